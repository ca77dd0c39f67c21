"""Schemas for Groups module."""

from datetime import datetime, time
from decimal import Decimal
from enum import StrEnum

from pydantic import Field, model_validator

from src.shared.schemas.base import BaseSchema


class Weekday(StrEnum):
    MONDAY = "MONDAY"
    TUESDAY = "TUESDAY"
    WEDNESDAY = "WEDNESDAY"
    THURSDAY = "THURSDAY"
    FRIDAY = "FRIDAY"
    SATURDAY = "SATURDAY"
    SUNDAY = "SUNDAY"


class GroupCreate(BaseSchema):
    """Schema for creating a group."""

    name: str = Field(..., min_length=1, max_length=200)
    description: str | None = None
    price: Decimal = Field(..., ge=0, description="Monthly tuition per student")
    teacher_salary_per_student: Decimal = Field(Decimal("0.00"), ge=0)
    teacher_id: int
    branch_id: int
    start_time: time | None = None
    end_time: time | None = None
    days_of_week: list[Weekday] = []

    @model_validator(mode="after")
    def check_schedule(self):
        if self.start_time and self.end_time and self.end_time <= self.start_time:
            raise ValueError("end_time must be after start_time")
        return self


class GroupUpdate(BaseSchema):
    """Schema for updating a group. Branch cannot change."""

    name: str | None = Field(None, min_length=1, max_length=200)
    description: str | None = None
    price: Decimal | None = Field(None, ge=0)
    teacher_salary_per_student: Decimal | None = Field(None, ge=0)
    teacher_id: int | None = None
    start_time: time | None = None
    end_time: time | None = None
    days_of_week: list[Weekday] | None = None


class GroupResponse(BaseSchema):
    """Schema for group response."""

    id: int
    name: str
    description: str | None
    price: Decimal
    teacher_salary_per_student: Decimal
    teacher_id: int
    teacher_name: str | None
    branch_id: int
    branch_name: str | None
    start_time: time | None
    end_time: time | None
    days_of_week: list[str]
    student_count: int
    created_at: datetime


class GroupMembershipRequest(BaseSchema):
    """Add a student to a group."""

    student_id: int
