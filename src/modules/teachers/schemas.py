"""Schemas for Teachers module."""

import re
from datetime import datetime

from pydantic import Field, field_validator

from src.shared.schemas.base import BaseSchema

PHONE_REGEX = re.compile(r"^\+?[1-9]\d{1,14}$")


def normalize_phone(v: str | None) -> str | None:
    """Strip spaces and dashes and check E.164-like format."""
    if v is None:
        return v
    normalized = v.replace(" ", "").replace("-", "")
    if not PHONE_REGEX.match(normalized):
        raise ValueError("Invalid phone number format")
    return normalized


class TeacherCreate(BaseSchema):
    """Schema for creating a teacher."""

    first_name: str = Field(..., min_length=2, max_length=50)
    last_name: str = Field(..., min_length=2, max_length=50)
    phone_number: str | None = None
    email: str | None = Field(None, max_length=255)
    branch_id: int

    @field_validator("phone_number")
    @classmethod
    def validate_phone(cls, v: str | None) -> str | None:
        return normalize_phone(v)


class TeacherUpdate(BaseSchema):
    """Schema for updating a teacher."""

    first_name: str | None = Field(None, min_length=2, max_length=50)
    last_name: str | None = Field(None, min_length=2, max_length=50)
    phone_number: str | None = None
    email: str | None = Field(None, max_length=255)

    @field_validator("phone_number")
    @classmethod
    def validate_phone(cls, v: str | None) -> str | None:
        return normalize_phone(v)


class TeacherResponse(BaseSchema):
    """Schema for teacher response."""

    id: int
    first_name: str
    last_name: str
    full_name: str
    phone_number: str | None
    email: str | None
    branch_id: int
    branch_name: str | None = None
    created_at: datetime
