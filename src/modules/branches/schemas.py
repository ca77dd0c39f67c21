"""Schemas for Branches module."""

from datetime import datetime

from pydantic import Field

from src.shared.schemas.base import BaseSchema


class BranchCreate(BaseSchema):
    """Schema for creating a branch."""

    name: str = Field(..., min_length=1, max_length=200)
    address: str | None = Field(None, max_length=500)


class BranchResponse(BaseSchema):
    """Schema for branch response."""

    id: int
    name: str
    address: str | None
    created_at: datetime
