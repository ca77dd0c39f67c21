"""Schemas for Expenses module."""

from datetime import datetime
from decimal import Decimal

from pydantic import Field

from src.modules.expenses.models import ExpenseCategory
from src.shared.schemas.base import BaseSchema


class ExpenseCreate(BaseSchema):
    """Schema for recording an operational expense."""

    description: str = Field(..., min_length=1, max_length=500)
    amount: Decimal = Field(..., gt=0)
    category: ExpenseCategory = ExpenseCategory.OTHER
    notes: str | None = None
    branch_id: int


class ExpenseResponse(BaseSchema):
    """Schema for expense response."""

    id: int
    description: str
    amount: Decimal
    category: str
    notes: str | None
    branch_id: int
    branch_name: str | None
    created_at: datetime
