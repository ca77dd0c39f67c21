"""Operational expense model."""

from decimal import Decimal
from enum import StrEnum

from sqlalchemy import Numeric, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from src.core.database.base import BaseModel, BranchOwnedMixin


class ExpenseCategory(StrEnum):
    """Expense categories. Teacher salaries are tracked separately."""

    RENT = "rent"
    UTILITIES = "utilities"
    SUPPLIES = "supplies"
    MARKETING = "marketing"
    MAINTENANCE = "maintenance"
    OTHER = "other"


class Expense(BranchOwnedMixin, BaseModel):
    """Regular (non-salary) expense of a branch."""

    __tablename__ = "expenses"

    description: Mapped[str] = mapped_column(String(500), nullable=False)
    amount: Mapped[Decimal] = mapped_column(Numeric(15, 2), nullable=False)
    category: Mapped[str] = mapped_column(String(20), nullable=False, index=True)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)

    # Relationships
    branch: Mapped["Branch"] = relationship("Branch")

    @property
    def branch_name(self) -> str | None:
        return self.branch.name if self.branch else None


from src.modules.branches.models import Branch
