"""Product sale model."""

from decimal import Decimal
from enum import StrEnum

from sqlalchemy import ForeignKey, Integer, Numeric, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from src.core.database.base import BaseModel, BigIntPK, BranchOwnedMixin


class ProductCategory(StrEnum):
    """Product categories sold at the front desk."""

    BOOKS = "books"
    STATIONERY = "stationery"
    UNIFORM = "uniform"
    MERCHANDISE = "merchandise"
    OTHER = "other"


class ProductSale(BranchOwnedMixin, BaseModel):
    """Sale of merchandise. total_amount is always unit_price * quantity."""

    __tablename__ = "product_sales"

    product_name: Mapped[str] = mapped_column(String(100), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    quantity: Mapped[int] = mapped_column(Integer, nullable=False)
    unit_price: Mapped[Decimal] = mapped_column(Numeric(15, 2), nullable=False)
    total_amount: Mapped[Decimal] = mapped_column(Numeric(15, 2), nullable=False)
    category: Mapped[str] = mapped_column(String(20), nullable=False, index=True)

    # Optional buyer
    student_id: Mapped[int | None] = mapped_column(
        BigIntPK, ForeignKey("students.id"), nullable=True, index=True
    )

    # Relationships
    branch: Mapped["Branch"] = relationship("Branch")
    student: Mapped["Student | None"] = relationship("Student")

    @property
    def branch_name(self) -> str | None:
        return self.branch.name if self.branch else None

    @property
    def student_name(self) -> str | None:
        return self.student.full_name if self.student else None


from src.modules.branches.models import Branch
from src.modules.students.models import Student
