"""Tuition Payment model."""

from datetime import date
from decimal import Decimal
from enum import StrEnum

from sqlalchemy import Date, ForeignKey, Integer, Numeric, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from src.core.database.base import BaseModel, BigIntPK, BranchOwnedMixin


class PaymentCategory(StrEnum):
    """What a payment is for."""

    TUITION = "tuition"
    REGISTRATION = "registration"
    EXAM = "exam"
    OTHER = "other"


class PaymentStatus(StrEnum):
    """Payment status options."""

    COMPLETED = "completed"
    PENDING = "pending"
    CANCELLED = "cancelled"


class Payment(BranchOwnedMixin, BaseModel):
    """
    Tuition payment of a student for one group and one billing period.

    (payment_year, payment_month) is the period the money is for, independent
    of created_at. due_date is computed from the student's pay day when the
    payment is recorded and never recomputed afterwards.
    """

    __tablename__ = "payments"

    # Nullable: history survives a missing student reference
    student_id: Mapped[int | None] = mapped_column(
        BigIntPK, ForeignKey("students.id"), nullable=True, index=True
    )
    group_id: Mapped[int] = mapped_column(
        BigIntPK, ForeignKey("groups.id"), nullable=False, index=True
    )

    amount: Mapped[Decimal] = mapped_column(Numeric(15, 2), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    category: Mapped[str] = mapped_column(
        String(20), nullable=False, default=PaymentCategory.TUITION.value, index=True
    )
    status: Mapped[str] = mapped_column(
        String(20), nullable=False, default=PaymentStatus.COMPLETED.value
    )

    payment_year: Mapped[int] = mapped_column(Integer, nullable=False, index=True)
    payment_month: Mapped[int] = mapped_column(Integer, nullable=False, index=True)
    due_date: Mapped[date | None] = mapped_column(Date, nullable=True)

    # Relationships
    student: Mapped["Student | None"] = relationship("Student")
    group: Mapped["Group"] = relationship("Group")
    branch: Mapped["Branch"] = relationship("Branch")

    @property
    def student_name(self) -> str | None:
        return self.student.full_name if self.student else None

    @property
    def group_name(self) -> str | None:
        return self.group.name if self.group else None

    @property
    def branch_name(self) -> str | None:
        return self.branch.name if self.branch else None


from src.modules.branches.models import Branch
from src.modules.groups.models import Group
from src.modules.students.models import Student
