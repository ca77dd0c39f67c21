"""Teacher salary disbursement model."""

from decimal import Decimal

from sqlalchemy import ForeignKey, Integer, Numeric, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from src.core.database.base import BaseModel, BigIntPK, BranchOwnedMixin


class TeacherSalaryPayment(BranchOwnedMixin, BaseModel):
    """Money actually paid out to a teacher for a (year, month) period."""

    __tablename__ = "teacher_salary_payments"

    teacher_id: Mapped[int] = mapped_column(
        BigIntPK, ForeignKey("teachers.id"), nullable=False, index=True
    )
    year: Mapped[int] = mapped_column(Integer, nullable=False, index=True)
    month: Mapped[int] = mapped_column(Integer, nullable=False, index=True)
    amount: Mapped[Decimal] = mapped_column(Numeric(15, 2), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)

    # Relationships
    teacher: Mapped["Teacher"] = relationship("Teacher")
    branch: Mapped["Branch"] = relationship("Branch")

    @property
    def teacher_name(self) -> str | None:
        return self.teacher.full_name if self.teacher else None

    @property
    def branch_name(self) -> str | None:
        return self.branch.name if self.branch else None


from src.modules.branches.models import Branch
from src.modules.teachers.models import Teacher
