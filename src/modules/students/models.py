"""Student model."""

from enum import StrEnum

from sqlalchemy import Integer, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from src.core.database.base import BaseModel, BranchOwnedMixin


class StudentStatus(StrEnum):
    """Student lifecycle. Deleted students keep their rows so payments stay attributable."""

    ACTIVE = "active"
    DELETED = "deleted"


class Student(BranchOwnedMixin, BaseModel):
    """Student of a branch."""

    __tablename__ = "students"

    first_name: Mapped[str] = mapped_column(String(100), nullable=False)
    last_name: Mapped[str] = mapped_column(String(100), nullable=False)
    phone_number: Mapped[str | None] = mapped_column(String(20), nullable=True)
    parent_phone_number: Mapped[str | None] = mapped_column(String(20), nullable=True)

    # Day of month tuition is due (1-31). 15 means the 15th of every month.
    payment_day_of_month: Mapped[int | None] = mapped_column(Integer, nullable=True)

    status: Mapped[str] = mapped_column(
        String(20), nullable=False, default=StudentStatus.ACTIVE.value, index=True
    )

    # Relationships
    branch: Mapped["Branch"] = relationship("Branch")

    @property
    def full_name(self) -> str:
        """Full name of the student."""
        return f"{self.first_name} {self.last_name}"

    @property
    def branch_name(self) -> str | None:
        return self.branch.name if self.branch else None

    @property
    def is_active(self) -> bool:
        return self.status == StudentStatus.ACTIVE.value

    @property
    def is_deleted(self) -> bool:
        return self.status == StudentStatus.DELETED.value


from src.modules.branches.models import Branch
