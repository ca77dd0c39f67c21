"""Group and GroupMembership models."""

from datetime import datetime, time
from decimal import Decimal

from sqlalchemy import DateTime, ForeignKey, Numeric, String, Text, Time, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from src.core.database.base import Base, BaseModel, BigIntPK, BranchOwnedMixin


class Group(BranchOwnedMixin, BaseModel):
    """
    A class taught by one teacher at one branch.

    price is the monthly tuition expected from every enrolled student;
    teacher_salary_per_student is what the teacher earns for each student
    who paid anything for the month.
    """

    __tablename__ = "groups"

    name: Mapped[str] = mapped_column(String(200), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)

    price: Mapped[Decimal] = mapped_column(Numeric(15, 2), nullable=False)
    teacher_salary_per_student: Mapped[Decimal] = mapped_column(
        Numeric(15, 2), nullable=False, default=Decimal("0.00")
    )

    teacher_id: Mapped[int] = mapped_column(
        BigIntPK, ForeignKey("teachers.id"), nullable=False, index=True
    )

    # Schedule
    start_time: Mapped[time | None] = mapped_column(Time, nullable=True)
    end_time: Mapped[time | None] = mapped_column(Time, nullable=True)
    days_of_week: Mapped[str | None] = mapped_column(
        String(100), nullable=True
    )  # "MONDAY,WEDNESDAY,FRIDAY"

    # Relationships
    teacher: Mapped["Teacher"] = relationship("Teacher")
    branch: Mapped["Branch"] = relationship("Branch")

    @property
    def teacher_name(self) -> str | None:
        return self.teacher.full_name if self.teacher else None

    @property
    def branch_name(self) -> str | None:
        return self.branch.name if self.branch else None

    @property
    def schedule_days(self) -> list[str]:
        if not self.days_of_week:
            return []
        return [d for d in self.days_of_week.split(",") if d]


class GroupMembership(Base):
    """
    Enrollment of a student in a group.

    The roster is this table alone: neither Group nor Student holds a
    collection of the other.
    """

    __tablename__ = "group_memberships"

    group_id: Mapped[int] = mapped_column(
        BigIntPK, ForeignKey("groups.id"), primary_key=True
    )
    student_id: Mapped[int] = mapped_column(
        BigIntPK, ForeignKey("students.id"), primary_key=True, index=True
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )


from src.modules.branches.models import Branch
from src.modules.teachers.models import Teacher
