"""Teacher model."""

from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from src.core.database.base import BaseModel, BranchOwnedMixin


class Teacher(BranchOwnedMixin, BaseModel):
    """Teacher working at a branch. Paid per paid student in each group they teach."""

    __tablename__ = "teachers"

    first_name: Mapped[str] = mapped_column(String(100), nullable=False)
    last_name: Mapped[str] = mapped_column(String(100), nullable=False)
    phone_number: Mapped[str | None] = mapped_column(String(20), nullable=True)
    email: Mapped[str | None] = mapped_column(String(255), nullable=True)

    # Relationships
    branch: Mapped["Branch"] = relationship("Branch")

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"

    @property
    def branch_name(self) -> str | None:
        return self.branch.name if self.branch else None


from src.modules.branches.models import Branch
