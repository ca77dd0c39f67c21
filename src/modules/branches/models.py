"""Branch model."""

from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column

from src.core.database.base import BaseModel


class Branch(BaseModel):
    """A physical location of the centre. Top-level scope for all data and access."""

    __tablename__ = "branches"

    name: Mapped[str] = mapped_column(String(200), nullable=False, unique=True)
    address: Mapped[str | None] = mapped_column(String(500), nullable=True)
