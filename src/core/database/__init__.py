from src.core.database.session import async_session, engine, get_db
from src.core.database.base import Base, BaseModel, BigIntPK, BranchOwnedMixin

__all__ = ["async_session", "engine", "get_db", "Base", "BaseModel", "BigIntPK", "BranchOwnedMixin"]
