import logging
from enum import StrEnum
from typing import Any

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from src.core.audit.models import AuditLog

logger = logging.getLogger(__name__)


class AuditAction(StrEnum):
    """Standard audit actions."""

    CREATE = "CREATE"
    UPDATE = "UPDATE"
    DELETE = "DELETE"

    # Domain-specific actions
    CREATE_PAYMENT = "CREATE_PAYMENT"
    UPDATE_PAYMENT_AMOUNT = "UPDATE_PAYMENT_AMOUNT"
    DELETE_PAYMENT = "DELETE_PAYMENT"
    ENROLL_STUDENT = "ENROLL_STUDENT"
    UNENROLL_STUDENT = "UNENROLL_STUDENT"
    SOFT_DELETE_STUDENT = "SOFT_DELETE_STUDENT"
    CREATE_SALARY_PAYMENT = "CREATE_SALARY_PAYMENT"
    DELETE_SALARY_PAYMENT = "DELETE_SALARY_PAYMENT"


class AuditService:
    """Service for creating audit logs."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def log(
        self,
        action: str | AuditAction,
        entity_type: str,
        entity_id: int,
        branch_id: int | None = None,
        old_values: dict[str, Any] | None = None,
        new_values: dict[str, Any] | None = None,
        comment: str | None = None,
    ) -> AuditLog:
        """Create an audit log entry (flushed, committed with the caller's transaction)."""
        audit_log = AuditLog(
            action=str(action),
            entity_type=entity_type,
            entity_id=entity_id,
            branch_id=branch_id,
            old_values=old_values,
            new_values=new_values,
            comment=comment,
        )

        self.db.add(audit_log)
        await self.db.flush()

        logger.info("%s %s id=%s branch=%s", action, entity_type, entity_id, branch_id)
        return audit_log


async def list_audit_entries(
    session: AsyncSession,
    *,
    branch_id: int | None = None,
    entity_type: str | None = None,
    entity_id: int | None = None,
    action: str | None = None,
) -> list[AuditLog]:
    """List audit log entries, newest first, with optional filters."""
    q = select(AuditLog).order_by(AuditLog.created_at.desc(), AuditLog.id.desc())
    if branch_id is not None:
        q = q.where(AuditLog.branch_id == branch_id)
    if entity_type is not None:
        q = q.where(AuditLog.entity_type == entity_type)
    if entity_id is not None:
        q = q.where(AuditLog.entity_id == entity_id)
    if action is not None:
        q = q.where(AuditLog.action == action)

    result = await session.execute(q)
    return list(result.scalars().all())
