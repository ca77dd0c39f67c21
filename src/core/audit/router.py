"""API endpoints for the audit trail (read-only)."""

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from src.core.access import BranchAccess
from src.core.audit.schemas import AuditTrailEntryResponse
from src.core.audit.service import list_audit_entries
from src.core.database.session import get_db
from src.shared.schemas.base import ApiResponse

router = APIRouter(prefix="/audit-trail", tags=["Audit"])


@router.get(
    "",
    response_model=ApiResponse[list[AuditTrailEntryResponse]],
)
async def get_audit_trail(
    access: BranchAccess,
    branch_id: int = Query(...),
    entity_type: str | None = Query(None),
    entity_id: int | None = Query(None),
    action: str | None = Query(None),
    db: AsyncSession = Depends(get_db),
):
    """Audit log entries of a branch, newest first."""
    access.check(branch_id)
    entries = await list_audit_entries(
        db,
        branch_id=branch_id,
        entity_type=entity_type,
        entity_id=entity_id,
        action=action,
    )
    return ApiResponse(data=[AuditTrailEntryResponse.model_validate(a) for a in entries])
