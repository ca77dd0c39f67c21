"""API endpoints for Branches module."""

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from src.core.access import BranchAccess
from src.core.database.session import get_db
from src.modules.branches.schemas import BranchCreate, BranchResponse
from src.modules.branches.service import BranchService
from src.shared.schemas.base import ApiResponse

router = APIRouter(prefix="/branches", tags=["Branches"])


@router.post(
    "",
    response_model=ApiResponse[BranchResponse],
    status_code=status.HTTP_201_CREATED,
)
async def create_branch(
    data: BranchCreate,
    access: BranchAccess,
    db: AsyncSession = Depends(get_db),
):
    """Create a new branch. Only callers without a branch restriction may do this."""
    access.check_unrestricted()
    service = BranchService(db)
    branch = await service.create_branch(data)
    return ApiResponse(
        data=BranchResponse.model_validate(branch),
        message="Branch created successfully",
    )


@router.get(
    "",
    response_model=ApiResponse[list[BranchResponse]],
)
async def list_branches(
    access: BranchAccess,
    db: AsyncSession = Depends(get_db),
):
    """List the branches the caller can access."""
    service = BranchService(db)
    branches = await service.list_branches(access.allowed_branch_ids)
    return ApiResponse(data=[BranchResponse.model_validate(b) for b in branches])


@router.get(
    "/{branch_id}",
    response_model=ApiResponse[BranchResponse],
)
async def get_branch(
    branch_id: int,
    access: BranchAccess,
    db: AsyncSession = Depends(get_db),
):
    """Get branch by ID."""
    access.check(branch_id)
    service = BranchService(db)
    branch = await service.get_branch_by_id(branch_id)
    return ApiResponse(data=BranchResponse.model_validate(branch))
