"""API endpoints for Teachers module."""

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from src.core.access import BranchAccess
from src.core.database.session import get_db
from src.modules.teachers.schemas import TeacherCreate, TeacherResponse, TeacherUpdate
from src.modules.teachers.service import TeacherService
from src.shared.schemas.base import ApiResponse

router = APIRouter(prefix="/teachers", tags=["Teachers"])


@router.post(
    "",
    response_model=ApiResponse[TeacherResponse],
    status_code=status.HTTP_201_CREATED,
)
async def create_teacher(
    data: TeacherCreate,
    access: BranchAccess,
    db: AsyncSession = Depends(get_db),
):
    """Create a new teacher."""
    access.check(data.branch_id)
    service = TeacherService(db)
    teacher = await service.create_teacher(data)
    return ApiResponse(
        data=TeacherResponse.model_validate(teacher),
        message="Teacher created successfully",
    )


@router.get(
    "",
    response_model=ApiResponse[list[TeacherResponse]],
)
async def list_teachers(
    access: BranchAccess,
    branch_id: int = Query(...),
    db: AsyncSession = Depends(get_db),
):
    """List teachers of a branch."""
    access.check(branch_id)
    service = TeacherService(db)
    teachers = await service.list_teachers(branch_id)
    return ApiResponse(data=[TeacherResponse.model_validate(t) for t in teachers])


@router.get(
    "/{teacher_id}",
    response_model=ApiResponse[TeacherResponse],
)
async def get_teacher(
    teacher_id: int,
    access: BranchAccess,
    db: AsyncSession = Depends(get_db),
):
    """Get teacher by ID."""
    service = TeacherService(db)
    teacher = await service.get_teacher_by_id(teacher_id)
    access.check(teacher.branch_id)
    return ApiResponse(data=TeacherResponse.model_validate(teacher))


@router.patch(
    "/{teacher_id}",
    response_model=ApiResponse[TeacherResponse],
)
async def update_teacher(
    teacher_id: int,
    data: TeacherUpdate,
    access: BranchAccess,
    db: AsyncSession = Depends(get_db),
):
    """Update a teacher."""
    service = TeacherService(db)
    teacher = await service.get_teacher_by_id(teacher_id)
    access.check(teacher.branch_id)
    teacher = await service.update_teacher(teacher_id, data)
    return ApiResponse(
        data=TeacherResponse.model_validate(teacher),
        message="Teacher updated successfully",
    )
