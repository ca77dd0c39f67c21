"""API endpoints for Groups module."""

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from src.core.access import BranchAccess
from src.core.database.session import get_db
from src.modules.groups.schemas import (
    GroupCreate,
    GroupMembershipRequest,
    GroupResponse,
    GroupUpdate,
)
from src.modules.groups.service import GroupService
from src.modules.students.schemas import StudentResponse
from src.modules.students.service import StudentService
from src.modules.teachers.service import TeacherService
from src.shared.schemas.base import ApiResponse

router = APIRouter(prefix="/groups", tags=["Groups"])


@router.post(
    "",
    response_model=ApiResponse[GroupResponse],
    status_code=status.HTTP_201_CREATED,
)
async def create_group(
    data: GroupCreate,
    access: BranchAccess,
    db: AsyncSession = Depends(get_db),
):
    """Create a new group."""
    access.check(data.branch_id)
    service = GroupService(db)
    group = await service.create_group(data)
    responses = await service.to_responses([group])
    return ApiResponse(data=responses[0], message="Group created successfully")


@router.get(
    "",
    response_model=ApiResponse[list[GroupResponse]],
)
async def list_groups(
    access: BranchAccess,
    branch_id: int = Query(...),
    db: AsyncSession = Depends(get_db),
):
    """List groups of a branch."""
    access.check(branch_id)
    service = GroupService(db)
    groups = await service.list_groups(branch_id)
    return ApiResponse(data=await service.to_responses(groups))


@router.get(
    "/by-teacher/{teacher_id}",
    response_model=ApiResponse[list[GroupResponse]],
)
async def list_groups_by_teacher(
    teacher_id: int,
    access: BranchAccess,
    db: AsyncSession = Depends(get_db),
):
    """List groups taught by a teacher."""
    teacher = await TeacherService(db).get_teacher_by_id(teacher_id)
    access.check(teacher.branch_id)
    service = GroupService(db)
    groups = await service.list_groups_by_teacher(teacher_id)
    return ApiResponse(data=await service.to_responses(groups))


@router.get(
    "/{group_id}",
    response_model=ApiResponse[GroupResponse],
)
async def get_group(
    group_id: int,
    access: BranchAccess,
    db: AsyncSession = Depends(get_db),
):
    """Get group by ID."""
    service = GroupService(db)
    group = await service.get_group_by_id(group_id)
    access.check(group.branch_id)
    responses = await service.to_responses([group])
    return ApiResponse(data=responses[0])


@router.patch(
    "/{group_id}",
    response_model=ApiResponse[GroupResponse],
)
async def update_group(
    group_id: int,
    data: GroupUpdate,
    access: BranchAccess,
    db: AsyncSession = Depends(get_db),
):
    """Update a group."""
    service = GroupService(db)
    group = await service.get_group_by_id(group_id)
    access.check(group.branch_id)
    group = await service.update_group(group_id, data)
    responses = await service.to_responses([group])
    return ApiResponse(data=responses[0], message="Group updated successfully")


@router.get(
    "/{group_id}/students",
    response_model=ApiResponse[list[StudentResponse]],
)
async def list_group_students(
    group_id: int,
    access: BranchAccess,
    year: int | None = Query(None, ge=2000, le=2100),
    month: int | None = Query(None, ge=1, le=12),
    db: AsyncSession = Depends(get_db),
):
    """List students of a group with their payment status for the period."""
    group = await GroupService(db).get_group_by_id(group_id)
    access.check(group.branch_id)
    service = StudentService(db)
    students = await service.list_students_by_group(group_id)
    return ApiResponse(
        data=await service.build_responses(students, group.branch_id, year, month)
    )


@router.post(
    "/{group_id}/students",
    response_model=ApiResponse[GroupResponse],
)
async def add_student_to_group(
    group_id: int,
    data: GroupMembershipRequest,
    access: BranchAccess,
    db: AsyncSession = Depends(get_db),
):
    """Enroll a student in a group."""
    service = GroupService(db)
    group = await service.get_group_by_id(group_id)
    access.check(group.branch_id)
    group = await service.add_student(group_id, data.student_id)
    responses = await service.to_responses([group])
    return ApiResponse(data=responses[0], message="Student added to group")


@router.delete(
    "/{group_id}/students/{student_id}",
    response_model=ApiResponse[GroupResponse],
)
async def remove_student_from_group(
    group_id: int,
    student_id: int,
    access: BranchAccess,
    db: AsyncSession = Depends(get_db),
):
    """Remove a student from a group."""
    service = GroupService(db)
    group = await service.get_group_by_id(group_id)
    access.check(group.branch_id)
    group = await service.remove_student(group_id, student_id)
    responses = await service.to_responses([group])
    return ApiResponse(data=responses[0], message="Student removed from group")
