"""API endpoints for Students module."""

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from src.core.access import BranchAccess
from src.core.database.session import get_db
from src.modules.groups.schemas import GroupResponse
from src.modules.payments.schemas import PaymentResponse
from src.modules.students.schemas import (
    StudentCreate,
    StudentResponse,
    StudentStatisticsResponse,
    StudentUpdate,
    UnpaidStudentResponse,
)
from src.modules.students.service import StudentService
from src.shared.schemas.base import ApiResponse

router = APIRouter(prefix="/students", tags=["Students"])

YEAR_QUERY = Query(None, ge=2000, le=2100)
MONTH_QUERY = Query(None, ge=1, le=12)


@router.post(
    "",
    response_model=ApiResponse[StudentResponse],
    status_code=status.HTTP_201_CREATED,
)
async def create_student(
    data: StudentCreate,
    access: BranchAccess,
    db: AsyncSession = Depends(get_db),
):
    """Create a new student."""
    access.check(data.branch_id)
    service = StudentService(db)
    student = await service.create_student(data)
    responses = await service.build_responses([student], student.branch_id)
    return ApiResponse(data=responses[0], message="Student created successfully")


@router.get(
    "",
    response_model=ApiResponse[list[StudentResponse]],
)
async def list_students(
    access: BranchAccess,
    branch_id: int = Query(...),
    year: int | None = YEAR_QUERY,
    month: int | None = MONTH_QUERY,
    db: AsyncSession = Depends(get_db),
):
    """List active students of a branch with their payment status."""
    access.check(branch_id)
    service = StudentService(db)
    students = await service.list_students(branch_id)
    return ApiResponse(data=await service.build_responses(students, branch_id, year, month))


@router.get(
    "/search",
    response_model=ApiResponse[list[StudentResponse]],
)
async def search_students(
    access: BranchAccess,
    branch_id: int = Query(...),
    q: str = Query(..., min_length=1),
    db: AsyncSession = Depends(get_db),
):
    """Search students by name or phone number."""
    access.check(branch_id)
    service = StudentService(db)
    students = await service.search_students(branch_id, q)
    return ApiResponse(data=await service.build_responses(students, branch_id))


@router.get(
    "/recent",
    response_model=ApiResponse[list[StudentResponse]],
)
async def list_recent_students(
    access: BranchAccess,
    branch_id: int = Query(...),
    limit: int = Query(10, ge=1, le=100),
    db: AsyncSession = Depends(get_db),
):
    """Most recently created students of a branch."""
    access.check(branch_id)
    service = StudentService(db)
    students = await service.list_recent_students(branch_id, limit)
    return ApiResponse(data=await service.build_responses(students, branch_id))


@router.get(
    "/unpaid",
    response_model=ApiResponse[list[UnpaidStudentResponse]],
)
async def list_unpaid_students(
    access: BranchAccess,
    branch_id: int = Query(...),
    year: int | None = YEAR_QUERY,
    month: int | None = MONTH_QUERY,
    db: AsyncSession = Depends(get_db),
):
    """Students with an overdue outstanding balance, one row per group."""
    access.check(branch_id)
    service = StudentService(db)
    return ApiResponse(data=await service.find_unpaid(branch_id, year, month))


@router.get(
    "/statistics",
    response_model=ApiResponse[StudentStatisticsResponse],
)
async def get_student_statistics(
    access: BranchAccess,
    branch_id: int = Query(...),
    year: int | None = YEAR_QUERY,
    month: int | None = MONTH_QUERY,
    db: AsyncSession = Depends(get_db),
):
    """Payment status counts for a branch."""
    access.check(branch_id)
    service = StudentService(db)
    return ApiResponse(data=await service.get_statistics(branch_id, year, month))


@router.get(
    "/{student_id}",
    response_model=ApiResponse[StudentResponse],
)
async def get_student(
    student_id: int,
    access: BranchAccess,
    year: int | None = YEAR_QUERY,
    month: int | None = MONTH_QUERY,
    db: AsyncSession = Depends(get_db),
):
    """Get student by ID with payment status for a period."""
    service = StudentService(db)
    student = await service.get_student_by_id(student_id)
    access.check(student.branch_id)
    responses = await service.build_responses([student], student.branch_id, year, month)
    return ApiResponse(data=responses[0])


@router.patch(
    "/{student_id}",
    response_model=ApiResponse[StudentResponse],
)
async def update_student(
    student_id: int,
    data: StudentUpdate,
    access: BranchAccess,
    db: AsyncSession = Depends(get_db),
):
    """Update a student."""
    service = StudentService(db)
    student = await service.get_student_by_id(student_id)
    access.check(student.branch_id)
    student = await service.update_student(student_id, data)
    responses = await service.build_responses([student], student.branch_id)
    return ApiResponse(data=responses[0], message="Student updated successfully")


@router.delete(
    "/{student_id}",
    response_model=ApiResponse[None],
)
async def delete_student(
    student_id: int,
    access: BranchAccess,
    db: AsyncSession = Depends(get_db),
):
    """Soft delete a student."""
    service = StudentService(db)
    student = await service.get_student_by_id(student_id)
    access.check(student.branch_id)
    await service.delete_student(student_id)
    return ApiResponse(data=None, message="Student deleted successfully")


@router.get(
    "/{student_id}/groups",
    response_model=ApiResponse[list[GroupResponse]],
)
async def get_student_groups(
    student_id: int,
    access: BranchAccess,
    db: AsyncSession = Depends(get_db),
):
    """Groups a student is enrolled in."""
    service = StudentService(db)
    student = await service.get_student_by_id(student_id)
    access.check(student.branch_id)
    groups = await service.get_student_groups(student_id)
    return ApiResponse(data=await service.groups.to_responses(groups))


@router.get(
    "/{student_id}/payments",
    response_model=ApiResponse[list[PaymentResponse]],
)
async def get_student_payment_history(
    student_id: int,
    access: BranchAccess,
    db: AsyncSession = Depends(get_db),
):
    """Payment history of a student."""
    service = StudentService(db)
    student = await service.get_student_by_id(student_id, include_deleted=True)
    access.check(student.branch_id)
    payments = await service.get_payment_history(student_id)
    return ApiResponse(data=[PaymentResponse.model_validate(p) for p in payments])
