"""API endpoints for Salaries module."""

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from src.core.access import BranchAccess
from src.core.database.session import get_db
from src.modules.salaries.schemas import (
    RemainingSalaryResponse,
    SalaryCalculationResponse,
    SalaryHistoryEntry,
    SalaryPaymentCreate,
    SalaryPaymentResponse,
)
from src.modules.salaries.service import SalaryService
from src.modules.teachers.service import TeacherService
from src.shared.schemas.base import ApiResponse

router = APIRouter(prefix="/salaries", tags=["Salaries"])

YEAR_QUERY = Query(..., ge=2000, le=2100)
MONTH_QUERY = Query(..., ge=1, le=12)


# --- Calculation Endpoints ---


@router.get(
    "/calculate",
    response_model=ApiResponse[list[SalaryCalculationResponse]],
)
async def calculate_branch_salaries(
    access: BranchAccess,
    branch_id: int = Query(...),
    year: int = YEAR_QUERY,
    month: int = MONTH_QUERY,
    db: AsyncSession = Depends(get_db),
):
    """Salary owed to every teacher of a branch for a period."""
    access.check(branch_id)
    service = SalaryService(db)
    return ApiResponse(data=await service.calculate_salaries_for_branch(branch_id, year, month))


@router.get(
    "/calculate/{teacher_id}",
    response_model=ApiResponse[SalaryCalculationResponse],
)
async def calculate_teacher_salary(
    teacher_id: int,
    access: BranchAccess,
    year: int = YEAR_QUERY,
    month: int = MONTH_QUERY,
    db: AsyncSession = Depends(get_db),
):
    """Salary owed to a teacher for a period."""
    teacher = await TeacherService(db).get_teacher_by_id(teacher_id)
    access.check(teacher.branch_id)
    return ApiResponse(data=await SalaryService(db).calculate_salary(teacher_id, year, month))


@router.get(
    "/remaining/{teacher_id}",
    response_model=ApiResponse[RemainingSalaryResponse],
)
async def get_remaining_salary(
    teacher_id: int,
    access: BranchAccess,
    year: int = YEAR_QUERY,
    month: int = MONTH_QUERY,
    db: AsyncSession = Depends(get_db),
):
    """Salary still to be paid to a teacher for a period."""
    teacher = await TeacherService(db).get_teacher_by_id(teacher_id)
    access.check(teacher.branch_id)
    remaining = await SalaryService(db).remaining_for_teacher(teacher_id, year, month)
    return ApiResponse(
        data=RemainingSalaryResponse(
            teacher_id=teacher_id, year=year, month=month, remaining_amount=remaining
        )
    )


@router.get(
    "/history/{teacher_id}",
    response_model=ApiResponse[list[SalaryHistoryEntry]],
)
async def get_salary_history(
    teacher_id: int,
    access: BranchAccess,
    db: AsyncSession = Depends(get_db),
):
    """Salary history of a teacher, most recent period first."""
    teacher = await TeacherService(db).get_teacher_by_id(teacher_id)
    access.check(teacher.branch_id)
    return ApiResponse(data=await SalaryService(db).salary_history(teacher_id))


# --- Disbursement Endpoints ---


@router.post(
    "/payments",
    response_model=ApiResponse[SalaryPaymentResponse],
    status_code=status.HTTP_201_CREATED,
)
async def create_salary_payment(
    data: SalaryPaymentCreate,
    access: BranchAccess,
    db: AsyncSession = Depends(get_db),
):
    """Record a salary disbursement."""
    access.check(data.branch_id)
    payment = await SalaryService(db).create_salary_payment(data)
    return ApiResponse(
        data=SalaryPaymentResponse.model_validate(payment),
        message="Salary payment created successfully",
    )


@router.get(
    "/payments",
    response_model=ApiResponse[list[SalaryPaymentResponse]],
)
async def list_salary_payments(
    access: BranchAccess,
    branch_id: int = Query(...),
    db: AsyncSession = Depends(get_db),
):
    """Salary disbursements of a branch."""
    access.check(branch_id)
    payments = await SalaryService(db).list_salary_payments(branch_id=branch_id)
    return ApiResponse(data=[SalaryPaymentResponse.model_validate(p) for p in payments])


@router.get(
    "/payments/by-teacher/{teacher_id}",
    response_model=ApiResponse[list[SalaryPaymentResponse]],
)
async def list_teacher_salary_payments(
    teacher_id: int,
    access: BranchAccess,
    year: int | None = Query(None, ge=2000, le=2100),
    month: int | None = Query(None, ge=1, le=12),
    db: AsyncSession = Depends(get_db),
):
    """Salary disbursements of a teacher, optionally for one period."""
    teacher = await TeacherService(db).get_teacher_by_id(teacher_id)
    access.check(teacher.branch_id)
    payments = await SalaryService(db).list_salary_payments(
        teacher_id=teacher_id, year=year, month=month
    )
    return ApiResponse(data=[SalaryPaymentResponse.model_validate(p) for p in payments])


@router.delete(
    "/payments/{payment_id}",
    response_model=ApiResponse[None],
)
async def delete_salary_payment(
    payment_id: int,
    access: BranchAccess,
    db: AsyncSession = Depends(get_db),
):
    """Delete a salary disbursement."""
    service = SalaryService(db)
    payment = await service.get_salary_payment_by_id(payment_id)
    access.check(payment.branch_id)
    await service.delete_salary_payment(payment_id)
    return ApiResponse(data=None, message="Salary payment deleted successfully")
