"""API for financial reports."""

from datetime import date

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from src.core.access import BranchAccess
from src.core.database.session import get_db
from src.modules.reports.schemas import (
    ExpenseReportResponse,
    FinancialSummaryResponse,
    IncomeReportResponse,
)
from src.modules.reports.service import ReportsService
from src.shared.schemas.base import ApiResponse
from src.shared.utils.dates import resolve_period

router = APIRouter(prefix="/reports", tags=["Reports"])


# --- Expenses ---


@router.get(
    "/expenses/daily",
    response_model=ApiResponse[ExpenseReportResponse],
)
async def get_daily_expenses(
    access: BranchAccess,
    branch_id: int = Query(...),
    day: date | None = Query(None, alias="date", description="Default: today"),
    db: AsyncSession = Depends(get_db),
):
    """Expenses recorded on one day."""
    access.check(branch_id)
    data = await ReportsService(db).daily_expenses(branch_id, day or date.today())
    return ApiResponse(data=ExpenseReportResponse(**data))


@router.get(
    "/expenses/monthly",
    response_model=ApiResponse[ExpenseReportResponse],
)
async def get_monthly_expenses(
    access: BranchAccess,
    branch_id: int = Query(...),
    year: int | None = Query(None, ge=2000, le=2100),
    month: int | None = Query(None, ge=1, le=12),
    db: AsyncSession = Depends(get_db),
):
    """
    Expenses of a month (default: current payment period).

    Salaries by billing period, regular expenses by creation date.
    """
    access.check(branch_id)
    year, month = resolve_period(year, month)
    data = await ReportsService(db).monthly_expenses(branch_id, year, month)
    return ApiResponse(data=ExpenseReportResponse(**data))


@router.get(
    "/expenses/range",
    response_model=ApiResponse[ExpenseReportResponse],
)
async def get_range_expenses(
    access: BranchAccess,
    branch_id: int = Query(...),
    start_date: date = Query(...),
    end_date: date = Query(...),
    db: AsyncSession = Depends(get_db),
):
    """Expenses recorded between two dates, both inclusive."""
    access.check(branch_id)
    data = await ReportsService(db).range_expenses(branch_id, start_date, end_date)
    return ApiResponse(data=ExpenseReportResponse(**data))


@router.get(
    "/expenses/all-time",
    response_model=ApiResponse[ExpenseReportResponse],
)
async def get_all_time_expenses(
    access: BranchAccess,
    branch_id: int = Query(...),
    db: AsyncSession = Depends(get_db),
):
    """Every expense of a branch."""
    access.check(branch_id)
    data = await ReportsService(db).all_time_expenses(branch_id)
    return ApiResponse(data=ExpenseReportResponse(**data))


# --- Income ---


@router.get(
    "/payments/daily",
    response_model=ApiResponse[IncomeReportResponse],
)
async def get_daily_income(
    access: BranchAccess,
    branch_id: int = Query(...),
    day: date | None = Query(None, alias="date", description="Default: today"),
    db: AsyncSession = Depends(get_db),
):
    """Income recorded on one day."""
    access.check(branch_id)
    data = await ReportsService(db).daily_income(branch_id, day or date.today())
    return ApiResponse(data=IncomeReportResponse(**data))


@router.get(
    "/payments/monthly",
    response_model=ApiResponse[IncomeReportResponse],
)
async def get_monthly_income(
    access: BranchAccess,
    branch_id: int = Query(...),
    year: int | None = Query(None, ge=2000, le=2100),
    month: int | None = Query(None, ge=1, le=12),
    db: AsyncSession = Depends(get_db),
):
    """
    Income of a month (default: current payment period).

    Tuition by billing period, product sales by creation date.
    """
    access.check(branch_id)
    year, month = resolve_period(year, month)
    data = await ReportsService(db).monthly_income(branch_id, year, month)
    return ApiResponse(data=IncomeReportResponse(**data))


@router.get(
    "/payments/range",
    response_model=ApiResponse[IncomeReportResponse],
)
async def get_range_income(
    access: BranchAccess,
    branch_id: int = Query(...),
    start_date: date = Query(...),
    end_date: date = Query(...),
    db: AsyncSession = Depends(get_db),
):
    """Income recorded between two dates, both inclusive."""
    access.check(branch_id)
    data = await ReportsService(db).range_income(branch_id, start_date, end_date)
    return ApiResponse(data=IncomeReportResponse(**data))


# --- Summary ---


@router.get(
    "/financial-summary",
    response_model=ApiResponse[FinancialSummaryResponse],
)
async def get_financial_summary(
    access: BranchAccess,
    branch_id: int = Query(...),
    year: int | None = Query(None, ge=2000, le=2100),
    month: int | None = Query(None, ge=1, le=12),
    db: AsyncSession = Depends(get_db),
):
    """Income, expenses and net profit of a month."""
    access.check(branch_id)
    year, month = resolve_period(year, month)
    data = await ReportsService(db).financial_summary(branch_id, year, month)
    return ApiResponse(data=FinancialSummaryResponse(**data))


@router.get(
    "/financial-summary/range",
    response_model=ApiResponse[FinancialSummaryResponse],
)
async def get_financial_summary_range(
    access: BranchAccess,
    branch_id: int = Query(...),
    start_date: date = Query(...),
    end_date: date = Query(...),
    db: AsyncSession = Depends(get_db),
):
    """Income, expenses and net profit between two dates, both inclusive."""
    access.check(branch_id)
    data = await ReportsService(db).financial_summary_range(branch_id, start_date, end_date)
    return ApiResponse(data=FinancialSummaryResponse(**data))
