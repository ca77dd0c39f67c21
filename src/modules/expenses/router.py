"""API endpoints for Expenses module."""

from datetime import date

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from src.core.access import BranchAccess
from src.core.database.session import get_db
from src.modules.expenses.models import ExpenseCategory
from src.modules.expenses.schemas import ExpenseCreate, ExpenseResponse
from src.modules.expenses.service import ExpenseService
from src.shared.schemas.base import ApiResponse

router = APIRouter(prefix="/expenses", tags=["Expenses"])


@router.post(
    "",
    response_model=ApiResponse[ExpenseResponse],
    status_code=status.HTTP_201_CREATED,
)
async def create_expense(
    data: ExpenseCreate,
    access: BranchAccess,
    db: AsyncSession = Depends(get_db),
):
    """Record an expense."""
    access.check(data.branch_id)
    expense = await ExpenseService(db).create_expense(data)
    return ApiResponse(
        data=ExpenseResponse.model_validate(expense),
        message="Expense created successfully",
    )


@router.get(
    "",
    response_model=ApiResponse[list[ExpenseResponse]],
)
async def list_expenses(
    access: BranchAccess,
    branch_id: int = Query(...),
    category: ExpenseCategory | None = Query(None),
    start_date: date | None = Query(None),
    end_date: date | None = Query(None),
    db: AsyncSession = Depends(get_db),
):
    """List expenses of a branch."""
    access.check(branch_id)
    expenses = await ExpenseService(db).list_expenses(branch_id, category, start_date, end_date)
    return ApiResponse(data=[ExpenseResponse.model_validate(e) for e in expenses])


@router.get(
    "/{expense_id}",
    response_model=ApiResponse[ExpenseResponse],
)
async def get_expense(
    expense_id: int,
    access: BranchAccess,
    db: AsyncSession = Depends(get_db),
):
    """Get expense by ID."""
    expense = await ExpenseService(db).get_expense_by_id(expense_id)
    access.check(expense.branch_id)
    return ApiResponse(data=ExpenseResponse.model_validate(expense))


@router.delete(
    "/{expense_id}",
    response_model=ApiResponse[None],
)
async def delete_expense(
    expense_id: int,
    access: BranchAccess,
    db: AsyncSession = Depends(get_db),
):
    """Delete an expense."""
    service = ExpenseService(db)
    expense = await service.get_expense_by_id(expense_id)
    access.check(expense.branch_id)
    await service.delete_expense(expense_id)
    return ApiResponse(data=None, message="Expense deleted successfully")
