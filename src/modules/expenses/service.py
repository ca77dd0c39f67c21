"""Service for Expenses module."""

from datetime import date

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from src.core.audit.service import AuditAction, AuditService
from src.core.exceptions import NotFoundError, ValidationError
from src.modules.branches.service import BranchService
from src.modules.expenses.models import Expense, ExpenseCategory
from src.modules.expenses.schemas import ExpenseCreate
from src.shared.utils.dates import range_bounds
from src.shared.utils.money import round_money


class ExpenseService:
    """Service for regular (non-salary) branch expenses."""

    def __init__(self, db: AsyncSession):
        self.db = db
        self.audit = AuditService(db)

    async def create_expense(self, data: ExpenseCreate) -> Expense:
        await BranchService(self.db).get_branch_by_id(data.branch_id)
        expense = Expense(
            description=data.description,
            amount=round_money(data.amount),
            category=data.category.value,
            notes=data.notes,
            branch_id=data.branch_id,
        )
        self.db.add(expense)
        await self.db.flush()

        await self.audit.log(
            action=AuditAction.CREATE,
            entity_type="Expense",
            entity_id=expense.id,
            branch_id=expense.branch_id,
            new_values={"amount": str(expense.amount), "category": expense.category},
        )

        await self.db.commit()
        return await self.get_expense_by_id(expense.id)

    async def get_expense_by_id(self, expense_id: int) -> Expense:
        result = await self.db.execute(
            select(Expense)
            .where(Expense.id == expense_id)
            .options(selectinload(Expense.branch))
            .execution_options(populate_existing=True)
        )
        expense = result.scalar_one_or_none()
        if not expense:
            raise NotFoundError("Expense", expense_id)
        return expense

    async def delete_expense(self, expense_id: int) -> None:
        expense = await self.get_expense_by_id(expense_id)
        await self.audit.log(
            action=AuditAction.DELETE,
            entity_type="Expense",
            entity_id=expense.id,
            branch_id=expense.branch_id,
            old_values={"amount": str(expense.amount), "category": expense.category},
        )
        await self.db.delete(expense)
        await self.db.commit()

    async def list_expenses(
        self,
        branch_id: int,
        category: ExpenseCategory | None = None,
        start_date: date | None = None,
        end_date: date | None = None,
    ) -> list[Expense]:
        """Expenses of a branch, optionally by category and created_at date range (inclusive)."""
        query = select(Expense).where(Expense.branch_id == branch_id)
        if category is not None:
            query = query.where(Expense.category == category.value)
        if start_date is not None or end_date is not None:
            if start_date is None or end_date is None:
                raise ValidationError("start_date and end_date must be given together")
            if end_date < start_date:
                raise ValidationError("end_date must not be before start_date", field="end_date")
            start, end = range_bounds(start_date, end_date)
            query = query.where(Expense.created_at >= start, Expense.created_at < end)

        result = await self.db.execute(
            query.options(selectinload(Expense.branch))
            .order_by(Expense.created_at.desc(), Expense.id.desc())
            .execution_options(populate_existing=True)
        )
        return list(result.scalars().all())
