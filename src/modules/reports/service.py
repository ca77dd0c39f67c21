"""
Financial reports for a branch.

Four sources are summed per window: tuition payments and product sales are
income, regular expenses and salary disbursements are expenses. Monthly
tuition and salary sums follow the billing period; every other window is by
created_at. An empty source sums to zero.
"""

from datetime import date, datetime

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from src.core.exceptions import ValidationError
from src.modules.expenses.models import Expense
from src.modules.payments.models import Payment
from src.modules.payments.service import COUNTED
from src.modules.product_sales.models import ProductSale
from src.modules.reports.schemas import ReportType
from src.modules.salaries.models import TeacherSalaryPayment
from src.shared.utils.dates import day_bounds, month_bounds, range_bounds
from src.shared.utils.money import Money, round_money, sum_or_zero

Bounds = tuple[datetime, datetime] | None


def _created_within(model, bounds: Bounds) -> list:
    if bounds is None:
        return []
    start, end = bounds
    return [model.created_at >= start, model.created_at < end]


def _checked_range(start_date: date, end_date: date) -> tuple[datetime, datetime]:
    if end_date < start_date:
        raise ValidationError("end_date must not be before start_date", field="end_date")
    return range_bounds(start_date, end_date)


class ReportsService:
    """Build financial report data for a branch."""

    def __init__(self, db: AsyncSession):
        self.db = db

    # --- Sources ---

    async def _sum(self, column, *conditions) -> Money:
        result = await self.db.execute(select(func.sum(column)).where(*conditions))
        return sum_or_zero(result.scalar())

    async def student_payments(
        self,
        branch_id: int,
        bounds: Bounds = None,
        period: tuple[int, int] | None = None,
    ) -> Money:
        conditions = [Payment.branch_id == branch_id, COUNTED, *_created_within(Payment, bounds)]
        if period is not None:
            conditions += [Payment.payment_year == period[0], Payment.payment_month == period[1]]
        return await self._sum(Payment.amount, *conditions)

    async def product_sales(self, branch_id: int, bounds: Bounds = None) -> Money:
        return await self._sum(
            ProductSale.total_amount,
            ProductSale.branch_id == branch_id,
            *_created_within(ProductSale, bounds),
        )

    async def regular_expenses(self, branch_id: int, bounds: Bounds = None) -> Money:
        return await self._sum(
            Expense.amount,
            Expense.branch_id == branch_id,
            *_created_within(Expense, bounds),
        )

    async def salary_expenses(
        self,
        branch_id: int,
        bounds: Bounds = None,
        period: tuple[int, int] | None = None,
    ) -> Money:
        conditions = [
            TeacherSalaryPayment.branch_id == branch_id,
            *_created_within(TeacherSalaryPayment, bounds),
        ]
        if period is not None:
            conditions += [
                TeacherSalaryPayment.year == period[0],
                TeacherSalaryPayment.month == period[1],
            ]
        return await self._sum(TeacherSalaryPayment.amount, *conditions)

    # --- Expense reports ---

    async def _expenses(self, branch_id, bounds, period=None) -> dict:
        regular = await self.regular_expenses(branch_id, bounds)
        salaries = await self.salary_expenses(branch_id, None if period else bounds, period)
        return {
            "branch_id": branch_id,
            "regular_expenses": regular,
            "salary_expenses": salaries,
            "total_expenses": round_money(regular + salaries),
        }

    async def daily_expenses(self, branch_id: int, day: date) -> dict:
        data = await self._expenses(branch_id, day_bounds(day))
        return {**data, "type": ReportType.DAILY_EXPENSE, "date": day}

    async def monthly_expenses(self, branch_id: int, year: int, month: int) -> dict:
        data = await self._expenses(branch_id, month_bounds(year, month), (year, month))
        return {**data, "type": ReportType.MONTHLY_EXPENSE, "year": year, "month": month}

    async def range_expenses(self, branch_id: int, start_date: date, end_date: date) -> dict:
        data = await self._expenses(branch_id, _checked_range(start_date, end_date))
        return {
            **data,
            "type": ReportType.RANGE_EXPENSE,
            "start_date": start_date,
            "end_date": end_date,
        }

    async def all_time_expenses(self, branch_id: int) -> dict:
        data = await self._expenses(branch_id, None)
        return {**data, "type": ReportType.ALL_TIME_EXPENSE}

    # --- Income reports ---

    async def _income(self, branch_id, bounds, period=None) -> dict:
        tuition = await self.student_payments(branch_id, None if period else bounds, period)
        sales = await self.product_sales(branch_id, bounds)
        return {
            "branch_id": branch_id,
            "student_payments": tuition,
            "product_sales": sales,
            "total_income": round_money(tuition + sales),
        }

    async def daily_income(self, branch_id: int, day: date) -> dict:
        data = await self._income(branch_id, day_bounds(day))
        return {**data, "type": ReportType.DAILY_PAYMENT, "date": day}

    async def monthly_income(self, branch_id: int, year: int, month: int) -> dict:
        data = await self._income(branch_id, month_bounds(year, month), (year, month))
        return {**data, "type": ReportType.MONTHLY_PAYMENT, "year": year, "month": month}

    async def range_income(self, branch_id: int, start_date: date, end_date: date) -> dict:
        data = await self._income(branch_id, _checked_range(start_date, end_date))
        return {
            **data,
            "type": ReportType.RANGE_PAYMENT,
            "start_date": start_date,
            "end_date": end_date,
        }

    # --- Financial summary ---

    async def _summary(self, branch_id, bounds, period=None) -> dict:
        income = await self._income(branch_id, bounds, period)
        expenses = await self._expenses(branch_id, bounds, period)
        return {
            **income,
            **expenses,
            "net_profit": round_money(income["total_income"] - expenses["total_expenses"]),
        }

    async def financial_summary(self, branch_id: int, year: int, month: int) -> dict:
        data = await self._summary(branch_id, month_bounds(year, month), (year, month))
        return {**data, "type": ReportType.FINANCIAL_SUMMARY, "year": year, "month": month}

    async def financial_summary_range(
        self, branch_id: int, start_date: date, end_date: date
    ) -> dict:
        data = await self._summary(branch_id, _checked_range(start_date, end_date))
        return {
            **data,
            "type": ReportType.FINANCIAL_SUMMARY_RANGE,
            "start_date": start_date,
            "end_date": end_date,
        }
