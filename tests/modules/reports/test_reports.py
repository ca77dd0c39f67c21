"""Tests for Reports module."""

from datetime import date, datetime
from decimal import Decimal

import pytest
from httpx import AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession

from src.core.exceptions import ValidationError
from src.modules.payments.models import PaymentStatus
from src.modules.reports.schemas import ReportType
from src.modules.reports.service import ReportsService
from tests.factories import (
    create_branch,
    create_expense,
    create_group,
    create_payment,
    create_product_sale,
    create_salary_payment,
    create_student,
    create_teacher,
)


class TestReportsService:
    """Tests for ReportsService."""

    async def _setup_test_data(self, db_session: AsyncSession) -> dict:
        branch = await create_branch(db_session)
        teacher = await create_teacher(db_session, branch)
        group = await create_group(db_session, teacher)
        student = await create_student(db_session, branch, groups=[group])
        await db_session.commit()
        return {"branch": branch, "teacher": teacher, "group": group, "student": student}

    async def test_empty_branch_reports_zero(self, db_session: AsyncSession):
        data = await self._setup_test_data(db_session)

        summary = await ReportsService(db_session).financial_summary(data["branch"].id, 2024, 4)

        assert summary["total_income"] == Decimal("0.00")
        assert summary["total_expenses"] == Decimal("0.00")
        assert summary["net_profit"] == Decimal("0.00")
        assert summary["type"] == ReportType.FINANCIAL_SUMMARY

    async def test_expenses_without_regular_rows_equal_salaries(self, db_session: AsyncSession):
        data = await self._setup_test_data(db_session)
        await create_salary_payment(db_session, data["teacher"], "120000", 2024, 4)
        await create_salary_payment(db_session, data["teacher"], "30000", 2024, 4)
        await db_session.commit()

        report = await ReportsService(db_session).monthly_expenses(data["branch"].id, 2024, 4)

        assert report["regular_expenses"] == Decimal("0.00")
        assert report["salary_expenses"] == Decimal("150000.00")
        assert report["total_expenses"] == Decimal("150000.00")

    async def test_monthly_income_follows_billing_period(self, db_session: AsyncSession):
        data = await self._setup_test_data(db_session)
        student, group = data["student"], data["group"]
        # Paid in May for April
        await create_payment(
            db_session, student, group, "300000", 2024, 4, created_at=datetime(2024, 5, 3, 12)
        )
        await create_payment(
            db_session, student, group, "300000", 2024, 5, created_at=datetime(2024, 4, 28, 12)
        )
        await create_payment(
            db_session, student, group, "99000", 2024, 4,
            created_at=datetime(2024, 4, 10, 12), status=PaymentStatus.CANCELLED,
        )
        await create_product_sale(db_session, data["branch"], 2, "10000", created_at=datetime(2024, 4, 15, 12))
        await create_product_sale(db_session, data["branch"], 1, "10000", created_at=datetime(2024, 5, 1, 12))
        await db_session.commit()

        report = await ReportsService(db_session).monthly_income(data["branch"].id, 2024, 4)

        assert report["student_payments"] == Decimal("300000.00")
        assert report["product_sales"] == Decimal("20000.00")
        assert report["total_income"] == Decimal("320000.00")

    async def test_daily_and_range_follow_created_at(self, db_session: AsyncSession):
        data = await self._setup_test_data(db_session)
        student, group = data["student"], data["group"]
        await create_payment(
            db_session, student, group, "300000", 2024, 3, created_at=datetime(2024, 4, 2, 12)
        )
        await create_payment(
            db_session, student, group, "100000", 2024, 4, created_at=datetime(2024, 4, 3, 12)
        )
        await create_expense(db_session, data["branch"], "50000", created_at=datetime(2024, 4, 2, 9))
        await create_salary_payment(
            db_session, data["teacher"], "70000", 2024, 3, created_at=datetime(2024, 4, 2, 15)
        )
        await db_session.commit()
        service = ReportsService(db_session)

        daily_income = await service.daily_income(data["branch"].id, date(2024, 4, 2))
        daily_expenses = await service.daily_expenses(data["branch"].id, date(2024, 4, 2))
        range_income = await service.range_income(
            data["branch"].id, date(2024, 4, 1), date(2024, 4, 3)
        )

        assert daily_income["student_payments"] == Decimal("300000.00")
        assert daily_expenses["total_expenses"] == Decimal("120000.00")
        assert range_income["student_payments"] == Decimal("400000.00")
        assert daily_income["date"] == date(2024, 4, 2)

    async def test_net_profit_can_be_negative(self, db_session: AsyncSession):
        data = await self._setup_test_data(db_session)
        await create_payment(
            db_session, data["student"], data["group"], "100000", 2024, 4,
            created_at=datetime(2024, 4, 5, 12),
        )
        await create_expense(db_session, data["branch"], "2500000", created_at=datetime(2024, 4, 1, 12))
        await db_session.commit()
        service = ReportsService(db_session)

        monthly = await service.financial_summary(data["branch"].id, 2024, 4)
        ranged = await service.financial_summary_range(
            data["branch"].id, date(2024, 4, 1), date(2024, 4, 30)
        )

        assert monthly["net_profit"] == Decimal("-2400000.00")
        assert ranged["net_profit"] == Decimal("-2400000.00")

    async def test_all_time_expenses(self, db_session: AsyncSession):
        data = await self._setup_test_data(db_session)
        await create_expense(db_session, data["branch"], "100000", created_at=datetime(2023, 1, 5, 12))
        await create_expense(db_session, data["branch"], "200000", created_at=datetime(2024, 6, 5, 12))
        await create_salary_payment(db_session, data["teacher"], "50000", 2022, 11)
        other = await create_branch(db_session, name="Second Branch")
        await create_expense(db_session, other, "999999")
        await db_session.commit()

        report = await ReportsService(db_session).all_time_expenses(data["branch"].id)

        assert report["total_expenses"] == Decimal("350000.00")

    async def test_reversed_range_is_rejected(self, db_session: AsyncSession):
        data = await self._setup_test_data(db_session)

        with pytest.raises(ValidationError):
            await ReportsService(db_session).range_expenses(
                data["branch"].id, date(2024, 4, 30), date(2024, 4, 1)
            )


class TestReportsApi:
    """Tests for the reports endpoints."""

    async def test_financial_summary_endpoint(self, client: AsyncClient, db_session: AsyncSession):
        branch = await create_branch(db_session)
        teacher = await create_teacher(db_session, branch)
        await create_salary_payment(db_session, teacher, "80000", 2024, 4)
        await db_session.commit()

        response = await client.get(
            "/api/v1/reports/financial-summary",
            params={"branch_id": branch.id, "year": 2024, "month": 4},
        )

        assert response.status_code == 200
        body = response.json()["data"]
        assert body["type"] == "FINANCIAL_SUMMARY"
        assert body["net_profit"] == "-80000.00"

    async def test_daily_report_by_date_param(self, client: AsyncClient, db_session: AsyncSession):
        branch = await create_branch(db_session)
        await create_expense(db_session, branch, "40000", created_at=datetime(2024, 4, 2, 12))
        await db_session.commit()

        response = await client.get(
            "/api/v1/reports/expenses/daily", params={"branch_id": branch.id, "date": "2024-04-02"}
        )

        assert response.status_code == 200
        assert response.json()["data"]["regular_expenses"] == "40000.00"
        assert response.json()["data"]["date"] == "2024-04-02"

    async def test_reports_of_other_branch_are_forbidden(
        self, client: AsyncClient, db_session: AsyncSession, restrict_branches
    ):
        branch = await create_branch(db_session)
        other = await create_branch(db_session, name="Second Branch")
        await db_session.commit()
        restrict_branches(other.id)

        response = await client.get(
            "/api/v1/reports/expenses/all-time", params={"branch_id": branch.id}
        )

        assert response.status_code == 403
