"""Tests for Payments module."""

from datetime import date, datetime
from decimal import Decimal

import pytest
from httpx import AsyncClient
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from src.core.exceptions import NotFoundError, ValidationError
from src.modules.payments.models import Payment, PaymentCategory, PaymentStatus
from src.modules.payments.schemas import PaymentCreate, PaymentFilters
from src.modules.payments.service import PaymentService
from src.modules.students.models import StudentStatus
from src.modules.students.schemas import StudentUpdate
from src.modules.students.service import StudentService
from tests.factories import (
    create_branch,
    create_group,
    create_payment,
    create_student,
    create_teacher,
)


async def _count_payments(db_session: AsyncSession) -> int:
    return (await db_session.execute(select(func.count(Payment.id)))).scalar_one()


class TestPaymentService:
    """Tests for PaymentService."""

    async def _setup_test_data(self, db_session: AsyncSession) -> dict:
        branch = await create_branch(db_session)
        teacher = await create_teacher(db_session, branch)
        group = await create_group(db_session, teacher)
        student = await create_student(db_session, branch, pay_day=31, groups=[group])
        await db_session.commit()
        return {"branch": branch, "teacher": teacher, "group": group, "student": student}

    def _payment_data(self, data: dict, **overrides) -> PaymentCreate:
        values = {
            "student_id": data["student"].id,
            "group_id": data["group"].id,
            "branch_id": data["branch"].id,
            "amount": Decimal("300000"),
            "payment_year": 2024,
            "payment_month": 4,
        }
        values.update(overrides)
        return PaymentCreate(**values)

    async def test_create_payment_stores_due_date(self, db_session: AsyncSession):
        data = await self._setup_test_data(db_session)

        payment = await PaymentService(db_session).create_payment(self._payment_data(data))

        assert payment.amount == Decimal("300000.00")
        assert payment.category == PaymentCategory.TUITION.value
        assert payment.status == PaymentStatus.COMPLETED.value
        # Pay day 31 falls on the last day of April
        assert payment.due_date == date(2024, 4, 30)
        assert payment.student_name == "Aziz Rahimov"
        assert payment.group_name == "English A1"
        assert payment.branch_name == "Main Branch"

    async def test_due_date_is_first_without_pay_day(self, db_session: AsyncSession):
        data = await self._setup_test_data(db_session)
        student = await create_student(
            db_session, data["branch"], first_name="Nodira", groups=[data["group"]]
        )
        await db_session.commit()

        payment = await PaymentService(db_session).create_payment(
            self._payment_data(data, student_id=student.id, payment_month=2)
        )

        assert payment.due_date == date(2024, 2, 1)

    async def test_non_member_is_rejected_without_writing(self, db_session: AsyncSession):
        data = await self._setup_test_data(db_session)
        outsider = await create_student(db_session, data["branch"], first_name="Outsider")
        await db_session.commit()

        with pytest.raises(ValidationError):
            await PaymentService(db_session).create_payment(
                self._payment_data(data, student_id=outsider.id)
            )

        assert await _count_payments(db_session) == 0

    async def test_group_of_other_branch_is_rejected(self, db_session: AsyncSession):
        data = await self._setup_test_data(db_session)
        other = await create_branch(db_session, name="Second Branch")
        await db_session.commit()

        with pytest.raises(ValidationError):
            await PaymentService(db_session).create_payment(
                self._payment_data(data, branch_id=other.id)
            )

        assert await _count_payments(db_session) == 0

    async def test_deleted_student_is_rejected(self, db_session: AsyncSession):
        data = await self._setup_test_data(db_session)
        gone = await create_student(
            db_session, data["branch"], groups=[data["group"]], status=StudentStatus.DELETED
        )
        await db_session.commit()

        with pytest.raises(NotFoundError):
            await PaymentService(db_session).create_payment(
                self._payment_data(data, student_id=gone.id)
            )

    async def test_update_amount(self, db_session: AsyncSession):
        data = await self._setup_test_data(db_session)
        service = PaymentService(db_session)
        payment = await service.create_payment(self._payment_data(data))

        updated = await service.update_payment_amount(payment.id, Decimal("150000.50"))

        assert updated.amount == Decimal("150000.50")
        assert updated.due_date == date(2024, 4, 30)
        assert updated.payment_month == 4

    async def test_due_date_survives_pay_day_change(self, db_session: AsyncSession):
        data = await self._setup_test_data(db_session)
        student = await create_student(
            db_session, data["branch"], first_name="Nodira", pay_day=30, groups=[data["group"]]
        )
        await db_session.commit()
        service = PaymentService(db_session)
        payment = await service.create_payment(
            self._payment_data(data, student_id=student.id, payment_month=2)
        )
        assert payment.due_date == date(2024, 2, 29)

        await StudentService(db_session).update_student(
            student.id, StudentUpdate(payment_day_of_month=10)
        )
        reloaded = await service.get_payment_by_id(payment.id)

        assert reloaded.due_date == date(2024, 2, 29)

    async def test_update_amount_must_be_positive(self, db_session: AsyncSession):
        data = await self._setup_test_data(db_session)
        service = PaymentService(db_session)
        payment = await service.create_payment(self._payment_data(data))

        with pytest.raises(ValidationError):
            await service.update_payment_amount(payment.id, Decimal("0"))

    async def test_delete_payment(self, db_session: AsyncSession):
        data = await self._setup_test_data(db_session)
        service = PaymentService(db_session)
        payment = await service.create_payment(self._payment_data(data))

        await service.delete_payment(payment.id)

        with pytest.raises(NotFoundError):
            await service.get_payment_by_id(payment.id)

    async def test_list_payments_with_filters(self, db_session: AsyncSession):
        data = await self._setup_test_data(db_session)
        service = PaymentService(db_session)
        april = await service.create_payment(self._payment_data(data))
        may = await service.create_payment(self._payment_data(data, payment_month=5))
        exam = await service.create_payment(
            self._payment_data(data, category=PaymentCategory.EXAM, amount=Decimal("50000"))
        )
        branch_id = data["branch"].id

        everything = await service.list_payments(PaymentFilters(branch_id=branch_id))
        in_april = await service.list_payments(
            PaymentFilters(branch_id=branch_id, year=2024, month=4)
        )
        exams = await service.list_payments(
            PaymentFilters(branch_id=branch_id, category=PaymentCategory.EXAM)
        )
        # A lone month is not a period
        month_only = await service.list_payments(PaymentFilters(branch_id=branch_id, month=5))

        assert {p.id for p in everything} == {april.id, may.id, exam.id}
        assert {p.id for p in in_april} == {april.id, exam.id}
        assert [p.id for p in exams] == [exam.id]
        assert len(month_only) == 3

    async def test_list_by_date_range(self, db_session: AsyncSession):
        data = await self._setup_test_data(db_session)
        student, group = data["student"], data["group"]
        early = await create_payment(
            db_session, student, group, "100000", 2024, 3, created_at=datetime(2024, 3, 5, 12)
        )
        last_day = await create_payment(
            db_session, student, group, "100000", 2024, 3, created_at=datetime(2024, 3, 31, 12)
        )
        await create_payment(
            db_session, student, group, "100000", 2024, 4, created_at=datetime(2024, 4, 1, 12)
        )
        await db_session.commit()
        service = PaymentService(db_session)

        in_march = await service.list_payments_by_date_range(
            data["branch"].id, date(2024, 3, 1), date(2024, 3, 31)
        )

        assert {p.id for p in in_march} == {early.id, last_day.id}

        with pytest.raises(ValidationError):
            await service.list_payments_by_date_range(
                data["branch"].id, date(2024, 3, 31), date(2024, 3, 1)
            )

    async def test_search_and_recent(self, db_session: AsyncSession):
        data = await self._setup_test_data(db_session)
        other = await create_student(
            db_session, data["branch"], first_name="Madina", last_name="Yusupova",
            groups=[data["group"]],
        )
        await create_payment(
            db_session, data["student"], data["group"], "100000", 2024, 4,
            created_at=datetime(2024, 4, 2, 12),
        )
        second = await create_payment(
            db_session, other, data["group"], "100000", 2024, 4,
            created_at=datetime(2024, 4, 3, 12),
        )
        await db_session.commit()
        service = PaymentService(db_session)

        found = await service.search_payments(data["branch"].id, "yusup")
        recent = await service.list_recent_payments(data["branch"].id, limit=1)

        assert [p.id for p in found] == [second.id]
        assert [p.id for p in recent] == [second.id]

    async def test_paid_sums_count_completed_only(self, db_session: AsyncSession):
        data = await self._setup_test_data(db_session)
        student, group = data["student"], data["group"]
        await create_payment(db_session, student, group, "100000", 2024, 4)
        await create_payment(db_session, student, group, "50000", 2024, 4)
        await create_payment(
            db_session, student, group, "70000", 2024, 4, status=PaymentStatus.PENDING
        )
        await create_payment(db_session, student, group, "30000", 2024, 3)
        await db_session.commit()
        service = PaymentService(db_session)

        by_period = await service.paid_by_student_for_period([student.id], 2024, 4)
        by_group = await service.paid_by_student_and_group_for_period([group.id], 2024, 4)
        all_time = await service.paid_by_student_and_group_all_time([group.id])

        assert by_period == {student.id: Decimal("150000.00")}
        assert by_group == {(student.id, group.id): Decimal("150000.00")}
        assert all_time == {(student.id, group.id): Decimal("180000.00")}
        assert await service.paid_by_student_for_period([student.id], 2024, 5) == {}


class TestPaymentsApi:
    """Tests for the payments endpoints."""

    async def test_create_and_correct_payment(self, client: AsyncClient, db_session: AsyncSession):
        branch = await create_branch(db_session)
        group = await create_group(db_session, await create_teacher(db_session, branch))
        student = await create_student(db_session, branch, pay_day=10, groups=[group])
        await db_session.commit()

        response = await client.post(
            "/api/v1/payments",
            json={
                "student_id": student.id,
                "group_id": group.id,
                "branch_id": branch.id,
                "amount": "300000",
                "payment_year": 2024,
                "payment_month": 4,
            },
        )
        assert response.status_code == 201
        body = response.json()["data"]
        assert body["due_date"] == "2024-04-10"
        assert body["amount"] == "300000.00"

        patched = await client.patch(
            f"/api/v1/payments/{body['id']}/amount", json={"amount": "250000"}
        )
        assert patched.status_code == 200
        assert patched.json()["data"]["amount"] == "250000.00"

        deleted = await client.delete(f"/api/v1/payments/{body['id']}")
        assert deleted.status_code == 200
        assert (await client.get(f"/api/v1/payments/{body['id']}")).status_code == 404

    async def test_non_member_returns_422(self, client: AsyncClient, db_session: AsyncSession):
        branch = await create_branch(db_session)
        group = await create_group(db_session, await create_teacher(db_session, branch))
        student = await create_student(db_session, branch)
        await db_session.commit()

        response = await client.post(
            "/api/v1/payments",
            json={
                "student_id": student.id,
                "group_id": group.id,
                "branch_id": branch.id,
                "amount": "300000",
                "payment_year": 2024,
                "payment_month": 4,
            },
        )

        assert response.status_code == 422
        assert await _count_payments(db_session) == 0

    async def test_non_positive_amount_returns_422(
        self, client: AsyncClient, db_session: AsyncSession
    ):
        branch = await create_branch(db_session)
        group = await create_group(db_session, await create_teacher(db_session, branch))
        student = await create_student(db_session, branch, groups=[group])
        await db_session.commit()

        response = await client.post(
            "/api/v1/payments",
            json={
                "student_id": student.id,
                "group_id": group.id,
                "branch_id": branch.id,
                "amount": "-5",
                "payment_year": 2024,
                "payment_month": 4,
            },
        )

        assert response.status_code == 422

    async def test_list_of_other_branch_is_forbidden(
        self, client: AsyncClient, db_session: AsyncSession, restrict_branches
    ):
        branch = await create_branch(db_session)
        other = await create_branch(db_session, name="Second Branch")
        await db_session.commit()
        restrict_branches(other.id)

        response = await client.get("/api/v1/payments", params={"branch_id": branch.id})

        assert response.status_code == 403
