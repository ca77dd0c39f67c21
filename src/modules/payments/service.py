"""Service for Payments module."""

from datetime import date, datetime

from sqlalchemy import func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from src.core.audit.service import AuditAction, AuditService
from src.core.exceptions import NotFoundError, ValidationError
from src.modules.branches.service import BranchService
from src.modules.groups.service import GroupService
from src.modules.payments.models import Payment, PaymentStatus
from src.modules.payments.schemas import PaymentCreate, PaymentFilters
from src.modules.students.models import Student, StudentStatus
from src.shared.utils.dates import compute_due_date, range_bounds
from src.shared.utils.money import Money, round_money, sum_or_zero


# Only completed payments count towards what a student has paid.
COUNTED = Payment.status == PaymentStatus.COMPLETED.value


def _with_relations(query):
    return query.options(
        selectinload(Payment.student),
        selectinload(Payment.group),
        selectinload(Payment.branch),
    )


class PaymentService:
    """Service for tuition payments and the paid-amount lookups built on them."""

    def __init__(self, db: AsyncSession):
        self.db = db
        self.audit = AuditService(db)

    # --- Payment Methods ---

    async def create_payment(self, data: PaymentCreate) -> Payment:
        """
        Record a tuition payment.

        Everything is validated before the row is added: the student must be
        active, the group must belong to the payment's branch and the student
        must be enrolled in it. The due date is computed from the student's pay
        day once and never recomputed.
        """
        await BranchService(self.db).get_branch_by_id(data.branch_id)
        student = await self._get_student(data.student_id)
        groups = GroupService(self.db)
        group = await groups.get_group_by_id(data.group_id)

        if group.branch_id != data.branch_id:
            raise ValidationError(
                f"Group {group.id} does not belong to branch {data.branch_id}",
                field="group_id",
            )
        if not await groups.is_member(group.id, student.id):
            raise ValidationError(
                f"Student {student.id} is not a member of group {group.id}",
                field="student_id",
            )

        payment = Payment(
            student_id=student.id,
            group_id=group.id,
            branch_id=data.branch_id,
            amount=round_money(data.amount),
            description=data.description,
            category=data.category.value,
            status=data.status.value,
            payment_year=data.payment_year,
            payment_month=data.payment_month,
            due_date=compute_due_date(
                student.payment_day_of_month, data.payment_year, data.payment_month
            ),
        )
        self.db.add(payment)
        await self.db.flush()

        await self.audit.log(
            action=AuditAction.CREATE_PAYMENT,
            entity_type="Payment",
            entity_id=payment.id,
            branch_id=payment.branch_id,
            new_values={
                "student_id": student.id,
                "group_id": group.id,
                "amount": str(payment.amount),
                "period": f"{data.payment_year}-{data.payment_month:02d}",
            },
        )

        await self.db.commit()
        return await self.get_payment_by_id(payment.id)

    async def get_payment_by_id(self, payment_id: int) -> Payment:
        """Get payment by ID with student, group and branch loaded."""
        result = await self.db.execute(
            _with_relations(select(Payment))
            .where(Payment.id == payment_id)
            .execution_options(populate_existing=True)
        )
        payment = result.scalar_one_or_none()
        if not payment:
            raise NotFoundError("Payment", payment_id)
        return payment

    async def update_payment_amount(self, payment_id: int, amount: Money) -> Payment:
        """Correct the amount of a payment. Period and due date stay as recorded."""
        if amount <= 0:
            raise ValidationError("Amount must be positive", field="amount")
        payment = await self.get_payment_by_id(payment_id)
        old_amount = payment.amount
        payment.amount = round_money(amount)

        await self.audit.log(
            action=AuditAction.UPDATE_PAYMENT_AMOUNT,
            entity_type="Payment",
            entity_id=payment.id,
            branch_id=payment.branch_id,
            old_values={"amount": str(old_amount)},
            new_values={"amount": str(payment.amount)},
        )

        await self.db.commit()
        return await self.get_payment_by_id(payment_id)

    async def delete_payment(self, payment_id: int) -> None:
        payment = await self.get_payment_by_id(payment_id)
        await self.audit.log(
            action=AuditAction.DELETE_PAYMENT,
            entity_type="Payment",
            entity_id=payment.id,
            branch_id=payment.branch_id,
            old_values={
                "student_id": payment.student_id,
                "group_id": payment.group_id,
                "amount": str(payment.amount),
            },
        )
        await self.db.delete(payment)
        await self.db.commit()

    async def list_payments(self, filters: PaymentFilters) -> list[Payment]:
        """List payments of a branch, optionally by category and billing period."""
        query = _with_relations(select(Payment)).where(
            Payment.branch_id == filters.branch_id
        )
        if filters.category is not None:
            query = query.where(Payment.category == filters.category.value)
        if filters.year is not None and filters.month is not None:
            query = query.where(
                Payment.payment_year == filters.year,
                Payment.payment_month == filters.month,
            )

        result = await self.db.execute(
            query.order_by(Payment.created_at.desc(), Payment.id.desc())
            .execution_options(populate_existing=True)
        )
        return list(result.scalars().all())

    async def list_payments_by_student(self, student_id: int) -> list[Payment]:
        """Payment history of a student, deleted students included."""
        result = await self.db.execute(
            _with_relations(select(Payment))
            .where(Payment.student_id == student_id)
            .order_by(Payment.created_at.desc(), Payment.id.desc())
            .execution_options(populate_existing=True)
        )
        return list(result.scalars().all())

    async def list_payments_by_date_range(
        self, branch_id: int, start_date: date, end_date: date
    ) -> list[Payment]:
        """Payments recorded between start_date and end_date, both inclusive."""
        if end_date < start_date:
            raise ValidationError("end_date must not be before start_date", field="end_date")
        start, end = range_bounds(start_date, end_date)
        result = await self.db.execute(
            _with_relations(select(Payment))
            .where(
                Payment.branch_id == branch_id,
                Payment.created_at >= start,
                Payment.created_at < end,
            )
            .order_by(Payment.created_at.desc(), Payment.id.desc())
            .execution_options(populate_existing=True)
        )
        return list(result.scalars().all())

    async def search_payments(self, branch_id: int, student_name: str) -> list[Payment]:
        """Payments whose student's first or last name matches."""
        search_term = f"%{student_name.strip()}%"
        result = await self.db.execute(
            _with_relations(select(Payment))
            .join(Student, Student.id == Payment.student_id)
            .where(
                Payment.branch_id == branch_id,
                or_(
                    Student.first_name.ilike(search_term),
                    Student.last_name.ilike(search_term),
                ),
            )
            .order_by(Payment.created_at.desc(), Payment.id.desc())
            .execution_options(populate_existing=True)
        )
        return list(result.scalars().all())

    async def list_recent_payments(self, branch_id: int, limit: int = 10) -> list[Payment]:
        result = await self.db.execute(
            _with_relations(select(Payment))
            .where(Payment.branch_id == branch_id)
            .order_by(Payment.created_at.desc(), Payment.id.desc())
            .execution_options(populate_existing=True)
            .limit(limit)
        )
        return list(result.scalars().all())

    # --- Paid amount lookups ---

    async def paid_by_student_for_period(
        self, student_ids: list[int], year: int, month: int
    ) -> dict[int, Money]:
        """student_id -> completed tuition paid for the period, all groups."""
        if not student_ids:
            return {}
        result = await self.db.execute(
            select(Payment.student_id, func.sum(Payment.amount))
            .where(
                Payment.student_id.in_(student_ids),
                Payment.payment_year == year,
                Payment.payment_month == month,
                COUNTED,
            )
            .group_by(Payment.student_id)
        )
        return {student_id: sum_or_zero(total) for student_id, total in result.all()}

    async def paid_by_student_and_group_for_period(
        self, group_ids: list[int], year: int, month: int
    ) -> dict[tuple[int, int], Money]:
        """(student_id, group_id) -> completed tuition paid for the period."""
        if not group_ids:
            return {}
        result = await self.db.execute(
            select(Payment.student_id, Payment.group_id, func.sum(Payment.amount))
            .where(
                Payment.group_id.in_(group_ids),
                Payment.student_id.is_not(None),
                Payment.payment_year == year,
                Payment.payment_month == month,
                COUNTED,
            )
            .group_by(Payment.student_id, Payment.group_id)
        )
        return {
            (student_id, group_id): sum_or_zero(total)
            for student_id, group_id, total in result.all()
        }

    async def paid_by_student_and_group_all_time(
        self, group_ids: list[int]
    ) -> dict[tuple[int, int], Money]:
        """(student_id, group_id) -> completed tuition ever paid, any period."""
        if not group_ids:
            return {}
        result = await self.db.execute(
            select(Payment.student_id, Payment.group_id, func.sum(Payment.amount))
            .where(
                Payment.group_id.in_(group_ids),
                Payment.student_id.is_not(None),
                COUNTED,
            )
            .group_by(Payment.student_id, Payment.group_id)
        )
        return {
            (student_id, group_id): sum_or_zero(total)
            for student_id, group_id, total in result.all()
        }

    async def last_payment_dates(self, student_ids: list[int]) -> dict[int, datetime]:
        """student_id -> when the student's latest payment was recorded."""
        if not student_ids:
            return {}
        result = await self.db.execute(
            select(Payment.student_id, func.max(Payment.created_at))
            .where(Payment.student_id.in_(student_ids), COUNTED)
            .group_by(Payment.student_id)
        )
        return {student_id: last for student_id, last in result.all()}

    async def _get_student(self, student_id: int) -> Student:
        student = await self.db.get(Student, student_id)
        if not student or student.status == StudentStatus.DELETED.value:
            raise NotFoundError("Student", student_id)
        return student
