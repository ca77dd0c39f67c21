"""
Service for Salaries module.

A teacher earns the group's teacher_salary_per_student for every enrolled
student who paid anything in that group for the period; the amount paid does
not matter once it is above zero. Disbursements recorded for the period are
netted out, never below zero.
"""

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from src.core.audit.service import AuditAction, AuditService
from src.core.exceptions import NotFoundError, ValidationError
from src.modules.branches.service import BranchService
from src.modules.groups.models import Group
from src.modules.groups.service import GroupService
from src.modules.payments.service import PaymentService
from src.modules.salaries.models import TeacherSalaryPayment
from src.modules.salaries.schemas import (
    GroupSalaryInfo,
    SalaryCalculationResponse,
    SalaryHistoryEntry,
    SalaryPaymentCreate,
)
from src.modules.teachers.models import Teacher
from src.modules.teachers.service import TeacherService
from src.shared.utils.money import ZERO, Money, round_money, sum_or_zero


def calculate_group_salary(
    group: Group,
    roster: list[int],
    paid: dict[tuple[int, int], Money],
) -> GroupSalaryInfo:
    """Salary earned from one group given (student_id, group_id) -> paid for the period."""
    paid_students = sum(
        1 for student_id in roster if sum_or_zero(paid.get((student_id, group.id))) > 0
    )
    rate = sum_or_zero(group.teacher_salary_per_student)
    return GroupSalaryInfo(
        group_id=group.id,
        group_name=group.name,
        paid_students=paid_students,
        total_students=len(roster),
        group_price=sum_or_zero(group.price),
        salary_amount=round_money(rate * paid_students),
    )


def remaining_salary(total_salary: Money, already_paid: Money) -> Money:
    return max(round_money(total_salary - already_paid), ZERO)


class SalaryService:
    """Salary calculation and salary disbursements."""

    def __init__(self, db: AsyncSession):
        self.db = db
        self.audit = AuditService(db)
        self.groups = GroupService(db)
        self.payments = PaymentService(db)

    # --- Calculation ---

    async def calculate_salary(
        self, teacher_id: int, year: int, month: int
    ) -> SalaryCalculationResponse:
        teacher = await TeacherService(self.db).get_teacher_by_id(teacher_id)
        calculations = await self._calculate([teacher], year, month)
        return calculations[0]

    async def calculate_salaries_for_branch(
        self, branch_id: int, year: int, month: int
    ) -> list[SalaryCalculationResponse]:
        """One calculation per teacher of the branch."""
        await BranchService(self.db).get_branch_by_id(branch_id)
        teachers = await TeacherService(self.db).list_teachers(branch_id)
        return await self._calculate(teachers, year, month)

    async def remaining_for_teacher(self, teacher_id: int, year: int, month: int) -> Money:
        calculation = await self.calculate_salary(teacher_id, year, month)
        return calculation.remaining_amount

    async def salary_history(self, teacher_id: int) -> list[SalaryHistoryEntry]:
        """Every period with a disbursement, most recent first."""
        teacher = await TeacherService(self.db).get_teacher_by_id(teacher_id)
        result = await self.db.execute(
            select(
                TeacherSalaryPayment.year,
                TeacherSalaryPayment.month,
                func.sum(TeacherSalaryPayment.amount),
                func.max(TeacherSalaryPayment.created_at),
                func.count(TeacherSalaryPayment.id),
            )
            .where(TeacherSalaryPayment.teacher_id == teacher_id)
            .group_by(TeacherSalaryPayment.year, TeacherSalaryPayment.month)
            .order_by(TeacherSalaryPayment.year.desc(), TeacherSalaryPayment.month.desc())
        )

        history = []
        for year, month, total_paid, last_payment_at, payment_count in result.all():
            calculation = (await self._calculate([teacher], year, month))[0]
            total_paid = sum_or_zero(total_paid)
            remaining = remaining_salary(calculation.total_salary, total_paid)
            history.append(
                SalaryHistoryEntry(
                    teacher_id=teacher.id,
                    teacher_name=teacher.full_name,
                    year=year,
                    month=month,
                    total_salary=calculation.total_salary,
                    total_paid=total_paid,
                    remaining_amount=remaining,
                    is_fully_paid=remaining == 0,
                    last_payment_date=last_payment_at,
                    payment_count=payment_count,
                )
            )
        return history

    async def _calculate(
        self, teachers: list[Teacher], year: int, month: int
    ) -> list[SalaryCalculationResponse]:
        """Rosters, paid sums and disbursements are loaded once for all teachers."""
        teacher_ids = [t.id for t in teachers]
        if not teacher_ids:
            return []

        result = await self.db.execute(
            select(Group)
            .where(Group.teacher_id.in_(teacher_ids))
            .order_by(Group.created_at.desc(), Group.id.desc())
        )
        groups = list(result.scalars().all())
        group_ids = [g.id for g in groups]
        rosters = await self.groups.get_rosters(group_ids)
        paid = await self.payments.paid_by_student_and_group_for_period(group_ids, year, month)
        disbursed = await self._disbursed_by_teacher(teacher_ids, year, month)

        calculations = []
        for teacher in teachers:
            group_infos = [
                calculate_group_salary(group, rosters[group.id], paid)
                for group in groups
                if group.teacher_id == teacher.id
            ]
            total_salary = sum_or_zero(*(info.salary_amount for info in group_infos))
            already_paid = sum_or_zero(disbursed.get(teacher.id))
            calculations.append(
                SalaryCalculationResponse(
                    teacher_id=teacher.id,
                    teacher_name=teacher.full_name,
                    branch_id=teacher.branch_id,
                    branch_name=teacher.branch_name,
                    year=year,
                    month=month,
                    total_salary=total_salary,
                    total_paid_students=sum(info.paid_students for info in group_infos),
                    already_paid=already_paid,
                    remaining_amount=remaining_salary(total_salary, already_paid),
                    groups=group_infos,
                )
            )
        return calculations

    async def _disbursed_by_teacher(
        self, teacher_ids: list[int], year: int, month: int
    ) -> dict[int, Money]:
        result = await self.db.execute(
            select(TeacherSalaryPayment.teacher_id, func.sum(TeacherSalaryPayment.amount))
            .where(
                TeacherSalaryPayment.teacher_id.in_(teacher_ids),
                TeacherSalaryPayment.year == year,
                TeacherSalaryPayment.month == month,
            )
            .group_by(TeacherSalaryPayment.teacher_id)
        )
        return {teacher_id: sum_or_zero(total) for teacher_id, total in result.all()}

    # --- Disbursements ---

    async def create_salary_payment(self, data: SalaryPaymentCreate) -> TeacherSalaryPayment:
        await BranchService(self.db).get_branch_by_id(data.branch_id)
        teacher = await TeacherService(self.db).get_teacher_by_id(data.teacher_id)
        if teacher.branch_id != data.branch_id:
            raise ValidationError(
                f"Teacher {teacher.id} does not belong to branch {data.branch_id}",
                field="teacher_id",
            )

        payment = TeacherSalaryPayment(
            teacher_id=teacher.id,
            branch_id=data.branch_id,
            year=data.year,
            month=data.month,
            amount=round_money(data.amount),
            description=data.description,
        )
        self.db.add(payment)
        await self.db.flush()

        await self.audit.log(
            action=AuditAction.CREATE_SALARY_PAYMENT,
            entity_type="TeacherSalaryPayment",
            entity_id=payment.id,
            branch_id=payment.branch_id,
            new_values={
                "teacher_id": teacher.id,
                "amount": str(payment.amount),
                "period": f"{data.year}-{data.month:02d}",
            },
        )

        await self.db.commit()
        return await self.get_salary_payment_by_id(payment.id)

    async def get_salary_payment_by_id(self, payment_id: int) -> TeacherSalaryPayment:
        result = await self.db.execute(
            select(TeacherSalaryPayment)
            .where(TeacherSalaryPayment.id == payment_id)
            .options(
                selectinload(TeacherSalaryPayment.teacher),
                selectinload(TeacherSalaryPayment.branch),
            )
            .execution_options(populate_existing=True)
        )
        payment = result.scalar_one_or_none()
        if not payment:
            raise NotFoundError("TeacherSalaryPayment", payment_id)
        return payment

    async def list_salary_payments(
        self,
        branch_id: int | None = None,
        teacher_id: int | None = None,
        year: int | None = None,
        month: int | None = None,
    ) -> list[TeacherSalaryPayment]:
        """Disbursements by branch or teacher, optionally for one period."""
        query = select(TeacherSalaryPayment).options(
            selectinload(TeacherSalaryPayment.teacher),
            selectinload(TeacherSalaryPayment.branch),
        )
        if branch_id is not None:
            query = query.where(TeacherSalaryPayment.branch_id == branch_id)
        if teacher_id is not None:
            query = query.where(TeacherSalaryPayment.teacher_id == teacher_id)
        if year is not None and month is not None:
            query = query.where(
                TeacherSalaryPayment.year == year,
                TeacherSalaryPayment.month == month,
            )

        result = await self.db.execute(
            query.order_by(TeacherSalaryPayment.created_at.desc(), TeacherSalaryPayment.id.desc())
            .execution_options(populate_existing=True)
        )
        return list(result.scalars().all())

    async def delete_salary_payment(self, payment_id: int) -> None:
        payment = await self.get_salary_payment_by_id(payment_id)
        await self.audit.log(
            action=AuditAction.DELETE_SALARY_PAYMENT,
            entity_type="TeacherSalaryPayment",
            entity_id=payment.id,
            branch_id=payment.branch_id,
            old_values={"teacher_id": payment.teacher_id, "amount": str(payment.amount)},
        )
        await self.db.delete(payment)
        await self.db.commit()
