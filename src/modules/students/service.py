"""Service for Students module: student records, payment projections and collection lists."""

from collections import Counter
from datetime import date, datetime

from sqlalchemy import delete, or_, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from src.core.audit.service import AuditAction, AuditService
from src.core.exceptions import NotFoundError, ValidationError
from src.modules.branches.service import BranchService
from src.modules.groups.models import Group, GroupMembership
from src.modules.groups.service import GroupService
from src.modules.payments.models import Payment
from src.modules.payments.service import PaymentService
from src.modules.students.models import Student, StudentStatus
from src.modules.students.payment_status import (
    StudentPaymentStatus,
    classify_payment_status,
)
from src.modules.students.schemas import (
    StudentCreate,
    StudentGroupInfo,
    StudentPaymentProjection,
    StudentResponse,
    StudentStatisticsResponse,
    StudentUpdate,
    UnpaidStudentResponse,
)
from src.shared.utils.dates import compute_next_due_date, is_payment_overdue, resolve_period
from src.shared.utils.money import ZERO, Money, round_money, sum_or_zero

# Fields an update may clear by sending null
NULLABLE_STUDENT_FIELDS = ("phone_number", "parent_phone_number", "payment_day_of_month")


def visible(query):
    """Restrict a Student query to active students."""
    return query.where(Student.status == StudentStatus.ACTIVE.value)


def build_payment_projection(
    student: Student,
    groups: list[Group],
    total_paid: Money,
    last_payment_at: datetime | None,
    year: int,
    month: int,
    today: date,
) -> StudentPaymentProjection:
    """Where a student stands for (year, month): expected from groups vs. paid."""
    expected = sum_or_zero(*(g.price for g in groups))
    next_due_date = compute_next_due_date(student.payment_day_of_month, year, month, today)
    return StudentPaymentProjection(
        year=year,
        month=month,
        has_paid_in_month=total_paid > 0,
        total_paid_in_month=total_paid,
        expected_amount=expected,
        remaining_amount=max(round_money(expected - total_paid), ZERO),
        payment_status=classify_payment_status(total_paid, expected, next_due_date, today),
        next_due_date=next_due_date,
        last_payment_date=last_payment_at,
        groups=[
            StudentGroupInfo(id=g.id, name=g.name, price=g.price, teacher_name=g.teacher_name)
            for g in groups
        ],
    )


class StudentService:
    """Service for managing students."""

    def __init__(self, db: AsyncSession):
        self.db = db
        self.audit = AuditService(db)
        self.groups = GroupService(db)
        self.payments = PaymentService(db)

    # --- Student Methods ---

    async def create_student(self, data: StudentCreate) -> Student:
        """
        Create a student and enroll them in data.group_ids.

        Every group must belong to the student's branch; nothing is written
        otherwise.
        """
        await BranchService(self.db).get_branch_by_id(data.branch_id)
        group_ids = await self._validate_groups(data.group_ids, data.branch_id)

        student = Student(
            first_name=data.first_name,
            last_name=data.last_name,
            phone_number=data.phone_number,
            parent_phone_number=data.parent_phone_number,
            payment_day_of_month=data.payment_day_of_month,
            branch_id=data.branch_id,
            status=StudentStatus.ACTIVE.value,
        )
        self.db.add(student)
        await self.db.flush()

        for group_id in group_ids:
            self.db.add(GroupMembership(group_id=group_id, student_id=student.id))

        await self.audit.log(
            action=AuditAction.CREATE,
            entity_type="Student",
            entity_id=student.id,
            branch_id=student.branch_id,
            new_values={"full_name": student.full_name, "group_ids": group_ids},
        )

        await self.db.commit()
        return await self.get_student_by_id(student.id)

    async def get_student_by_id(self, student_id: int, include_deleted: bool = False) -> Student:
        """Get student by ID. Deleted students are only found with include_deleted."""
        result = await self.db.execute(
            select(Student)
            .where(Student.id == student_id)
            .options(selectinload(Student.branch))
            .execution_options(populate_existing=True)
        )
        student = result.scalar_one_or_none()
        if not student or (student.is_deleted and not include_deleted):
            raise NotFoundError("Student", student_id)
        return student

    async def update_student(self, student_id: int, data: StudentUpdate) -> Student:
        """Update a student. A given group_ids replaces all memberships."""
        student = await self.get_student_by_id(student_id)
        changes = {
            field: value
            for field, value in data.model_dump(exclude_unset=True).items()
            if value is not None or field in NULLABLE_STUDENT_FIELDS
        }
        group_ids = changes.pop("group_ids", None)

        new_group_ids = None
        if group_ids is not None:
            new_group_ids = await self._validate_groups(group_ids, student.branch_id)

        old_values = {field: getattr(student, field) for field in changes}
        for field, value in changes.items():
            setattr(student, field, value)

        if new_group_ids is not None:
            await self.db.execute(
                delete(GroupMembership).where(GroupMembership.student_id == student_id)
            )
            for group_id in new_group_ids:
                self.db.add(GroupMembership(group_id=group_id, student_id=student_id))
            changes["group_ids"] = new_group_ids

        if changes:
            await self.audit.log(
                action=AuditAction.UPDATE,
                entity_type="Student",
                entity_id=student_id,
                branch_id=student.branch_id,
                old_values=old_values,
                new_values=changes,
            )

        await self.db.commit()
        return await self.get_student_by_id(student_id)

    async def delete_student(self, student_id: int) -> None:
        """Soft delete: drop memberships and mark deleted. Payments keep their student."""
        student = await self.get_student_by_id(student_id)
        await self.db.execute(
            delete(GroupMembership).where(GroupMembership.student_id == student_id)
        )
        student.status = StudentStatus.DELETED.value

        await self.audit.log(
            action=AuditAction.SOFT_DELETE_STUDENT,
            entity_type="Student",
            entity_id=student_id,
            branch_id=student.branch_id,
            old_values={"status": StudentStatus.ACTIVE.value},
            new_values={"status": StudentStatus.DELETED.value},
        )
        await self.db.commit()

    async def list_students(self, branch_id: int) -> list[Student]:
        """Active students of a branch, newest first."""
        result = await self.db.execute(
            visible(select(Student))
            .where(Student.branch_id == branch_id)
            .options(selectinload(Student.branch))
            .order_by(Student.created_at.desc(), Student.id.desc())
            .execution_options(populate_existing=True)
        )
        return list(result.scalars().all())

    async def list_students_by_group(self, group_id: int) -> list[Student]:
        """Active students enrolled in a group, newest first."""
        result = await self.db.execute(
            visible(select(Student))
            .join(GroupMembership, GroupMembership.student_id == Student.id)
            .where(GroupMembership.group_id == group_id)
            .options(selectinload(Student.branch))
            .order_by(Student.created_at.desc(), Student.id.desc())
            .execution_options(populate_existing=True)
        )
        return list(result.scalars().all())

    async def search_students(self, branch_id: int, query: str) -> list[Student]:
        """Active students whose name or phone number matches."""
        search_term = f"%{query.strip()}%"
        result = await self.db.execute(
            visible(select(Student))
            .where(
                Student.branch_id == branch_id,
                or_(
                    Student.first_name.ilike(search_term),
                    Student.last_name.ilike(search_term),
                    Student.phone_number.ilike(search_term),
                ),
            )
            .options(selectinload(Student.branch))
            .order_by(Student.created_at.desc(), Student.id.desc())
            .execution_options(populate_existing=True)
        )
        return list(result.scalars().all())

    async def list_recent_students(self, branch_id: int, limit: int = 10) -> list[Student]:
        result = await self.db.execute(
            visible(select(Student))
            .where(Student.branch_id == branch_id)
            .options(selectinload(Student.branch))
            .order_by(Student.created_at.desc(), Student.id.desc())
            .execution_options(populate_existing=True)
            .limit(limit)
        )
        return list(result.scalars().all())

    async def get_student_groups(self, student_id: int) -> list[Group]:
        await self.get_student_by_id(student_id)
        return await self.groups.get_student_groups(student_id)

    async def get_payment_history(self, student_id: int) -> list[Payment]:
        await self.get_student_by_id(student_id, include_deleted=True)
        return await self.payments.list_payments_by_student(student_id)

    # --- Payment projections ---

    async def build_responses(
        self,
        students: list[Student],
        branch_id: int,
        year: int | None = None,
        month: int | None = None,
        today: date | None = None,
    ) -> list[StudentResponse]:
        """
        Student responses with the payment projection for a period.

        Groups, memberships and paid sums are loaded once for the whole list.
        The period defaults to the current payment period.
        """
        today = today or date.today()
        year, month = resolve_period(year, month, today)
        student_ids = [s.id for s in students]

        branch = await BranchService(self.db).get_branch_by_id(branch_id)
        groups_by_student = await self.groups.get_groups_by_student(branch_id)
        paid = await self.payments.paid_by_student_for_period(student_ids, year, month)
        last_paid = await self.payments.last_payment_dates(student_ids)

        return [
            StudentResponse(
                id=s.id,
                first_name=s.first_name,
                last_name=s.last_name,
                full_name=s.full_name,
                phone_number=s.phone_number,
                parent_phone_number=s.parent_phone_number,
                payment_day_of_month=s.payment_day_of_month,
                status=s.status,
                branch_id=s.branch_id,
                branch_name=branch.name,
                created_at=s.created_at,
                payment=build_payment_projection(
                    s,
                    groups_by_student.get(s.id, []),
                    sum_or_zero(paid.get(s.id)),
                    last_paid.get(s.id),
                    year,
                    month,
                    today,
                ),
            )
            for s in students
        ]

    async def get_statistics(
        self,
        branch_id: int,
        year: int | None = None,
        month: int | None = None,
        today: date | None = None,
    ) -> StudentStatisticsResponse:
        """Counts of active students per payment status. PARTIAL counts as unpaid."""
        today = today or date.today()
        year, month = resolve_period(year, month, today)
        students = await self.list_students(branch_id)
        responses = await self.build_responses(students, branch_id, year, month, today)
        counts = Counter(r.payment.payment_status for r in responses)

        total = len(responses)
        paid = counts[StudentPaymentStatus.PAID]
        return StudentStatisticsResponse(
            branch_id=branch_id,
            year=year,
            month=month,
            total_students=total,
            paid_students=paid,
            unpaid_students=counts[StudentPaymentStatus.UNPAID] + counts[StudentPaymentStatus.PARTIAL],
            upcoming_students=counts[StudentPaymentStatus.UPCOMING],
            overdue_students=counts[StudentPaymentStatus.OVERDUE],
            payment_rate=round(paid / total * 100, 2) if total else 0.0,
        )

    async def find_unpaid(
        self,
        branch_id: int,
        year: int | None = None,
        month: int | None = None,
        today: date | None = None,
    ) -> list[UnpaidStudentResponse]:
        """
        Collections worklist: one row per (student, group) still owing money
        whose due date has passed.

        With an explicit year and month the paid amount is summed for that
        period; otherwise it is summed over all time for the pair. The overdue
        test always uses the student's own pay day against the target period.
        """
        today = today or date.today()
        target_year, target_month = resolve_period(year, month, today)

        groups = await self.groups.list_groups(branch_id)
        group_ids = [g.id for g in groups]
        rosters = await self.groups.get_rosters(group_ids)

        if year is not None and month is not None:
            paid = await self.payments.paid_by_student_and_group_for_period(
                group_ids, year, month
            )
        else:
            paid = await self.payments.paid_by_student_and_group_all_time(group_ids)

        student_ids = {sid for roster in rosters.values() for sid in roster}
        students = await self._load_visible(student_ids)

        unpaid = []
        for group in groups:
            for student_id in rosters[group.id]:
                student = students.get(student_id)
                if student is None:
                    continue
                remaining = round_money(
                    group.price - sum_or_zero(paid.get((student_id, group.id)))
                )
                if remaining <= 0:
                    continue
                if not is_payment_overdue(
                    student.payment_day_of_month, target_year, target_month, today
                ):
                    continue
                unpaid.append(
                    UnpaidStudentResponse(
                        student_id=student.id,
                        first_name=student.first_name,
                        last_name=student.last_name,
                        phone_number=student.phone_number,
                        parent_phone_number=student.parent_phone_number,
                        remaining_amount=remaining,
                        group_id=group.id,
                        group_name=group.name,
                    )
                )
        return unpaid

    # --- Helpers ---

    async def _load_visible(self, student_ids: set[int]) -> dict[int, Student]:
        if not student_ids:
            return {}
        result = await self.db.execute(
            visible(select(Student)).where(Student.id.in_(student_ids))
        )
        return {s.id: s for s in result.scalars().all()}

    async def _validate_groups(self, group_ids: list[int], branch_id: int) -> list[int]:
        """Check every group exists and belongs to the branch. Returns ids deduplicated."""
        unique_ids = list(dict.fromkeys(group_ids))
        for group_id in unique_ids:
            group = await self.groups.get_group_by_id(group_id)
            if group.branch_id != branch_id:
                raise ValidationError(
                    f"Group {group_id} does not belong to branch {branch_id}",
                    field="group_ids",
                )
        return unique_ids
