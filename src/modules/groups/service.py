"""Service for Groups module: groups and their rosters."""

from collections import defaultdict

from sqlalchemy import delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from src.core.audit.service import AuditAction, AuditService
from src.core.exceptions import NotFoundError, ValidationError
from src.modules.branches.service import BranchService
from src.modules.groups.models import Group, GroupMembership
from src.modules.groups.schemas import GroupCreate, GroupResponse, GroupUpdate
from src.modules.students.models import Student, StudentStatus
from src.modules.teachers.service import TeacherService
from src.shared.utils.money import round_money


# Fields an update may clear by sending null
NULLABLE_GROUP_FIELDS = ("description", "start_time", "end_time", "days_of_week")


class GroupService:
    """Service for managing groups and group membership."""

    def __init__(self, db: AsyncSession):
        self.db = db
        self.audit = AuditService(db)

    # --- Group Methods ---

    async def create_group(self, data: GroupCreate) -> Group:
        """Create a group. The teacher must work at the group's branch."""
        await BranchService(self.db).get_branch_by_id(data.branch_id)
        await self._validate_teacher(data.teacher_id, data.branch_id)

        group = Group(
            name=data.name,
            description=data.description,
            price=round_money(data.price),
            teacher_salary_per_student=round_money(data.teacher_salary_per_student),
            teacher_id=data.teacher_id,
            branch_id=data.branch_id,
            start_time=data.start_time,
            end_time=data.end_time,
            days_of_week=",".join(d.value for d in data.days_of_week) or None,
        )
        self.db.add(group)
        await self.db.flush()

        await self.audit.log(
            action=AuditAction.CREATE,
            entity_type="Group",
            entity_id=group.id,
            branch_id=group.branch_id,
            new_values={"name": data.name, "price": str(data.price)},
        )

        await self.db.commit()
        return await self.get_group_by_id(group.id)

    async def get_group_by_id(self, group_id: int) -> Group:
        """Get group by ID with teacher and branch loaded."""
        result = await self.db.execute(
            select(Group)
            .where(Group.id == group_id)
            .options(selectinload(Group.teacher), selectinload(Group.branch))
            .execution_options(populate_existing=True)
        )
        group = result.scalar_one_or_none()
        if not group:
            raise NotFoundError("Group", group_id)
        return group

    async def list_groups(self, branch_id: int) -> list[Group]:
        """List groups of a branch, newest first."""
        result = await self.db.execute(
            select(Group)
            .where(Group.branch_id == branch_id)
            .options(selectinload(Group.teacher), selectinload(Group.branch))
            .order_by(Group.created_at.desc(), Group.id.desc())
            .execution_options(populate_existing=True)
        )
        return list(result.scalars().all())

    async def list_groups_by_teacher(self, teacher_id: int) -> list[Group]:
        """List groups taught by a teacher, newest first."""
        result = await self.db.execute(
            select(Group)
            .where(Group.teacher_id == teacher_id)
            .options(selectinload(Group.teacher), selectinload(Group.branch))
            .order_by(Group.created_at.desc(), Group.id.desc())
            .execution_options(populate_existing=True)
        )
        return list(result.scalars().all())

    async def update_group(self, group_id: int, data: GroupUpdate) -> Group:
        """Update a group."""
        group = await self.get_group_by_id(group_id)
        changes = {
            field: value
            for field, value in data.model_dump(exclude_unset=True).items()
            if value is not None or field in NULLABLE_GROUP_FIELDS
        }

        if changes.get("teacher_id") is not None:
            await self._validate_teacher(changes["teacher_id"], group.branch_id)
        if "days_of_week" in changes:
            days = changes["days_of_week"] or []
            changes["days_of_week"] = ",".join(str(d) for d in days) or None
        for money_field in ("price", "teacher_salary_per_student"):
            if changes.get(money_field) is not None:
                changes[money_field] = round_money(changes[money_field])

        old_values = {field: str(getattr(group, field)) for field in changes}
        for field, value in changes.items():
            setattr(group, field, value)

        if changes:
            await self.audit.log(
                action=AuditAction.UPDATE,
                entity_type="Group",
                entity_id=group_id,
                branch_id=group.branch_id,
                old_values=old_values,
                new_values={k: str(v) for k, v in changes.items()},
            )

        await self.db.commit()
        return await self.get_group_by_id(group_id)

    async def _validate_teacher(self, teacher_id: int, branch_id: int) -> None:
        teacher = await TeacherService(self.db).get_teacher_by_id(teacher_id)
        if teacher.branch_id != branch_id:
            raise ValidationError(
                f"Teacher {teacher_id} does not belong to branch {branch_id}",
                field="teacher_id",
            )

    # --- Membership Methods ---

    async def add_student(self, group_id: int, student_id: int) -> Group:
        """Enroll a student. Both must belong to the same branch. Idempotent."""
        group = await self.get_group_by_id(group_id)
        student = await self.db.get(Student, student_id)
        if not student or student.status == StudentStatus.DELETED.value:
            raise NotFoundError("Student", student_id)
        if student.branch_id != group.branch_id:
            raise ValidationError(
                f"Student {student_id} and group {group_id} belong to different branches",
                field="student_id",
            )

        if not await self.is_member(group_id, student_id):
            self.db.add(GroupMembership(group_id=group_id, student_id=student_id))
            await self.db.flush()
            await self.audit.log(
                action=AuditAction.ENROLL_STUDENT,
                entity_type="Group",
                entity_id=group_id,
                branch_id=group.branch_id,
                new_values={"student_id": student_id},
            )
            await self.db.commit()
        return group

    async def remove_student(self, group_id: int, student_id: int) -> Group:
        """Remove a student from a group's roster. Idempotent."""
        group = await self.get_group_by_id(group_id)
        result = await self.db.execute(
            delete(GroupMembership).where(
                GroupMembership.group_id == group_id,
                GroupMembership.student_id == student_id,
            )
        )
        if result.rowcount:
            await self.audit.log(
                action=AuditAction.UNENROLL_STUDENT,
                entity_type="Group",
                entity_id=group_id,
                branch_id=group.branch_id,
                old_values={"student_id": student_id},
            )
            await self.db.commit()
        return group

    async def is_member(self, group_id: int, student_id: int) -> bool:
        result = await self.db.execute(
            select(GroupMembership.student_id).where(
                GroupMembership.group_id == group_id,
                GroupMembership.student_id == student_id,
            )
        )
        return result.first() is not None

    async def get_rosters(self, group_ids: list[int]) -> dict[int, list[int]]:
        """group_id -> enrolled student ids, for many groups in one query."""
        rosters: dict[int, list[int]] = {gid: [] for gid in group_ids}
        if not group_ids:
            return rosters
        result = await self.db.execute(
            select(GroupMembership.group_id, GroupMembership.student_id)
            .where(GroupMembership.group_id.in_(group_ids))
            .order_by(GroupMembership.group_id, GroupMembership.student_id)
        )
        for group_id, student_id in result.all():
            rosters[group_id].append(student_id)
        return rosters

    async def get_student_counts(self, group_ids: list[int]) -> dict[int, int]:
        """group_id -> number of enrolled students."""
        if not group_ids:
            return {}
        result = await self.db.execute(
            select(GroupMembership.group_id, func.count(GroupMembership.student_id))
            .where(GroupMembership.group_id.in_(group_ids))
            .group_by(GroupMembership.group_id)
        )
        counts = {gid: 0 for gid in group_ids}
        counts.update({gid: int(count) for gid, count in result.all()})
        return counts

    async def get_groups_by_student(self, branch_id: int) -> dict[int, list[Group]]:
        """student_id -> groups of the branch the student is enrolled in."""
        result = await self.db.execute(
            select(GroupMembership.student_id, Group)
            .join(Group, Group.id == GroupMembership.group_id)
            .where(Group.branch_id == branch_id)
            .options(selectinload(Group.teacher))
            .order_by(Group.created_at.desc(), Group.id.desc())
            .execution_options(populate_existing=True)
        )
        by_student: dict[int, list[Group]] = defaultdict(list)
        for student_id, group in result.all():
            by_student[student_id].append(group)
        return by_student

    async def get_student_groups(self, student_id: int) -> list[Group]:
        """Groups a student is enrolled in."""
        result = await self.db.execute(
            select(Group)
            .join(GroupMembership, GroupMembership.group_id == Group.id)
            .where(GroupMembership.student_id == student_id)
            .options(selectinload(Group.teacher), selectinload(Group.branch))
            .order_by(Group.created_at.desc(), Group.id.desc())
            .execution_options(populate_existing=True)
        )
        return list(result.scalars().all())

    async def to_responses(self, groups: list[Group]) -> list[GroupResponse]:
        """Build responses with one count query for all groups."""
        counts = await self.get_student_counts([g.id for g in groups])
        return [group_to_response(g, counts.get(g.id, 0)) for g in groups]


def group_to_response(group: Group, student_count: int) -> GroupResponse:
    """Helper to convert Group to response."""
    return GroupResponse(
        id=group.id,
        name=group.name,
        description=group.description,
        price=group.price,
        teacher_salary_per_student=group.teacher_salary_per_student,
        teacher_id=group.teacher_id,
        teacher_name=group.teacher_name,
        branch_id=group.branch_id,
        branch_name=group.branch_name,
        start_time=group.start_time,
        end_time=group.end_time,
        days_of_week=group.schedule_days,
        student_count=student_count,
        created_at=group.created_at,
    )
