"""Service for Teachers module."""

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from src.core.audit.service import AuditAction, AuditService
from src.core.exceptions import NotFoundError
from src.modules.branches.service import BranchService
from src.modules.teachers.models import Teacher
from src.modules.teachers.schemas import TeacherCreate, TeacherUpdate


class TeacherService:
    """Service for managing teachers."""

    def __init__(self, db: AsyncSession):
        self.db = db
        self.audit = AuditService(db)

    async def create_teacher(self, data: TeacherCreate) -> Teacher:
        """Create a new teacher in a branch."""
        await BranchService(self.db).get_branch_by_id(data.branch_id)

        teacher = Teacher(
            first_name=data.first_name,
            last_name=data.last_name,
            phone_number=data.phone_number,
            email=data.email,
            branch_id=data.branch_id,
        )
        self.db.add(teacher)
        await self.db.flush()

        await self.audit.log(
            action=AuditAction.CREATE,
            entity_type="Teacher",
            entity_id=teacher.id,
            branch_id=teacher.branch_id,
            new_values={"first_name": data.first_name, "last_name": data.last_name},
        )

        await self.db.commit()
        return await self.get_teacher_by_id(teacher.id)

    async def get_teacher_by_id(self, teacher_id: int) -> Teacher:
        """Get teacher by ID with branch loaded."""
        result = await self.db.execute(
            select(Teacher)
            .where(Teacher.id == teacher_id)
            .options(selectinload(Teacher.branch))
            .execution_options(populate_existing=True)
        )
        teacher = result.scalar_one_or_none()
        if not teacher:
            raise NotFoundError("Teacher", teacher_id)
        return teacher

    async def list_teachers(self, branch_id: int) -> list[Teacher]:
        """List teachers of a branch, newest first."""
        result = await self.db.execute(
            select(Teacher)
            .where(Teacher.branch_id == branch_id)
            .options(selectinload(Teacher.branch))
            .order_by(Teacher.created_at.desc(), Teacher.id.desc())
            .execution_options(populate_existing=True)
        )
        return list(result.scalars().all())

    async def update_teacher(self, teacher_id: int, data: TeacherUpdate) -> Teacher:
        """Update teacher profile fields."""
        teacher = await self.get_teacher_by_id(teacher_id)

        changes = {
            field: value
            for field, value in data.model_dump(exclude_unset=True).items()
            if value is not None or field in ("phone_number", "email")
        }
        old_values = {field: getattr(teacher, field) for field in changes}
        for field, value in changes.items():
            setattr(teacher, field, value)

        if changes:
            await self.audit.log(
                action=AuditAction.UPDATE,
                entity_type="Teacher",
                entity_id=teacher_id,
                branch_id=teacher.branch_id,
                old_values=old_values,
                new_values=changes,
            )

        await self.db.commit()
        return await self.get_teacher_by_id(teacher_id)
