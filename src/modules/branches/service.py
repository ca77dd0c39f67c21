"""Service for Branches module."""

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from src.core.audit.service import AuditAction, AuditService
from src.core.exceptions import DuplicateError, NotFoundError
from src.modules.branches.models import Branch
from src.modules.branches.schemas import BranchCreate


class BranchService:
    """Service for managing branches."""

    def __init__(self, db: AsyncSession):
        self.db = db
        self.audit = AuditService(db)

    async def create_branch(self, data: BranchCreate) -> Branch:
        """Create a new branch."""
        existing = await self.db.execute(select(Branch).where(Branch.name == data.name))
        if existing.scalar_one_or_none():
            raise DuplicateError("Branch", "name", data.name)

        branch = Branch(name=data.name, address=data.address)
        self.db.add(branch)
        await self.db.flush()

        await self.audit.log(
            action=AuditAction.CREATE,
            entity_type="Branch",
            entity_id=branch.id,
            branch_id=branch.id,
            new_values={"name": data.name},
        )

        await self.db.commit()
        await self.db.refresh(branch)
        return branch

    async def get_branch_by_id(self, branch_id: int) -> Branch:
        """Get branch by ID."""
        result = await self.db.execute(select(Branch).where(Branch.id == branch_id))
        branch = result.scalar_one_or_none()
        if not branch:
            raise NotFoundError("Branch", branch_id)
        return branch

    async def list_branches(self, branch_ids: set[int] | None = None) -> list[Branch]:
        """List branches by name; restricted to branch_ids when given."""
        query = select(Branch).order_by(Branch.name)
        if branch_ids is not None:
            query = query.where(Branch.id.in_(branch_ids))
        result = await self.db.execute(query)
        return list(result.scalars().all())
