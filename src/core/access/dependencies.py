from typing import Annotated

from fastapi import Depends

from src.core.config import settings
from src.core.exceptions import AuthorizationError


class BranchAccessControl:
    """
    Gate consulted before any operation on a branch's data.

    allowed_branch_ids=None means the caller may access every branch.

    Usage:
        @router.get("/payments")
        async def list_payments(branch_id: int, access: BranchAccess):
            access.check(branch_id)
            ...
    """

    def __init__(self, allowed_branch_ids: set[int] | None = None):
        self.allowed_branch_ids = allowed_branch_ids

    def has_access_to_branch(self, branch_id: int | None) -> bool:
        if self.allowed_branch_ids is None:
            return True
        return branch_id is not None and branch_id in self.allowed_branch_ids

    def check(self, *branch_ids: int | None) -> None:
        """Raise AuthorizationError unless every given branch is accessible."""
        for branch_id in branch_ids:
            if not self.has_access_to_branch(branch_id):
                raise AuthorizationError(f"Access to branch {branch_id} denied")

    def check_unrestricted(self) -> None:
        """Raise AuthorizationError for callers limited to some branches."""
        if self.allowed_branch_ids is not None:
            raise AuthorizationError("Operation requires access to all branches")


def get_branch_access() -> BranchAccessControl:
    """Dependency returning the branch gate configured for this deployment."""
    return BranchAccessControl(settings.branch_allowlist)


BranchAccess = Annotated[BranchAccessControl, Depends(get_branch_access)]
