from src.core.access.dependencies import BranchAccess, BranchAccessControl, get_branch_access

__all__ = ["BranchAccess", "BranchAccessControl", "get_branch_access"]
