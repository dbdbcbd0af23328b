"""Repository reconciliation and role-based access resolution."""

from redmag.access.policy import AccessTier, RolePolicy, TieBreak, resolve_tier
from redmag.access.reconcile import (
    CreationResult,
    RepositoryInventory,
    RepositoryPathState,
    RepositoryState,
    check_existing_repositories,
    create_missing_repositories,
    load_inventory,
)

__all__ = [
    "AccessTier",
    "CreationResult",
    "RepositoryInventory",
    "RepositoryPathState",
    "RepositoryState",
    "RolePolicy",
    "TieBreak",
    "check_existing_repositories",
    "create_missing_repositories",
    "load_inventory",
    "resolve_tier",
]
