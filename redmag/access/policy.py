"""Map Redmine role ids to repository access tiers."""

from __future__ import annotations

from enum import Enum
from typing import Iterable


class AccessTier(str, Enum):
    """Permission level a member gets on a project repository."""

    NONE = "none"
    READ = "r"
    READ_WRITE = "rw"


class TieBreak(str, Enum):
    """Which tier wins for a role id listed in both role sets.

    ``READ`` reproduces the historical behaviour: read roles are checked
    first.
    """

    READ = "read"
    READ_WRITE = "read-write"


def resolve_tier(
    role_id: int,
    read_roles: Iterable[int],
    rw_roles: Iterable[int],
    tie_break: TieBreak = TieBreak.READ,
) -> AccessTier:
    """Return the :class:`AccessTier` for *role_id*.

    Roles in neither set get :attr:`AccessTier.NONE`.
    """
    in_read = role_id in set(read_roles)
    in_rw = role_id in set(rw_roles)
    if in_read and in_rw:
        return AccessTier.READ if tie_break is TieBreak.READ else AccessTier.READ_WRITE
    if in_read:
        return AccessTier.READ
    if in_rw:
        return AccessTier.READ_WRITE
    return AccessTier.NONE


class RolePolicy:
    """Role-id sets plus tie-break, applied to every project alike.

    Parameters
    ----------
    read_roles:
        Role ids granted read-only access.
    rw_roles:
        Role ids granted read-write access.
    tie_break:
        Tier chosen for a role id present in both sets.
    """

    def __init__(
        self,
        read_roles: Iterable[int],
        rw_roles: Iterable[int],
        tie_break: TieBreak | str = TieBreak.READ,
    ) -> None:
        self.read_roles = frozenset(read_roles)
        self.rw_roles = frozenset(rw_roles)
        self.tie_break = TieBreak(tie_break)

    @property
    def overlapping_roles(self) -> frozenset[int]:
        return self.read_roles & self.rw_roles

    def resolve(self, role_id: int) -> AccessTier:
        return resolve_tier(role_id, self.read_roles, self.rw_roles, self.tie_break)

    def __repr__(self) -> str:
        return (
            f"RolePolicy(read_roles={sorted(self.read_roles)}, "
            f"rw_roles={sorted(self.rw_roles)}, tie_break={self.tie_break.value!r})"
        )
