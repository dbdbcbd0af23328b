"""Render the path-based AuthZ file consumed by the SVN server.

Layout, in order:

1. header comment block,
2. ``[groups]``: ``<identifier>-r`` and ``<identifier>-rw`` groups,
3. ``[/]``: default policy is no access,
4. one ``[<identifier>:/]`` section per existing repository.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone

from pydantic import BaseModel, ConfigDict, Field

from redmag.access.policy import AccessTier, RolePolicy
from redmag.access.reconcile import RepositoryInventory

logger = logging.getLogger(__name__)


class ProjectAccess(BaseModel):
    """Logins granted access to one project repository."""

    model_config = ConfigDict(frozen=True)

    identifier: str
    path: str = ""
    read_users: list[str] = Field(default_factory=list)
    rw_users: list[str] = Field(default_factory=list)

    @property
    def read_group(self) -> str:
        return f"{self.identifier}-r"

    @property
    def rw_group(self) -> str:
        return f"{self.identifier}-rw"


def collect_project_access(
    inventory: RepositoryInventory,
    loader,
    policy: RolePolicy,
) -> list[ProjectAccess]:
    """Resolve member access for every existing repository in *inventory*.

    Members are fetched once per project.  Members whose role maps to
    :attr:`AccessTier.NONE` are left out.
    """
    accesses: list[ProjectAccess] = []
    for entry in inventory.existing():
        read_users: list[str] = []
        rw_users: list[str] = []
        for member in loader.list_members(entry.identifier):
            tier = policy.resolve(member.role_id)
            if tier is AccessTier.READ:
                read_users.append(member.login)
            elif tier is AccessTier.READ_WRITE:
                rw_users.append(member.login)
        logger.debug(
            "%s: %d read-only, %d read-write users",
            entry.identifier, len(read_users), len(rw_users),
        )
        accesses.append(ProjectAccess(
            identifier=entry.identifier,
            path=entry.path,
            read_users=read_users,
            rw_users=rw_users,
        ))
    return accesses


def _header(version: str, generated_on: datetime) -> list[str]:
    return [
        "#",
        "# AUTOMATICALLY GENERATED AUTHZ FILE",
        f"# By Redmag {version}",
        "# *** DO NOT MODIFY BY HAND ***",
        "# Contact system administrator !",
        f"# File generated on: {generated_on.strftime('%a %b %d %H:%M:%S %Z %Y')}",
        "",
    ]


def render_authz(
    accesses: list[ProjectAccess],
    generated_on: datetime | None = None,
    version: str | None = None,
) -> str:
    """Return the complete AuthZ document for *accesses*.

    Projects are emitted sorted by identifier so that the output only
    depends on its inputs and *generated_on*.
    """
    if version is None:
        from redmag import __version__ as version
    if generated_on is None:
        generated_on = datetime.now(timezone.utc)

    groups = ["[groups]"]
    sections: list[str] = []

    for access in sorted(accesses, key=lambda a: a.identifier):
        ident = access.identifier
        sections.append(f"# Permissions for repos at {access.path}")
        sections.append(f"[{ident}:/]")
        sections.append("* = ")

        if access.read_users:
            groups.append(f"{access.read_group} = {', '.join(access.read_users)}")
            sections.append(f"@{access.read_group} = r")
        else:
            sections.append(f'# No read-only users for project "{ident}"')

        if access.rw_users:
            groups.append(f"{access.rw_group} = {', '.join(access.rw_users)}")
            sections.append(f"@{access.rw_group} = rw")
        else:
            sections.append(f'# No read-write users for project "{ident}"')

        groups.append("")
        sections.append("")

    lines = _header(version, generated_on)
    lines.extend(groups)
    if len(groups) == 1:
        lines.append("")
    lines.extend(["# Default policy is no access", "[/]", "* = ", ""])
    lines.extend(sections)
    return "\n".join(lines)
