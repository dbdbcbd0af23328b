"""Human-readable output: role tables and run summaries."""

from __future__ import annotations

from collections.abc import Iterable, Mapping

from pydantic import BaseModel, Field

from redmag.access.reconcile import RepositoryInventory, RepositoryState
from redmag.db.models import Role


def _separator(widths: list[int], style: str) -> str:
    return "+" + "+".join(style * w for w in widths) + "+\n"


def _row(widths: list[int], labels: list[str]) -> str:
    cells = [f"{label:>{w - 1}} |" for w, label in zip(widths, labels)]
    return "|" + "".join(cells) + "\n"


def format_role_table(roles: Mapping[int, str] | Iterable[Role]) -> str:
    """Render roles as an ASCII table sorted by id.

    *roles* is either ``{id: name}`` or an iterable of :class:`Role`.

    ::

        +------+-----------+
        |   id |      role |
        +======+===========+
        |    3 |   Manager |
        +------+-----------+
    """
    if isinstance(roles, Mapping):
        records = [Role(id=i, name=n) for i, n in roles.items()]
    else:
        records = list(roles)
    records.sort(key=lambda r: r.id)

    longest = max((len(r.name) for r in records), default=0)
    widths = [6, longest + 2]

    out = [
        _separator(widths, "-"),
        _row(widths, ["id", "role"]),
        _separator(widths, "="),
    ]
    for role in records:
        out.append(_row(widths, [str(role.id), role.name]))
    out.append(_separator(widths, "-"))
    return "".join(out)


class SyncReport(BaseModel):
    """Summary of one synchronisation run."""

    projects: int = 0
    existing: list[str] = Field(default_factory=list)
    created: list[str] = Field(default_factory=list)
    failed: list[str] = Field(default_factory=list)
    missing: list[str] = Field(default_factory=list)
    blocked: list[str] = Field(default_factory=list)
    output_file: str = ""

    @classmethod
    def from_inventory(
        cls,
        inventory: RepositoryInventory,
        failed: list[str] | None = None,
        output_file: str = "",
    ) -> SyncReport:
        failed = list(failed or [])
        blocked_states = (
            RepositoryState.INVALID_BLOCKED_BY_FILE,
            RepositoryState.INVALID_BLOCKED_BY_NON_SVN_DIR,
        )
        states = inventory.states()
        return cls(
            projects=len(states),
            existing=[e.identifier for e in states if e.is_existing],
            created=[e.identifier for e in states if e.created],
            failed=failed,
            missing=[
                e.identifier for e in states
                if e.state is RepositoryState.VALID_CREATABLE and e.identifier not in failed
            ],
            blocked=[e.identifier for e in states if e.state in blocked_states],
            output_file=output_file,
        )

    def to_text(self) -> str:
        lines = [
            f"Projects:              {self.projects}",
            f"Repositories in AuthZ: {len(self.existing)}",
            f"Created:               {len(self.created)}",
        ]
        if self.failed:
            lines.append(f"Creation failed:       {', '.join(self.failed)}")
        if self.missing:
            lines.append(f"Missing (not created): {', '.join(self.missing)}")
        if self.blocked:
            lines.append(f"Blocked paths:         {', '.join(self.blocked)}")
        if self.output_file:
            lines.append(f"AuthZ file:            {self.output_file}")
        return "\n".join(lines)
