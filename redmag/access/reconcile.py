"""Repository reconciliation — classify project paths and create missing repositories.

Every project maps to ``<svn_root>/<identifier>``.  The checker classifies
each path once into a :class:`RepositoryInventory`; the creator returns a
new inventory rather than mutating the old one, and the AuthZ generator
consumes whichever inventory it is handed.
"""

from __future__ import annotations

import logging
import os
from enum import Enum
from pathlib import Path
from typing import Iterable, Sequence

from pydantic import BaseModel, ConfigDict, Field

from redmag.db.models import Project
from redmag.svn.admin import DEFAULT_CREATE_FLAGS, ReposAdmin, SvnAdminError

logger = logging.getLogger(__name__)


class RepositoryState(str, Enum):
    """Outcome of checking a project's repository path."""

    VALID_EXISTING = "valid_existing"
    VALID_CREATABLE = "valid_creatable"
    INVALID_BLOCKED_BY_NON_SVN_DIR = "invalid_blocked_by_non_svn_dir"
    INVALID_BLOCKED_BY_FILE = "invalid_blocked_by_file"


class RepositoryPathState(BaseModel):
    """Resolved repository path of one project."""

    model_config = ConfigDict(frozen=True)

    identifier: str
    path: str
    exists: bool = False
    is_repository: bool = False
    state: RepositoryState
    created: bool = False
    error: str = ""

    @property
    def is_valid(self) -> bool:
        return self.state in (RepositoryState.VALID_EXISTING, RepositoryState.VALID_CREATABLE)

    @property
    def is_existing(self) -> bool:
        return self.state is RepositoryState.VALID_EXISTING


class RepositoryInventory(BaseModel):
    """Immutable map of project identifier to :class:`RepositoryPathState`."""

    model_config = ConfigDict(frozen=True)

    entries: dict[str, RepositoryPathState] = Field(default_factory=dict)

    def states(self) -> list[RepositoryPathState]:
        """All entries, sorted by identifier."""
        return [self.entries[k] for k in sorted(self.entries)]

    def __len__(self) -> int:
        return len(self.entries)

    def __contains__(self, identifier: object) -> bool:
        return identifier in self.entries

    def get(self, identifier: str) -> RepositoryPathState | None:
        return self.entries.get(identifier)

    def in_state(self, state: RepositoryState) -> list[RepositoryPathState]:
        return [e for e in self.states() if e.state is state]

    @property
    def valid_paths(self) -> frozenset[str]:
        """Paths holding a repository or free to receive one."""
        return frozenset(e.path for e in self.entries.values() if e.is_valid)

    @property
    def existing_paths(self) -> frozenset[str]:
        """Paths holding a repository, pre-existing or just created."""
        return frozenset(e.path for e in self.entries.values() if e.is_existing)

    @property
    def path_to_identifier(self) -> dict[str, str]:
        return {e.path: e.identifier for e in self.entries.values()}

    def existing(self) -> list[RepositoryPathState]:
        """Existing repositories, sorted by identifier."""
        return [e for e in self.states() if e.is_existing]


class CreationResult(BaseModel):
    """Outcome of :func:`create_missing_repositories`."""

    model_config = ConfigDict(frozen=True)

    inventory: RepositoryInventory
    created: int = 0
    failed: list[str] = Field(default_factory=list)


def repository_path(svn_root: str | Path, identifier: str) -> str:
    """Absolute, normalised repository path for *identifier*."""
    return os.path.abspath(os.path.join(os.fspath(svn_root), identifier))


def classify_path(identifier: str, path: str, admin: ReposAdmin) -> RepositoryPathState:
    """Classify a single repository path.

    A missing path is creatable; a directory is checked with
    ``admin.verify``; anything else blocks the project.
    """
    p = Path(path)
    if not p.exists():
        return RepositoryPathState(
            identifier=identifier, path=path, state=RepositoryState.VALID_CREATABLE,
        )
    if p.is_dir():
        if admin.verify(p):
            return RepositoryPathState(
                identifier=identifier, path=path, exists=True, is_repository=True,
                state=RepositoryState.VALID_EXISTING,
            )
        return RepositoryPathState(
            identifier=identifier, path=path, exists=True,
            state=RepositoryState.INVALID_BLOCKED_BY_NON_SVN_DIR,
            error="non-SVN directory with that name exists",
        )
    return RepositoryPathState(
        identifier=identifier, path=path, exists=True,
        state=RepositoryState.INVALID_BLOCKED_BY_FILE,
        error="file with that name exists",
    )


def check_existing_repositories(
    projects: Iterable[Project],
    svn_root: str | Path,
    admin: ReposAdmin,
) -> RepositoryInventory:
    """Classify the repository path of every project under *svn_root*.

    Blocked paths are logged and kept in the inventory; they never abort
    the check.
    """
    logger.info("*** Checking for missing repositories:")
    entries: dict[str, RepositoryPathState] = {}
    for project in projects:
        path = repository_path(svn_root, project.identifier)
        entry = classify_path(project.identifier, path, admin)
        entries[project.identifier] = entry

        if entry.state is RepositoryState.VALID_EXISTING:
            logger.info('   Project "%s": EXISTS at : %s', project.identifier, path)
        elif entry.state is RepositoryState.VALID_CREATABLE:
            logger.info('   Project "%s": MISSING at : %s', project.identifier, path)
        else:
            logger.info(
                '   Project "%s": MISSING at %s --> ERROR: %s',
                project.identifier, path, entry.error.upper(),
            )
    return RepositoryInventory(entries=entries)


def load_inventory(loader, svn_root: str | Path, admin: ReposAdmin) -> RepositoryInventory:
    """Query projects from *loader* and check their repositories.

    Data-access errors from ``loader.list_projects()`` propagate.
    """
    return check_existing_repositories(loader.list_projects(), svn_root, admin)


def create_missing_repositories(
    inventory: RepositoryInventory,
    admin: ReposAdmin,
    flags: Sequence[str] = DEFAULT_CREATE_FLAGS,
) -> CreationResult:
    """Create a repository for every creatable entry of *inventory*.

    A failed creation is logged and leaves its entry creatable; the
    remaining entries are still processed.  Nothing is rolled back.
    """
    logger.info("*** Creating missing repositories")
    entries = dict(inventory.entries)
    created = 0
    failed: list[str] = []

    for entry in inventory.in_state(RepositoryState.VALID_CREATABLE):
        try:
            admin.create(entry.path, *flags)
        except SvnAdminError as exc:
            logger.info('   Creating a repository at "%s" : FAILURE --> %s', entry.path, exc)
            entries[entry.identifier] = entry.model_copy(update={"error": str(exc)})
            failed.append(entry.identifier)
            continue
        logger.info('   Creating a repository at "%s" : SUCCESS', entry.path)
        entries[entry.identifier] = entry.model_copy(update={
            "exists": True,
            "is_repository": True,
            "state": RepositoryState.VALID_EXISTING,
            "created": True,
            "error": "",
        })
        created += 1

    if created == 0 and not failed:
        logger.info("    SUCCESS: None to create !")

    return CreationResult(
        inventory=RepositoryInventory(entries=entries),
        created=created,
        failed=failed,
    )
