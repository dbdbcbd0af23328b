"""RedmineDataLoader — read-only queries against a Redmine database.

A single SQLAlchemy engine is created per loader and shared by every query
of a run.  Any driver or SQL failure surfaces as :class:`DataAccessError`.
"""

from __future__ import annotations

import logging
from typing import Any

from sqlalchemy import create_engine, text
from sqlalchemy.engine import URL, Engine
from sqlalchemy.exc import SQLAlchemyError

from redmag.db.models import Project, ProjectMember, Role

logger = logging.getLogger(__name__)

_ROLES_SQL = text("SELECT id, name FROM roles ORDER BY id")

_PROJECTS_SQL = text(
    "SELECT identifier, name, description, parent_id, updated_on "
    "FROM projects ORDER BY identifier"
)

_MEMBERS_SELECT = (
    "SELECT p.identifier, u.login, u.firstname, u.lastname, u.mail, "
    "u.admin, u.last_login_on, m.role_id "
    "FROM members m, projects p, users u "
    "WHERE m.project_id = p.id AND u.id = m.user_id"
)

_MEMBERS_SQL = text(f"{_MEMBERS_SELECT} ORDER BY p.identifier, m.role_id")

_PROJECT_MEMBERS_SQL = text(
    f"{_MEMBERS_SELECT} AND p.identifier = :identifier "
    "ORDER BY p.identifier, m.role_id"
)


class DataAccessError(Exception):
    """Raised when a Redmine database query or connection fails."""


class RedmineDataLoader:
    """Query roles, projects and project members from Redmine.

    Parameters
    ----------
    url:
        SQLAlchemy database URL (string or :class:`~sqlalchemy.engine.URL`).
    engine:
        An already-configured engine.  Takes precedence over *url*.
    """

    def __init__(
        self,
        url: str | URL | None = None,
        *,
        engine: Engine | None = None,
    ) -> None:
        if engine is None:
            if url is None:
                raise ValueError("Either url or engine is required")
            try:
                engine = create_engine(url, future=True)
            except (SQLAlchemyError, ImportError) as exc:
                raise DataAccessError(f"Cannot initialise database driver: {exc}") from exc
        self.engine = engine

    def __enter__(self) -> RedmineDataLoader:
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    def close(self) -> None:
        """Release pooled connections."""
        self.engine.dispose()

    # -- Queries -------------------------------------------------------------

    def list_roles(self) -> dict[int, str]:
        """Return all roles as ``{id: name}``."""
        rows = self._fetch(_ROLES_SQL)
        return {int(r["id"]): r["name"] for r in rows}

    def role_records(self) -> list[Role]:
        """Return all roles as :class:`Role` records, ordered by id."""
        return [Role(id=i, name=n) for i, n in self.list_roles().items()]

    def list_projects(self) -> list[Project]:
        """Return every project, ordered by identifier."""
        rows = self._fetch(_PROJECTS_SQL)
        return [
            Project(
                identifier=r["identifier"],
                name=r["name"] or "",
                description=r["description"],
                is_subproject=(r["parent_id"] or 0) > 0,
                last_updated=r["updated_on"],
            )
            for r in rows
        ]

    def list_members(self, project_identifier: str = "") -> list[ProjectMember]:
        """Return the members of *project_identifier*.

        An empty identifier selects the members of all projects.  Rows are
        ordered by project identifier, then role id.
        """
        if project_identifier:
            rows = self._fetch(_PROJECT_MEMBERS_SQL, identifier=project_identifier)
        else:
            rows = self._fetch(_MEMBERS_SQL)
        return [
            ProjectMember(
                login=r["login"],
                first_name=r["firstname"] or "",
                last_name=r["lastname"] or "",
                mail=r["mail"] or "",
                project_identifier=r["identifier"],
                role_id=int(r["role_id"]),
                is_admin=bool(r["admin"]),
                last_login=r["last_login_on"],
            )
            for r in rows
        ]

    # -- Internals -----------------------------------------------------------

    def _fetch(self, statement: Any, **params: Any) -> list[dict[str, Any]]:
        logger.debug("SQL %s %s", statement, params or "")
        try:
            with self.engine.connect() as conn:
                result = conn.execute(statement, params)
                return [dict(row) for row in result.mappings()]
        except SQLAlchemyError as exc:
            raise DataAccessError(str(exc)) from exc
