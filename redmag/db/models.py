"""Redmine record models — subsets of the Redmine 0.8 tables."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict


def _when(value: datetime | None) -> str:
    return "Never" if value is None else value.isoformat(sep=" ")


class Role(BaseModel):
    """A Redmine role (``roles`` table)."""

    model_config = ConfigDict(frozen=True)

    id: int
    name: str = ""


class Project(BaseModel):
    """A Redmine project (``projects`` table).

    ``identifier`` is the system-friendly project key and doubles as the
    repository directory name under the SVN root.
    """

    model_config = ConfigDict(frozen=True)

    identifier: str
    name: str = ""
    description: str | None = None
    is_subproject: bool = False
    last_updated: datetime | None = None

    def __str__(self) -> str:
        return (
            f"Identifier: {self.identifier}, name: {self.name}, "
            f"description: {self.description} isSubProject= {self.is_subproject}, "
            f"Last update= {_when(self.last_updated)}"
        )


class ProjectMember(BaseModel):
    """A user's membership in a project, joined with the ``users`` row."""

    model_config = ConfigDict(frozen=True)

    login: str
    first_name: str = ""
    last_name: str = ""
    mail: str = ""
    project_identifier: str = ""
    role_id: int
    is_admin: bool = False
    last_login: datetime | None = None

    def __str__(self) -> str:
        return (
            f"ProjectID: {self.project_identifier}, Login: {self.login}, "
            f"First: {self.first_name}, Last: {self.last_name}, "
            f"Admin= {self.is_admin}, E-mail= {self.mail}, "
            f"Last-Login= {_when(self.last_login)}, Role= {self.role_id}"
        )
