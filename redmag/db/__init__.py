"""Redmine database access.

Read-only queries against the Redmine ``roles``, ``projects``, ``members``
and ``users`` tables.
"""

from redmag.db.loader import DataAccessError, RedmineDataLoader
from redmag.db.models import Project, ProjectMember, Role

__all__ = ["DataAccessError", "Project", "ProjectMember", "RedmineDataLoader", "Role"]
