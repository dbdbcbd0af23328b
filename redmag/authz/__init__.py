"""SVN AuthZ document generation and persistence."""

from redmag.authz.generator import ProjectAccess, collect_project_access, render_authz
from redmag.authz.writer import PersistenceError, write_authz

__all__ = [
    "PersistenceError",
    "ProjectAccess",
    "collect_project_access",
    "render_authz",
    "write_authz",
]
