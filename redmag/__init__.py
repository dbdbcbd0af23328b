"""Redmag — Subversion repository access management for Redmine projects."""

__version__ = "1.3.0"

from redmag.access.policy import AccessTier, RolePolicy, TieBreak, resolve_tier
from redmag.access.reconcile import (
    CreationResult,
    RepositoryInventory,
    RepositoryPathState,
    RepositoryState,
    check_existing_repositories,
    create_missing_repositories,
)
from redmag.authz.generator import ProjectAccess, collect_project_access, render_authz
from redmag.authz.writer import PersistenceError, write_authz
from redmag.config import ConfigurationError, RedmagConfig
from redmag.db.loader import DataAccessError, RedmineDataLoader
from redmag.db.models import Project, ProjectMember, Role
from redmag.processor import SvnAccessProcessor
from redmag.report import SyncReport, format_role_table
from redmag.svn.admin import ReposAdmin, SvnAdmin, SvnAdminError

__all__ = [
    "__version__",
    # Data source
    "DataAccessError",
    "Project",
    "ProjectMember",
    "RedmineDataLoader",
    "Role",
    # Repository administration
    "ReposAdmin",
    "SvnAdmin",
    "SvnAdminError",
    # Reconciliation
    "CreationResult",
    "RepositoryInventory",
    "RepositoryPathState",
    "RepositoryState",
    "check_existing_repositories",
    "create_missing_repositories",
    # Access policy
    "AccessTier",
    "RolePolicy",
    "TieBreak",
    "resolve_tier",
    # AuthZ output
    "PersistenceError",
    "ProjectAccess",
    "collect_project_access",
    "render_authz",
    "write_authz",
    # Orchestration
    "ConfigurationError",
    "RedmagConfig",
    "SvnAccessProcessor",
    "SyncReport",
    "format_role_table",
]
