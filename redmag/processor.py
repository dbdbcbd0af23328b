"""SvnAccessProcessor — one synchronisation run from Redmine to SVN."""

from __future__ import annotations

import logging
from datetime import datetime

from redmag.access.policy import RolePolicy
from redmag.access.reconcile import (
    RepositoryInventory,
    create_missing_repositories,
    load_inventory,
)
from redmag.authz.generator import collect_project_access, render_authz
from redmag.authz.writer import write_authz
from redmag.config import RedmagConfig
from redmag.db.loader import RedmineDataLoader
from redmag.report import SyncReport, format_role_table
from redmag.svn.admin import ReposAdmin, SvnAdmin

logger = logging.getLogger(__name__)


class SvnAccessProcessor:
    """Reconcile repositories and regenerate the AuthZ file.

    Parameters
    ----------
    config:
        Validated run configuration.
    loader:
        Redmine data source.  Built from ``config.database_url`` if omitted.
    admin:
        Repository admin capability.  Defaults to :class:`SvnAdmin`.
    """

    def __init__(
        self,
        config: RedmagConfig,
        loader: RedmineDataLoader | None = None,
        admin: ReposAdmin | None = None,
    ) -> None:
        self.config = config
        self.loader = loader or RedmineDataLoader(config.database_url)
        self.admin = admin or SvnAdmin(config.svnadmin)
        self.policy = RolePolicy(config.read_roles, config.rw_roles, config.tie_break)

    def role_table(self) -> str:
        """Return the Redmine role list as a printable table."""
        return format_role_table(self.loader.role_records())

    def check(self) -> RepositoryInventory:
        return load_inventory(self.loader, self.config.svn_root, self.admin)

    def run(self, generated_on: datetime | None = None) -> SyncReport:
        """Check, optionally create, then write the AuthZ file.

        Database errors propagate before anything is written.  A write
        failure raises :class:`~redmag.authz.writer.PersistenceError`;
        repositories created earlier in the run are kept.
        """
        logger.info("*** Read-only roles: %s", sorted(self.policy.read_roles))
        logger.info("*** Read/write roles: %s", sorted(self.policy.rw_roles))
        if self.policy.overlapping_roles:
            logger.warning(
                "Roles %s are both read-only and read/write; granting %s",
                sorted(self.policy.overlapping_roles), self.policy.tie_break.value,
            )

        inventory = self.check()
        failed: list[str] = []
        if self.config.create_missing_repos:
            result = create_missing_repositories(
                inventory, self.admin, self.config.create_flags,
            )
            inventory = result.inventory
            failed = result.failed

        accesses = collect_project_access(inventory, self.loader, self.policy)
        document = render_authz(accesses, generated_on=generated_on)
        write_authz(document, self.config.output_file)

        return SyncReport.from_inventory(
            inventory, failed=failed, output_file=str(self.config.output_file),
        )

    def close(self) -> None:
        self.loader.close()
