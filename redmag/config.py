"""Run configuration: defaults, environment overrides and validation.

Values resolve in order: defaults -> ``REDMAG_*`` environment variables ->
command-line flags.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Any, Mapping

from pydantic import BaseModel, Field, ValidationError, field_validator
from sqlalchemy.engine import URL, make_url
from sqlalchemy.exc import ArgumentError

from redmag.access.policy import TieBreak
from redmag.svn.admin import DEFAULT_CREATE_FLAGS

logger = logging.getLogger(__name__)

DEFAULT_DB_HOST = "localhost"
DEFAULT_DB_PORT = 3306
DEFAULT_DB_DRIVER = "mysql+pymysql"
DEFAULT_SVN_ROOT = Path("/svn")
DEFAULT_OUTPUT_FILE = Path("/svn/access.authZ")

# Environment variable -> config field
ENV_VARS: dict[str, str] = {
    "REDMAG_DB_USER": "db_user",
    "REDMAG_DB_PASSWORD": "db_password",
    "REDMAG_DB_HOST": "db_host",
    "REDMAG_DB_PORT": "db_port",
    "REDMAG_DB_NAME": "db_name",
    "REDMAG_DB_DRIVER": "db_driver",
    "REDMAG_DATABASE_URL": "database_url_override",
    "REDMAG_SVN_ROOT": "svn_root",
    "REDMAG_OUTPUT_FILE": "output_file",
    "REDMAG_READ_ROLES": "read_roles",
    "REDMAG_RW_ROLES": "rw_roles",
    "REDMAG_TIE_BREAK": "tie_break",
    "REDMAG_SVNADMIN": "svnadmin",
}


class ConfigurationError(Exception):
    """Raised when options are missing or malformed."""


def parse_role_ids(value: Any) -> list[int]:
    """Parse ``"1,2,3"`` (or an iterable of ids) into a list of ints."""
    if value is None:
        return []
    if isinstance(value, str):
        items = [v.strip() for v in value.split(",") if v.strip()]
    else:
        items = list(value)
    ids: list[int] = []
    for item in items:
        try:
            ids.append(int(item))
        except (TypeError, ValueError):
            raise ValueError(f'Bad role id format: "{item}"') from None
    return ids


class RedmagConfig(BaseModel):
    """Validated settings for one run."""

    db_user: str = ""
    db_password: str = ""
    db_host: str = DEFAULT_DB_HOST
    db_port: int = DEFAULT_DB_PORT
    db_name: str = ""
    db_driver: str = DEFAULT_DB_DRIVER
    database_url_override: str = ""

    svn_root: Path = DEFAULT_SVN_ROOT
    output_file: Path = DEFAULT_OUTPUT_FILE
    read_roles: list[int] = Field(default_factory=list)
    rw_roles: list[int] = Field(default_factory=list)
    tie_break: TieBreak = TieBreak.READ
    create_missing_repos: bool = False
    verbose: bool = False

    svnadmin: str = "svnadmin"
    create_flags: list[str] = Field(default_factory=lambda: list(DEFAULT_CREATE_FLAGS))

    @field_validator("read_roles", "rw_roles", mode="before")
    @classmethod
    def _split_roles(cls, value: Any) -> list[int]:
        return parse_role_ids(value)

    @field_validator("database_url_override")
    @classmethod
    def _check_url(cls, value: str) -> str:
        if value:
            try:
                make_url(value)
            except ArgumentError as exc:
                raise ValueError(f"Bad database URL: {exc}") from None
        return value

    @property
    def database_url(self) -> URL:
        """SQLAlchemy URL for the Redmine database."""
        if self.database_url_override:
            return make_url(self.database_url_override)
        return URL.create(
            self.db_driver,
            username=self.db_user,
            password=self.db_password or None,
            host=self.db_host,
            port=self.db_port,
            database=self.db_name,
        )

    def require_database(self) -> None:
        """Raise :class:`ConfigurationError` unless the database is identified."""
        if self.database_url_override:
            return
        if not self.db_user:
            raise ConfigurationError("Redmine database user name required !")
        if not self.db_name:
            raise ConfigurationError("Redmine database name required !")

    def require_roles(self) -> None:
        """Raise :class:`ConfigurationError` unless both role lists are set."""
        if not self.read_roles:
            raise ConfigurationError("Read roles list is mandatory !")
        if not self.rw_roles:
            raise ConfigurationError("Read/writes roles list is mandatory !")


def env_overrides(environ: Mapping[str, str] | None = None) -> dict[str, str]:
    """Collect config values from ``REDMAG_*`` environment variables."""
    env = os.environ if environ is None else environ
    values: dict[str, str] = {}
    for var, field in ENV_VARS.items():
        if env.get(var):
            values[field] = env[var]
    return values


def load_config(
    overrides: Mapping[str, Any] | None = None,
    environ: Mapping[str, str] | None = None,
) -> RedmagConfig:
    """Build a :class:`RedmagConfig` from the environment and *overrides*.

    *overrides* entries whose value is ``None`` are ignored so that unset
    command-line flags fall through to the environment or defaults.
    """
    values: dict[str, Any] = dict(env_overrides(environ))
    for key, value in (overrides or {}).items():
        if value is not None:
            values[key] = value
    try:
        return RedmagConfig(**values)
    except ValidationError as exc:
        messages = "; ".join(
            f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}" for err in exc.errors()
        )
        raise ConfigurationError(messages) from exc
