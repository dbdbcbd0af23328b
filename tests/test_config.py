"""Tests for configuration loading and the role table / run report."""

from __future__ import annotations

from pathlib import Path

import pytest

from redmag.access.policy import TieBreak
from redmag.access.reconcile import (
    RepositoryInventory,
    RepositoryPathState,
    RepositoryState,
)
from redmag.config import ConfigurationError, RedmagConfig, load_config, parse_role_ids
from redmag.db.models import Role
from redmag.report import SyncReport, format_role_table


class TestParseRoleIds:

    def test_comma_separated(self):
        assert parse_role_ids("3,4, 5") == [3, 4, 5]

    def test_iterable(self):
        assert parse_role_ids([1, "2"]) == [1, 2]

    def test_bad_id(self):
        with pytest.raises(ValueError, match='Bad role id format: "x"'):
            parse_role_ids("1,x")


class TestLoadConfig:

    def test_defaults(self):
        config = load_config(environ={})
        assert config.db_host == "localhost"
        assert config.db_port == 3306
        assert config.svn_root == Path("/svn")
        assert config.output_file == Path("/svn/access.authZ")
        assert config.tie_break is TieBreak.READ
        assert config.create_flags == ["--pre-1.5-compatible"]
        assert config.create_missing_repos is False

    def test_environment_then_overrides(self):
        env = {
            "REDMAG_DB_USER": "redmine",
            "REDMAG_DB_PASSWORD": "s3cret",
            "REDMAG_DB_PORT": "3307",
            "REDMAG_READ_ROLES": "5",
        }
        config = load_config({"db_port": "3308", "db_user": None}, environ=env)
        assert config.db_user == "redmine"
        assert config.db_password == "s3cret"
        assert config.db_port == 3308
        assert config.read_roles == [5]

    def test_bad_port(self):
        with pytest.raises(ConfigurationError, match="db_port"):
            load_config({"db_port": "http"}, environ={})

    def test_bad_role_list(self):
        with pytest.raises(ConfigurationError, match="Bad role id"):
            load_config({"rw_roles": "3,four"}, environ={})

    def test_bad_database_url(self):
        with pytest.raises(ConfigurationError):
            load_config(environ={"REDMAG_DATABASE_URL": "not a url"})

    def test_bad_tie_break(self):
        with pytest.raises(ConfigurationError):
            load_config({"tie_break": "both"}, environ={})


class TestRedmagConfig:

    def test_database_url(self):
        config = RedmagConfig(db_user="redmine", db_password="pw", db_name="redmine_prod",
                              db_host="db.example.org", db_port=3307)
        url = config.database_url
        assert url.drivername == "mysql+pymysql"
        assert url.username == "redmine"
        assert url.password == "pw"
        assert url.host == "db.example.org"
        assert url.port == 3307
        assert url.database == "redmine_prod"

    def test_database_url_override(self, tmp_path: Path):
        config = RedmagConfig(database_url_override=f"sqlite:///{tmp_path / 'r.db'}")
        assert config.database_url.drivername == "sqlite"
        config.require_database()

    def test_require_database(self):
        with pytest.raises(ConfigurationError, match="user name required"):
            RedmagConfig(db_name="redmine").require_database()
        with pytest.raises(ConfigurationError, match="database name required"):
            RedmagConfig(db_user="redmine").require_database()

    def test_require_roles(self):
        with pytest.raises(ConfigurationError, match="Read roles"):
            RedmagConfig(rw_roles=[3]).require_roles()
        with pytest.raises(ConfigurationError, match="Read/writes roles"):
            RedmagConfig(read_roles=[5]).require_roles()
        RedmagConfig(read_roles="5", rw_roles="3,4").require_roles()


class TestFormatRoleTable:

    def test_table(self):
        table = format_role_table({4: "Manager", 1: "Reporter", 2: "Developer"})
        assert table == (
            "+------+-----------+\n"
            "|   id |      role |\n"
            "+======+===========+\n"
            "|    1 |  Reporter |\n"
            "|    2 | Developer |\n"
            "|    4 |   Manager |\n"
            "+------+-----------+\n"
        )

    def test_role_records_match_mapping(self):
        records = [Role(id=4, name="Manager"), Role(id=1, name="Reporter")]
        assert format_role_table(records) == format_role_table({1: "Reporter", 4: "Manager"})

    def test_empty(self):
        assert format_role_table({}).startswith("+------+--+\n")


class TestSyncReport:

    def _entry(self, ident, state, created=False):
        return RepositoryPathState(identifier=ident, path=f"/svn/{ident}",
                                   state=state, created=created)

    def test_from_inventory(self):
        inv = RepositoryInventory(entries={
            "a": self._entry("a", RepositoryState.VALID_EXISTING),
            "b": self._entry("b", RepositoryState.VALID_EXISTING, created=True),
            "c": self._entry("c", RepositoryState.VALID_CREATABLE),
            "d": self._entry("d", RepositoryState.VALID_CREATABLE),
            "e": self._entry("e", RepositoryState.INVALID_BLOCKED_BY_FILE),
        })
        report = SyncReport.from_inventory(inv, failed=["d"], output_file="/svn/access.authZ")
        assert report.projects == 5
        assert report.existing == ["a", "b"]
        assert report.created == ["b"]
        assert report.failed == ["d"]
        assert report.missing == ["c"]
        assert report.blocked == ["e"]
        text = report.to_text()
        assert "Repositories in AuthZ: 2" in text
        assert "Blocked paths:         e" in text
