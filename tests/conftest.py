"""Shared fixtures: a small Redmine database and a fake svnadmin."""

from __future__ import annotations

from pathlib import Path

import pytest
from sqlalchemy import create_engine, text

from redmag.db.loader import RedmineDataLoader
from redmag.svn.admin import ReposAdmin, SvnAdminError

_SCHEMA = [
    "CREATE TABLE roles (id INTEGER PRIMARY KEY, name TEXT NOT NULL)",
    """CREATE TABLE projects (
        id INTEGER PRIMARY KEY,
        identifier TEXT NOT NULL,
        name TEXT NOT NULL,
        description TEXT,
        parent_id INTEGER,
        updated_on TEXT
    )""",
    """CREATE TABLE users (
        id INTEGER PRIMARY KEY,
        login TEXT NOT NULL,
        firstname TEXT,
        lastname TEXT,
        mail TEXT,
        admin INTEGER NOT NULL DEFAULT 0,
        last_login_on TEXT
    )""",
    """CREATE TABLE members (
        id INTEGER PRIMARY KEY,
        user_id INTEGER NOT NULL,
        project_id INTEGER NOT NULL,
        role_id INTEGER NOT NULL
    )""",
]

ROLES = [(1, "Reporter"), (2, "Developer"), (3, "Non member"), (4, "Manager")]

PROJECTS = [
    (1, "alpha", "Alpha", "First project", None, "2009-06-21T18:54:35"),
    (2, "beta", "Beta", None, 1, None),
    (3, "gamma", "Gamma", "Third", 0, "2009-09-14T08:13:22"),
]

USERS = [
    (1, "Alice", "Alice", "Anders", "alice@example.org", 0, "2009-06-20T10:00:00"),
    (2, "Bob", "Bob", "Brown", "bob@example.org", 1, None),
    (3, "Carol", "Carol", "Clark", "carol@example.org", 0, None),
    (4, "Dave", "Dave", "Dunn", "dave@example.org", 0, None),
]

# (user_id, project_id, role_id)
MEMBERS = [
    (1, 1, 1),
    (2, 1, 2),
    (3, 1, 3),
    (4, 2, 2),
    (1, 2, 4),
]


def seed_redmine(url: str) -> None:
    engine = create_engine(url)
    with engine.begin() as conn:
        for stmt in _SCHEMA:
            conn.execute(text(stmt))
        conn.execute(text("INSERT INTO roles VALUES (:id, :name)"),
                     [{"id": i, "name": n} for i, n in ROLES])
        conn.execute(
            text("INSERT INTO projects VALUES (:id, :ident, :name, :descr, :parent, :upd)"),
            [dict(zip(("id", "ident", "name", "descr", "parent", "upd"), p)) for p in PROJECTS],
        )
        conn.execute(
            text("INSERT INTO users VALUES (:id, :login, :fn, :ln, :mail, :admin, :last)"),
            [dict(zip(("id", "login", "fn", "ln", "mail", "admin", "last"), u)) for u in USERS],
        )
        conn.execute(
            text("INSERT INTO members (user_id, project_id, role_id) VALUES (:u, :p, :r)"),
            [{"u": u, "p": p, "r": r} for u, p, r in MEMBERS],
        )
    engine.dispose()


@pytest.fixture
def redmine_url(tmp_path: Path) -> str:
    url = f"sqlite:///{tmp_path / 'redmine.db'}"
    seed_redmine(url)
    return url


@pytest.fixture
def loader(redmine_url: str):
    ldr = RedmineDataLoader(redmine_url)
    yield ldr
    ldr.close()


class FakeAdmin(ReposAdmin):
    """In-process stand-in for svnadmin.

    A directory counts as a repository when it holds a ``format`` file,
    as real SVN repositories do.
    """

    def __init__(self, fail_on: set[str] | None = None) -> None:
        self.fail_on = set(fail_on or ())
        self.verified: list[str] = []
        self.created: list[tuple[str, tuple[str, ...]]] = []

    def verify(self, path) -> bool:
        self.verified.append(str(path))
        return (Path(path) / "format").is_file()

    def create(self, path, *flags: str) -> None:
        if Path(path).name in self.fail_on:
            raise SvnAdminError(
                f"svnadmin create {path} failed (rc=1)",
                returncode=1, stderr="svnadmin: E000013: Permission denied",
            )
        self.created.append((str(path), flags))
        Path(path).mkdir(parents=True)
        (Path(path) / "format").write_text("5\n")


def make_repo(path: Path) -> Path:
    """Lay out a directory FakeAdmin recognises as a repository."""
    path.mkdir(parents=True, exist_ok=True)
    (path / "format").write_text("5\n")
    return path


@pytest.fixture
def admin() -> FakeAdmin:
    return FakeAdmin()
