"""Command-line entry point: ``redmag``."""

from __future__ import annotations

import argparse
import logging
import os
import sys
from typing import Sequence

from redmag import __version__
from redmag.access.policy import TieBreak
from redmag.authz.writer import PersistenceError
from redmag.config import ConfigurationError, load_config
from redmag.db.loader import DataAccessError
from redmag.processor import SvnAccessProcessor

logger = logging.getLogger(__name__)

OK_EXITCODE = 0
BAD_ARGUMENTS_EXITCODE = 1
DB_ERROR_EXITCODE = 3
WRITE_ERROR_EXITCODE = 4
FILESYSTEM_ERROR_EXITCODE = 5

DESCRIPTION = (
    f"Redmag v{__version__}\n"
    "The automatic SVN repository management tool for Redmine integration"
)


class _ArgumentParser(argparse.ArgumentParser):
    """ArgumentParser that reports errors as ``ERROR:`` with exit code 1."""

    def error(self, message: str) -> None:  # type: ignore[override]
        print(f"ERROR: {message}\n", file=sys.stderr)
        print("Use the -h option to get help !", file=sys.stderr)
        sys.exit(BAD_ARGUMENTS_EXITCODE)


def build_parser() -> argparse.ArgumentParser:
    parser = _ArgumentParser(
        prog="redmag",
        description=DESCRIPTION,
        formatter_class=argparse.RawDescriptionHelpFormatter,
        add_help=False,
    )
    parser.add_argument("-h", "-?", "--help", action="help", help="show help")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument("-u", "--user", dest="db_user", help="Redmine database username")
    parser.add_argument(
        "-p", "--password", dest="db_password",
        help='Redmine database password (default: "", or $REDMAG_DB_PASSWORD)',
    )
    parser.add_argument("-d", "--dbname", dest="db_name", help="Redmine database name")
    parser.add_argument(
        "-i", "--dbhost", dest="db_host", help="Redmine database host (default: localhost)",
    )
    parser.add_argument("--port", dest="db_port", help="Redmine database port (default: 3306)")
    parser.add_argument(
        "-s", "--svn-root", dest="svn_root", help="SVN repositories root (default: /svn)",
    )
    parser.add_argument(
        "--output-file", dest="output_file", help="filename (default: /svn/access.authZ)",
    )
    parser.add_argument(
        "--read-roles", dest="read_roles",
        help="Provide list of roleIds that can read SVN: roleId1,roleId2,..",
    )
    parser.add_argument(
        "--rw-roles", dest="rw_roles",
        help="Provide list of roleIds that can read and write SVN: roleId1,roleId2,..",
    )
    parser.add_argument(
        "--tie-break", dest="tie_break", choices=[t.value for t in TieBreak],
        help="access granted to a role listed in both role lists (default: read)",
    )
    parser.add_argument("--svnadmin", dest="svnadmin", help="svnadmin executable")
    parser.add_argument(
        "-c", "--create-missing-repos", dest="create_missing_repos",
        action="store_true", default=None, help="Create missing project repositories",
    )
    parser.add_argument(
        "-v", "--verbose", dest="verbose", action="store_true", default=None,
        help="be verbose",
    )
    parser.add_argument(
        "-l", "--list-roles", dest="list_roles", action="store_true",
        help="list available user roles",
    )
    return parser


def configure_logging(verbose: bool) -> None:
    level_name = os.environ.get("REDMAG_LOG_LEVEL")
    level = getattr(logging, level_name.upper(), None) if level_name else None
    if not isinstance(level, int):
        level = logging.INFO if verbose else logging.WARNING
    logging.basicConfig(level=level, format="%(message)s", stream=sys.stdout)


def _fail(message: str, code: int) -> int:
    print(f"ERROR: {message}", file=sys.stderr)
    return code


def main(argv: Sequence[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    list_roles = args.list_roles
    overrides = {k: v for k, v in vars(args).items() if k != "list_roles"}

    try:
        config = load_config(overrides)
        config.require_database()
        if not list_roles:
            config.require_roles()
    except ConfigurationError as exc:
        print(f"ERROR: {exc}\n", file=sys.stderr)
        print("Use the -h option to get help !", file=sys.stderr)
        return BAD_ARGUMENTS_EXITCODE

    configure_logging(config.verbose)
    logger.info(
        "*** Using database URL: %s",
        config.database_url.render_as_string(hide_password=True),
    )

    try:
        processor = SvnAccessProcessor(config)
    except DataAccessError as exc:
        return _fail(f"Database Access Error: {exc}", DB_ERROR_EXITCODE)

    try:
        if list_roles:
            print("Available roles list:")
            print(processor.role_table())
            return OK_EXITCODE

        report = processor.run()
        logger.info("\n%s", report.to_text())
        return OK_EXITCODE
    except DataAccessError as exc:
        return _fail(f"Database Access Error: {exc}", DB_ERROR_EXITCODE)
    except PersistenceError as exc:
        return _fail(str(exc), WRITE_ERROR_EXITCODE)
    except OSError as exc:
        return _fail(f"Filesystem error: {exc}", FILESYSTEM_ERROR_EXITCODE)
    finally:
        processor.close()


if __name__ == "__main__":
    sys.exit(main())
