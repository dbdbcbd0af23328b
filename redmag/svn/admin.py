"""Minimal repository validation and creation via the ``svnadmin`` CLI.

All operations use :func:`subprocess.run` with an argument list; no SVN
bindings are required.
"""

from __future__ import annotations

import abc
import logging
import subprocess
from pathlib import Path

logger = logging.getLogger(__name__)

# Repositories readable by SVN 1.4+ servers
DEFAULT_CREATE_FLAGS = ("--pre-1.5-compatible",)

# Failures to launch or run svnadmin at all
_EXECUTION_ERRORS = (OSError, ValueError, subprocess.SubprocessError)


class SvnAdminError(Exception):
    """Raised when ``svnadmin`` cannot be run or exits non-zero."""

    def __init__(
        self,
        message: str,
        *,
        returncode: int | None = None,
        stdout: str = "",
        stderr: str = "",
    ) -> None:
        super().__init__(message)
        self.returncode = returncode
        self.stdout = stdout
        self.stderr = stderr


class ReposAdmin(abc.ABC):
    """Capability to validate and create repository containers."""

    @abc.abstractmethod
    def verify(self, path: str | Path) -> bool:
        """Return *True* iff *path* holds a valid repository.

        Implementations must return *False*, never raise, when the check
        itself cannot be executed.
        """

    @abc.abstractmethod
    def create(self, path: str | Path, *flags: str) -> None:
        """Create a repository at *path*.

        Raises :class:`SvnAdminError` on failure.
        """


class SvnAdmin(ReposAdmin):
    """:class:`ReposAdmin` backed by the local ``svnadmin`` executable.

    Parameters
    ----------
    executable:
        Name or path of the ``svnadmin`` binary.
    """

    def __init__(self, executable: str = "svnadmin") -> None:
        self.executable = executable

    def _run(self, *args: str) -> subprocess.CompletedProcess[str]:
        cmd = [self.executable, *args]
        logger.debug("%s", " ".join(cmd))
        return subprocess.run(cmd, capture_output=True, text=True)

    def verify(self, path: str | Path) -> bool:
        try:
            result = self._run("verify", "-q", str(Path(path).resolve()))
        except _EXECUTION_ERRORS as exc:
            logger.error("SVN execution error: %s", exc)
            return False
        return result.returncode == 0

    def create(self, path: str | Path, *flags: str) -> None:
        target = str(Path(path).resolve())
        try:
            result = self._run("create", *flags, target)
        except _EXECUTION_ERRORS as exc:
            raise SvnAdminError(f"svnadmin create {target}: {exc}") from exc
        if result.returncode != 0:
            raise SvnAdminError(
                f"svnadmin create {target} failed (rc={result.returncode}): "
                f"{result.stderr.strip()} {result.stdout.strip()}".rstrip(),
                returncode=result.returncode,
                stdout=result.stdout,
                stderr=result.stderr,
            )
