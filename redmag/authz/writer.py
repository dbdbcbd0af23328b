"""Atomic persistence of the AuthZ document."""

from __future__ import annotations

import logging
import os
import tempfile
from pathlib import Path

logger = logging.getLogger(__name__)


class PersistenceError(Exception):
    """Raised when a rendered AuthZ document cannot be written.

    The document itself was generated successfully and is kept on
    :attr:`document`.
    """

    def __init__(self, path: str | Path, cause: OSError, document: str = "") -> None:
        super().__init__(f'Cannot save authorization file "{path}": {cause}')
        self.path = Path(path)
        self.cause = cause
        self.document = document


def _same_owner(tmp: str, st: os.stat_result) -> bool:
    own = os.stat(tmp)
    return (own.st_uid, own.st_gid) == (st.st_uid, st.st_gid)


def _write_in_place(document: str, target: Path) -> None:
    with open(target, "w", encoding="utf-8") as fh:
        fh.write(document)
        fh.flush()
        os.fsync(fh.fileno())


def write_authz(document: str, path: str | Path) -> Path:
    """Write *document* to *path* atomically.

    Symlinks are followed, so the file they point at is the one replaced.
    The text goes to a temporary file beside that file which is then
    renamed over it; a failed write leaves any previous file untouched.
    An existing file's mode, owner and group carry over to the new one;
    when the owner cannot be carried over the file is overwritten in place.
    Returns the path given.
    """
    requested = Path(path)
    tmp: str | None = None
    try:
        target = requested.resolve()
        fd, tmp = tempfile.mkstemp(
            dir=target.parent, prefix=f".{target.name}.", suffix=".tmp",
        )
        with open(fd, "w", encoding="utf-8") as fh:
            fh.write(document)
            fh.flush()
            os.fsync(fh.fileno())
        if target.exists():
            st = target.stat()
            os.chmod(tmp, st.st_mode & 0o7777)
            if not _same_owner(tmp, st):
                try:
                    os.chown(tmp, st.st_uid, st.st_gid)
                except PermissionError:
                    # Cannot hand the file to its owner: overwrite in place.
                    Path(tmp).unlink(missing_ok=True)
                    tmp = None
                    _write_in_place(document, target)
                    logger.info("*** SAVED Authorization file: %s", requested)
                    return requested
        else:
            os.chmod(tmp, 0o644)
        Path(tmp).replace(target)
    except OSError as exc:
        if tmp is not None:
            Path(tmp).unlink(missing_ok=True)
        raise PersistenceError(requested, exc, document) from exc

    logger.info("*** SAVED Authorization file: %s", requested)
    return requested
