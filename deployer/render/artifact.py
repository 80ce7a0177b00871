"""Secured scratch copies of values templates.

An artifact is the file actually handed to ``helm --values``.  It lives in
a volatile directory (``/dev/shm`` where available), is created with
``0600`` permissions, is explicitly chowned to the invoking user and is
removed on every exit path of the operation that created it.
"""

from __future__ import annotations

import contextlib
import logging
import os
import pwd
import tempfile
import uuid
from pathlib import Path
from typing import Iterator, Optional

from deployer.errors import ConfigurationError, OwnershipError

logger = logging.getLogger(__name__)

#: Preferred scratch location: memory-backed, never hits disk.
VOLATILE_DIR: Path = Path("/dev/shm")

#: Owner read/write only.
ARTIFACT_MODE: int = 0o600


def scratch_dir() -> Path:
    """Return :data:`VOLATILE_DIR` if usable, else the platform temp dir."""
    if VOLATILE_DIR.is_dir() and os.access(VOLATILE_DIR, os.W_OK):
        return VOLATILE_DIR
    return Path(tempfile.gettempdir())


def _chown_to_current_user(path: Path) -> None:
    try:
        entry = pwd.getpwuid(os.getuid())
    except KeyError as exc:
        raise OwnershipError(
            f"Failed to get current user information for uid {os.getuid()}"
        ) from exc
    try:
        os.chown(path, entry.pw_uid, entry.pw_gid)
    except OSError as exc:
        raise OwnershipError(f"Error changing ownership of file {path}: {exc}") from exc


def create_artifact(source: bytes, *, directory: Optional[Path] = None) -> Path:
    """Write *source* to a new uniquely named, owner-only file.

    The write is restricted first (``O_EXCL`` + ``0600``), then ownership
    is asserted.  If the ownership step fails the file is removed before
    :class:`OwnershipError` propagates.
    """
    target_dir = directory if directory is not None else scratch_dir()
    path = target_dir / f"{uuid.uuid4()}.yaml"

    try:
        fd = os.open(path, os.O_WRONLY | os.O_CREAT | os.O_EXCL, ARTIFACT_MODE)
    except OSError as exc:
        raise ConfigurationError(f"Error writing file {path}: {exc}") from exc
    try:
        with os.fdopen(fd, "wb") as fh:
            fh.write(source)
        os.chmod(path, ARTIFACT_MODE)
    except OSError as exc:
        destroy_artifact(path)
        raise ConfigurationError(f"Error writing file {path}: {exc}") from exc

    try:
        _chown_to_current_user(path)
    except OwnershipError:
        destroy_artifact(path)
        raise

    logger.debug("Created values artifact %s", path)
    return path


def destroy_artifact(path: Path) -> None:
    """Remove *path*; failures are logged, never raised."""
    try:
        os.remove(path)
    except FileNotFoundError:
        return
    except OSError as exc:
        logger.warning("Could not remove values artifact %s: %s", path, exc)
        return
    logger.debug("Removed values artifact %s", path)


@contextlib.contextmanager
def values_artifact(
    template: Path,
    *,
    directory: Optional[Path] = None,
) -> Iterator[Path]:
    """Yield a fresh artifact copied from *template*; always removed on exit."""
    try:
        source = Path(template).read_bytes()
    except OSError as exc:
        raise ConfigurationError(f"Error reading file {template}: {exc}") from exc

    path = create_artifact(source, directory=directory)
    try:
        yield path
    finally:
        destroy_artifact(path)
