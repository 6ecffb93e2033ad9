"""File access for the durable task list and the markdown export."""

from __future__ import annotations

import fcntl
import logging
import os
import stat
import tempfile
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path
from typing import Optional

from todo_list.exceptions import StorageError

logger = logging.getLogger(__name__)


class TaskFile:
    """Reads and writes the durable task file.

    Writes replace the whole file: the new bytes go to a temp file in the
    same directory, which is then renamed over the old one. ``locked()``
    holds an exclusive advisory lock on a sidecar ``<name>.lock`` file so
    two invocations cannot interleave their read-modify-write cycles.
    """

    def __init__(self, path: Path) -> None:
        """Initialize with the location of the task file."""
        self._path = path
        self._lock_path = path.with_name(path.name + ".lock")

    @property
    def path(self) -> Path:
        return self._path

    def _ensure_directory(self) -> None:
        """Create the parent directory if needed."""
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise StorageError(f"Cannot create directory {self._path.parent}: {e}", self._path) from e

    @contextmanager
    def locked(self) -> Iterator[TaskFile]:
        """Hold an exclusive lock for the duration of the block."""
        self._ensure_directory()
        try:
            lock_file = open(self._lock_path, "w")
        except OSError as e:
            raise StorageError(f"Cannot open lock file {self._lock_path}: {e}", self._path) from e
        try:
            fcntl.flock(lock_file, fcntl.LOCK_EX)
            logger.debug("Acquired lock %s", self._lock_path)
            yield self
        finally:
            fcntl.flock(lock_file, fcntl.LOCK_UN)
            lock_file.close()
            logger.debug("Released lock %s", self._lock_path)

    def read(self) -> Optional[bytes]:
        """Return the file contents, or None if the file does not exist yet."""
        try:
            data = self._path.read_bytes()
        except FileNotFoundError:
            logger.debug("No task file at %s", self._path)
            return None
        except OSError as e:
            raise StorageError(f"Cannot read {self._path}: {e}", self._path) from e
        logger.debug("Read %d bytes from %s", len(data), self._path)
        return data

    def write(self, data: bytes) -> None:
        """Atomically replace the file contents."""
        self._ensure_directory()
        write_atomic(self._path, data)
        logger.debug("Wrote %d bytes to %s", len(data), self._path)


def write_atomic(path: Path, data: bytes) -> None:
    """Write ``data`` to a temp file beside ``path`` and rename it into place.

    The file keeps its current permissions; a new file gets the usual
    umask-based ones.

    Raises:
        StorageError: If the file cannot be written.
    """
    try:
        fd, temp_name = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.", suffix=".tmp")
    except OSError as e:
        raise StorageError(f"Cannot write {path}: {e}", path) from e
    try:
        with os.fdopen(fd, "wb") as temp_file:
            temp_file.write(data)
            temp_file.flush()
            os.fsync(temp_file.fileno())
            os.fchmod(temp_file.fileno(), _file_mode(path))
        os.replace(temp_name, path)
    except OSError as e:
        Path(temp_name).unlink(missing_ok=True)
        raise StorageError(f"Cannot write {path}: {e}", path) from e


def _file_mode(path: Path) -> int:
    """Permission bits for ``path``: its current ones, or 0o666 less the umask."""
    try:
        return stat.S_IMODE(path.stat().st_mode)
    except FileNotFoundError:
        umask = os.umask(0)
        os.umask(umask)
        return 0o666 & ~umask


def write_export(path: Path, text: str) -> None:
    """Write the markdown export, creating its directory if needed."""
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise StorageError(f"Cannot create directory {path.parent}: {e}", path) from e
    write_atomic(path, text.encode("utf-8"))
    logger.info("Exported %s", path)


def read_text(path: Path) -> str:
    """Read a UTF-8 text file such as a markdown list to import."""
    try:
        return path.read_text(encoding="utf-8")
    except OSError as e:
        raise StorageError(f"Cannot read {path}: {e}", path) from e
    except UnicodeDecodeError as e:
        raise StorageError(f"{path} is not valid UTF-8: {e}", path) from e
