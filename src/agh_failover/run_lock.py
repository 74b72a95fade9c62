"""Non-blocking exclusive lock guarding a single controller run."""

import fcntl
import os
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path

import structlog

from .exceptions import RunLockError

logger = structlog.get_logger()


@contextmanager
def run_lock(path: Path) -> Iterator[bool]:
    """Try to take an exclusive flock on ``path``.

    Yields True if the lock was acquired, False if another run holds it.
    The lock and descriptor are released on every exit path; a run that
    did not acquire the lock releases nothing.
    """
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        fd = os.open(path, os.O_RDWR | os.O_CREAT, 0o644)
    except OSError as e:
        raise RunLockError(f"Cannot open lock file {path}: {e}") from e
    try:
        try:
            fcntl.flock(fd, fcntl.LOCK_EX | fcntl.LOCK_NB)
            acquired = True
        except BlockingIOError:
            acquired = False

        if not acquired:
            logger.info("Another run holds the lock, skipping", lock=str(path))
            yield False
            return

        try:
            os.ftruncate(fd, 0)
            os.write(fd, f"{os.getpid()}\n".encode())
            yield True
        finally:
            fcntl.flock(fd, fcntl.LOCK_UN)
    finally:
        os.close(fd)
