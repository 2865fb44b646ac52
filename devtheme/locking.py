"""
Per-slot lock file so two deploys of the same slot never interleave.

The lock file is only ever created with O_EXCL. A stale lock is first renamed
to a unique name and checked to still be the file that was judged stale
before it is discarded; a fresh lock grabbed by mistake is linked back.
"""

import os
import time
import uuid
import logging
from datetime import datetime, timezone

from .errors import DeployLockedError, LockError

logger = logging.getLogger(__name__)

DEFAULT_LOCK_TIMEOUT = 2 * 60 * 60  # seconds (2 hours)


class SlotLock:
    """Context manager holding <lock_directory>/<slot_name>.lock."""

    def __init__(self, lock_directory, slot_name, timeout=DEFAULT_LOCK_TIMEOUT):
        self.path = os.path.join(lock_directory, f"{slot_name}.lock")
        self.timeout = timeout
        self._held = False

    def acquire(self):
        try:
            os.makedirs(os.path.dirname(self.path), exist_ok=True)
            if not self._create():
                self._take_over_stale()
                if not self._create():
                    raise DeployLockedError(f"Lock file {self.path} was taken concurrently")
        except OSError as e:
            raise LockError(f"Cannot use lock file {self.path}: {e}") from e

        self._held = True
        logger.debug(f"Acquired {self.path}")

    def _create(self):
        """Create the lock file; False if it already exists."""
        try:
            fd = os.open(self.path, os.O_CREAT | os.O_EXCL | os.O_WRONLY)
        except FileExistsError:
            return False

        with os.fdopen(fd, 'w', encoding='utf-8') as lf:
            lf.write(f"{os.getpid()}\n")
            lf.write(datetime.now(timezone.utc).isoformat() + "\n")
        return True

    def _take_over_stale(self):
        """Remove the existing lock if it is stale, else raise DeployLockedError."""
        seen = _read(self.path)
        try:
            age = time.time() - os.path.getmtime(self.path)
        except FileNotFoundError:
            # Released meanwhile
            return
        if age < self.timeout:
            raise DeployLockedError(
                f"Lock file {self.path} exists and is recent (age {age:.0f}s)"
            )

        logger.warning(f"Stale lock found ({age:.0f}s old): removing {self.path}")
        aside = f"{self.path}.{uuid.uuid4().hex}.stale"
        try:
            os.rename(self.path, aside)
        except FileNotFoundError as e:
            raise DeployLockedError(f"Stale lock {self.path} was taken over concurrently") from e

        if _read(aside) != seen:
            # Someone replaced the stale lock before the rename: hand it back
            try:
                os.link(aside, self.path)
            except FileExistsError:
                pass
            os.remove(aside)
            raise DeployLockedError(f"Stale lock {self.path} was taken over concurrently")

        os.remove(aside)

    def release(self):
        if not self._held:
            return
        try:
            os.remove(self.path)
        except FileNotFoundError:
            logger.warning(f"Lock file {self.path} vanished before release")
        self._held = False
        logger.debug(f"Released {self.path}")

    def __enter__(self):
        self.acquire()
        return self

    def __exit__(self, exc_type, exc, tb):
        self.release()
        return False


def _read(path):
    try:
        with open(path, 'r', encoding='utf-8') as f:
            return f.read()
    except FileNotFoundError:
        return None
