"""
ConfigLock: Cross-process exclusive lock on the config directory.

Uses fcntl.flock() on a dedicated lock file. Each acquisition opens its
own file description, so two ConfigLock instances exclude each other
whether they live in different processes or in different threads of one
process.

A ConfigLock is single-use per bracket and not reentrant: acquiring it
twice without a release raises LockError instead of deadlocking.

Example:
```python
with ConfigLock(layout.lock_path()):
    config = config_file.load()
    ...
    config_file.save(config)
```
"""

from __future__ import annotations

import fcntl
import logging
import time
from pathlib import Path
from typing import IO

from ctxstore.errors import LockError

logger = logging.getLogger(__name__)

# Sleep between non-blocking attempts when a timeout is set
_POLL_INTERVAL = 0.05


class ConfigLock:
    """
    Exclusive flock-based lock on a well-known path.

    Args:
        path: Lock file path (created if missing).
        timeout: Seconds to wait, or None to block until the lock is free.
    """

    def __init__(self, path: Path | str, timeout: float | None = None) -> None:
        self._path = Path(path)
        self._timeout = timeout
        self._file: IO[str] | None = None

    @property
    def path(self) -> Path:
        """The lock file path."""
        return self._path

    @property
    def held(self) -> bool:
        """True while this instance owns the lock."""
        return self._file is not None

    def __repr__(self) -> str:
        return f"ConfigLock(path={self._path!r}, held={self.held})"

    def acquire(self) -> None:
        """
        Block until the lock is owned by this instance.

        Raises:
            LockError: If already held by this instance, the lock file
                cannot be opened, or the timeout expires.
        """
        if self._file is not None:
            raise LockError(f"config lock {self._path} is already held")

        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            lock_file = self._path.open("a")
        except OSError as e:
            raise LockError(f"cannot open config lock {self._path}: {e}") from e

        try:
            if self._timeout is None:
                fcntl.flock(lock_file.fileno(), fcntl.LOCK_EX)
            else:
                self._acquire_with_deadline(lock_file)
        except OSError as e:
            lock_file.close()
            raise LockError(f"cannot lock {self._path}: {e}") from e
        except BaseException:
            lock_file.close()
            raise

        self._file = lock_file
        logger.debug(f"Acquired config lock {self._path}")

    def _acquire_with_deadline(self, lock_file: IO[str]) -> None:
        deadline = time.monotonic() + self._timeout
        while True:
            try:
                fcntl.flock(lock_file.fileno(), fcntl.LOCK_EX | fcntl.LOCK_NB)
                return
            except BlockingIOError:
                if time.monotonic() >= deadline:
                    raise LockError(
                        f"timed out after {self._timeout}s waiting for "
                        f"config lock {self._path}"
                    ) from None
                time.sleep(_POLL_INTERVAL)

    def release(self) -> None:
        """
        Relinquish the lock.

        Raises:
            LockError: If this instance does not hold the lock.
        """
        lock_file = self._file
        if lock_file is None:
            raise LockError(f"config lock {self._path} is not held")

        self._file = None
        try:
            fcntl.flock(lock_file.fileno(), fcntl.LOCK_UN)
        finally:
            lock_file.close()
        logger.debug(f"Released config lock {self._path}")

    def __enter__(self) -> ConfigLock:
        self.acquire()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.release()
