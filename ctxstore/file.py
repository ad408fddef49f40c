"""
ConfigFile: Reads and writes the serialized ClientConfig blob.

Concurrency guarantees:

- Atomic writes: temp file in the same directory + fsync + os.replace()
- Writes require a held ConfigLock for the same directory
- Reads never observe a half-written blob
"""

from __future__ import annotations

import json
import logging
import os
import tempfile
from pathlib import Path

from ctxstore.errors import ConfigReadError, ConfigWriteError, ContextStoreError, LockError
from ctxstore.layout import ConfigLayout
from ctxstore.lock import ConfigLock
from ctxstore.schema import dump_client_config, load_client_config
from ctxstore.types import ClientConfig

logger = logging.getLogger(__name__)


class ConfigFile:
    """
    Loader/saver for the config blob described by a ConfigLayout.

    Holds no config state between calls: every load() reads the blob
    afresh.
    """

    def __init__(self, layout: ConfigLayout) -> None:
        self._layout = layout

    @property
    def path(self) -> Path:
        """Path to the blob."""
        return self._layout.config_path()

    @property
    def layout(self) -> ConfigLayout:
        """The directory layout of this file."""
        return self._layout

    def __repr__(self) -> str:
        return f"ConfigFile(path={self.path!r})"

    def exists(self) -> bool:
        """True if a blob has been stored."""
        return self.path.is_file()

    def load(self) -> ClientConfig:
        """
        Read the blob into a ClientConfig.

        Returns:
            The stored config, or an empty ClientConfig if nothing has been
            stored yet.

        Raises:
            ConfigReadError: If the blob exists but cannot be read or parsed.
        """
        path = self.path
        try:
            raw = path.read_bytes()
        except FileNotFoundError:
            logger.debug(f"No config at {path}, starting empty")
            return ClientConfig()
        except OSError as e:
            raise ConfigReadError(f"failed to read config {path}: {e}") from e

        try:
            data = json.loads(raw.decode("utf-8"))
            config = load_client_config(data)
        except (UnicodeDecodeError, json.JSONDecodeError, ContextStoreError) as e:
            raise ConfigReadError(f"failed to parse config {path}: {e}") from e

        logger.debug(f"Loaded {len(config.known_contexts)} contexts from {path}")
        return config

    def save(self, config: ClientConfig, lock: ConfigLock) -> None:
        """
        Replace the blob with *config*.

        Args:
            config: The full config to persist.
            lock: The held lock for this directory.

        Raises:
            LockError: If *lock* is not held or guards another directory.
            ConfigWriteError: If the blob cannot be written.
        """
        self._check_lock(lock)
        content = json.dumps(dump_client_config(config), indent=2, sort_keys=True)
        try:
            self._layout.ensure_directories()
            self._atomic_write(self.path, content.encode("utf-8"))
        except OSError as e:
            raise ConfigWriteError(f"failed to write config {self.path}: {e}") from e
        logger.debug(f"Saved {len(config.known_contexts)} contexts to {self.path}")

    def delete(self, lock: ConfigLock) -> bool:
        """
        Remove the blob.

        Returns:
            True if a blob was removed, False if none existed.
        """
        self._check_lock(lock)
        try:
            self.path.unlink()
        except FileNotFoundError:
            return False
        except OSError as e:
            raise ConfigWriteError(f"failed to delete config {self.path}: {e}") from e
        logger.debug(f"Deleted config {self.path}")
        return True

    def _check_lock(self, lock: ConfigLock) -> None:
        if not lock.held:
            raise LockError(f"config lock {lock.path} must be held to write")
        if lock.path != self._layout.lock_path():
            raise LockError(
                f"config lock {lock.path} does not guard {self.path}"
            )

    @staticmethod
    def _atomic_write(path: Path, data: bytes) -> None:
        """Write data atomically using temp file + rename."""
        fd, temp_path = tempfile.mkstemp(
            dir=str(path.parent),
            prefix=f".{path.name}.",
            suffix=".tmp",
        )
        try:
            with os.fdopen(fd, "wb") as f:
                f.write(data)
                f.flush()
                os.fsync(f.fileno())
            os.replace(temp_path, path)
        except BaseException:
            # Clean up temp file on failure
            try:
                os.unlink(temp_path)
            except OSError:
                logger.warning(f"Could not remove temporary file {temp_path}")
            raise
