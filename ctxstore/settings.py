"""
StoreSettings: Where a ContextStore keeps its state.

Settings are a pure data object threaded into the store at construction,
so one process can address several config directories (tests do) without
any module-level path variable.

Resolution order for the directory:

    explicit config_dir → $CTXSTORE_CONFIG_DIR → ~/.config/ctxstore

Example:
    >>> settings = StoreSettings.from_env()
    >>> store = settings.connect()
    >>> store.context_exists("mc1")
    False
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING

from ctxstore.layout import ConfigLayout

if TYPE_CHECKING:
    from ctxstore.store import ContextStore

CONFIG_DIR_ENV = "CTXSTORE_CONFIG_DIR"
DEFAULT_CONFIG_DIR = Path("~/.config/ctxstore")


@dataclass(frozen=True, kw_only=True)
class StoreSettings:
    """
    Settings for a ContextStore.

    Attributes:
        config_dir: Directory holding the blob and lock file.
        config_filename: Name of the blob inside *config_dir*.
        lock_filename: Name of the lock file inside *config_dir*.
        lock_timeout: Seconds to wait for the lock, or None to wait forever.
    """

    config_dir: str
    config_filename: str = "config.json"
    lock_filename: str = ".config.lock"
    lock_timeout: float | None = None

    def __post_init__(self) -> None:
        # Normalize to absolute path
        resolved = str(Path(self.config_dir).expanduser().resolve())
        if self.config_dir != resolved:
            object.__setattr__(self, "config_dir", resolved)
        if self.lock_timeout is not None and self.lock_timeout < 0:
            raise ValueError(f"lock_timeout must be >= 0, got {self.lock_timeout}")

    @classmethod
    def from_env(cls, **kwargs) -> StoreSettings:
        """
        Build settings from the environment.

        Uses ``$CTXSTORE_CONFIG_DIR`` when set and non-empty, otherwise
        ``~/.config/ctxstore``. Keyword arguments override the other fields.
        """
        config_dir = os.environ.get(CONFIG_DIR_ENV) or str(DEFAULT_CONFIG_DIR)
        return cls(config_dir=config_dir, **kwargs)

    @property
    def layout(self) -> ConfigLayout:
        """The directory layout for these settings."""
        return ConfigLayout(
            Path(self.config_dir),
            config_file=self.config_filename,
            lock_file=self.lock_filename,
        )

    def connect(self) -> ContextStore:
        """Create a ContextStore from these settings."""
        from ctxstore.store import ContextStore

        return ContextStore(self)
