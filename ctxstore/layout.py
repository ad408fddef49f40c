"""
Config directory layout: Encapsulates where the blob and its lock live.

Default layout:
    {config_dir}/
    ├── config.json      # Serialized ClientConfig
    └── .config.lock     # flock target guarding read-modify-write
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path


@dataclass(frozen=True)
class ConfigLayout:
    """
    Centralizes all path construction for a config directory.

    The lock lives in its own file rather than on the blob, because the
    blob is replaced by rename on every save and a lock held on the old
    inode would no longer exclude anyone.
    """

    root: Path

    config_file: str = "config.json"
    lock_file: str = ".config.lock"

    def __repr__(self) -> str:
        """Return a concise string representation."""
        return f"ConfigLayout(root={self.root!r})"

    def __post_init__(self) -> None:
        # Ensure root is a Path
        if not isinstance(self.root, Path):
            object.__setattr__(self, "root", Path(self.root))

    def config_path(self) -> Path:
        """Path to the serialized config blob."""
        return self.root / self.config_file

    def lock_path(self) -> Path:
        """Path to the lock file."""
        return self.root / self.lock_file

    def ensure_directories(self) -> None:
        """Create the config directory if it doesn't exist."""
        self.root.mkdir(parents=True, exist_ok=True)
