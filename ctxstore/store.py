"""
ContextStore: Lock-guarded operations on the persisted client config.

Every public method is one self-contained bracket:

    acquire lock → load blob → read/mutate → save (mutations only) → release

No ClientConfig survives between brackets, so no operation can act on a
stale copy. The lock is released on every exit path, including errors
raised by the mutation, in which case nothing is saved.

Create via StoreSettings:
```python
store = StoreSettings.from_env().connect()
store.add_context(ctx, make_current=True)
store.get_current_context(ContextType.K8S)
```
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Generator

from ctxstore import registry, servers
from ctxstore.errors import ContextNotFoundError
from ctxstore.file import ConfigFile
from ctxstore.lock import ConfigLock
from ctxstore.schema import dump_client_config, load_client_config
from ctxstore.settings import StoreSettings
from ctxstore.types import ClientConfig, Context, ContextType, Server

logger = logging.getLogger(__name__)


class ContextStore:
    """
    Persisted registry of contexts with a legacy server view.

    Safe to call from several processes (and threads) at once without
    any locking by the caller.
    """

    def __init__(self, settings: StoreSettings) -> None:
        """
        Initialize from settings.

        Use StoreSettings(...).connect() to create instances.
        """
        self._settings = settings
        self._layout = settings.layout
        self._file = ConfigFile(self._layout)

    @property
    def settings(self) -> StoreSettings:
        """The settings for this store."""
        return self._settings

    @property
    def config_file(self) -> ConfigFile:
        """The loader/saver for the blob."""
        return self._file

    def __repr__(self) -> str:
        return f"ContextStore(config_dir={self._settings.config_dir!r})"

    # =========================================================================
    # Brackets
    # =========================================================================

    def lock(self) -> ConfigLock:
        """A fresh, unacquired lock for this store's directory."""
        return ConfigLock(self._layout.lock_path(), timeout=self._settings.lock_timeout)

    @contextmanager
    def _read(self) -> Generator[ClientConfig, None, None]:
        """Load under the lock; nothing is saved."""
        with self.lock():
            yield self._file.load()

    @contextmanager
    def _transaction(self) -> Generator[ClientConfig, None, None]:
        """Load under the lock and save on normal exit."""
        with self.lock() as lock:
            config = self._file.load()
            yield config
            self._file.save(config, lock)

    # =========================================================================
    # Whole-config operations
    # =========================================================================

    def get_client_config(self) -> ClientConfig:
        """Return the stored config (empty if none has been stored)."""
        with self._read() as config:
            return config

    def store_client_config(self, config: ClientConfig) -> None:
        """
        Replace the stored config with *config*.

        The config is validated through the same path as a load, so a
        config with duplicate names is rejected and dangling current
        pointers are dropped before anything is written.
        """
        normalized = load_client_config(dump_client_config(config))
        with self.lock() as lock:
            self._file.save(normalized, lock)
        logger.info(f"Stored config with {len(normalized.known_contexts)} contexts")

    def delete_client_config(self) -> bool:
        """Remove the stored config. Returns True if one existed."""
        with self.lock() as lock:
            return self._file.delete(lock)

    # =========================================================================
    # Contexts
    # =========================================================================

    def get_context(self, name: str) -> Context:
        """Return the context named *name*."""
        with self._read() as config:
            return registry.get_context(config, name)

    def context_exists(self, name: str) -> bool:
        """True if a context named *name* exists, whatever its type."""
        with self._read() as config:
            return registry.context_exists(config, name)

    def list_contexts(self, context_type: ContextType | str | None = None) -> list[Context]:
        """List contexts in insertion order, optionally filtered by type."""
        with self._read() as config:
            return registry.list_contexts(config, context_type)

    def add_context(self, ctx: Context, make_current: bool = False) -> None:
        """Add *ctx*, optionally making it current for its type."""
        with self._transaction() as config:
            registry.add_context(config, ctx, make_current)

    def remove_context(self, name: str) -> Context:
        """Remove the context named *name*, clearing any current pointer to it."""
        with self._transaction() as config:
            return registry.remove_context(config, name)

    def set_current_context(self, name: str) -> Context:
        """Make the context named *name* current for its type."""
        with self._transaction() as config:
            return registry.set_current_context(config, name)

    def get_current_context(self, context_type: ContextType | str) -> Context:
        """Return the current context for *context_type*."""
        with self._read() as config:
            return registry.get_current_context(config, context_type)

    def get_all_current_contexts(self) -> dict[ContextType, str]:
        """Return the type to current-name mapping."""
        with self._read() as config:
            return registry.get_all_current_contexts(config)

    # =========================================================================
    # Legacy servers
    # =========================================================================

    def server_exists(self, name: str) -> bool:
        """True if a server (a context of any type) named *name* exists."""
        with self._read() as config:
            return servers.server_exists(config, name)

    def get_server(self, name: str) -> Server:
        """Return the server named *name*."""
        with self._read() as config:
            return servers.get_server(config, name)

    def list_servers(self) -> list[Server]:
        """All contexts as servers, in insertion order."""
        with self._read() as config:
            return servers.list_servers(config)

    def get_current_server(self) -> Server:
        """Return the current server (the current K8S context)."""
        with self._read() as config:
            return servers.get_current_server(config)

    def set_current_server(self, name: str) -> Server:
        """
        Make the server named *name* current.

        Only K8S contexts move the current server; selecting a TMC server
        makes it the current TMC context and leaves the server unchanged.
        """
        with self._transaction() as config:
            if not servers.server_exists(config, name):
                raise ContextNotFoundError.server(name)
            ctx = registry.set_current_context(config, name)
            return servers.to_server(ctx)

    def remove_server(self, name: str) -> Server:
        """Remove the server named *name* and its context."""
        with self._transaction() as config:
            if not servers.server_exists(config, name):
                raise ContextNotFoundError.server(name)
            return servers.to_server(registry.remove_context(config, name))
