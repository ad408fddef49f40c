"""
ctxstore: Persisted connection contexts for multi-cluster CLIs.

A Context is a named connection profile for one remote endpoint, tagged
with a ContextType. The store keeps every known context plus the current
one per type in a single config file that many CLI processes may read
and update at once; every operation runs under a cross-process lock.

Older callers see the same data as "servers", where the current server
is the current K8S context.

Example:
    import ctxstore

    store = ctxstore.StoreSettings.from_env().connect()
    store.add_context(
        ctxstore.Context(
            name="mc1",
            type=ctxstore.ContextType.K8S,
            cluster_opts=ctxstore.ClusterServer(endpoint="https://10.0.0.1:6443"),
        ),
        make_current=True,
    )
    store.get_current_context(ctxstore.ContextType.K8S).name  # "mc1"
    store.get_current_server().name                            # "mc1"
"""

__version__ = "0.1.0"

# Errors
from ctxstore.errors import (
    ConfigReadError,
    ConfigWriteError,
    ContextExistsError,
    ContextNotFoundError,
    ContextStoreError,
    InvalidContextError,
    LockError,
    NoCurrentContextError,
)

# Persistence
from ctxstore.file import ConfigFile
from ctxstore.layout import ConfigLayout
from ctxstore.lock import ConfigLock
from ctxstore.settings import StoreSettings
from ctxstore.store import ContextStore

# Types
from ctxstore.types import (
    PRIMARY_CONTEXT_TYPE,
    ClientConfig,
    ClusterServer,
    Context,
    ContextType,
    GlobalServer,
    Server,
    ServerType,
)

__all__ = [
    "__version__",
    # Types
    "ClientConfig",
    "ClusterServer",
    "Context",
    "ContextType",
    "GlobalServer",
    "PRIMARY_CONTEXT_TYPE",
    "Server",
    "ServerType",
    # Persistence
    "ConfigFile",
    "ConfigLayout",
    "ConfigLock",
    "ContextStore",
    "StoreSettings",
    # Errors
    "ConfigReadError",
    "ConfigWriteError",
    "ContextExistsError",
    "ContextNotFoundError",
    "ContextStoreError",
    "InvalidContextError",
    "LockError",
    "NoCurrentContextError",
]
