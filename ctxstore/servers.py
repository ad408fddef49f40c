"""
Server compatibility view.

Older callers only know about "servers": a flat list of endpoints with a
single current one. This module projects that view from the contexts of
a ClientConfig instead of keeping a second collection, so the two can
never disagree:

- every context appears as a server of the same name
- the current server is the current K8S context; TMC contexts never
  become the current server
"""

from __future__ import annotations

import logging

from ctxstore import registry
from ctxstore.errors import ContextNotFoundError, NoCurrentContextError
from ctxstore.types import (
    PRIMARY_CONTEXT_TYPE,
    ClientConfig,
    Context,
    ContextType,
    Server,
    ServerType,
)

logger = logging.getLogger(__name__)

_SERVER_TYPE: dict[ContextType, ServerType] = {
    ContextType.K8S: ServerType.MANAGEMENT_CLUSTER,
    ContextType.TMC: ServerType.GLOBAL,
}


def to_server(ctx: Context) -> Server:
    """Project a context into its legacy server form."""
    return Server(
        name=ctx.name,
        type=_SERVER_TYPE[ctx.type],
        management_cluster_opts=ctx.cluster_opts,
        global_opts=ctx.global_opts,
    )


def list_servers(config: ClientConfig) -> list[Server]:
    """All contexts as servers, in insertion order."""
    return [to_server(c) for c in config.known_contexts]


def server_exists(config: ClientConfig, name: str) -> bool:
    """True if a server (i.e. a context of any type) named *name* exists."""
    return registry.context_exists(config, name)


def get_server(config: ClientConfig, name: str) -> Server:
    """
    Return the server named *name*.

    Raises:
        ContextNotFoundError: ``could not find server "<name>"``.
    """
    ctx = config.find(name)
    if ctx is None:
        raise ContextNotFoundError.server(name)
    return to_server(ctx)


def current_server_name(config: ClientConfig) -> str | None:
    """Name of the current server, or None if no K8S context is current."""
    name = config.current_context.get(PRIMARY_CONTEXT_TYPE)
    ctx = config.find(name) if name else None
    if ctx is None or ctx.type != PRIMARY_CONTEXT_TYPE:
        return None
    return name


def get_current_server(config: ClientConfig) -> Server:
    """
    Return the current server.

    Raises:
        NoCurrentContextError: ``current server "" not found``.
    """
    name = current_server_name(config)
    if name is None:
        raise NoCurrentContextError.for_server()
    return to_server(config.find(name))


def adopt_legacy_current_server(config: ClientConfig, name: str) -> bool:
    """
    Take a K8S current pointer from a blob's legacy ``current_server`` key.

    Only applies when no K8S context is current yet and *name* is an
    existing K8S context. Returns True if the pointer was adopted.
    """
    if not name or PRIMARY_CONTEXT_TYPE in config.current_context:
        return False
    ctx = config.find(name)
    if ctx is None or ctx.type != PRIMARY_CONTEXT_TYPE:
        return False
    config.current_context[PRIMARY_CONTEXT_TYPE] = name
    logger.debug(f"Adopted legacy current server {name!r} as current context")
    return True
