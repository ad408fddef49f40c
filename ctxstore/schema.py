"""
Serialization of the client config blob.

This module provides:
- SCHEMA_VERSION constant stamped into every saved blob
- dump_client_config / load_client_config: the marshal boundary
- Tolerant loaders that apply defaults for missing fields

Legacy ``current_server`` and ``known_servers`` keys are written as a
projection of the contexts (see ctxstore.servers) and are never the
source of truth on load, except to adopt a K8S current pointer that
older writers only recorded as the current server.
"""

from __future__ import annotations

import logging
from typing import Any

from ctxstore import registry, servers
from ctxstore.errors import InvalidContextError
from ctxstore.types import (
    ClientConfig,
    ClusterServer,
    Context,
    ContextType,
    GlobalServer,
    Server,
)

logger = logging.getLogger(__name__)

# Current schema version
SCHEMA_VERSION = "0.1"

# Keys owned by ctxstore; anything else is carried through in ClientConfig.extra
RESERVED_KEYS = frozenset(
    {
        "_schema_version",
        "known_contexts",
        "current_context",
        "current_server",
        "known_servers",
    }
)


def load_client_config(data: dict[str, Any]) -> ClientConfig:
    """
    Load a ClientConfig from a dictionary, tolerating missing fields.

    Args:
        data: Parsed blob contents.

    Returns:
        A ClientConfig whose current pointers all name existing contexts
        of the matching type.

    Raises:
        InvalidContextError: If a field has the wrong type, a context is
            malformed or names collide.
    """
    _expect(data, dict, "config")

    version = get_schema_version(data)
    if version != SCHEMA_VERSION:
        logger.warning(
            f"Config schema version {version!r} differs from {SCHEMA_VERSION!r}, "
            "loading anyway"
        )

    contexts: list[Context] = []
    seen: set[str] = set()
    for ctx_data in _expect(data.get("known_contexts") or [], list, "known_contexts"):
        ctx = load_context(ctx_data)
        if ctx.name in seen:
            raise InvalidContextError(f"duplicate context name {ctx.name!r}")
        seen.add(ctx.name)
        contexts.append(ctx)

    current: dict[ContextType, str] = {}
    current_data = _expect(data.get("current_context") or {}, dict, "current_context")
    for type_value, name in current_data.items():
        _expect(name, str, f"current_context[{type_value!r}]")
        try:
            ctx_type = ContextType(type_value)
        except ValueError:
            raise InvalidContextError(
                f"unknown context type {type_value!r} in current_context"
            ) from None
        if name:
            current[ctx_type] = name

    config = ClientConfig(
        known_contexts=contexts,
        current_context=current,
        extra={k: v for k, v in data.items() if k not in RESERVED_KEYS},
    )

    registry.prune_current(config)
    legacy_current = _expect(data.get("current_server") or "", str, "current_server")
    servers.adopt_legacy_current_server(config, legacy_current)
    return config


def load_context(data: dict[str, Any]) -> Context:
    """
    Load a Context from a dictionary.

    Args:
        data: Dictionary representation of a Context.

    Returns:
        A Context instance.

    Raises:
        InvalidContextError: If the type is unknown or the options payload
            does not match it.
    """
    _expect(data, dict, "context entry")
    name = _expect(data.get("name", ""), str, "context name")

    cluster_data = data.get("cluster_opts")
    global_data = data.get("global_opts")
    for opts_data in (cluster_data, global_data):
        if opts_data is not None:
            _expect(opts_data, dict, "context options")

    cluster_opts = None
    if cluster_data is not None:
        cluster_opts = ClusterServer(
            endpoint=_expect(cluster_data.get("endpoint", ""), str, "endpoint"),
            path=_expect(cluster_data.get("path", ""), str, "path"),
            context=_expect(cluster_data.get("context", ""), str, "context"),
            is_management_cluster=_expect(
                cluster_data.get("is_management_cluster", False),
                bool,
                "is_management_cluster",
            ),
        )

    global_opts = None
    if global_data is not None:
        global_opts = GlobalServer(
            endpoint=_expect(global_data.get("endpoint", ""), str, "endpoint")
        )

    return Context(
        name=name,
        type=_expect(data.get("type", ""), str, f"type of context {name!r}"),
        cluster_opts=cluster_opts,
        global_opts=global_opts,
    )


def dump_client_config(config: ClientConfig) -> dict[str, Any]:
    """
    Serialize a ClientConfig to a dictionary for storage.

    Args:
        config: The ClientConfig to serialize.

    Returns:
        A dictionary suitable for JSON serialization.
    """
    data: dict[str, Any] = dict(config.extra)
    data.update(
        {
            "_schema_version": SCHEMA_VERSION,
            "known_contexts": [dump_context(c) for c in config.known_contexts],
            "current_context": {
                ctx_type.value: name
                for ctx_type, name in config.current_context.items()
            },
            # Legacy projection for readers that predate context types
            "current_server": servers.current_server_name(config) or "",
            "known_servers": [dump_server(s) for s in servers.list_servers(config)],
        }
    )
    return data


def dump_context(ctx: Context) -> dict[str, Any]:
    """Serialize a Context to a dictionary."""
    data: dict[str, Any] = {"name": ctx.name, "type": ctx.type.value}
    if ctx.cluster_opts is not None:
        data["cluster_opts"] = _dump_cluster_server(ctx.cluster_opts)
    if ctx.global_opts is not None:
        data["global_opts"] = {"endpoint": ctx.global_opts.endpoint}
    return data


def dump_server(server: Server) -> dict[str, Any]:
    """Serialize a legacy Server to a dictionary."""
    data: dict[str, Any] = {"name": server.name, "type": server.type.value}
    if server.management_cluster_opts is not None:
        data["management_cluster_opts"] = _dump_cluster_server(
            server.management_cluster_opts
        )
    if server.global_opts is not None:
        data["global_opts"] = {"endpoint": server.global_opts.endpoint}
    return data


def _expect(value: Any, kind: type, what: str) -> Any:
    """Return *value* if it is a *kind*, else raise InvalidContextError."""
    if not isinstance(value, kind):
        raise InvalidContextError(
            f"{what} must be a {_KIND_NAMES[kind]}, got {type(value).__name__}"
        )
    return value


_KIND_NAMES = {dict: "mapping", list: "list", str: "string", bool: "boolean"}


def _dump_cluster_server(opts: ClusterServer) -> dict[str, Any]:
    return {
        "endpoint": opts.endpoint,
        "path": opts.path,
        "context": opts.context,
        "is_management_cluster": opts.is_management_cluster,
    }


def get_schema_version(data: dict[str, Any]) -> str:
    """
    Extract the schema version from serialized data.

    Returns:
        The schema version string, or "0.1" if not present.
    """
    return str(data.get("_schema_version", "0.1"))
