"""
Core types for ctxstore (PUBLIC).

This module defines the data structures persisted in the client config:
- ContextType: Kind of remote endpoint a context connects to
- ClusterServer: Connection options for Kubernetes cluster contexts
- GlobalServer: Connection options for managed-service contexts
- Context: A named connection profile (tagged variant over the options)
- ServerType / Server: Legacy single-endpoint view of a context
- ClientConfig: The root persisted structure
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from ctxstore.errors import InvalidContextError


class ContextType(str, Enum):
    """Kind of remote endpoint a context connects to."""

    K8S = "k8s"
    TMC = "tmc"


# The legacy "server" pointer only ever follows contexts of this type.
PRIMARY_CONTEXT_TYPE = ContextType.K8S


@dataclass(frozen=True)
class ClusterServer:
    """
    Connection options for a Kubernetes cluster context.

    Attributes:
        endpoint: API endpoint of the cluster.
        path: Path to the kubeconfig holding the credentials.
        context: Name of the kubeconfig context to use.
        is_management_cluster: True if the cluster manages other clusters.
    """

    endpoint: str = ""
    path: str = ""
    context: str = ""
    is_management_cluster: bool = False


@dataclass(frozen=True)
class GlobalServer:
    """
    Connection options for a managed-service context.

    Attributes:
        endpoint: Service endpoint.
    """

    endpoint: str = ""


@dataclass(frozen=True)
class Context:
    """
    A named connection profile for one remote endpoint.

    Exactly one options payload is populated, selected by ``type``:
    ``cluster_opts`` for K8S, ``global_opts`` for TMC. A mismatch raises
    InvalidContextError at construction.

    Example:
    ```python
    ctx = Context(
        name="mc1",
        type=ContextType.K8S,
        cluster_opts=ClusterServer(endpoint="https://10.0.0.1:6443"),
    )
    ```
    """

    name: str
    type: ContextType
    cluster_opts: ClusterServer | None = None
    global_opts: GlobalServer | None = None

    def __post_init__(self) -> None:
        if not self.name:
            raise InvalidContextError("context name must not be empty")

        # Accept plain strings for the tag ("k8s", "tmc")
        if not isinstance(self.type, ContextType):
            try:
                object.__setattr__(self, "type", ContextType(self.type))
            except ValueError:
                raise InvalidContextError(
                    f"context {self.name!r} has unknown type {self.type!r}"
                ) from None

        expected = _OPTIONS_FIELD[self.type]
        for opts_field in _OPTIONS_FIELD.values():
            populated = getattr(self, opts_field) is not None
            if opts_field == expected and not populated:
                raise InvalidContextError(
                    f"context {self.name!r} of type {self.type.value!r} "
                    f"requires {opts_field}"
                )
            if opts_field != expected and populated:
                raise InvalidContextError(
                    f"context {self.name!r} of type {self.type.value!r} "
                    f"must not set {opts_field}"
                )

    @property
    def options(self) -> ClusterServer | GlobalServer:
        """The populated connection options for this context's type."""
        return getattr(self, _OPTIONS_FIELD[self.type])

    @property
    def endpoint(self) -> str:
        """Endpoint of the populated options."""
        return self.options.endpoint


_OPTIONS_FIELD: dict[ContextType, str] = {
    ContextType.K8S: "cluster_opts",
    ContextType.TMC: "global_opts",
}


class ServerType(str, Enum):
    """Legacy server kinds, one per context type."""

    MANAGEMENT_CLUSTER = "managementcluster"
    GLOBAL = "global"


@dataclass(frozen=True)
class Server:
    """
    Legacy view of a context, for callers that predate context types.

    Servers are never stored independently; see ctxstore.servers.
    """

    name: str
    type: ServerType
    management_cluster_opts: ClusterServer | None = None
    global_opts: GlobalServer | None = None


@dataclass
class ClientConfig:
    """
    The root persisted structure.

    Attributes:
        known_contexts: Contexts in insertion order, unique by name.
        current_context: Current context name per type.
        extra: Top-level blob keys owned by other tools, preserved on save.
    """

    known_contexts: list[Context] = field(default_factory=list)
    current_context: dict[ContextType, str] = field(default_factory=dict)
    extra: dict[str, Any] = field(default_factory=dict)

    def find(self, name: str) -> Context | None:
        """Return the context named *name*, or None."""
        for ctx in self.known_contexts:
            if ctx.name == name:
                return ctx
        return None
