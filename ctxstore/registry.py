"""
Context registry: in-memory operations over a loaded ClientConfig.

Every function here works on a ClientConfig obtained from
ConfigFile.load() and is a no-op for durable state until the config is
saved. ContextStore wraps each of them in a lock/load/save bracket.

Mutating functions validate before touching the config, so a raised
error always leaves it unchanged.

The legacy current server is not tracked here: it is derived from the
K8S entry of ``current_context`` (see ctxstore.servers), so making a K8S
context current or removing it updates the server view as well.
"""

from __future__ import annotations

import logging

from ctxstore.errors import (
    ContextExistsError,
    ContextNotFoundError,
    NoCurrentContextError,
)
from ctxstore.types import ClientConfig, Context, ContextType

logger = logging.getLogger(__name__)


def get_context(config: ClientConfig, name: str) -> Context:
    """
    Return the context named *name*.

    Raises:
        ContextNotFoundError: ``could not find context "<name>"``.
    """
    ctx = config.find(name)
    if ctx is None:
        raise ContextNotFoundError.lookup(name)
    return ctx


def context_exists(config: ClientConfig, name: str) -> bool:
    """True if a context named *name* exists, whatever its type."""
    return config.find(name) is not None


def list_contexts(
    config: ClientConfig, context_type: ContextType | str | None = None
) -> list[Context]:
    """List contexts in insertion order, optionally only those of one type."""
    if context_type is None:
        return list(config.known_contexts)
    ctx_type = ContextType(context_type)
    return [c for c in config.known_contexts if c.type == ctx_type]


def add_context(
    config: ClientConfig, ctx: Context, make_current: bool = False
) -> None:
    """
    Append *ctx*, optionally making it current for its type.

    Names are unique across all types.

    Raises:
        ContextExistsError: ``context "<name>" already exists``.
    """
    if context_exists(config, ctx.name):
        raise ContextExistsError(ctx.name)

    config.known_contexts.append(ctx)
    if make_current:
        config.current_context[ctx.type] = ctx.name
    logger.info(
        f"Added context {ctx.name!r} ({ctx.type.value})"
        + (" as current" if make_current else "")
    )


def remove_context(config: ClientConfig, name: str) -> Context:
    """
    Remove the context named *name* and clear any current pointer to it.

    Returns:
        The removed context.

    Raises:
        ContextNotFoundError: ``context <name> not found``.
    """
    for index, ctx in enumerate(config.known_contexts):
        if ctx.name == name:
            break
    else:
        raise ContextNotFoundError.removal(name)

    del config.known_contexts[index]
    if config.current_context.get(ctx.type) == name:
        del config.current_context[ctx.type]
    logger.info(f"Removed context {name!r} ({ctx.type.value})")
    return ctx


def set_current_context(config: ClientConfig, name: str) -> Context:
    """
    Make the context named *name* current for its type.

    Returns:
        The context that is now current.

    Raises:
        ContextNotFoundError: ``could not find context "<name>"``.
    """
    ctx = get_context(config, name)
    config.current_context[ctx.type] = ctx.name
    logger.info(f"Current {ctx.type.value} context set to {name!r}")
    return ctx


def get_current_context(
    config: ClientConfig, context_type: ContextType | str
) -> Context:
    """
    Return the current context for *context_type*.

    Raises:
        NoCurrentContextError: ``no current context set for type "<type>"``.
    """
    type_value = getattr(context_type, "value", context_type)
    try:
        ctx_type = ContextType(type_value)
    except ValueError:
        raise NoCurrentContextError.for_type(type_value) from None

    name = config.current_context.get(ctx_type)
    ctx = config.find(name) if name else None
    if ctx is None or ctx.type != ctx_type:
        raise NoCurrentContextError.for_type(ctx_type.value)
    return ctx


def get_all_current_contexts(config: ClientConfig) -> dict[ContextType, str]:
    """Return a copy of the type to current-name mapping."""
    return dict(config.current_context)


def prune_current(config: ClientConfig) -> list[ContextType]:
    """
    Drop current pointers that do not name an existing context of their type.

    Returns:
        The types whose pointer was dropped.
    """
    dropped = []
    for ctx_type, name in list(config.current_context.items()):
        ctx = config.find(name)
        if ctx is None or ctx.type != ctx_type:
            logger.warning(
                f"Dropping current {ctx_type.value} context {name!r}: "
                f"no such context of that type"
            )
            del config.current_context[ctx_type]
            dropped.append(ctx_type)
    return dropped
