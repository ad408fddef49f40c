"""
Exceptions raised by ctxstore.

Messages are stable strings; tooling and tests match on them literally.
"""

from __future__ import annotations


class ContextStoreError(Exception):
    """Base class for all ctxstore errors."""


class InvalidContextError(ContextStoreError, ValueError):
    """A context's type tag does not match its options payload."""


class ContextNotFoundError(ContextStoreError, LookupError):
    """The named context (or server) does not exist."""

    def __init__(self, message: str, name: str) -> None:
        super().__init__(message)
        self.name = name

    @classmethod
    def lookup(cls, name: str) -> ContextNotFoundError:
        """Error for reads and current-pointer updates."""
        return cls(f'could not find context "{name}"', name)

    @classmethod
    def removal(cls, name: str) -> ContextNotFoundError:
        """Error for removals (unquoted name)."""
        return cls(f"context {name} not found", name)

    @classmethod
    def server(cls, name: str) -> ContextNotFoundError:
        """Error for legacy server lookups."""
        return cls(f'could not find server "{name}"', name)


class ContextExistsError(ContextStoreError, ValueError):
    """A context with the same name already exists (any type)."""

    def __init__(self, name: str) -> None:
        super().__init__(f'context "{name}" already exists')
        self.name = name


class NoCurrentContextError(ContextStoreError, LookupError):
    """No current context (or legacy current server) is set."""

    @classmethod
    def for_type(cls, context_type: str) -> NoCurrentContextError:
        return cls(f'no current context set for type "{context_type}"')

    @classmethod
    def for_server(cls, name: str = "") -> NoCurrentContextError:
        return cls(f'current server "{name}" not found')


class ConfigReadError(ContextStoreError):
    """The config blob exists but could not be read or parsed."""


class ConfigWriteError(ContextStoreError):
    """The config blob could not be written."""


class LockError(ContextStoreError):
    """The config lock could not be acquired."""
