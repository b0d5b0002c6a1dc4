"""Unified exception hierarchy for accesslens.

All errors inherit from AccessLensError. This module provides:
- Base exception hierarchy with stable error codes
- ErrorRegistry for mapping codes back to classes

Propagation policy:
    AuthenticationError and TransportError always cross the engine
    boundary. QueryError, RuleSourceError and MalformedMetadataError are
    absorbed by the sharing and hierarchy resolvers, which degrade to an
    omitted fact or a ``False`` membership answer. UserNotFoundError is
    raised only when the subject user of a resolution is missing.

Usage:
    from accesslens.exceptions import AuthenticationError, QueryError
"""

from __future__ import annotations

from typing import Any, Callable, TypeVar, cast

__all__ = [
    # Base hierarchy
    "AccessLensError",
    "ConfigurationError",
    "AuthenticationError",
    "TransportError",
    "QueryError",
    "UserNotFoundError",
    "RuleSourceError",
    "MalformedMetadataError",
    # Registry
    "ErrorRegistry",
    "error_registry",
    "register_error",
]


# ---- Exception Hierarchy ----------------------------------------------------


class AccessLensError(Exception):
    """Base exception for accesslens.

    Attributes:
        code: Stable error code string (e.g. "AUTHENTICATION_ERROR").
        message: Human-readable error description.
        details: Additional context as keyword arguments.
    """

    code: str = "INTERNAL_ERROR"
    message: str = "An internal error occurred"

    def __init__(self, message: str | None = None, code: str | None = None, **kwargs: Any) -> None:
        self.message = message or self.message
        self.code = code or self.code
        self.details = kwargs
        super().__init__(self.message)


class ConfigurationError(AccessLensError):
    """Invalid or missing configuration."""

    code: str = "CONFIGURATION_ERROR"


class AuthenticationError(AccessLensError):
    """Credentials missing, rejected or expired."""

    code: str = "AUTHENTICATION_ERROR"
    message: str = "Authentication failed. Please run: sf org login web"


class TransportError(AccessLensError):
    """Network-level failure talking to the org."""

    code: str = "TRANSPORT_ERROR"


class QueryError(AccessLensError):
    """The org rejected a query or describe call."""

    code: str = "QUERY_ERROR"


class UserNotFoundError(AccessLensError):
    """Subject user of a resolution does not exist or is inactive."""

    code: str = "USER_NOT_FOUND"


class RuleSourceError(AccessLensError):
    """Sharing-rule metadata could not be retrieved."""

    code: str = "RULE_SOURCE_ERROR"


class MalformedMetadataError(AccessLensError):
    """Sharing-rule metadata document could not be read."""

    code: str = "MALFORMED_METADATA"


# ---- Error Registry ---------------------------------------------------------

_E = TypeVar("_E", bound=type[AccessLensError])


class ErrorRegistry:
    """Registry for mapping error codes to exception classes."""

    def __init__(self) -> None:
        self._errors: dict[str, type[AccessLensError]] = {}

    def register(self, code: str, error_cls: type[AccessLensError]) -> None:
        self._errors[code] = error_cls

    def get(self, code: str) -> type[AccessLensError] | None:
        return self._errors.get(code)

    def all(self) -> dict[str, type[AccessLensError]]:
        return dict(self._errors)

    def rehydrate(self, code: str, message: str | None = None, **details: Any) -> AccessLensError:
        """Build an exception instance for a serialized ``code``.

        Unknown codes fall back to AccessLensError carrying the code.
        """
        error_cls = self._errors.get(code)
        if error_cls is None:
            return AccessLensError(message, code=code, **details)
        return error_cls(message, **details)


error_registry = ErrorRegistry()


def register_error(code: str) -> Callable[[_E], _E]:
    """Decorator to register a custom error type.

    Usage:
        @register_error("MY_CUSTOM_ERROR")
        class MyCustomError(AccessLensError):
            code = "MY_CUSTOM_ERROR"
    """

    def decorator(cls: _E) -> _E:
        error_registry.register(code, cls)
        return cls

    return cast(Callable[[_E], _E], decorator)


# Register base errors
error_registry.register("INTERNAL_ERROR", AccessLensError)
error_registry.register("CONFIGURATION_ERROR", ConfigurationError)
error_registry.register("AUTHENTICATION_ERROR", AuthenticationError)
error_registry.register("TRANSPORT_ERROR", TransportError)
error_registry.register("QUERY_ERROR", QueryError)
error_registry.register("USER_NOT_FOUND", UserNotFoundError)
error_registry.register("RULE_SOURCE_ERROR", RuleSourceError)
error_registry.register("MALFORMED_METADATA", MalformedMetadataError)
