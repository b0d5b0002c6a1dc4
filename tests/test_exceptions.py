"""Tests for accesslens.exceptions."""

from __future__ import annotations

import pytest

from accesslens.exceptions import (
    AccessLensError,
    AuthenticationError,
    ErrorRegistry,
    MalformedMetadataError,
    QueryError,
    RuleSourceError,
    TransportError,
    UserNotFoundError,
    error_registry,
    register_error,
)


class TestErrorHierarchy:
    """Tests for error codes and messages."""

    @pytest.mark.parametrize(
        ("error_cls", "code"),
        [
            (AuthenticationError, "AUTHENTICATION_ERROR"),
            (TransportError, "TRANSPORT_ERROR"),
            (QueryError, "QUERY_ERROR"),
            (UserNotFoundError, "USER_NOT_FOUND"),
            (RuleSourceError, "RULE_SOURCE_ERROR"),
            (MalformedMetadataError, "MALFORMED_METADATA"),
        ],
    )
    def test_codes(self, error_cls: type[AccessLensError], code: str) -> None:
        error = error_cls("boom")
        assert error.code == code
        assert isinstance(error, AccessLensError)
        assert str(error) == "boom"

    def test_default_authentication_message(self) -> None:
        assert AuthenticationError().message == "Authentication failed. Please run: sf org login web"

    def test_details(self) -> None:
        error = QueryError("Salesforce API Error: bad column", status_code=400)
        assert error.details == {"status_code": 400}


class TestErrorRegistry:
    """Tests for ErrorRegistry."""

    def test_base_errors_registered(self) -> None:
        assert error_registry.get("USER_NOT_FOUND") is UserNotFoundError
        assert error_registry.get("MALFORMED_METADATA") is MalformedMetadataError

    def test_rehydrate(self) -> None:
        error = error_registry.rehydrate("QUERY_ERROR", "Salesforce API Error: x", status_code=500)
        assert isinstance(error, QueryError)
        assert error.details == {"status_code": 500}

    def test_rehydrate_unknown_code(self) -> None:
        error = error_registry.rehydrate("SOMETHING_NEW", "unexpected")
        assert type(error) is AccessLensError
        assert error.code == "SOMETHING_NEW"

    def test_register_error_decorator(self) -> None:
        @register_error("TEST_LIMIT_ERROR")
        class LimitError(AccessLensError):
            code = "TEST_LIMIT_ERROR"

        assert error_registry.get("TEST_LIMIT_ERROR") is LimitError

    def test_isolated_registry(self) -> None:
        registry = ErrorRegistry()
        registry.register("QUERY_ERROR", QueryError)
        assert registry.all() == {"QUERY_ERROR": QueryError}
