"""Configuration contract for accesslens.

This module provides the Pydantic-validated configuration model shared by
the session provider, the directory client and the resolvers.

All components MUST receive their settings through ``InspectorConfig``.
Direct os.environ/os.getenv usage is FORBIDDEN outside
``load_config_from_env()``.
"""

from __future__ import annotations

import re
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field, field_validator

from .exceptions import ConfigurationError

_API_VERSION_RE = re.compile(r"^\d{2}\.\d$")


class LogLevel(str, Enum):
    """Standard log levels."""

    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class InspectorConfig(BaseModel):
    """Settings for one inspection session against a target org.

    A static session is used when both ``instance_url`` and
    ``access_token`` are set; otherwise credentials come from the
    ``sf`` CLI for ``target_org`` (or the CLI's default org).
    """

    # Logging
    log_level: LogLevel = Field(
        default=LogLevel.INFO,
        description="Logging level",
    )
    log_json: bool = Field(
        default=False,
        description="Use JSON log format (default: plain text)",
    )

    # Org connection
    api_version: str = Field(
        default="63.0",
        description="REST API version used for data and tooling queries",
    )
    target_org: Optional[str] = Field(
        default=None,
        description="sf CLI alias or username of the org to inspect",
    )
    instance_url: Optional[str] = Field(
        default=None,
        description="Instance base URL for a static session",
    )
    access_token: Optional[str] = Field(
        default=None,
        repr=False,
        description="Bearer token for a static session",
    )
    sf_cli_path: str = Field(
        default="sf",
        description="Executable used for session bootstrap and metadata retrieval",
    )
    request_timeout: float = Field(
        default=30.0,
        gt=0,
        description="HTTP request timeout in seconds",
    )
    sf_cli_timeout: float = Field(
        default=120.0,
        gt=0,
        description="Seconds an sf CLI command may run before it is killed",
    )

    # Resolution limits
    max_fields: Optional[int] = Field(
        default=None,
        ge=1,
        description="Cap on fields reported per object (None = all)",
    )
    max_concurrency: Optional[int] = Field(
        default=None,
        ge=1,
        description="Cap on concurrent sharing resolutions (None = unbounded)",
    )
    user_search_min_chars: int = Field(default=2, ge=1)
    user_search_limit: int = Field(default=20, ge=1)

    @field_validator("api_version")
    @classmethod
    def validate_api_version(cls, v: str) -> str:
        """Accept versions in NN.N form."""
        if not _API_VERSION_RE.match(v):
            raise ValueError(f"Invalid API version: {v}. Expected a value like '63.0'")
        return v

    @field_validator("instance_url")
    @classmethod
    def validate_instance_url(cls, v: Optional[str]) -> Optional[str]:
        """Require https and strip trailing slashes."""
        if v is None:
            return v
        if not v.startswith("https://"):
            raise ValueError("Instance URL must start with https://")
        return v.rstrip("/")

    @field_validator("log_level", mode="before")
    @classmethod
    def validate_log_level(cls, v: str | LogLevel) -> LogLevel:
        """Convert string to LogLevel enum."""
        if isinstance(v, LogLevel):
            return v
        if isinstance(v, str):
            try:
                return LogLevel[v.upper()]
            except KeyError:
                raise ValueError(f"Invalid log level: {v}. Must be one of {[e.value for e in LogLevel]}")
        raise ValueError(f"Log level must be string or LogLevel enum, got {type(v)}")

    @property
    def has_static_session(self) -> bool:
        return bool(self.instance_url and self.access_token)

    model_config = {
        "use_enum_values": True,
        "extra": "forbid",
    }


def _optional_int(raw: Optional[str]) -> Optional[int]:
    if raw is None or not raw.strip():
        return None
    return int(raw)


def load_config_from_env() -> InspectorConfig:
    """Load configuration from environment variables.

    This is the ONLY place where os.getenv is allowed.

    Environment variables:
    - LOG_LEVEL: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
    - LOG_JSON: Use JSON log format (true/false, default: false)
    - SF_API_VERSION: REST API version (default: 63.0)
    - SF_TARGET_ORG: sf CLI alias or username
    - SF_INSTANCE_URL / SF_ACCESS_TOKEN: static session credentials
    - SF_CLI_PATH: sf executable (default: sf)
    - SF_REQUEST_TIMEOUT: HTTP timeout in seconds (default: 30)
    - SF_CLI_TIMEOUT: sf command timeout in seconds (default: 120)
    - SF_MAX_FIELDS: cap on fields per object (unset = all)
    - SF_MAX_CONCURRENCY: cap on concurrent sharing resolutions

    Returns:
        InspectorConfig instance with values from environment or defaults.

    Raises:
        ConfigurationError: a variable is malformed or out of range.
    """
    import os

    try:
        return InspectorConfig(
            log_level=os.getenv("LOG_LEVEL", "INFO"),
            log_json=os.getenv("LOG_JSON", "false").lower() in ("true", "1", "yes"),
            api_version=os.getenv("SF_API_VERSION", "63.0"),
            target_org=os.getenv("SF_TARGET_ORG") or None,
            instance_url=os.getenv("SF_INSTANCE_URL") or None,
            access_token=os.getenv("SF_ACCESS_TOKEN") or None,
            sf_cli_path=os.getenv("SF_CLI_PATH", "sf"),
            request_timeout=float(os.getenv("SF_REQUEST_TIMEOUT", "30")),
            sf_cli_timeout=float(os.getenv("SF_CLI_TIMEOUT", "120")),
            max_fields=_optional_int(os.getenv("SF_MAX_FIELDS")),
            max_concurrency=_optional_int(os.getenv("SF_MAX_CONCURRENCY")),
        )
    except ValueError as e:
        # pydantic ValidationError is a ValueError too
        raise ConfigurationError(f"Invalid configuration: {e}") from e


__all__ = [
    "InspectorConfig",
    "LogLevel",
    "load_config_from_env",
]
