"""Centralized logging utilities for accesslens.

This module provides:
- Logging configuration from InspectorConfig
- Safe preview utilities for record payloads
- Secret redaction (bearer tokens, org session ids)
- Structured logging with user/object resolution context
"""

from __future__ import annotations

import json
import logging
import re
from typing import Any, Optional

from .config import InspectorConfig, LogLevel

# Patterns for detecting secrets (common patterns to redact)
SECRET_PATTERNS = [
    r'(?i)(?:password|passwd|pwd|secret|token|key|api[_-]?key|auth[_-]?token|access[_-]?token)\s*[:=]\s*["\']?([^"\'\s]+)',
    r'(?i)(?:bearer|basic)\s+([a-zA-Z0-9+/=!._-]+)',
    r'\b00D[a-zA-Z0-9]{12,15}![a-zA-Z0-9._]+',  # org session id
    r'[a-f0-9]{32,}',  # Long hex strings (could be hashes or keys)
]

# Standard LogRecord attributes that are not copied as extra fields
_RECORD_ATTRS = frozenset(
    {
        "name", "msg", "args", "created", "filename", "funcName",
        "levelname", "levelno", "lineno", "module", "msecs",
        "message", "pathname", "process", "processName", "relativeCreated",
        "thread", "threadName", "exc_info", "exc_text", "stack_info",
        "taskName", "user_id", "object_name",
    }
)


def safe_preview(value: Any, limit: int = 240) -> str:
    """Create a safe, length-bounded preview of a value for logging.

    Converts any value to a single-line string, normalizes whitespace and
    truncates to ``limit`` characters.

    Args:
        value: The value to preview (any type)
        limit: Maximum length of the preview (default: 240)

    Returns:
        A safe, truncated string representation
    """
    if value is None:
        return ""

    if isinstance(value, str):
        s = value
    elif isinstance(value, (dict, list, tuple)):
        try:
            s = json.dumps(value, default=str, ensure_ascii=False)
        except (TypeError, ValueError):
            s = str(value)
    else:
        s = str(value)

    s = " ".join(s.split())

    if len(s) > limit:
        return s[: limit - 1] + "…"

    return s


def redact_secrets(text: str, replacement: str = "[REDACTED]") -> str:
    """Redact secret patterns from text.

    Removes bearer tokens, org session ids, key/value credentials and
    long hex strings.

    Args:
        text: The text to redact
        replacement: String to replace secrets with (default: "[REDACTED]")

    Returns:
        Text with secrets redacted
    """
    if not isinstance(text, str):
        return text

    result = text
    for pattern in SECRET_PATTERNS:
        result = re.sub(pattern, replacement, result, flags=re.IGNORECASE | re.DOTALL)

    return result


def safe_log_value(value: Any, limit: int = 240, redact: bool = True) -> str:
    """Create a safe log value with preview and optional redaction.

    This is the main function to use when logging raw directory records.
    """
    preview = safe_preview(value, limit=limit)
    if redact:
        preview = redact_secrets(preview)
    return preview


class AccessLensFormatter(logging.Formatter):
    """Formatter that includes resolution context and optional JSON output.

    Adds ``user_id`` and ``object_name`` when present on the record,
    previews extra fields and redacts secrets from the message.
    """

    def __init__(
        self,
        include_context: bool = True,
        json_format: bool = True,
        redact_secrets: bool = True,
        *args: Any,
        **kwargs: Any,
    ):
        super().__init__(*args, **kwargs)
        self.include_context = include_context
        self.json_format = json_format
        self.redact_secrets = redact_secrets

    def format(self, record: logging.LogRecord) -> str:
        user_id = getattr(record, "user_id", None)
        object_name = getattr(record, "object_name", None)

        log_data: dict[str, Any] = {
            "timestamp": self.formatTime(record, self.datefmt),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        if self.include_context:
            if user_id:
                log_data["user_id"] = user_id
            if object_name:
                log_data["object_name"] = object_name

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        for key, value in record.__dict__.items():
            if key not in _RECORD_ATTRS:
                log_data[key] = safe_log_value(value, redact=self.redact_secrets)

        if self.redact_secrets:
            log_data["message"] = redact_secrets(log_data["message"])

        if self.json_format:
            return json.dumps(log_data, default=str, ensure_ascii=False)

        parts = [
            f"[{log_data['timestamp']}]",
            f"{log_data['level']}",
            f"{log_data['logger']}",
        ]
        if self.include_context and user_id:
            parts.append(f"user_id={user_id}")
        if self.include_context and object_name:
            parts.append(f"object={object_name}")
        parts.append(f": {log_data['message']}")
        return " ".join(parts)


class AccessLensLoggerAdapter(logging.LoggerAdapter):
    """Logger adapter that adds user_id and object_name to log records.

    Usage:
        logger = get_inspector_logger(__name__, user_id="005...")
        logger.info("Resolving sharing", object_name="Account")
    """

    def __init__(
        self,
        logger: logging.Logger,
        user_id: Optional[str] = None,
        object_name: Optional[str] = None,
    ):
        super().__init__(logger, {})
        self.user_id = user_id
        self.object_name = object_name

    def process(self, msg: str, kwargs: dict[str, Any]) -> tuple[str, dict[str, Any]]:
        user_id = kwargs.pop("user_id", self.user_id)
        object_name = kwargs.pop("object_name", self.object_name)

        extra = kwargs.get("extra", {})
        if user_id:
            extra["user_id"] = user_id
        if object_name:
            extra["object_name"] = object_name
        kwargs["extra"] = extra

        return msg, kwargs


def setup_logging(
    config: Optional[InspectorConfig] = None,
    json_format: Optional[bool] = None,
    redact_secrets: bool = True,
) -> None:
    """Configure root logging for an inspection process.

    Args:
        config: InspectorConfig instance (if None, loads from environment)
        json_format: Override ``config.log_json``
        redact_secrets: Whether to redact secrets (default: True)
    """
    if config is None:
        from .config import load_config_from_env

        config = load_config_from_env()

    log_level = getattr(logging, LogLevel(config.log_level).value, logging.INFO)
    if json_format is None:
        json_format = config.log_json

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)

    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    console_handler = logging.StreamHandler()
    console_handler.setLevel(log_level)
    console_handler.setFormatter(
        AccessLensFormatter(
            include_context=True,
            json_format=json_format,
            redact_secrets=redact_secrets,
        )
    )
    root_logger.addHandler(console_handler)

    # httpx logs every request URL at INFO, including full query strings
    logging.getLogger("httpx").setLevel(max(log_level, logging.WARNING))


def get_inspector_logger(
    name: str,
    user_id: Optional[str] = None,
    object_name: Optional[str] = None,
) -> AccessLensLoggerAdapter:
    """Get a logger adapter bound to a resolution context.

    Args:
        name: Logger name (typically __name__)
        user_id: Optional subject user id to include in all logs
        object_name: Optional object name to include in all logs
    """
    logger = logging.getLogger(name)
    return AccessLensLoggerAdapter(logger, user_id=user_id, object_name=object_name)


__all__ = [
    "safe_preview",
    "redact_secrets",
    "safe_log_value",
    "AccessLensFormatter",
    "AccessLensLoggerAdapter",
    "setup_logging",
    "get_inspector_logger",
]
