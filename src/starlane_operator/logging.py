"""Structured logging configuration for the Starlane Operator.

Every resource event is one JSON object per line on stdout. Generated
credentials travel through the same code paths as ordinary child objects, so
anything handed to :func:`log_resource_event` is scrubbed first: credential
fields are replaced wholesale, nested Secret bodies are walked, and free text
goes through the same patterns as error messages.
"""

import json
import logging
import os
import sys
from typing import Any

from .utils.errors import sanitize_error_message

REDACTED = "***REDACTED***"

# Keys whose values are credentials whatever their shape
SECRET_FIELDS = frozenset({"password", "string_data", "stringData", "data", "token"})

# Client libraries that log every request at DEBUG/INFO
NOISY_LOGGERS = ("kubernetes.client.rest", "urllib3")


def setup_structured_logging(level: str | None = None) -> None:
    """Configure structured JSON logging.

    Args:
        level: Log level name; defaults to the LOG_LEVEL environment variable, then INFO
    """
    level_name = (level or os.getenv("LOG_LEVEL", "INFO")).upper()
    logging.basicConfig(
        level=getattr(logging, level_name, logging.INFO),
        format="%(message)s",
        handlers=[logging.StreamHandler(sys.stdout)],
    )
    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


def log_resource_event(
    logger: logging.Logger,
    controller: str,
    resource_kind: str,
    resource_name: str,
    namespace: str,
    uid: str,
    event: str,
    reason: str,
    message: str,
    level: int = logging.INFO,
    **kwargs: Any,
) -> None:
    """Log a structured resource event."""
    log_data = {
        "controller": controller,
        "resource": resource_kind,
        "name": resource_name,
        "namespace": namespace,
        "uid": uid,
        "event": event,
        "reason": reason,
        "message": sanitize_error_message(message),
    }
    log_data.update(sanitize_secrets(kwargs))
    logger.log(level, json.dumps(log_data, default=str))


def sanitize_secrets(log_data: dict[str, Any]) -> dict[str, Any]:
    """Return a copy of ``log_data`` with credential values redacted at any depth."""
    return {key: _redact(key, value) for key, value in log_data.items()}


def _redact(key: str, value: Any) -> Any:
    if key in SECRET_FIELDS:
        return REDACTED
    if isinstance(value, dict):
        return sanitize_secrets(value)
    if isinstance(value, (list, tuple)):
        return [_redact("", item) for item in value]
    if isinstance(value, str):
        return sanitize_error_message(value)
    return value
