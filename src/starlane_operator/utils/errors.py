"""Error sanitization utilities to prevent information leakage."""

import re


# Patterns that might expose sensitive information
SENSITIVE_PATTERNS = [
    r"password[\"']?[:=\s]+[\"']?([^\s,;\)\"']+)",
    r"(?:POSTGRES|KEYCLOAK|DB|STARLANE)_PASSWORD[\"']?[:=\s]+[\"']?([^\s,;\)\"']+)",
    r"stringData[\"']?[:=\s]+(\{[^}]*\})",
    r"token[\"']?[:=\s]+[\"']?([A-Za-z0-9\-_\.=]+)",
]


def sanitize_error_message(message: str) -> str:
    """Sanitize error message to remove sensitive information.

    Args:
        message: Original error message

    Returns:
        Sanitized error message with sensitive data redacted
    """
    sanitized = message
    for pattern in SENSITIVE_PATTERNS:
        sanitized = re.sub(
            pattern,
            lambda m: m.group(0).replace(m.group(1), "[REDACTED]"),
            sanitized,
            flags=re.IGNORECASE,
        )
    return sanitized


def sanitize_exception(error: BaseException) -> str:
    """Sanitize exception message.

    Args:
        error: Exception object

    Returns:
        Sanitized error message
    """
    return sanitize_error_message(str(error))
