"""Error types and sanitization utilities to prevent key material leakage."""

from __future__ import annotations

import re


class RotatorError(Exception):
    """Base class for all rotator errors."""


class RetryableError(RotatorError):
    """The reconciliation pass failed and must be re-delivered with fresh state."""


class ConflictError(RetryableError):
    """An update lost an optimistic concurrency race."""


class StoreUnavailableError(RetryableError):
    """The secret store could not be reached or rejected the call."""

    def __init__(self, message: str, status: int | None = None):
        super().__init__(message)
        self.status = status


class DeadlineExceededError(RetryableError):
    """The pass ran out of time before a store call could be issued."""


class AlreadyExistsError(RotatorError):
    """A secret with the same identity already exists."""


# PEM blocks of any kind (certificates, private keys)
PEM_PATTERN = re.compile(
    r"-----BEGIN [A-Z0-9 ]+-----.*?-----END [A-Z0-9 ]+-----",
    flags=re.DOTALL,
)

# Patterns that might expose sensitive information
SENSITIVE_PATTERNS = [
    r"(bearer)\s+[A-Za-z0-9\-\._~\+/]+=*",
    r"(authorization)[:\s]+[^\s,;\)]+",
]

# Fields to redact completely
SENSITIVE_FIELDS = {
    "tls.key",
    "prev-tls.key",
    "next-tls.key",
    "private_key",
}


def sanitize_error_message(message: str) -> str:
    """Sanitize error message to remove sensitive information.

    Args:
        message: Original error message

    Returns:
        Sanitized error message with sensitive data redacted
    """
    sanitized = PEM_PATTERN.sub("[REDACTED PEM]", message)

    for pattern in SENSITIVE_PATTERNS:
        sanitized = re.sub(pattern, r"\1 [REDACTED]", sanitized, flags=re.IGNORECASE)

    for name in SENSITIVE_FIELDS:
        sanitized = re.sub(
            rf"(['\"]?{re.escape(name)}['\"]?)[:=\s]+([^\s,;\)\}}]+)",
            r"\1: [REDACTED]",
            sanitized,
            flags=re.IGNORECASE,
        )

    return sanitized


def sanitize_exception(error: Exception) -> str:
    """Sanitize exception message.

    Args:
        error: Exception object

    Returns:
        Sanitized error message
    """
    return sanitize_error_message(str(error))

