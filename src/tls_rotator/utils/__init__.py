"""Utility functions for the TLS Rotator."""

from .context import (
    Deadline,
    get_context_dict,
    get_correlation_id,
    set_correlation_id,
    with_correlation_id,
)
from .errors import (
    AlreadyExistsError,
    ConflictError,
    DeadlineExceededError,
    RetryableError,
    RotatorError,
    StoreUnavailableError,
)
from .events import emit_event
from .key_ids import derive_key_id, derive_key_id_bytes

__all__ = [
    "Deadline",
    "set_correlation_id",
    "get_correlation_id",
    "with_correlation_id",
    "get_context_dict",
    "RotatorError",
    "RetryableError",
    "ConflictError",
    "StoreUnavailableError",
    "DeadlineExceededError",
    "AlreadyExistsError",
    "emit_event",
    "derive_key_id",
    "derive_key_id_bytes",
]
