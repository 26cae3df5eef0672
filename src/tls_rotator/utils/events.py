"""Utilities for emitting Kubernetes events."""

from __future__ import annotations

from typing import Any

import kopf

from ..constants import (
    EVENT_REASON_RECONCILE_FAILED,
    EVENT_REASON_TARGET_CREATED,
    EVENT_REASON_TARGET_DETACHED,
    EVENT_REASON_TARGET_ROTATED,
    EVENT_REASON_VALIDATION_FAILED,
    KIND_SECRET,
    SECRET_API_VERSION,
)
from ..models import SecretIdentity


def secret_reference(identity: SecretIdentity, uid: str | None = None) -> dict[str, Any]:
    """Build the body kopf needs to attach an event to a secret."""
    metadata: dict[str, Any] = {"name": identity.name, "namespace": identity.namespace}
    if uid:
        metadata["uid"] = uid
    return {"apiVersion": SECRET_API_VERSION, "kind": KIND_SECRET, "metadata": metadata}


def emit_event(
    body: dict[str, Any],
    reason: str,
    message: str,
    type_: str = "Normal",
) -> None:
    """Emit a Kubernetes event.

    Args:
        body: Object reference (apiVersion, kind and metadata)
        reason: Event reason
        message: Event message
        type_: Event type (Normal or Warning)
    """
    kopf.event(
        body,
        reason=reason,
        message=message,
        type=type_,
    )


def emit_target_created(body: dict[str, Any], target: SecretIdentity) -> None:
    """Emit target created event."""
    emit_event(body, EVENT_REASON_TARGET_CREATED, f"Target secret {target.name} created")


def emit_target_rotated(body: dict[str, Any], target: SecretIdentity, kid: str) -> None:
    """Emit target rotated event."""
    emit_event(
        body,
        EVENT_REASON_TARGET_ROTATED,
        f"Target secret {target.name} rotated, next key id {kid}",
    )


def emit_target_detached(body: dict[str, Any], target: SecretIdentity) -> None:
    """Emit target detached event."""
    emit_event(
        body,
        EVENT_REASON_TARGET_DETACHED,
        f"Target secret {target.name} detached and kept after source deletion",
    )


def emit_validation_failed(body: dict[str, Any], message: str) -> None:
    """Emit validation failed event."""
    emit_event(body, EVENT_REASON_VALIDATION_FAILED, message, type_="Warning")


def emit_reconcile_failed(body: dict[str, Any], message: str) -> None:
    """Emit reconcile failed event."""
    emit_event(body, EVENT_REASON_RECONCILE_FAILED, message, type_="Warning")
