"""Handlers for source secrets and the target secrets they own."""

from __future__ import annotations

from typing import Any

import kopf

from .. import metrics
from ..config import OperatorConfig
from ..constants import FINALIZER, KIND_SECRET, SECRET_API_VERSION
from ..models import SecretIdentity, is_source_annotated
from ..reconciler import ReconcileOutcome, ReconcileResult, RotationReconciler
from ..services.store.kubernetes import KubernetesSecretStore, get_core_v1_api
from ..tracing import add_span_attribute, trace_span
from ..utils.context import Deadline, with_correlation_id
from ..utils.errors import RetryableError, sanitize_exception
from ..utils.events import (
    emit_target_created,
    emit_target_detached,
    emit_target_rotated,
    emit_validation_failed,
    secret_reference,
)
from .base import BaseHandler


def owning_sources(meta: dict[str, Any]) -> list[SecretIdentity]:
    """List the secrets that own a secret through owner references.

    Args:
        meta: Metadata of the owned secret

    Returns:
        Identities of owning secrets, in the owned secret's namespace
    """
    namespace = meta.get("namespace", "default")
    return [
        SecretIdentity(namespace, ref["name"])
        for ref in meta.get("ownerReferences") or []
        if ref.get("kind") == KIND_SECRET
        and ref.get("apiVersion") == SECRET_API_VERSION
        and ref.get("name")
    ]


def is_rotation_source(annotations: Any, **_: Any) -> bool:
    """Filter for secrets marked as rotation sources with a destination."""
    return is_source_annotated(dict(annotations or {}))


def is_source_or_finalized(annotations: Any, meta: Any, **_: Any) -> bool:
    """Filter for rotation sources and former sources still holding the finalizer."""
    if is_source_annotated(dict(annotations or {})):
        return True
    return FINALIZER in (dict(meta).get("finalizers") or [])


def is_owned_target(annotations: Any, meta: Any, **_: Any) -> bool:
    """Filter for non-source secrets owned by another secret."""
    if is_source_annotated(dict(annotations or {})):
        return False
    return bool(owning_sources(dict(meta)))


class SecretRotationHandler(BaseHandler):
    """Handler that drives the rotation reconciler from kopf."""

    def __init__(
        self,
        reconciler: RotationReconciler | None = None,
        config: OperatorConfig | None = None,
    ):
        """Initialize the handler.

        Args:
            reconciler: Reconciler to use, built against the cluster on first use when omitted
            config: Operator configuration, read from the environment when omitted
        """
        super().__init__(KIND_SECRET)
        self._reconciler = reconciler
        self._config = config

    @property
    def config(self) -> OperatorConfig:
        if self._config is None:
            self._config = OperatorConfig.from_env()
        return self._config

    @property
    def reconciler(self) -> RotationReconciler:
        if self._reconciler is None:
            self._reconciler = RotationReconciler(KubernetesSecretStore(get_core_v1_api()))
        return self._reconciler

    def reconcile(self, meta: dict[str, Any]) -> ReconcileResult:
        """Reconcile the source secret described by ``meta``.

        Raises:
            kopf.TemporaryError: If the pass failed and must be re-delivered
        """
        identity = SecretIdentity(meta.get("namespace", "default"), meta.get("name", "unknown"))
        body = secret_reference(identity, meta.get("uid"))

        with with_correlation_id(), trace_span(
            "reconcile_secret", kind=KIND_SECRET, attributes={"secret.name": str(identity)}
        ):
            deadline = Deadline.after(self.config.reconcile_timeout)
            try:
                result = self.reconcile_with_metrics(
                    meta, body, lambda: self.reconciler.reconcile(identity, deadline)
                )
            except RetryableError as e:
                raise kopf.TemporaryError(sanitize_exception(e), delay=self.config.retry_delay) from e

            add_span_attribute("reconcile.outcome", result.outcome.value)
            self.report(meta, body, result)
            return result

    def report(self, meta: dict[str, Any], body: dict[str, Any], result: ReconcileResult) -> None:
        """Record metrics, events and logs for a successful pass."""
        target = result.target
        if result.outcome is ReconcileOutcome.INITIALIZED:
            metrics.rotations_total.labels(transition="initialized").inc()
            emit_target_created(body, target)
            self.log_info(
                meta,
                f"Created target secret {target}",
                event="create",
                reason="TargetCreated",
                key_id=result.key_id,
            )
        elif result.outcome is ReconcileOutcome.ROTATED:
            metrics.rotations_total.labels(transition="rotated").inc()
            emit_target_rotated(body, target, result.key_id or "")
            self.log_info(
                meta,
                f"Rotated target secret {target}",
                event="rotate",
                reason="TargetRotated",
                key_id=result.key_id,
            )
        elif result.outcome is ReconcileOutcome.DETACHED:
            metrics.rotations_total.labels(transition="detached").inc()
            emit_target_detached(body, target)
            self.log_info(
                meta,
                f"Released source, {result.message}",
                event="deletion",
                reason="TargetDetached",
                target=str(target),
            )
        elif result.outcome is ReconcileOutcome.RELEASED:
            self.log_info(meta, f"Released finalizer, {result.message}", event="deletion", reason="Released")
        elif result.outcome is ReconcileOutcome.INVALID:
            emit_validation_failed(body, result.message)
            self.log_warning(meta, result.message, reason="ValidationFailed")
        else:
            self.log_info(meta, f"Nothing to do: {result.outcome.value}", reason=result.outcome.value)

    def reconcile_owners(self, meta: dict[str, Any]) -> list[ReconcileResult]:
        """Reconcile every source that owns the given target secret.

        Event handlers are not retried, so failures are only logged; the
        owner's own handlers remain responsible for retries.
        """
        results = []
        for owner in owning_sources(meta):
            owner_meta = {"namespace": owner.namespace, "name": owner.name}
            try:
                results.append(self.reconcile(owner_meta))
            except kopf.TemporaryError as e:
                self.log_warning(
                    owner_meta,
                    f"Reconcile triggered by owned secret {meta.get('name')} failed: {e}",
                    reason="OwnerReconcileFailed",
                )
        return results


# Global handler instance
_handler = SecretRotationHandler()


@kopf.on.resume("v1", "secrets", when=is_rotation_source)
@kopf.on.create("v1", "secrets", when=is_rotation_source)
@kopf.on.update("v1", "secrets", when=is_rotation_source)
def handle_source_secret(meta: dict[str, Any], **kwargs: Any) -> None:
    """Handle source secret creation, changes and operator restarts."""
    _handler.reconcile(dict(meta))


@kopf.on.delete("v1", "secrets", when=is_source_or_finalized)
def handle_source_secret_delete(meta: dict[str, Any], **kwargs: Any) -> None:
    """Handle source secret deletion while the rotator finalizer blocks it.

    The reconciler releases the finalizer itself; kopf only waits for this
    handler before letting the deletion through.
    """
    _handler.reconcile(dict(meta))


@kopf.on.event("v1", "secrets", when=is_owned_target)
def handle_owned_secret(meta: dict[str, Any], **kwargs: Any) -> None:
    """Route changes of an owned target secret to its owning sources."""
    _handler.reconcile_owners(dict(meta))
