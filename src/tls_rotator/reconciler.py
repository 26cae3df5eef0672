"""Rotation reconciler: keeps a three-generation target secret in step with its source."""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from enum import Enum

from .builders.target import detach_target, initialize_target, rotate_target
from .constants import FINALIZER, GENERATION_NEXT
from .models import (
    Ignored,
    SecretIdentity,
    SecretObject,
    SourceView,
    classify,
    destination_name,
    source_view,
)
from .services.store.base import SecretStore
from .tracing import trace_span
from .utils.context import Deadline
from .utils.errors import AlreadyExistsError
from .utils.key_ids import derive_key_id_bytes

logger = logging.getLogger(__name__)


class ReconcileOutcome(str, Enum):
    """What a successful reconciliation pass did."""

    NOT_FOUND = "NotFound"
    IGNORED = "Ignored"
    INVALID = "Invalid"
    NOTHING_TO_FINALIZE = "NothingToFinalize"
    DETACHED = "Detached"
    RELEASED = "Released"
    INITIALIZED = "Initialized"
    ALREADY_EXISTS = "AlreadyExists"
    ROTATED = "Rotated"
    UNCHANGED = "Unchanged"


@dataclass(frozen=True)
class ReconcileResult:
    """Result of a successful reconciliation pass."""

    outcome: ReconcileOutcome
    source: SecretIdentity
    target: SecretIdentity | None = None
    key_id: str | None = None
    message: str = ""


class RotationReconciler:
    """Reconciles one source secret identity per call.

    Every call re-reads the source and target and derives the writes from that
    state alone, so calls may be repeated any number of times. Failed writes are
    raised as ``RetryableError`` subclasses and never merged against stale
    reads; the caller re-delivers the identity.
    """

    def __init__(self, store: SecretStore):
        self.store = store

    def reconcile(self, identity: SecretIdentity, deadline: Deadline | None = None) -> ReconcileResult:
        """Run one reconciliation pass for a source secret.

        Args:
            identity: Namespace and name of the changed secret
            deadline: Deadline for all store calls of this pass

        Returns:
            Result describing the transition that was applied

        Raises:
            RetryableError: If a read or write failed and the pass must be retried
        """
        deadline = deadline or Deadline.never()

        secret = self.store.get(identity, timeout=deadline.remaining())
        if secret is None:
            logger.debug(f"Secret {identity} no longer exists, nothing to do")
            return ReconcileResult(ReconcileOutcome.NOT_FOUND, identity)

        view = classify(secret)
        if isinstance(view, Ignored):
            if secret.deletion_timestamp is not None and FINALIZER in secret.finalizers:
                # A former source must not stay stuck in Terminating
                return self._release(secret, deadline)
            logger.debug(f"Ignoring secret {identity}: {view.reason}")
            return ReconcileResult(ReconcileOutcome.IGNORED, identity, message=view.reason)

        if view.deleting:
            return self._finalize(secret, view, deadline)

        if not view.has_key_material:
            message = "Source secret does not contain non-empty tls.crt and tls.key"
            logger.warning(f"{message}: {identity}")
            return ReconcileResult(
                ReconcileOutcome.INVALID, identity, target=view.destination, message=message
            )

        if FINALIZER not in view.finalizers:
            self._add_finalizer(secret, deadline)

        kid = derive_key_id_bytes(view.certificate)
        target = self.store.get(view.destination, timeout=deadline.remaining())
        if target is None:
            return self._initialize(view, kid, deadline)
        return self._rotate(target, view, kid, deadline)

    def _add_finalizer(self, secret: SecretObject, deadline: Deadline) -> None:
        updated = replace(secret, finalizers=[*secret.finalizers, FINALIZER])
        self.store.update(updated, timeout=deadline.remaining())
        logger.info(f"Added finalizer to source secret {secret.identity}")

    def _initialize(self, source: SourceView, kid: bytes, deadline: Deadline) -> ReconcileResult:
        target = initialize_target(source, kid)
        with trace_span("create_target", attributes={"target.name": target.name}):
            try:
                self.store.create(target, timeout=deadline.remaining())
            except AlreadyExistsError:
                # Another pass created it first; the next change reconciles any divergence
                logger.info(f"Target secret {target.identity} was created concurrently, skipping")
                return ReconcileResult(
                    ReconcileOutcome.ALREADY_EXISTS,
                    source.identity,
                    target=target.identity,
                    message="target created concurrently",
                )

        logger.info(f"Created target secret {target.identity} from source {source.identity}")
        return ReconcileResult(
            ReconcileOutcome.INITIALIZED,
            source.identity,
            target=target.identity,
            key_id=kid.decode("ascii"),
        )

    def _rotate(
        self,
        target: SecretObject,
        source: SourceView,
        kid: bytes,
        deadline: Deadline,
    ) -> ReconcileResult:
        if source.certificate == target.data.get(f"{GENERATION_NEXT}.crt"):
            logger.info(
                f"Skipping update of {target.identity}, source certificate equals {GENERATION_NEXT}.crt"
            )
            return ReconcileResult(ReconcileOutcome.UNCHANGED, source.identity, target=target.identity)

        rotated = rotate_target(target, source, kid)
        with trace_span("rotate_target", attributes={"target.name": target.name}):
            self.store.update(rotated, timeout=deadline.remaining())

        logger.info(f"Rotated target secret {target.identity} from source {source.identity}")
        return ReconcileResult(
            ReconcileOutcome.ROTATED,
            source.identity,
            target=target.identity,
            key_id=kid.decode("ascii"),
        )

    def _release(self, secret: SecretObject, deadline: Deadline) -> ReconcileResult:
        """Release the finalizer of a terminating secret that is no longer a source.

        A target still named by the destination annotation is detached first,
        exactly as for a source.
        """
        destination = destination_name(secret.annotations)
        if destination:
            return self._finalize(secret, source_view(secret, destination), deadline)

        released = replace(secret, finalizers=[f for f in secret.finalizers if f != FINALIZER])
        self.store.update(released, timeout=deadline.remaining())
        logger.info(f"Removed finalizer from former source secret {secret.identity}")
        return ReconcileResult(
            ReconcileOutcome.RELEASED, secret.identity, message="no destination to detach"
        )

    def _finalize(self, secret: SecretObject, source: SourceView, deadline: Deadline) -> ReconcileResult:
        if FINALIZER not in source.finalizers:
            return ReconcileResult(
                ReconcileOutcome.NOTHING_TO_FINALIZE, source.identity, target=source.destination
            )

        # The target must be detached before the finalizer goes, otherwise the
        # garbage collector deletes it together with the source.
        target = self.store.get(source.destination, timeout=deadline.remaining())
        if target is not None:
            detached = detach_target(target, source)
            if detached is not None:
                with trace_span("detach_target", attributes={"target.name": target.name}):
                    self.store.update(detached, timeout=deadline.remaining())
                logger.info(f"Detached target secret {target.identity} from source {source.identity}")

        released = replace(secret, finalizers=[f for f in secret.finalizers if f != FINALIZER])
        self.store.update(released, timeout=deadline.remaining())
        logger.info(f"Removed finalizer from source secret {source.identity}")

        return ReconcileResult(
            ReconcileOutcome.DETACHED,
            source.identity,
            target=source.destination,
            message="target kept" if target is not None else "no target to keep",
        )
