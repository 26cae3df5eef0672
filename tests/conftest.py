"""Shared fixtures: an in-memory secret store with Kubernetes-like semantics."""

from __future__ import annotations

import copy
from datetime import datetime, timezone
from typing import Callable

import pytest

from tls_rotator.constants import ANNOTATION_DESTINATION_NAME, ANNOTATION_SOURCE
from tls_rotator.models import SecretIdentity, SecretObject
from tls_rotator.utils.errors import AlreadyExistsError, ConflictError


class FakeSecretStore:
    """In-memory SecretStore.

    Updates are compare-and-swap on ``resource_version``. Deleting an object
    with finalizers only sets its deletion timestamp; it disappears once an
    update removes the last finalizer, after which dependents without a
    remaining owner are garbage collected.
    """

    def __init__(self) -> None:
        self.objects: dict[SecretIdentity, SecretObject] = {}
        self.calls: list[tuple[str, SecretIdentity]] = []
        self.timeouts: list[float | None] = []
        self._failures: dict[str, list[Exception]] = {}
        self._hooks: dict[str, list[Callable[[SecretObject], None]]] = {}
        self._version = 0
        self._uids = 0

    # Test helpers

    def put(self, secret: SecretObject) -> SecretObject:
        """Seed an object, bypassing call recording."""
        stored = copy.deepcopy(secret)
        if not stored.uid:
            stored.uid = self._next_uid()
        stored.resource_version = self._next_version()
        self.objects[stored.identity] = stored
        return copy.deepcopy(stored)

    def read(self, identity: SecretIdentity) -> SecretObject | None:
        """Read an object, bypassing call recording."""
        stored = self.objects.get(identity)
        return copy.deepcopy(stored) if stored is not None else None

    def delete(self, identity: SecretIdentity) -> None:
        """Request deletion like the API server does."""
        stored = self.objects[identity]
        if stored.finalizers:
            if stored.deletion_timestamp is None:
                stored.deletion_timestamp = datetime.now(timezone.utc)
                stored.resource_version = self._next_version()
        else:
            self._remove(identity)

    def fail_next(self, operation: str, error: Exception) -> None:
        """Make the next call of ``operation`` raise ``error``."""
        self._failures.setdefault(operation, []).append(error)

    def before_next(self, operation: str, hook: Callable[[SecretObject], None]) -> None:
        """Run ``hook`` with the argument of the next ``operation`` call before it executes."""
        self._hooks.setdefault(operation, []).append(hook)

    @property
    def writes(self) -> list[tuple[str, SecretIdentity]]:
        return [call for call in self.calls if call[0] in ("create", "update")]

    # SecretStore protocol

    def get(self, identity: SecretIdentity, timeout: float | None = None) -> SecretObject | None:
        self._record("get", identity, timeout)
        return self.read(identity)

    def create(self, secret: SecretObject, timeout: float | None = None) -> SecretObject:
        self._record("create", secret.identity, timeout, secret)
        if secret.identity in self.objects:
            raise AlreadyExistsError(f"Secret {secret.identity} already exists")
        stored = copy.deepcopy(secret)
        stored.uid = stored.uid or self._next_uid()
        stored.resource_version = self._next_version()
        stored.deletion_timestamp = None
        self.objects[stored.identity] = stored
        return copy.deepcopy(stored)

    def update(self, secret: SecretObject, timeout: float | None = None) -> SecretObject:
        self._record("update", secret.identity, timeout, secret)
        stored = self.objects.get(secret.identity)
        if stored is None:
            raise ConflictError(f"Secret {secret.identity} disappeared before the update")
        if secret.resource_version != stored.resource_version:
            raise ConflictError(f"Secret {secret.identity} was modified concurrently")

        updated = copy.deepcopy(secret)
        updated.uid = stored.uid
        updated.resource_version = self._next_version()
        self.objects[updated.identity] = updated

        if updated.deletion_timestamp is not None and not updated.finalizers:
            self._remove(updated.identity)
        return copy.deepcopy(updated)

    # Internals

    def _record(
        self,
        operation: str,
        identity: SecretIdentity,
        timeout: float | None,
        secret: SecretObject | None = None,
    ) -> None:
        self.calls.append((operation, identity))
        self.timeouts.append(timeout)
        hooks = self._hooks.get(operation)
        if hooks and secret is not None:
            hooks.pop(0)(secret)
        failures = self._failures.get(operation)
        if failures:
            raise failures.pop(0)

    def _remove(self, identity: SecretIdentity) -> None:
        removed = self.objects.pop(identity)
        live_uids = {obj.uid for obj in self.objects.values()}
        for dependent in list(self.objects.values()):
            refs = [ref for ref in dependent.owner_references if ref.uid == removed.uid]
            if not refs:
                continue
            if not any(ref.uid in live_uids for ref in dependent.owner_references):
                self._remove(dependent.identity)

    def _next_version(self) -> str:
        self._version += 1
        return str(self._version)

    def _next_uid(self) -> str:
        self._uids += 1
        return f"uid-{self._uids}"


@pytest.fixture
def store() -> FakeSecretStore:
    """Empty in-memory secret store."""
    return FakeSecretStore()


@pytest.fixture
def make_source() -> Callable[..., SecretObject]:
    """Factory for source secrets."""

    def factory(
        name: str = "source",
        namespace: str = "default",
        cert: bytes = b"cert",
        key: bytes = b"key",
        destination: str = "target",
        marker: str = "true",
        **kwargs,
    ) -> SecretObject:
        annotations = {ANNOTATION_SOURCE: marker, ANNOTATION_DESTINATION_NAME: destination}
        annotations.update(kwargs.pop("annotations", {}))
        return SecretObject(
            identity=SecretIdentity(namespace, name),
            type="kubernetes.io/tls",
            annotations=annotations,
            data={"tls.crt": cert, "tls.key": key},
            **kwargs,
        )

    return factory
