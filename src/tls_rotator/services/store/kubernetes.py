"""Kubernetes API implementation of the secret store."""

from __future__ import annotations

import base64
import time
from typing import Callable, TypeVar

from kubernetes import client
from kubernetes.client.exceptions import ApiException
from urllib3.exceptions import HTTPError

from ... import metrics
from ...constants import FIELD_MANAGER
from ...models import OwnerReference, SecretIdentity, SecretObject
from ...utils.errors import (
    AlreadyExistsError,
    ConflictError,
    StoreUnavailableError,
)

_T = TypeVar("_T")


def decode_data(data: dict[str, str] | None) -> dict[str, bytes]:
    """Decode base64 secret data as returned by the API."""
    return {key: base64.b64decode(value or "") for key, value in (data or {}).items()}


def encode_data(data: dict[str, bytes]) -> dict[str, str]:
    """Encode secret data for the API."""
    return {key: base64.b64encode(value).decode("ascii") for key, value in data.items()}


def from_v1_secret(secret: client.V1Secret) -> SecretObject:
    """Convert an API secret into a store-independent object."""
    meta = secret.metadata
    return SecretObject(
        identity=SecretIdentity(meta.namespace, meta.name),
        uid=meta.uid or "",
        resource_version=meta.resource_version,
        type=secret.type or "Opaque",
        annotations=dict(meta.annotations or {}),
        labels=dict(meta.labels or {}),
        data=decode_data(secret.data),
        finalizers=list(meta.finalizers or []),
        owner_references=[
            OwnerReference(
                api_version=ref.api_version,
                kind=ref.kind,
                name=ref.name,
                uid=ref.uid,
                controller=bool(ref.controller),
                block_owner_deletion=bool(ref.block_owner_deletion),
            )
            for ref in (meta.owner_references or [])
        ],
        deletion_timestamp=meta.deletion_timestamp,
    )


def to_v1_secret(secret: SecretObject) -> client.V1Secret:
    """Convert a store-independent object into an API secret body."""
    return client.V1Secret(
        api_version="v1",
        kind="Secret",
        metadata=client.V1ObjectMeta(
            name=secret.name,
            namespace=secret.namespace,
            uid=secret.uid or None,
            resource_version=secret.resource_version,
            annotations=secret.annotations or None,
            labels=secret.labels or None,
            finalizers=secret.finalizers,
            owner_references=[
                client.V1OwnerReference(
                    api_version=ref.api_version,
                    kind=ref.kind,
                    name=ref.name,
                    uid=ref.uid,
                    controller=ref.controller,
                    block_owner_deletion=ref.block_owner_deletion,
                )
                for ref in secret.owner_references
            ],
            deletion_timestamp=secret.deletion_timestamp,
        ),
        type=secret.type,
        data=encode_data(secret.data),
    )


class KubernetesSecretStore:
    """Secret store backed by the Kubernetes CoreV1 API."""

    def __init__(self, api: client.CoreV1Api):
        """Initialize the store.

        Args:
            api: Kubernetes CoreV1Api instance
        """
        self.api = api

    def _call(self, operation: str, fn: Callable[[], _T]) -> _T:
        start_time = time.time()
        try:
            result = fn()
            metrics.api_call_total.labels(operation=operation, result="success").inc()
            return result
        except ApiException as e:
            metrics.api_call_total.labels(operation=operation, result=str(e.status)).inc()
            raise
        except HTTPError:
            metrics.api_call_total.labels(operation=operation, result="error").inc()
            raise
        finally:
            duration = time.time() - start_time
            metrics.api_call_duration_seconds.labels(operation=operation).observe(duration)

    def get(self, identity: SecretIdentity, timeout: float | None = None) -> SecretObject | None:
        """Read a secret, returning None when it does not exist."""
        try:
            secret = self._call(
                "get",
                lambda: self.api.read_namespaced_secret(
                    name=identity.name,
                    namespace=identity.namespace,
                    _request_timeout=timeout,
                ),
            )
        except ApiException as e:
            if e.status == 404:
                return None
            raise StoreUnavailableError(f"Failed to read secret {identity}: {e.reason}", e.status) from e
        except HTTPError as e:
            raise StoreUnavailableError(f"Failed to read secret {identity}: {e}") from e
        return from_v1_secret(secret)

    def create(self, secret: SecretObject, timeout: float | None = None) -> SecretObject:
        """Create a secret."""
        body = to_v1_secret(secret)
        body.metadata.resource_version = None
        try:
            created = self._call(
                "create",
                lambda: self.api.create_namespaced_secret(
                    namespace=secret.namespace,
                    body=body,
                    field_manager=FIELD_MANAGER,
                    _request_timeout=timeout,
                ),
            )
        except ApiException as e:
            if e.status == 409:
                raise AlreadyExistsError(f"Secret {secret.identity} already exists") from e
            raise StoreUnavailableError(
                f"Failed to create secret {secret.identity}: {e.reason}", e.status
            ) from e
        except HTTPError as e:
            raise StoreUnavailableError(f"Failed to create secret {secret.identity}: {e}") from e
        return from_v1_secret(created)

    def update(self, secret: SecretObject, timeout: float | None = None) -> SecretObject:
        """Replace a secret, conditional on its resource version."""
        body = to_v1_secret(secret)
        try:
            updated = self._call(
                "update",
                lambda: self.api.replace_namespaced_secret(
                    name=secret.name,
                    namespace=secret.namespace,
                    body=body,
                    field_manager=FIELD_MANAGER,
                    _request_timeout=timeout,
                ),
            )
        except ApiException as e:
            if e.status == 409:
                raise ConflictError(f"Secret {secret.identity} was modified concurrently") from e
            if e.status == 404:
                raise ConflictError(f"Secret {secret.identity} disappeared before the update") from e
            raise StoreUnavailableError(
                f"Failed to update secret {secret.identity}: {e.reason}", e.status
            ) from e
        except HTTPError as e:
            raise StoreUnavailableError(f"Failed to update secret {secret.identity}: {e}") from e
        return from_v1_secret(updated)


def get_core_v1_api() -> client.CoreV1Api:
    """Get Kubernetes CoreV1Api client.

    Returns:
        CoreV1Api instance
    """
    from kubernetes import config

    try:
        config.load_incluster_config()
    except config.ConfigException:
        config.load_kube_config()

    return client.CoreV1Api()
