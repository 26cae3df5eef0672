"""Models for source and target secrets."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import datetime
from typing import Union

from .constants import (
    ANNOTATION_DESTINATION_NAME,
    ANNOTATION_SOURCE,
    GENERATION_CURRENT,
    GENERATION_NEXT,
    GENERATION_PREVIOUS,
    SOURCE_CERT_KEY,
    SOURCE_KEY_KEY,
)


@dataclass(frozen=True)
class SecretIdentity:
    """Namespace and name of a secret."""

    namespace: str
    name: str

    def __str__(self) -> str:
        return f"{self.namespace}/{self.name}"


@dataclass(frozen=True)
class OwnerReference:
    """Owner reference from a dependent secret to its owner."""

    api_version: str
    kind: str
    name: str
    uid: str
    controller: bool = False
    block_owner_deletion: bool = False


@dataclass
class SecretObject:
    """Store-independent view of a Kubernetes secret.

    ``data`` holds decoded bytes. ``resource_version`` is carried along so that
    an update built from this object is rejected if the secret changed since it
    was read.
    """

    identity: SecretIdentity
    uid: str = ""
    resource_version: str | None = None
    type: str = "Opaque"
    annotations: dict[str, str] = field(default_factory=dict)
    labels: dict[str, str] = field(default_factory=dict)
    data: dict[str, bytes] = field(default_factory=dict)
    finalizers: list[str] = field(default_factory=list)
    owner_references: list[OwnerReference] = field(default_factory=list)
    deletion_timestamp: datetime | None = None

    @property
    def namespace(self) -> str:
        return self.identity.namespace

    @property
    def name(self) -> str:
        return self.identity.name


@dataclass(frozen=True)
class KeyMaterial:
    """One generation of key material."""

    crt: bytes = b""
    key: bytes = b""
    kid: bytes = b""

    @property
    def is_empty(self) -> bool:
        return not (self.crt or self.key or self.kid)


@dataclass(frozen=True)
class Generations:
    """The three generations held by a target secret."""

    previous: KeyMaterial = KeyMaterial()
    current: KeyMaterial = KeyMaterial()
    next: KeyMaterial = KeyMaterial()

    @classmethod
    def from_data(cls, data: dict[str, bytes]) -> Generations:
        """Read the generations from target secret data, missing fields are empty."""

        def read(prefix: str) -> KeyMaterial:
            return KeyMaterial(
                crt=data.get(f"{prefix}.crt") or b"",
                key=data.get(f"{prefix}.key") or b"",
                kid=data.get(f"{prefix}.kid") or b"",
            )

        return cls(
            previous=read(GENERATION_PREVIOUS),
            current=read(GENERATION_CURRENT),
            next=read(GENERATION_NEXT),
        )

    def to_data(self) -> dict[str, bytes]:
        """Render all nine target fields."""
        data: dict[str, bytes] = {}
        for prefix, material in (
            (GENERATION_PREVIOUS, self.previous),
            (GENERATION_CURRENT, self.current),
            (GENERATION_NEXT, self.next),
        ):
            data[f"{prefix}.crt"] = material.crt
            data[f"{prefix}.key"] = material.key
            data[f"{prefix}.kid"] = material.kid
        return data

    def shift(self, incoming: KeyMaterial) -> Generations:
        """Age every generation by one step.

        ``(previous, current, next)`` becomes ``(current, next, incoming)``; the
        old previous generation is dropped.
        """
        return replace(self, previous=self.current, current=self.next, next=incoming)


@dataclass(frozen=True)
class SourceView:
    """A secret classified as a rotation source."""

    identity: SecretIdentity
    uid: str
    destination: SecretIdentity
    certificate: bytes
    private_key: bytes
    finalizers: tuple[str, ...]
    deleting: bool

    @property
    def has_key_material(self) -> bool:
        return bool(self.certificate) and bool(self.private_key)


@dataclass(frozen=True)
class Ignored:
    """A secret that is not a rotation source."""

    identity: SecretIdentity
    reason: str


Classification = Union[SourceView, Ignored]


def is_truthy_marker(value: str | None) -> bool:
    """Check whether a source marker annotation value is set to true."""
    return value is not None and value.strip().lower() == "true"


def destination_name(annotations: dict[str, str] | None) -> str:
    """Destination secret name from annotations, empty when unset."""
    return ((annotations or {}).get(ANNOTATION_DESTINATION_NAME) or "").strip()


def is_source_annotated(annotations: dict[str, str] | None) -> bool:
    """Check whether annotations mark a secret as a rotation source."""
    annotations = annotations or {}
    if not is_truthy_marker(annotations.get(ANNOTATION_SOURCE)):
        return False
    return bool(destination_name(annotations))


def source_view(secret: SecretObject, destination: str) -> SourceView:
    """View ``secret`` as the source of the target named ``destination``."""
    return SourceView(
        identity=secret.identity,
        uid=secret.uid,
        destination=SecretIdentity(secret.namespace, destination),
        certificate=secret.data.get(SOURCE_CERT_KEY) or b"",
        private_key=secret.data.get(SOURCE_KEY_KEY) or b"",
        finalizers=tuple(secret.finalizers),
        deleting=secret.deletion_timestamp is not None,
    )


def classify(secret: SecretObject) -> Classification:
    """Classify a secret as a rotation source or something to ignore.

    Args:
        secret: Freshly read secret

    Returns:
        SourceView for rotation sources, Ignored otherwise
    """
    annotations = secret.annotations or {}
    if not is_truthy_marker(annotations.get(ANNOTATION_SOURCE)):
        return Ignored(secret.identity, "source marker annotation missing or false")

    destination = destination_name(annotations)
    if not destination:
        return Ignored(secret.identity, "destination secret name annotation missing or empty")

    return source_view(secret, destination)
