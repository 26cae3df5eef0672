"""Builder for target secrets."""

from __future__ import annotations

from dataclasses import replace

from ..constants import KIND_SECRET, SECRET_API_VERSION, SECRET_TYPE_TLS
from ..models import Generations, KeyMaterial, OwnerReference, SecretObject, SourceView


def incoming_material(source: SourceView, kid: bytes) -> KeyMaterial:
    """Key material a source contributes to the next generation."""
    return KeyMaterial(crt=source.certificate, key=source.private_key, kid=kid)


def references_source(ref: OwnerReference, source: SourceView) -> bool:
    """Check whether an owner reference points at the given source secret."""
    if ref.kind != KIND_SECRET or ref.api_version != SECRET_API_VERSION:
        return False
    return ref.uid == source.uid or ref.name == source.identity.name


def build_owner_reference(source: SourceView, controller: bool = True) -> OwnerReference:
    """Build an owner reference from a target to its source.

    Args:
        source: Owning source secret
        controller: Whether the source is the managing controller of the target

    Returns:
        Owner reference that lets the garbage collector cascade deletion
    """
    return OwnerReference(
        api_version=SECRET_API_VERSION,
        kind=KIND_SECRET,
        name=source.identity.name,
        uid=source.uid,
        controller=controller,
        block_owner_deletion=True,
    )


def with_owner_reference(
    references: list[OwnerReference],
    source: SourceView,
) -> list[OwnerReference]:
    """Return ``references`` with exactly one reference to ``source``.

    Stale references to the same source name are replaced. The source only
    claims the controller flag when no other owner holds it, so a second source
    naming the same target does not fail on an ownership clash.
    """
    others = [ref for ref in references if not references_source(ref, source)]
    other_controller = any(ref.controller for ref in others)
    return others + [build_owner_reference(source, controller=not other_controller)]


def without_owner_reference(
    references: list[OwnerReference],
    source: SourceView,
) -> list[OwnerReference]:
    """Return ``references`` with every reference to ``source`` removed."""
    return [ref for ref in references if not references_source(ref, source)]


def initialize_target(source: SourceView, kid: bytes) -> SecretObject:
    """Build a new target with the source material staged in ``next-tls.*``.

    The ``tls.*`` and ``prev-tls.*`` fields are present but empty.
    """
    generations = Generations(next=incoming_material(source, kid))
    return SecretObject(
        identity=source.destination,
        type=SECRET_TYPE_TLS,
        data=generations.to_data(),
        owner_references=[build_owner_reference(source)],
    )


def rotate_target(target: SecretObject, source: SourceView, kid: bytes) -> SecretObject:
    """Shift the target generations and stage the source material as next.

    ``prev-tls`` takes the current ``tls``, ``tls`` takes ``next-tls`` and
    ``next-tls`` takes the source. The owner reference to the source is
    re-applied. The returned object keeps the resource version of ``target``.
    """
    generations = Generations.from_data(target.data).shift(incoming_material(source, kid))
    data = dict(target.data)
    data.update(generations.to_data())
    return replace(
        target,
        data=data,
        owner_references=with_owner_reference(target.owner_references, source),
        annotations=dict(target.annotations),
        labels=dict(target.labels),
        finalizers=list(target.finalizers),
    )


def detach_target(target: SecretObject, source: SourceView) -> SecretObject | None:
    """Release a target from a terminating source.

    Removes the owner reference to the source and clears a deletion timestamp
    propagated by cascading deletion.

    Returns:
        Updated target, or None when there is nothing to change
    """
    references = without_owner_reference(target.owner_references, source)
    if len(references) == len(target.owner_references) and target.deletion_timestamp is None:
        return None

    return replace(
        target,
        owner_references=references,
        deletion_timestamp=None,
        annotations=dict(target.annotations),
        labels=dict(target.labels),
        data=dict(target.data),
        finalizers=list(target.finalizers),
    )
