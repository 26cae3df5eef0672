"""Utilities for deriving key identifiers."""

from __future__ import annotations

import hashlib
import uuid

# Key ids live in the nil namespace so they depend on the certificate bytes only
KEY_ID_NAMESPACE = uuid.UUID(int=0)


def derive_key_id(certificate: bytes) -> str:
    """Derive a deterministic key id from certificate bytes.

    The id is a version 5 UUID (SHA-1 over namespace and name, RFC 4122), so
    consumers can recompute it from the published certificate.

    Args:
        certificate: Raw certificate bytes as stored in the secret

    Returns:
        Canonical lowercase UUID string
    """
    digest = hashlib.sha1(KEY_ID_NAMESPACE.bytes + certificate).digest()
    return str(uuid.UUID(bytes=digest[:16], version=5))


def derive_key_id_bytes(certificate: bytes) -> bytes:
    """Derive the key id as it is stored in target secret data."""
    return derive_key_id(certificate).encode("ascii")
