"""Tests for key id derivation."""

from __future__ import annotations

import uuid

import pytest

from tls_rotator.utils.key_ids import KEY_ID_NAMESPACE, derive_key_id, derive_key_id_bytes

CERT = b"-----BEGIN CERTIFICATE-----\nMIIBszCCAVmgAwIBAgIU\n-----END CERTIFICATE-----\n"


class TestDeriveKeyId:
    """Test cases for derive_key_id function."""

    def test_namespace_is_nil_uuid(self):
        """Test that ids live in the nil namespace."""
        assert KEY_ID_NAMESPACE == uuid.UUID("00000000-0000-0000-0000-000000000000")

    @pytest.mark.parametrize("cert", [b"cert", CERT, b""])
    def test_matches_rfc4122_version5(self, cert):
        """Test that ids equal standard name-based SHA-1 UUIDs."""
        expected = uuid.uuid5(uuid.UUID(int=0), cert.decode("utf-8"))
        assert derive_key_id(cert) == str(expected)

    def test_version_and_variant(self):
        """Test the UUID version and variant bits."""
        parsed = uuid.UUID(derive_key_id(CERT))
        assert parsed.version == 5
        assert parsed.variant == uuid.RFC_4122

    def test_deterministic(self):
        """Test that equal certificates give equal ids."""
        assert derive_key_id(CERT) == derive_key_id(bytes(CERT))

    def test_distinct_certificates(self):
        """Test that different certificates give different ids."""
        assert derive_key_id(b"C1") != derive_key_id(b"C2")

    def test_binary_certificate(self):
        """Test that non UTF-8 bytes are accepted."""
        key_id = derive_key_id(b"\xff\xfe\x00")
        assert uuid.UUID(key_id).version == 5

    def test_canonical_lowercase_form(self):
        """Test the textual form."""
        key_id = derive_key_id(CERT)
        assert key_id == key_id.lower()
        assert len(key_id) == 36
        assert key_id.count("-") == 4

    def test_bytes_form(self):
        """Test the form stored in secret data."""
        assert derive_key_id_bytes(CERT) == derive_key_id(CERT).encode("ascii")
