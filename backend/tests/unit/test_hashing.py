"""Unit tests for backend.src.utils.hashing."""

import hashlib

from backend.src.utils.hashing import checksum, digest


class TestDigest:
    """Tests for digest()."""

    def test_known_value(self):
        assert digest(b"abc") == "ba7816bf8f01cfea414140de5dae2223b00361a396177a9cb410ff61f20015ad"

    def test_empty_input(self):
        assert digest(b"") == hashlib.sha256(b"").hexdigest()

    def test_lowercase_hex(self):
        value = digest(b"sar.dll")
        assert len(value) == 64
        assert value == value.lower()


class TestChecksum:
    """Tests for checksum()."""

    def test_known_value(self):
        # CRC-32 of "123456789" is the standard check value
        assert checksum(b"123456789") == "cbf43926"

    def test_zero_padded(self):
        assert checksum(b"") == "00000000"

    def test_differs_from_digest(self):
        assert checksum(b"abc") != digest(b"abc")[:8]
