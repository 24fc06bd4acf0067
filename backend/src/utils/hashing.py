"""
Content hashing helpers for uploaded binaries.

Two codes are stored with every artifact:
- hash: SHA-256 hex digest, validated against the client-supplied hash
- checksum: CRC-32, a cheap secondary integrity code (not for security)

Both must be computed over the exact buffer that is written to disk.
"""

import hashlib
import zlib


def digest(data: bytes) -> str:
    """Return the SHA-256 hex digest of raw bytes."""
    return hashlib.sha256(data).hexdigest()


def checksum(data: bytes) -> str:
    """Return the CRC-32 of raw bytes as 8 lowercase hex digits."""
    return f"{zlib.crc32(data) & 0xFFFFFFFF:08x}"
