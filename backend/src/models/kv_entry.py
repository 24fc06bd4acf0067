"""
Ordered key-value entry model backing the artifact index.

Keys are tuples of strings such as ("bin", "1.0.0", "linux", "sar.so").
They are stored as a single string with the parts joined by the ASCII
unit separator (0x1F). Because the separator sorts below every printable
character, ordering of encoded keys matches tuple ordering, and every key
under a prefix falls in the range [prefix + SEP, prefix + NEXT).

Design Rationale:
- One table, no foreign keys: the schema lives in the key layout
- Values are JSON documents produced by pydantic models
- No delete path: entries are created or overwritten only
"""

from datetime import datetime, timezone
from typing import Sequence, Tuple

from sqlalchemy import Column, DateTime

from backend.src.models import Base
from backend.src.models.types import JSONBType, OrderedKeyType


KEY_SEPARATOR = "\x1f"
# First character after KEY_SEPARATOR, upper bound of a prefix range
KEY_RANGE_END = "\x20"


def encode_key(parts: Sequence[str]) -> str:
    """
    Encode a key tuple into its ordered string form.

    Args:
        parts: Key parts, each a non-empty string

    Returns:
        Encoded key

    Raises:
        ValueError: If a part is empty, not a string, or contains
            control characters that would break ordering
    """
    for part in parts:
        if not isinstance(part, str) or not part:
            raise ValueError(f"Key parts must be non-empty strings, got {part!r}")
        if any(ord(ch) <= ord(KEY_SEPARATOR) for ch in part):
            raise ValueError(f"Key part contains control characters: {part!r}")
    return KEY_SEPARATOR.join(parts)


def decode_key(encoded: str) -> Tuple[str, ...]:
    """Decode an encoded key back into its tuple form."""
    return tuple(encoded.split(KEY_SEPARATOR))


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class KVEntry(Base):
    """
    One key-value pair of the artifact index.

    Attributes:
        key: Encoded key (primary key, ordered)
        value: JSON document
        updated_at: Time of the last write
    """

    __tablename__ = "kv_entries"

    key = Column(OrderedKeyType(), primary_key=True)
    value = Column(JSONBType(), nullable=False)
    updated_at = Column(DateTime(timezone=True), default=_utcnow, onupdate=_utcnow, nullable=False)

    @property
    def key_parts(self) -> Tuple[str, ...]:
        """Key as a tuple of strings."""
        return decode_key(self.key)

    def __repr__(self) -> str:
        return f"<KVEntry(key={self.key_parts!r})>"
