"""
Ordered key-value store over the kv_entries table.

Operations:
- get(key): point lookup
- set(key, value): single-key upsert, reported as success/failure
- scan(prefix): all entries under a key prefix, in key order
- compare_and_set(key, value, predicate): conditional write

Each set is committed on its own; there is no multi-key transaction.
compare_and_set serializes writers of the same key within this process.
"""

import threading
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from backend.src.models.kv_entry import KEY_RANGE_END, KEY_SEPARATOR, KVEntry, decode_key, encode_key
from backend.src.utils.logging_config import get_logger


logger = get_logger("db")

Key = Tuple[str, ...]
Value = Dict[str, Any]

# Module-level so that every store instance (one per request) shares them
_key_locks: Dict[str, threading.Lock] = {}
_key_locks_guard = threading.Lock()


def _lock_for(encoded_key: str) -> threading.Lock:
    with _key_locks_guard:
        lock = _key_locks.get(encoded_key)
        if lock is None:
            lock = _key_locks[encoded_key] = threading.Lock()
        return lock


class KVStore:
    """
    Key-value store bound to a database session.

    Usage:
        >>> store = KVStore(db)
        >>> store.set(("latest", "release"), {"version": "1.0.0"})
        True
        >>> store.scan(("latest",))
        [(('latest', 'release'), {'version': '1.0.0'})]
    """

    def __init__(self, db: Session):
        self.db = db

    def get(self, key: Sequence[str]) -> Optional[Value]:
        """Return the value stored at key, or None."""
        entry = self.db.get(KVEntry, encode_key(key))
        if entry is None:
            return None
        return entry.value

    def set(self, key: Sequence[str], value: Value) -> bool:
        """
        Store value at key, replacing any previous value.

        Returns:
            True if committed, False if the key is malformed or the
            database rejected the write
        """
        try:
            encoded = encode_key(key)
        except ValueError as e:
            logger.error(
                "Refused malformed key",
                extra={"key": list(key), "error": str(e)},
            )
            return False

        try:
            self._upsert(encoded, value)
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(
                "Failed to set key",
                extra={"key": list(key), "error": str(e)},
            )
            return False
        return True

    def compare_and_set(
        self,
        key: Sequence[str],
        value: Value,
        predicate: Callable[[Optional[Value]], bool],
    ) -> bool:
        """
        Store value at key only if predicate(current value) holds.

        The read and the write happen under a per-key lock so concurrent
        callers in this process cannot interleave between them.

        Returns:
            True if the value was written, False if the predicate rejected
            it or the database rejected the write
        """
        encoded = encode_key(key)
        with _lock_for(encoded):
            try:
                entry = self.db.get(KVEntry, encoded, populate_existing=True)
                current = entry.value if entry is not None else None
                if not predicate(current):
                    logger.info(
                        "Conditional write skipped",
                        extra={"key": list(key)},
                    )
                    return False
                self._upsert(encoded, value)
                self.db.commit()
            except SQLAlchemyError as e:
                self.db.rollback()
                logger.error(
                    "Failed to conditionally set key",
                    extra={"key": list(key), "error": str(e)},
                )
                return False
        return True

    def scan(self, prefix: Sequence[str] = ()) -> List[Tuple[Key, Value]]:
        """
        Return every entry strictly under prefix, ordered by key.

        An empty prefix returns the whole store.
        """
        query = self.db.query(KVEntry)
        if prefix:
            encoded = encode_key(prefix)
            query = query.filter(
                KVEntry.key >= encoded + KEY_SEPARATOR,
                KVEntry.key < encoded + KEY_RANGE_END,
            )
        return [(decode_key(entry.key), entry.value) for entry in query.order_by(KVEntry.key).all()]

    def _upsert(self, encoded: str, value: Value) -> None:
        entry = self.db.get(KVEntry, encoded)
        if entry is None:
            self.db.add(KVEntry(key=encoded, value=value))
        else:
            entry.value = value
        self.db.flush()
