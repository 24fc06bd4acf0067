"""
Custom SQLAlchemy types for cross-database compatibility.

Provides types that work across PostgreSQL and SQLite for testing.
"""

from sqlalchemy import JSON, String, TypeDecorator
from sqlalchemy.dialects.postgresql import JSONB


class JSONBType(TypeDecorator):
    """
    Platform-independent JSONB type.

    Uses PostgreSQL's native JSONB type when available,
    otherwise falls back to JSON for SQLite.
    """

    impl = JSON
    cache_ok = True

    def load_dialect_impl(self, dialect):
        if dialect.name == 'postgresql':
            return dialect.type_descriptor(JSONB())
        else:
            return dialect.type_descriptor(JSON())


class OrderedKeyType(TypeDecorator):
    """
    String column compared byte by byte.

    SQLite compares TEXT with BINARY collation by default. PostgreSQL
    uses the database locale unless told otherwise, which would break
    prefix range scans over encoded keys, so the "C" collation is forced.
    """

    impl = String(1024)
    cache_ok = True

    def load_dialect_impl(self, dialect):
        if dialect.name == 'postgresql':
            return dialect.type_descriptor(String(1024, collation="C"))
        else:
            return dialect.type_descriptor(String(1024))
