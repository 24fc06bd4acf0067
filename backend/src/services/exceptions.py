"""
Custom exceptions for service layer.

Provides specific exception types for business logic errors
that can be translated to appropriate HTTP responses.
"""

from typing import Any, List, Optional


class ServiceError(Exception):
    """Base exception for service layer errors."""
    pass


class NotFoundError(ServiceError):
    """Raised when a requested resource is not found."""

    def __init__(self, resource: str, identifier: Any):
        self.resource = resource
        self.identifier = identifier
        self.message = f"{resource} {identifier} not found"
        super().__init__(self.message)


class ValidationError(ServiceError):
    """Raised when input validation fails."""

    def __init__(self, message: str, field: Optional[str] = None):
        self.message = message
        self.field = field
        super().__init__(message)


class UnsupportedMediaError(ServiceError):
    """Raised when the request body or a form part has the wrong type."""

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class ArtifactIntegrityError(ServiceError):
    """Raised when an uploaded file does not match its client-supplied hash.

    Files committed earlier in the same batch stay in place; ``inserted``
    reports how many of them were persisted.
    """

    def __init__(self, name: str, expected: str, actual: str, inserted: int = 0):
        self.name = name
        self.expected = expected
        self.actual = actual
        self.inserted = inserted
        self.message = "File hash mismatch."
        super().__init__(f"{self.message} ({name}: expected {expected}, got {actual})")


class StorageError(ServiceError):
    """Raised when one or more files of a batch could not be stored."""

    def __init__(self, message: str, inserted: int = 0, failed: Optional[List[str]] = None):
        self.message = message
        self.inserted = inserted
        self.failed = failed or []
        super().__init__(message)
