"""
Service layer for business logic.

This module exports all service classes for use in API endpoints.
"""

from backend.src.services.artifact_store import ArtifactStore
from backend.src.services.channel_classifier import classify
from backend.src.services.consistency_service import ConsistencyReport, ConsistencyService
from backend.src.services.exceptions import (
    ArtifactIntegrityError,
    NotFoundError,
    ServiceError,
    StorageError,
    UnsupportedMediaError,
    ValidationError,
)
from backend.src.services.kv_store import KVStore
from backend.src.services.populate_service import PopulateService, PopulateSummary, UpstreamError
from backend.src.services.query_service import QueryService
from backend.src.services.upload_service import UploadService

__all__ = [
    "ArtifactStore",
    "KVStore",
    "classify",
    "ConsistencyReport",
    "ConsistencyService",
    "PopulateService",
    "PopulateSummary",
    "QueryService",
    "UploadService",
    "ServiceError",
    "NotFoundError",
    "ValidationError",
    "UnsupportedMediaError",
    "ArtifactIntegrityError",
    "StorageError",
    "UpstreamError",
]
