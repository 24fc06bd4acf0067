"""
Pydantic schemas and typed request structures.

This module exports the records stored in the artifact index and the
upload request types.
"""

from backend.src.schemas.binaries import (
    CHANNEL_NAMES,
    VALID_SYSTEMS,
    BinaryFile,
    BinaryFilePublic,
    Channel,
    ReleaseVersion,
    System,
    UploadResult,
)
from backend.src.schemas.upload import (
    UploadErrorKind,
    UploadFile,
    UploadForm,
    UploadPart,
    UploadRejection,
    UploadRequest,
    UploadValidation,
    validate_upload_form,
)

__all__ = [
    "CHANNEL_NAMES",
    "VALID_SYSTEMS",
    "BinaryFile",
    "BinaryFilePublic",
    "Channel",
    "ReleaseVersion",
    "System",
    "UploadResult",
    "UploadErrorKind",
    "UploadFile",
    "UploadForm",
    "UploadPart",
    "UploadRejection",
    "UploadRequest",
    "UploadValidation",
    "validate_upload_form",
]
