"""
Public API v1 for binaries and latest pointers.

Endpoints:
- GET /api/v1/latest/{channel}? - Latest release of a channel (default: release)
- GET /api/v1/list/{version}?/{system}? - Binaries, newest first, without path
- POST /api/v1/upload - Multipart batch upload (bearer token)
"""

from typing import List, Optional

from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session
from starlette.concurrency import run_in_threadpool
from starlette.datastructures import UploadFile as StarletteUploadFile

from backend.src.config.settings import AppSettings, get_settings
from backend.src.db.database import get_db
from backend.src.middleware.auth import require_upload_token
from backend.src.schemas.binaries import (
    CHANNEL_NAMES,
    BinaryFilePublic,
    Channel,
    ReleaseVersion,
    UploadResult,
)
from backend.src.schemas.upload import (
    MAX_FILES_PER_BATCH,
    UploadForm,
    UploadPart,
    UploadRejection,
    validate_upload_form,
)
from backend.src.services.artifact_store import ArtifactStore
from backend.src.services.exceptions import (
    NotFoundError,
    StorageError,
    UnsupportedMediaError,
    ValidationError,
)
from backend.src.services.query_service import QueryService
from backend.src.services.upload_service import UploadService
from backend.src.utils.logging_config import get_logger


logger = get_logger("api")

router = APIRouter(prefix="/api/v1", tags=["binaries"])


# ============================================================================
# Dependencies
# ============================================================================

def get_query_service(db: Session = Depends(get_db)) -> QueryService:
    """Create QueryService instance with database session."""
    return QueryService(ArtifactStore(db))


def get_upload_service(
    db: Session = Depends(get_db),
    settings: AppSettings = Depends(get_settings),
) -> UploadService:
    """Create UploadService instance bound to the artifact root."""
    return UploadService(ArtifactStore(db), settings.bin_folder)


async def read_upload_form(request: Request) -> UploadForm:
    """
    Read the multipart body into an UploadForm.

    The first occurrence of a field wins.

    Raises:
        UnsupportedMediaError: If the body is not multipart/form-data
    """
    content_type = request.headers.get("content-type", "")
    if not content_type.startswith("multipart/form-data"):
        raise UnsupportedMediaError("Invalid request body.")

    form = UploadForm()
    async with request.form(max_files=MAX_FILES_PER_BATCH) as data:
        for key, value in data.multi_items():
            if isinstance(value, StarletteUploadFile):
                if key not in form.files:
                    form.files[key] = UploadPart(
                        filename=value.filename or "",
                        content=await value.read(),
                    )
            elif key not in form.fields:
                form.fields[key] = value
    return form


# ============================================================================
# Endpoints
# ============================================================================

@router.get("/latest", response_model=ReleaseVersion)
@router.get("/latest/{channel}", response_model=ReleaseVersion)
async def get_latest(
    channel: str = Channel.RELEASE.value,
    service: QueryService = Depends(get_query_service),
):
    """
    Get the latest completed release of a channel.

    Channels: release (default), prerelease, canary.
    """
    if channel not in CHANNEL_NAMES:
        raise NotFoundError("Channel", channel)

    latest = service.get_latest(Channel(channel))
    if latest is None:
        raise NotFoundError("Latest release of channel", channel)
    return latest


@router.get("/list", response_model=List[BinaryFilePublic])
@router.get("/list/{version}", response_model=List[BinaryFilePublic])
@router.get("/list/{version}/{system}", response_model=List[BinaryFilePublic])
async def list_binaries(
    version: Optional[str] = None,
    system: Optional[str] = None,
    service: QueryService = Depends(get_query_service),
):
    """
    List binaries, newest first.

    The version segment also accepts a channel name (e.g. /list/canary/windows).
    The on-disk path is never included.
    """
    return service.list_artifacts(version=version, system=system)


@router.post(
    "/upload",
    response_model=UploadResult,
    dependencies=[Depends(require_upload_token)],
)
async def upload_binaries(
    request: Request,
    service: UploadService = Depends(get_upload_service),
):
    """
    Upload a batch of 1 to 4 files for one version and system.

    Multipart fields: version, sar_version, system, commit, branch, count,
    files[i], hashes[i] (SHA-256 hex of files[i]).

    The channel's latest pointer only moves when every file was stored.
    """
    form = await read_upload_form(request)

    validation = validate_upload_form(form)
    if isinstance(validation, UploadRejection):
        raise ValidationError(validation.message, field=validation.kind.value)

    result = await run_in_threadpool(service.upload, validation)

    if result.failed:
        raise StorageError(
            "Failed to store files.",
            inserted=result.inserted,
            failed=result.failed,
        )

    return result
