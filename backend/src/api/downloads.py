"""
Download endpoints.

Endpoints:
- GET / - HTML index of latest pointers and stored binaries
- GET /{version}/{system}/{name} - Stream a stored binary

This router has a catch-all shaped path and must be included after the
API routers.
"""

from functools import lru_cache

from fastapi import APIRouter, Depends
from fastapi.responses import FileResponse, HTMLResponse
from sqlalchemy.orm import Session

from backend.src.config.settings import AppSettings, get_settings
from backend.src.db.database import get_db
from backend.src.schemas.binaries import VALID_SYSTEMS
from backend.src.services.artifact_store import ArtifactStore
from backend.src.services.download_service import resolve_binary_path
from backend.src.services.exceptions import NotFoundError
from backend.src.services.query_service import QueryService
from backend.src.utils.listing_renderer import ListingContext, ListingRenderer
from backend.src.utils.logging_config import get_logger


logger = get_logger("api")

router = APIRouter(tags=["downloads"])


@lru_cache()
def get_listing_renderer() -> ListingRenderer:
    """Shared renderer, templates are loaded once."""
    return ListingRenderer()


def get_query_service(db: Session = Depends(get_db)) -> QueryService:
    """Create QueryService instance with database session."""
    return QueryService(ArtifactStore(db))


@router.get("/", response_class=HTMLResponse, include_in_schema=False)
async def index(
    service: QueryService = Depends(get_query_service),
    renderer: ListingRenderer = Depends(get_listing_renderer),
):
    """HTML listing of every channel's latest release and all binaries."""
    context = ListingContext(
        latest=service.list_latest(),
        binaries=service.list_artifacts(),
    )
    return HTMLResponse(renderer.render_listing(context))


@router.get("/{version}/{system}/{name}")
async def download_binary(
    version: str,
    system: str,
    name: str,
    service: QueryService = Depends(get_query_service),
    settings: AppSettings = Depends(get_settings),
):
    """
    Stream a stored binary.

    Response headers:
        X-File-Hash: SHA-256 hex digest recorded at upload
        X-File-Size: Size in bytes recorded at upload

    Raises:
        404: Unknown system, no index record, or file missing on disk
    """
    if system not in VALID_SYSTEMS:
        raise NotFoundError("File", f"{version}/{system}/{name}")

    binary = service.resolve_download(version, system, name)

    file_path, error = resolve_binary_path(settings.bin_folder, binary.path)
    if error:
        logger.warning(
            "Indexed binary not servable",
            extra={"version": version, "system": system, "file_name": name, "error": error},
        )
        raise NotFoundError("File", f"{version}/{system}/{name}")

    return FileResponse(
        path=file_path,
        filename=binary.name,
        media_type="application/octet-stream",
        headers={
            "X-File-Hash": binary.hash,
            "X-File-Size": str(binary.size),
        },
    )
