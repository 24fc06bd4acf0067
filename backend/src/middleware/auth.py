"""
Authorization dependency for the upload endpoint.

Uploads are authorized by a single shared bearer token (API_TOKEN).
The check runs before the request body is parsed, and the token is
compared in constant time.
"""

import hmac

from fastapi import Depends, HTTPException, Request, status

from backend.src.config.settings import AppSettings, get_settings
from backend.src.utils.logging_config import get_logger


logger = get_logger("api")


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


async def require_upload_token(
    request: Request,
    settings: AppSettings = Depends(get_settings),
) -> None:
    """
    FastAPI dependency that requires the upload bearer token.

    Raises:
        HTTPException 401: If the header is missing, not a Bearer token,
            the token is wrong, or no token is configured

    Example:
        @router.post("/upload", dependencies=[Depends(require_upload_token)])
        async def upload(request: Request):
            ...
    """
    auth_header = request.headers.get("Authorization")
    if not auth_header:
        logger.warning("Upload auth failed: no Authorization header")
        raise _unauthorized("Authorization header required.")

    scheme, _, token = auth_header.partition(" ")
    if scheme != "Bearer":
        logger.warning("Upload auth failed: invalid Authorization format")
        raise _unauthorized("Authorization must be Bearer.")

    if not settings.upload_configured:
        logger.error("Upload auth failed: API_TOKEN is not configured")
        raise _unauthorized("Invalid token.")

    if not hmac.compare_digest(token.encode("utf-8"), settings.api_token.encode("utf-8")):
        logger.warning(
            "Upload auth failed: invalid token",
            extra={"client": request.client.host if request.client else None},
        )
        raise _unauthorized("Invalid token.")
