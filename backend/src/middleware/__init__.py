"""
Middleware components for the SAR downloads backend.

This module provides:
- require_upload_token: FastAPI dependency checking the shared bearer token
"""

from backend.src.middleware.auth import require_upload_token

__all__ = [
    "require_upload_token",
]
