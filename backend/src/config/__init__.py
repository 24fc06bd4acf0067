"""
Configuration module for the SAR downloads backend.

Provides centralized configuration for:
- Upload authorization token
- Listen address
- Artifact root and index database
- Upstream release ingestion
"""

from backend.src.config.settings import AppSettings, get_settings

__all__ = [
    "AppSettings",
    "get_settings",
]
