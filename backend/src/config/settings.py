"""
Application settings configuration for the SAR downloads service.

Centralized settings loaded from environment variables and backend/.env.
Database, migrations and web_server.py read their configuration from here.
"""

from functools import lru_cache
from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


# backend/.env, next to src/
ENV_FILE = Path(__file__).parent.parent.parent / ".env"


class AppSettings(BaseSettings):
    """
    Application settings loaded from environment variables.

    Environment Variables:
        API_TOKEN: Shared bearer token required by POST /api/v1/upload.
            Empty disables uploads.
        SERVER_HOST: Listen host (default: 127.0.0.1)
        SERVER_PORT: Listen port (default: 8080)
        SAR_DL_BIN_FOLDER: Root directory of stored binaries (default: bin)
        SAR_DL_DB_URL: SQLAlchemy URL of the artifact index
        SAR_DL_UPSTREAM_REPO: GitHub repository ingested by `sar-dl populate`
        GITHUB_TOKEN: Optional token for GitHub API rate limits
    """

    model_config = SettingsConfigDict(env_file=ENV_FILE, extra="ignore")

    api_token: str = Field(
        default="",
        validation_alias="API_TOKEN",
        description="Shared bearer token for CI uploads"
    )

    server_host: str = Field(default="127.0.0.1", validation_alias="SERVER_HOST")

    server_port: int = Field(default=8080, validation_alias="SERVER_PORT", ge=1, le=65535)

    bin_folder: Path = Field(
        default=Path("bin"),
        validation_alias="SAR_DL_BIN_FOLDER",
        description="Root directory of the blob store: <root>/<channel>/<sar_version>/<system>/<name>"
    )

    db_url: str = Field(
        default="sqlite:///./sar_dl.db",
        validation_alias="SAR_DL_DB_URL",
        description="SQLAlchemy URL of the key-value index"
    )

    upstream_repo: str = Field(
        default="p2sr/SourceAutoRecord",
        validation_alias="SAR_DL_UPSTREAM_REPO",
        description="owner/name of the GitHub repository whose releases are ingested"
    )

    github_token: str = Field(default="", validation_alias="GITHUB_TOKEN")

    @field_validator("upstream_repo")
    @classmethod
    def validate_upstream_repo(cls, v: str) -> str:
        """Validate the repository is given as owner/name."""
        parts = v.split("/")
        if len(parts) != 2 or not all(parts):
            raise ValueError("SAR_DL_UPSTREAM_REPO must look like 'owner/name'")
        return v

    @property
    def upload_configured(self) -> bool:
        """Check if an upload token is configured."""
        return bool(self.api_token)


@lru_cache()
def get_settings() -> AppSettings:
    """
    Get cached application settings instance.

    Returns:
        AppSettings: Configured application settings from environment
    """
    return AppSettings()
