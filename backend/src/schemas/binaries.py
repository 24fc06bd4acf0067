"""
Pydantic schemas for binary artifacts and release pointers.

These models are both the JSON documents stored in the artifact index
and the payloads returned by the public API.
"""

import enum
from datetime import datetime
from typing import Literal

from pydantic import BaseModel, Field


# Valid target systems
System = Literal["windows", "linux"]
VALID_SYSTEMS = ("windows", "linux")


class Channel(str, enum.Enum):
    """Release track with its own latest pointer."""
    RELEASE = "release"
    PRERELEASE = "prerelease"
    CANARY = "canary"


CHANNEL_NAMES = frozenset(c.value for c in Channel)


class BinaryFilePublic(BaseModel):
    """
    A stored binary as exposed by the API.

    The on-disk path is an internal detail and is never part of this model.
    """
    version: str = Field(..., description="Channel-facing release tag (e.g. '1.2.3', '1.2.3-canary')")
    system: System = Field(..., description="Target system")
    name: str = Field(..., description="File name, unique within (version, system)")
    hash: str = Field(..., description="SHA-256 hex digest of the stored bytes")
    checksum: str = Field(..., description="CRC-32 of the stored bytes (8 hex digits)")
    size: int = Field(..., ge=0, description="Size in bytes")
    date: datetime = Field(..., description="Ingestion time")
    commit: str = Field(..., description="Upstream commit SHA")
    branch: str = Field(..., description="Upstream branch")
    channel: Channel = Field(..., description="Release channel")
    sar_version: str = Field(..., description="Fully-qualified build identifier (tag + commit descriptor)")

    model_config = {
        "json_schema_extra": {
            "example": {
                "version": "1.2.3-canary",
                "system": "windows",
                "name": "sar.dll",
                "hash": "a" * 64,
                "checksum": "1c291ca3",
                "size": 1572864,
                "date": "2026-01-01T12:00:00+00:00",
                "commit": "0b4c5d07376ed288fe1d2f18d36065c393474480",
                "branch": "master",
                "channel": "canary",
                "sar_version": "1.2.3-4-g0b4c5d073-canary",
            }
        }
    }


class BinaryFile(BinaryFilePublic):
    """A stored binary as recorded in the index, including its on-disk path."""
    path: str = Field(..., description="On-disk location, derived from channel/sar_version/system/name")

    def to_public(self) -> BinaryFilePublic:
        """Drop the on-disk path."""
        return BinaryFilePublic(**self.model_dump(exclude={"path"}))


class ReleaseVersion(BaseModel):
    """Latest completed batch of a channel."""
    channel: Channel
    version: str
    sar_version: str
    commit: str
    branch: str
    date: datetime


class UploadResult(BaseModel):
    """
    Result of a batch upload.

    Attributes:
        inserted: Number of files whose index record was persisted
        ok: Whether the channel's latest pointer was written
        failed: Names of files that could not be stored
    """
    inserted: int = 0
    ok: bool = False
    failed: list[str] = Field(default_factory=list)
