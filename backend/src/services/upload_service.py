"""
Upload coordinator for CI batch uploads.

Protocol (POST /api/v1/upload):
1. Request validated by schemas.upload (no side effects)
2. Channel derived from the version
3. Files ingested one by one, in index order:
   - part must be a file with a safe name
   - SHA-256 of the received bytes must equal hashes[i], otherwise the
     batch stops; files committed before it stay in place
   - bytes written to <root>/<channel>/<sar_version>/<system>/<name>
   - BinaryFile record written at ("bin", version, system, name)
4. Latest pointer of the channel advanced only if every file was stored

Re-running the same batch overwrites the same files and records, so CI
can retry a failed upload as is.
"""

from datetime import datetime, timezone
from pathlib import Path
from typing import List, Optional, Tuple

from backend.src.schemas.binaries import BinaryFile, Channel, ReleaseVersion, UploadResult
from backend.src.schemas.upload import UploadRequest, is_safe_filename
from backend.src.services.artifact_store import ArtifactStore
from backend.src.services.channel_classifier import classify
from backend.src.services.download_service import derive_storage_path, write_blob
from backend.src.services.exceptions import (
    ArtifactIntegrityError,
    UnsupportedMediaError,
    ValidationError,
)
from backend.src.utils.hashing import checksum, digest
from backend.src.utils.logging_config import get_logger


logger = get_logger("services")


def commit_binary(
    store: ArtifactStore,
    root: Path,
    data: bytes,
    *,
    version: str,
    system: str,
    name: str,
    commit: str,
    branch: str,
    channel: Channel,
    sar_version: str,
    date: Optional[datetime] = None,
) -> Tuple[BinaryFile, bool]:
    """
    Write one binary to disk, then record it in the index.

    The hash and checksum are computed over the same buffer that is
    written. The file is written before the index record.

    Args:
        store: Artifact index
        root: Artifact root directory
        data: File content
        date: Ingestion time (defaults to now)

    Returns:
        Tuple of (record, persisted). persisted is False when the index
        rejected the write; the file is on disk either way.

    Raises:
        ValidationError: If the storage path cannot be derived safely
        OSError: If the file cannot be written
    """
    path = derive_storage_path(root, channel.value, sar_version, system, name)
    write_blob(path, data)

    binary = BinaryFile(
        version=version,
        system=system,
        name=name,
        hash=digest(data),
        checksum=checksum(data),
        path=str(path),
        size=len(data),
        date=date or datetime.now(timezone.utc),
        commit=commit,
        branch=branch,
        channel=channel,
        sar_version=sar_version,
    )

    persisted = store.put_binary(binary)
    if persisted:
        logger.info(
            "Inserted binary file",
            extra={"version": version, "system": system, "file_name": name},
        )
    else:
        logger.error(
            "Failed to insert binary file",
            extra={"version": version, "system": system, "file_name": name},
        )
    return binary, persisted


class UploadService:
    """
    Coordinates a validated batch upload.

    Usage:
        >>> service = UploadService(ArtifactStore(db), settings.bin_folder)
        >>> result = service.upload(request)
        >>> result.inserted, result.ok
        (2, True)
    """

    def __init__(self, store: ArtifactStore, root: Path):
        self.store = store
        self.root = Path(root)

    def upload(self, request: UploadRequest) -> UploadResult:
        """
        Ingest every file of a batch and advance the channel's latest pointer.

        Args:
            request: Validated upload request

        Returns:
            UploadResult with the number of persisted records, whether the
            latest pointer was written, and the names of files that could
            not be stored (disk or index failure)

        Raises:
            UnsupportedMediaError: If files[i] is missing or not a file
            ValidationError: If a file name is not a safe path segment
            ArtifactIntegrityError: If a file does not match hashes[i]
        """
        channel = classify(request.version)
        started_at = datetime.now(timezone.utc)

        inserted = 0
        failed: List[str] = []

        for slot in request.files:
            part = slot.part
            if part is None:
                raise UnsupportedMediaError("Invalid file.")

            name = part.filename
            if not is_safe_filename(name):
                raise ValidationError("Invalid file name.", field=f"files[{slot.index}]")

            logger.info(
                "Received file",
                extra={
                    "file_name": name,
                    "version": request.version,
                    "system": request.system,
                    "channel": channel.value,
                    "size": len(part.content),
                },
            )

            data = part.content
            actual = digest(data)
            expected = (slot.expected_hash or "").strip().lower()
            if actual != expected:
                logger.warning(
                    "File hash mismatch",
                    extra={
                        "file_name": name,
                        "version": request.version,
                        "expected": expected,
                        "actual": actual,
                        "inserted": inserted,
                    },
                )
                raise ArtifactIntegrityError(name, expected, actual, inserted=inserted)

            try:
                _, persisted = commit_binary(
                    self.store,
                    self.root,
                    data,
                    version=request.version,
                    system=request.system,
                    name=name,
                    commit=request.commit,
                    branch=request.branch,
                    channel=channel,
                    sar_version=request.sar_version,
                )
            except OSError as e:
                logger.error(
                    "Failed to write binary file",
                    extra={"file_name": name, "version": request.version, "error": str(e)},
                )
                failed.append(name)
                continue

            if persisted:
                inserted += 1
            else:
                failed.append(name)

        if failed:
            logger.error(
                "Batch incomplete, latest pointer not advanced",
                extra={"channel": channel.value, "version": request.version, "failed": failed},
            )
            return UploadResult(inserted=inserted, ok=False, failed=failed)

        release = ReleaseVersion(
            channel=channel,
            version=request.version,
            sar_version=request.sar_version,
            commit=request.commit,
            branch=request.branch,
            date=started_at,
        )
        ok = self.store.advance_latest(release)
        if ok:
            logger.info(
                "Advanced latest pointer",
                extra={"channel": channel.value, "version": request.version},
            )
        else:
            logger.warning(
                "Latest pointer not advanced",
                extra={"channel": channel.value, "version": request.version},
            )

        return UploadResult(inserted=inserted, ok=ok)
