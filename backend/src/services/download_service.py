"""
Blob storage helpers for stored binaries.

The filesystem is the blob store and the key-value index points into it.
Paths are always derived from (channel, sar_version, system, name) and
never taken from the client directly:

    <root>/<channel>/<sar_version>/<system>/<name>

Provides:
- derive_storage_path: path derivation with traversal prevention
- write_blob: temp file + atomic rename, so readers never see torn files
- resolve_binary_path: containment and existence check before streaming
"""

import os
import tempfile
from pathlib import Path
from typing import Optional, Tuple

from backend.src.services.exceptions import ValidationError
from backend.src.utils.version import is_safe_path_segment


def _is_within(path: Path, root: Path) -> bool:
    try:
        path.relative_to(root)
    except ValueError:
        return False
    return True


def derive_storage_path(
    root: Path,
    channel: str,
    sar_version: str,
    system: str,
    name: str,
) -> Path:
    """
    Derive the on-disk location of a binary.

    Args:
        root: Artifact root directory
        channel: Release channel (e.g., "canary")
        sar_version: Build descriptor (e.g., "1.2.3-4-g0b4c5d073")
        system: Target system ("windows" or "linux")
        name: File name (e.g., "sar.dll")

    Returns:
        Absolute path inside root

    Raises:
        ValidationError: If a component is not a safe single path segment
    """
    for field, value in (
        ("channel", channel),
        ("sar_version", sar_version),
        ("system", system),
        ("name", name),
    ):
        if not value or not is_safe_path_segment(value):
            raise ValidationError(f"Invalid {field} for storage path: {value!r}", field=field)

    root_path = Path(root).resolve()
    file_path = (root_path / channel / sar_version / system / name).resolve()

    if not _is_within(file_path, root_path):
        raise ValidationError("Invalid file path", field="name")

    return file_path


def write_blob(path: Path, data: bytes) -> None:
    """
    Write bytes to path, replacing any existing file atomically.

    The bytes go to a temporary file in the same directory which is then
    renamed over the destination. Missing directories are created.

    Raises:
        OSError: If the directory cannot be created or the write fails
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp_name = tempfile.mkstemp(prefix=f".{path.name}.", suffix=".part", dir=path.parent)
    try:
        with os.fdopen(fd, "wb") as tmp:
            tmp.write(data)
            tmp.flush()
            os.fsync(tmp.fileno())
        os.replace(tmp_name, path)
    except BaseException:
        Path(tmp_name).unlink(missing_ok=True)
        raise


def resolve_binary_path(
    root: Path,
    stored_path: str,
) -> Tuple[Optional[Path], Optional[str]]:
    """
    Resolve and validate an indexed path before streaming it.

    Args:
        root: Artifact root directory
        stored_path: Path recorded in the index

    Returns:
        Tuple of (resolved_path, error_message). resolved_path is None on error.
    """
    root_path = Path(root).resolve()
    file_path = Path(stored_path).resolve()

    if not _is_within(file_path, root_path):
        return None, "Invalid file path"

    if not file_path.is_file():
        return None, "File not found."

    return file_path, None
