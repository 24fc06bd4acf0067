"""
Typed batch upload request and its validation pass.

The multipart body of POST /api/v1/upload is read into an UploadForm
(raw strings and file parts, nothing validated), then validate_upload_form
turns it into either an UploadRequest or an UploadRejection naming which
check failed. Validation never raises and has no side effects.

Form fields:
    version        SemVer tag or the literal "canary"
    sar_version    Build descriptor (git describe)
    system         "windows" or "linux"
    commit         Upstream commit SHA
    branch         Upstream branch
    count          Number of files, 1 to 4
    files[i]       File part i
    hashes[i]      SHA-256 hex digest of files[i]
"""

import enum
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Union

from backend.src.schemas.binaries import VALID_SYSTEMS
from backend.src.utils.version import is_safe_path_segment, is_valid_release_version


MIN_FILES_PER_BATCH = 1
MAX_FILES_PER_BATCH = 4


class UploadErrorKind(str, enum.Enum):
    """Named validation failures of an upload request."""
    MISSING_VERSION = "missing_version"
    INVALID_VERSION = "invalid_version"
    MISSING_SAR_VERSION = "missing_sar_version"
    INVALID_SAR_VERSION = "invalid_sar_version"
    INVALID_SYSTEM = "invalid_system"
    MISSING_COMMIT = "missing_commit"
    MISSING_BRANCH = "missing_branch"
    INVALID_COUNT = "invalid_count"


ERROR_MESSAGES: Dict[UploadErrorKind, str] = {
    UploadErrorKind.MISSING_VERSION: "Missing version.",
    UploadErrorKind.INVALID_VERSION: "Invalid semver version.",
    UploadErrorKind.MISSING_SAR_VERSION: "Missing SAR version.",
    UploadErrorKind.INVALID_SAR_VERSION: "Invalid SAR version.",
    UploadErrorKind.INVALID_SYSTEM: "Invalid system.",
    UploadErrorKind.MISSING_COMMIT: "Missing commit hash.",
    UploadErrorKind.MISSING_BRANCH: "Missing branch name.",
    UploadErrorKind.INVALID_COUNT: "Invalid count.",
}


@dataclass
class UploadPart:
    """One file part of the multipart body."""
    filename: str
    content: bytes


@dataclass
class UploadForm:
    """
    Raw upload form as received.

    Attributes:
        fields: Text fields by name (version, sar_version, ...)
        files: File parts by field name (files[0], files[1], ...)
    """
    fields: Dict[str, str] = field(default_factory=dict)
    files: Dict[str, UploadPart] = field(default_factory=dict)

    def text(self, name: str) -> Optional[str]:
        return self.fields.get(name)


@dataclass
class UploadFile:
    """
    File slot i of a validated request.

    part is None when files[i] is missing or not a file; the coordinator
    rejects the batch when it reaches that index.
    """
    index: int
    part: Optional[UploadPart]
    expected_hash: Optional[str]


@dataclass
class UploadRequest:
    """A validated batch upload."""
    version: str
    sar_version: str
    system: str
    commit: str
    branch: str
    files: List[UploadFile]

    @property
    def count(self) -> int:
        return len(self.files)


@dataclass
class UploadRejection:
    """A failed validation pass."""
    kind: UploadErrorKind

    @property
    def message(self) -> str:
        return ERROR_MESSAGES[self.kind]


UploadValidation = Union[UploadRequest, UploadRejection]


def _parse_count(raw: Optional[str]) -> Optional[int]:
    if raw is None:
        return None
    raw = raw.strip()
    if not raw.isascii() or not raw.isdecimal():
        return None
    count = int(raw)
    if not MIN_FILES_PER_BATCH <= count <= MAX_FILES_PER_BATCH:
        return None
    return count


def validate_upload_form(form: UploadForm) -> UploadValidation:
    """
    Validate an upload form.

    Checks run in a fixed order and the first failure is returned.

    Args:
        form: Raw form fields and file parts

    Returns:
        UploadRequest on success, UploadRejection otherwise
    """
    version = form.text("version")
    if not version:
        return UploadRejection(UploadErrorKind.MISSING_VERSION)
    if not is_valid_release_version(version):
        return UploadRejection(UploadErrorKind.INVALID_VERSION)

    sar_version = form.text("sar_version")
    if not sar_version:
        return UploadRejection(UploadErrorKind.MISSING_SAR_VERSION)
    if not is_safe_path_segment(sar_version):
        return UploadRejection(UploadErrorKind.INVALID_SAR_VERSION)

    system = form.text("system")
    if system not in VALID_SYSTEMS:
        return UploadRejection(UploadErrorKind.INVALID_SYSTEM)

    commit = form.text("commit")
    if not commit:
        return UploadRejection(UploadErrorKind.MISSING_COMMIT)

    branch = form.text("branch")
    if not branch:
        return UploadRejection(UploadErrorKind.MISSING_BRANCH)

    count = _parse_count(form.text("count"))
    if count is None:
        return UploadRejection(UploadErrorKind.INVALID_COUNT)

    files = [
        UploadFile(
            index=i,
            part=form.files.get(f"files[{i}]"),
            expected_hash=form.text(f"hashes[{i}]"),
        )
        for i in range(count)
    ]

    return UploadRequest(
        version=version,
        sar_version=sar_version,
        system=system,
        commit=commit,
        branch=branch,
        files=files,
    )


def is_safe_filename(name: str) -> bool:
    """Check whether an uploaded file name can be stored as-is."""
    return bool(name) and is_safe_path_segment(name)
