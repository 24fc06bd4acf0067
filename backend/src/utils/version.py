"""
Version string validation for uploaded releases.

Uploads carry two version strings:
- version: SemVer 2.0.0 tag (or the literal "canary"), used in index keys
- sar_version: build descriptor from `git describe`, used as a directory name
"""

import re

# SemVer 2.0.0, as published on semver.org
SEMVER_PATTERN = re.compile(
    r'(0|[1-9]\d*)\.(0|[1-9]\d*)\.(0|[1-9]\d*)'
    r'(?:-((?:0|[1-9]\d*|\d*[a-zA-Z-][0-9a-zA-Z-]*)'
    r'(?:\.(?:0|[1-9]\d*|\d*[a-zA-Z-][0-9a-zA-Z-]*))*))?'
    r'(?:\+([0-9a-zA-Z-]+(?:\.[0-9a-zA-Z-]+)*))?'
)

# Path segment: no separators, no leading dot, no traversal
PATH_SEGMENT_PATTERN = re.compile(r'[a-zA-Z0-9][a-zA-Z0-9.\-+_]*')

CANARY_VERSION = "canary"


def is_valid_semver(version: str) -> bool:
    """Check whether a string is a valid semantic version (no 'v' prefix)."""
    return bool(SEMVER_PATTERN.fullmatch(version))


def is_valid_release_version(version: str) -> bool:
    """Check whether a string is accepted as an upload version.

    Args:
        version: Either the literal "canary" or a semantic version.
    """
    return version == CANARY_VERSION or is_valid_semver(version)


def is_safe_path_segment(value: str) -> bool:
    """Check whether a string can be used as a single directory or file name."""
    return bool(PATH_SEGMENT_PATTERN.fullmatch(value)) and ".." not in value
