"""
Release channel classification.

Every code path that assigns a channel (direct upload and upstream
ingestion) goes through classify() so both agree on the result.
"""

from backend.src.schemas.binaries import Channel


def classify(version: str) -> Channel:
    """
    Map a version string to its release channel.

    The canary marker takes precedence over the prerelease marker.

    Args:
        version: Version tag such as "1.2.3", "1.2.3-pre.1" or "1.2.3-canary"

    Returns:
        The channel the version belongs to
    """
    if "canary" in version:
        return Channel.CANARY
    if "-pre" in version:
        return Channel.PRERELEASE
    return Channel.RELEASE
