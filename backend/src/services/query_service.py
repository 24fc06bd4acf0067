"""
Read-side projections of the artifact index.

Provides:
- get_latest: latest pointer of a channel (default: release)
- list_artifacts: binaries filtered by version and/or system, newest first,
  without their on-disk path
- resolve_download: exact (version, system, name) lookup for streaming
"""

from typing import List, Optional

from backend.src.schemas.binaries import (
    CHANNEL_NAMES,
    BinaryFile,
    BinaryFilePublic,
    Channel,
    ReleaseVersion,
)
from backend.src.services.artifact_store import ArtifactStore
from backend.src.services.exceptions import NotFoundError


class QueryService:
    """
    Read-only access to binaries and latest pointers.

    Usage:
        >>> service = QueryService(ArtifactStore(db))
        >>> service.list_artifacts(version="canary", system="windows")
        [BinaryFilePublic(name='sar.pdb', ...), BinaryFilePublic(name='sar.dll', ...)]
    """

    def __init__(self, store: ArtifactStore):
        self.store = store

    def get_latest(self, channel: Channel = Channel.RELEASE) -> Optional[ReleaseVersion]:
        """Latest completed batch of a channel, or None."""
        return self.store.get_latest(channel)

    def list_latest(self) -> List[ReleaseVersion]:
        """Latest pointers of every channel, newest first."""
        return sorted(self.store.list_latest(), key=lambda r: r.date, reverse=True)

    def list_artifacts(
        self,
        version: Optional[str] = None,
        system: Optional[str] = None,
    ) -> List[BinaryFilePublic]:
        """
        List binaries, newest first.

        A version filter naming a channel ("release", "prerelease",
        "canary") selects every binary of that channel. Ties on date keep
        key order (sorted() is stable).

        Args:
            version: Version tag or channel name
            system: Target system

        Returns:
            Matching binaries without their on-disk path
        """
        if version in CHANNEL_NAMES:
            channel = Channel(version)
            binaries = [
                b for b in self.store.scan_binaries(system=system)
                if b.channel == channel
            ]
        else:
            try:
                binaries = self.store.scan_binaries(version=version, system=system)
            except ValueError:
                return []

        binaries.sort(key=lambda b: b.date, reverse=True)
        return [b.to_public() for b in binaries]

    def resolve_download(self, version: str, system: str, name: str) -> BinaryFile:
        """
        Exact lookup of a binary.

        Raises:
            NotFoundError: If no binary is indexed under (version, system, name)
        """
        try:
            binary = self.store.get_binary(version, system, name)
        except ValueError:
            # Not encodable as a key, so never stored
            binary = None
        if binary is None:
            raise NotFoundError("File", f"{version}/{system}/{name}")
        return binary
