"""
Artifact index schema on top of the ordered key-value store.

Key space:
- ("bin", version, system, name) -> BinaryFile
- ("latest", channel) -> ReleaseVersion

Records are written only by the upload coordinator and upstream ingestion.
There is no delete path.
"""

from typing import List, Optional

from sqlalchemy.orm import Session

from backend.src.schemas.binaries import BinaryFile, Channel, ReleaseVersion
from backend.src.services.kv_store import KVStore, Value


BIN_PREFIX = "bin"
LATEST_PREFIX = "latest"


def binary_key(version: str, system: str, name: str) -> tuple:
    """Index key of a binary file."""
    return (BIN_PREFIX, version, system, name)


def latest_key(channel: Channel) -> tuple:
    """Index key of a channel's latest pointer."""
    return (LATEST_PREFIX, Channel(channel).value)


def _not_newer_than(release: ReleaseVersion):
    def predicate(current: Optional[Value]) -> bool:
        if current is None:
            return True
        return ReleaseVersion.model_validate(current).date <= release.date
    return predicate


class ArtifactStore:
    """
    Typed access to the artifact index.

    Usage:
        >>> store = ArtifactStore(db)
        >>> store.put_binary(binary_file)
        True
        >>> store.get_latest(Channel.CANARY)
        ReleaseVersion(channel=<Channel.CANARY: 'canary'>, ...)
    """

    def __init__(self, db: Session):
        self.kv = KVStore(db)

    def get_binary(self, version: str, system: str, name: str) -> Optional[BinaryFile]:
        """Point lookup of a binary record."""
        value = self.kv.get(binary_key(version, system, name))
        if value is None:
            return None
        return BinaryFile.model_validate(value)

    def put_binary(self, binary: BinaryFile) -> bool:
        """Create or overwrite a binary record. Returns False on storage failure."""
        return self.kv.set(
            binary_key(binary.version, binary.system, binary.name),
            binary.model_dump(mode="json"),
        )

    def scan_binaries(
        self,
        version: Optional[str] = None,
        system: Optional[str] = None,
    ) -> List[BinaryFile]:
        """
        Scan binary records narrowed by the given filters, in key order.

        A system filter without a version filter cannot narrow the key
        prefix and is applied to the scanned records instead.
        """
        prefix = [BIN_PREFIX]
        if version:
            prefix.append(version)
            if system:
                prefix.append(system)

        binaries = [BinaryFile.model_validate(value) for _, value in self.kv.scan(prefix)]
        if system and not version:
            binaries = [b for b in binaries if b.system == system]
        return binaries

    def get_latest(self, channel: Channel) -> Optional[ReleaseVersion]:
        """Point lookup of a channel's latest pointer."""
        value = self.kv.get(latest_key(channel))
        if value is None:
            return None
        return ReleaseVersion.model_validate(value)

    def advance_latest(self, release: ReleaseVersion) -> bool:
        """
        Point the channel's latest pointer at release.

        The write is skipped when the current pointer is newer than
        release, so a batch that started earlier cannot overwrite the
        pointer of a batch that started later.

        Returns:
            True if the pointer now refers to release
        """
        return self.kv.compare_and_set(
            latest_key(release.channel),
            release.model_dump(mode="json"),
            _not_newer_than(release),
        )

    def list_latest(self) -> List[ReleaseVersion]:
        """All latest pointers, in key order."""
        return [ReleaseVersion.model_validate(value) for _, value in self.kv.scan((LATEST_PREFIX,))]
