"""
Consistency sweep between the artifact index and the blob store.

The index is the source of truth and the filesystem mirrors it. Nothing
reconciles the two automatically; this sweep reports divergence:
- missing: indexed binaries whose file is gone
- corrupted: indexed binaries whose bytes no longer match hash or size
- orphaned: files under the root that no index record points to
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import List

from backend.src.services.artifact_store import ArtifactStore
from backend.src.utils.hashing import digest
from backend.src.utils.logging_config import get_logger


logger = get_logger("services")


@dataclass
class ConsistencyReport:
    """Result of a consistency sweep."""
    checked: int = 0
    missing: List[str] = field(default_factory=list)
    corrupted: List[str] = field(default_factory=list)
    orphaned: List[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not (self.missing or self.corrupted or self.orphaned)


class ConsistencyService:
    """
    Compares index records with the files under the artifact root.

    Args:
        store: Artifact index
        root: Artifact root directory
        verify_hashes: Re-hash every file (reads all content)
    """

    def __init__(self, store: ArtifactStore, root: Path, verify_hashes: bool = True):
        self.store = store
        self.root = Path(root)
        self.verify_hashes = verify_hashes

    def check(self) -> ConsistencyReport:
        """Run the sweep."""
        report = ConsistencyReport()
        indexed = set()

        for binary in self.store.scan_binaries():
            report.checked += 1
            key = f"{binary.version}/{binary.system}/{binary.name}"
            path = Path(binary.path).resolve()
            indexed.add(path)

            if not path.is_file():
                report.missing.append(key)
                continue

            if path.stat().st_size != binary.size:
                report.corrupted.append(key)
            elif self.verify_hashes and digest(path.read_bytes()) != binary.hash:
                report.corrupted.append(key)

        if self.root.is_dir():
            for path in sorted(self.root.resolve().rglob("*")):
                if path.is_file() and path not in indexed:
                    report.orphaned.append(str(path))

        if report.ok:
            logger.info("Consistency check passed", extra={"checked": report.checked})
        else:
            logger.warning(
                "Consistency check found problems",
                extra={
                    "checked": report.checked,
                    "missing": len(report.missing),
                    "corrupted": len(report.corrupted),
                    "orphaned": len(report.orphaned),
                },
            )
        return report
