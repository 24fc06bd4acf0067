"""
Upstream ingestion of GitHub releases.

Backfills the index from the upstream repository's published releases:
- version: release tag
- commit: SHA the tag points to (git/ref/tags/<tag>)
- sar_version: "<tag>-0-g<commit[:9]>", the git describe form of a tag
- branch: release target_commitish
- channel: classify(tag), the same classifier uploads use

Every asset is downloaded and stored through the same writer as uploads;
system is "linux" for ".so" assets and "windows" otherwise. The first
release seen per channel (GitHub lists newest first) advances that
channel's latest pointer once all of its assets are stored.
"""

from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Optional, Set

import httpx

from backend.src.schemas.binaries import Channel, ReleaseVersion
from backend.src.services.artifact_store import ArtifactStore
from backend.src.services.channel_classifier import classify
from backend.src.services.exceptions import ServiceError, ValidationError
from backend.src.services.upload_service import commit_binary
from backend.src.utils.logging_config import get_logger


logger = get_logger("ingest")

GITHUB_API_URL = "https://api.github.com"
USER_AGENT = "sar-dl"
REQUEST_TIMEOUT_SECONDS = 60.0


class UpstreamError(ServiceError):
    """Raised when the upstream release API cannot be read."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        self.message = message
        self.status_code = status_code
        super().__init__(message)


@dataclass
class PopulateSummary:
    """Outcome of an ingestion run."""
    releases: int = 0
    inserted: int = 0
    failed: List[str] = field(default_factory=list)
    channels: List[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.failed


def system_for_asset(name: str) -> str:
    """Target system of a release asset, from its file extension."""
    return "linux" if name.endswith(".so") else "windows"


def describe_tag(version: str, commit: str) -> str:
    """git describe output for a commit that is exactly a tag."""
    return f"{version}-0-g{commit[:9]}"


class GitHubReleaseClient:
    """
    Minimal client for the GitHub releases API.

    Args:
        repo: Repository as "owner/name"
        token: Optional token, raises the API rate limit
        client: Optional preconfigured httpx.Client (used by tests)
    """

    def __init__(
        self,
        repo: str,
        token: str = "",
        client: Optional[httpx.Client] = None,
    ):
        self.repo = repo
        headers = {"User-Agent": USER_AGENT, "Accept": "application/vnd.github+json"}
        if token:
            headers["Authorization"] = f"Bearer {token}"
        self._client = client or httpx.Client(
            base_url=GITHUB_API_URL,
            timeout=REQUEST_TIMEOUT_SECONDS,
            follow_redirects=True,
        )
        self._client.headers.update(headers)

    def close(self) -> None:
        self._client.close()

    def __enter__(self) -> "GitHubReleaseClient":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def _get(self, url: str) -> httpx.Response:
        try:
            response = self._client.get(url)
        except httpx.HTTPError as e:
            raise UpstreamError(f"Failed to fetch {url}: {e}")
        if response.status_code != 200:
            raise UpstreamError(
                f"Failed to fetch {url} : status {response.status_code}",
                status_code=response.status_code,
            )
        return response

    def list_releases(self) -> List[Dict[str, Any]]:
        """Published releases, newest first."""
        return self._get(f"/repos/{self.repo}/releases").json()

    def get_tag_commit(self, tag: str) -> str:
        """Commit SHA a tag points to."""
        ref = self._get(f"/repos/{self.repo}/git/ref/tags/{tag}").json()
        return ref["object"]["sha"]

    def download_asset(self, url: str) -> bytes:
        """Content of a release asset."""
        return self._get(url).content


class PopulateService:
    """
    Ingests upstream releases into the artifact store.

    Usage:
        >>> with GitHubReleaseClient("p2sr/SourceAutoRecord") as client:
        ...     summary = PopulateService(ArtifactStore(db), Path("bin"), client).populate()
    """

    def __init__(self, store: ArtifactStore, root: Path, client: GitHubReleaseClient):
        self.store = store
        self.root = Path(root)
        self.client = client

    def populate(self) -> PopulateSummary:
        """
        Ingest every release and its assets.

        Returns:
            PopulateSummary with counts and the names of failed assets

        Raises:
            UpstreamError: If the release list cannot be fetched
        """
        summary = PopulateSummary()
        pointed: Set[Channel] = set()

        for release in self.client.list_releases():
            summary.releases += 1
            version = release["tag_name"]
            channel = classify(version)

            try:
                commit = self.client.get_tag_commit(version)
            except UpstreamError as e:
                logger.error(
                    "Skipping release, tag not resolvable",
                    extra={"version": version, "error": e.message},
                )
                summary.failed.append(version)
                continue

            sar_version = describe_tag(version, commit)
            branch = release.get("target_commitish", "")

            complete = self._ingest_assets(release, summary, version, commit, branch, channel, sar_version)

            if channel in pointed:
                continue
            pointed.add(channel)

            if not complete:
                logger.warning(
                    "Latest pointer not advanced, release incomplete",
                    extra={"channel": channel.value, "version": version},
                )
                continue

            latest = ReleaseVersion(
                channel=channel,
                version=version,
                sar_version=sar_version,
                commit=commit,
                branch=branch,
                date=datetime.fromisoformat(release["created_at"].replace("Z", "+00:00")),
            )
            if self.store.advance_latest(latest):
                summary.channels.append(channel.value)
                logger.info(
                    "Inserted release version",
                    extra={"channel": channel.value, "version": version},
                )
            else:
                logger.error(
                    "Failed to insert release version",
                    extra={"channel": channel.value, "version": version},
                )

        logger.info(
            "Upstream ingestion finished",
            extra={
                "releases": summary.releases,
                "inserted": summary.inserted,
                "failed": summary.failed,
            },
        )
        return summary

    def _ingest_assets(
        self,
        release: Dict[str, Any],
        summary: PopulateSummary,
        version: str,
        commit: str,
        branch: str,
        channel: Channel,
        sar_version: str,
    ) -> bool:
        complete = True
        for asset in release.get("assets", []):
            name = asset["name"]
            try:
                data = self.client.download_asset(asset["browser_download_url"])
                _, persisted = commit_binary(
                    self.store,
                    self.root,
                    data,
                    version=version,
                    system=system_for_asset(name),
                    name=name,
                    commit=commit,
                    branch=branch,
                    channel=channel,
                    sar_version=sar_version,
                    date=datetime.fromisoformat(asset["created_at"].replace("Z", "+00:00")),
                )
            except (UpstreamError, ValidationError, OSError) as e:
                logger.error(
                    "Failed to ingest asset",
                    extra={"version": version, "file_name": name, "error": str(e)},
                )
                persisted = False

            if persisted:
                summary.inserted += 1
            else:
                summary.failed.append(f"{version}/{name}")
                complete = False
        return complete
