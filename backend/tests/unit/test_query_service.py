"""
Unit tests for the read-side query service.

Tests:
- Latest pointer lookup
- Filtered listings (version, system, channel name), newest first
- Public projection without the on-disk path
- Exact download lookup
"""

from datetime import datetime, timedelta, timezone

import pytest

from backend.src.schemas.binaries import BinaryFilePublic, Channel
from backend.src.services.exceptions import NotFoundError
from backend.src.services.query_service import QueryService


BASE_DATE = datetime(2026, 1, 1, tzinfo=timezone.utc)


@pytest.fixture
def query_service(artifact_store):
    return QueryService(artifact_store)


@pytest.fixture
def populated_store(artifact_store, sample_binary):
    """Three versions across channels, dated in increasing order."""
    binaries = [
        sample_binary(version="1.0.0", system="windows", name="sar.dll", date=BASE_DATE),
        sample_binary(version="1.0.0", system="linux", name="sar.so", date=BASE_DATE),
        sample_binary(version="1.1.0-pre", system="windows", name="sar.dll",
                      channel=Channel.PRERELEASE, date=BASE_DATE + timedelta(days=1)),
        sample_binary(version="0.0.0-canary", system="windows", name="sar.dll",
                      channel=Channel.CANARY, date=BASE_DATE + timedelta(days=2)),
        sample_binary(version="0.0.0-canary", system="windows", name="sar.pdb",
                      channel=Channel.CANARY, date=BASE_DATE + timedelta(days=2)),
    ]
    for binary in binaries:
        artifact_store.put_binary(binary)
    return artifact_store


class TestGetLatest:
    """Tests for get_latest()."""

    def test_default_channel_is_release(self, query_service, artifact_store, sample_release):
        artifact_store.advance_latest(sample_release(version="1.0.0"))

        assert query_service.get_latest().version == "1.0.0"

    def test_absent(self, query_service):
        assert query_service.get_latest(Channel.CANARY) is None

    def test_list_latest_newest_first(self, query_service, artifact_store, sample_release):
        artifact_store.advance_latest(sample_release(channel=Channel.RELEASE, date=BASE_DATE))
        artifact_store.advance_latest(sample_release(
            channel=Channel.CANARY, version="1.1.0-canary", date=BASE_DATE + timedelta(days=1)
        ))

        assert [r.channel for r in query_service.list_latest()] == [Channel.CANARY, Channel.RELEASE]


class TestListArtifacts:
    """Tests for list_artifacts()."""

    def test_all_newest_first(self, query_service, populated_store):
        results = query_service.list_artifacts()

        assert [r.version for r in results] == [
            "0.0.0-canary", "0.0.0-canary", "1.1.0-pre", "1.0.0", "1.0.0",
        ]

    def test_ties_keep_key_order(self, query_service, populated_store):
        results = query_service.list_artifacts(version="0.0.0-canary")

        assert [r.name for r in results] == ["sar.dll", "sar.pdb"]

    def test_path_never_exposed(self, query_service, populated_store):
        for result in query_service.list_artifacts():
            assert type(result) is BinaryFilePublic
            assert "path" not in result.model_dump()

    def test_filter_by_version_and_system(self, query_service, populated_store):
        results = query_service.list_artifacts(version="1.0.0", system="linux")

        assert [(r.version, r.system, r.name) for r in results] == [("1.0.0", "linux", "sar.so")]

    def test_filter_by_system_only(self, query_service, populated_store):
        results = query_service.list_artifacts(system="linux")

        assert [r.name for r in results] == ["sar.so"]

    def test_channel_name_selects_channel(self, query_service, populated_store):
        """/list/canary/windows returns the canary uploads."""
        results = query_service.list_artifacts(version="canary", system="windows")

        assert {r.version for r in results} == {"0.0.0-canary"}
        assert len(results) == 2

    def test_prerelease_channel(self, query_service, populated_store):
        results = query_service.list_artifacts(version="prerelease")

        assert [r.version for r in results] == ["1.1.0-pre"]

    def test_unknown_version_is_empty(self, query_service, populated_store):
        assert query_service.list_artifacts(version="9.9.9") == []

    def test_unencodable_filter_is_empty(self, query_service, populated_store):
        assert query_service.list_artifacts(version="bad\x01version") == []


class TestResolveDownload:
    """Tests for resolve_download()."""

    def test_found(self, query_service, populated_store):
        binary = query_service.resolve_download("1.0.0", "linux", "sar.so")

        assert binary.name == "sar.so"
        assert binary.path

    def test_not_found(self, query_service, populated_store):
        with pytest.raises(NotFoundError) as exc_info:
            query_service.resolve_download("1.0.0", "linux", "missing.so")

        assert exc_info.value.identifier == "1.0.0/linux/missing.so"

    def test_unencodable_is_not_found(self, query_service):
        with pytest.raises(NotFoundError):
            query_service.resolve_download("1.0.0", "linux", "bad\x00name")
