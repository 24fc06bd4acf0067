"""
Pytest configuration and fixtures for backend tests.

Provides shared fixtures for:
- Test database sessions
- Temporary artifact root and settings
- Sample data factories
- FastAPI test client with dependency overrides
"""

import os
import pytest
from datetime import datetime, timezone
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

# Set test environment variables before importing app modules
os.environ['SAR_DL_DB_URL'] = 'sqlite:///:memory:'
os.environ['API_TOKEN'] = 'test-token'

from backend.src.config.settings import AppSettings, get_settings
from backend.src.models import Base
from backend.src.schemas.binaries import BinaryFile, Channel, ReleaseVersion
from backend.src.schemas.upload import UploadForm, UploadPart
from backend.src.services.artifact_store import ArtifactStore
from backend.src.utils.hashing import checksum, digest


TEST_API_TOKEN = 'test-token'


# ============================================================================
# Database Fixtures
# ============================================================================

@pytest.fixture(scope='function')
def test_db_engine():
    """Create an in-memory SQLite database engine for testing."""
    engine = create_engine(
        'sqlite:///:memory:',
        connect_args={'check_same_thread': False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    yield engine
    Base.metadata.drop_all(engine)
    engine.dispose()


@pytest.fixture(scope='function')
def test_session_factory(test_db_engine):
    """Session factory bound to the test engine."""
    return sessionmaker(autocommit=False, autoflush=False, bind=test_db_engine)


@pytest.fixture(scope='function')
def test_db_session(test_session_factory):
    """Create a test database session."""
    session = test_session_factory()
    try:
        yield session
    finally:
        session.rollback()
        session.close()


@pytest.fixture
def artifact_store(test_db_session):
    """ArtifactStore bound to the test session."""
    return ArtifactStore(test_db_session)


# ============================================================================
# Settings Fixtures
# ============================================================================

@pytest.fixture
def bin_root(tmp_path):
    """Temporary artifact root directory."""
    root = tmp_path / 'bin'
    root.mkdir()
    return root


@pytest.fixture
def test_settings(bin_root, monkeypatch):
    """
    Settings pointing at the temporary artifact root.

    The environment is patched too, so code that calls get_settings()
    directly (lifespan, CLI) sees the same values.
    """
    monkeypatch.setenv('SAR_DL_BIN_FOLDER', str(bin_root))
    monkeypatch.setenv('API_TOKEN', TEST_API_TOKEN)
    get_settings.cache_clear()
    yield AppSettings(API_TOKEN=TEST_API_TOKEN, SAR_DL_BIN_FOLDER=str(bin_root))
    get_settings.cache_clear()


# ============================================================================
# Sample Data Factories
# ============================================================================

@pytest.fixture
def sample_binary(bin_root):
    """Factory for BinaryFile records whose content exists under bin_root."""
    def _create(
        version='1.0.0',
        system='windows',
        name='sar.dll',
        content=b'binary content',
        channel=Channel.RELEASE,
        sar_version=None,
        date=None,
        write_file=True,
    ):
        sar_version = sar_version or f'{version}-0-g0b4c5d073'
        path = bin_root / channel.value / sar_version / system / name
        if write_file:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_bytes(content)
        return BinaryFile(
            version=version,
            system=system,
            name=name,
            hash=digest(content),
            checksum=checksum(content),
            path=str(path.resolve()),
            size=len(content),
            date=date or datetime(2026, 1, 1, 12, 0, tzinfo=timezone.utc),
            commit='0b4c5d07376ed288fe1d2f18d36065c393474480',
            branch='master',
            channel=channel,
            sar_version=sar_version,
        )
    return _create


@pytest.fixture
def sample_release():
    """Factory for ReleaseVersion pointers."""
    def _create(
        channel=Channel.RELEASE,
        version='1.0.0',
        date=None,
    ):
        return ReleaseVersion(
            channel=channel,
            version=version,
            sar_version=f'{version}-0-g0b4c5d073',
            commit='0b4c5d07376ed288fe1d2f18d36065c393474480',
            branch='master',
            date=date or datetime(2026, 1, 1, 12, 0, tzinfo=timezone.utc),
        )
    return _create


@pytest.fixture
def upload_form():
    """Factory for a valid UploadForm; files are (name, content) tuples."""
    def _create(
        files=(('sar.dll', b'dll content'), ('sar.pdb', b'pdb content')),
        version='1.2.3-canary',
        sar_version='1.2.3-4-g0b4c5d073-canary',
        system='windows',
        commit='0b4c5d07376ed288fe1d2f18d36065c393474480',
        branch='master',
        count=None,
        hashes=None,
    ):
        form = UploadForm(fields={
            'version': version,
            'sar_version': sar_version,
            'system': system,
            'commit': commit,
            'branch': branch,
            'count': str(len(files)) if count is None else count,
        })
        for i, (name, content) in enumerate(files):
            form.files[f'files[{i}]'] = UploadPart(filename=name, content=content)
            form.fields[f'hashes[{i}]'] = digest(content) if hashes is None else hashes[i]
        return form
    return _create


# ============================================================================
# FastAPI Test Client Fixture
# ============================================================================

@pytest.fixture
def test_client(test_db_session, test_settings):
    """Create a test client for FastAPI application."""
    from fastapi.testclient import TestClient
    from backend.src.main import app
    from backend.src.db.database import get_db

    def get_test_db():
        try:
            yield test_db_session
        finally:
            pass

    def get_test_settings():
        return test_settings

    app.dependency_overrides[get_db] = get_test_db
    app.dependency_overrides[get_settings] = get_test_settings

    with TestClient(app) as client:
        yield client

    app.dependency_overrides.clear()


@pytest.fixture
def auth_headers():
    """Authorization header carrying the test upload token."""
    return {'Authorization': f'Bearer {TEST_API_TOKEN}'}
