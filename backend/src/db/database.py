"""
Database connection and session management.

This module provides the SQLAlchemy engine for the artifact index. SQLite
is the default embedded engine; PostgreSQL is supported for deployments
that already run one.
"""

from typing import Generator

from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, Session

from backend.src.config.settings import get_settings


# SAR_DL_DB_URL, from the environment or backend/.env
DATABASE_URL = get_settings().db_url


if DATABASE_URL.startswith("sqlite"):
    # SQLite doesn't support pool_size, max_overflow, or pool_recycle.
    # An in-memory database only exists on one connection.
    from sqlalchemy.pool import StaticPool
    pool_args = {"poolclass": StaticPool} if ":memory:" in DATABASE_URL else {}
    engine = create_engine(
        DATABASE_URL,
        connect_args={'check_same_thread': False},
        **pool_args,
        echo=False,
        future=True
    )
else:
    engine = create_engine(
        DATABASE_URL,
        pool_size=10,
        max_overflow=5,
        pool_pre_ping=True,    # Verify connections before checkout
        pool_recycle=3600,     # Recycle connections after 1 hour
        echo=False,
        future=True
    )


SessionLocal = sessionmaker(
    autocommit=False,
    autoflush=False,
    bind=engine,
    future=True
)


def get_db() -> Generator[Session, None, None]:
    """
    Dependency for FastAPI routes to get database session.

    Yields:
        Session: SQLAlchemy database session

    Usage:
        @router.get("/list")
        async def list_binaries(db: Session = Depends(get_db)):
            return QueryService(ArtifactStore(db)).list_artifacts()
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def init_db():
    """
    Initialize database tables.

    Used on first start with SQLite and in tests. For PostgreSQL,
    use Alembic migrations instead.
    """
    from backend.src.models import Base
    Base.metadata.create_all(bind=engine)


def dispose_engine():
    """
    Dispose of the engine and close all connections.

    Useful for cleanup in CLI tools and tests.
    """
    engine.dispose()
