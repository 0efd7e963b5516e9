"""Database configuration and session management"""
from contextlib import contextmanager
from sqlalchemy import create_engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import declarative_base, sessionmaker, Session
from sqlalchemy.orm.exc import StaleDataError
from sqlalchemy.pool import StaticPool
from typing import Generator, Iterator
import logging

from streamflow.config import settings
from streamflow.errors import StoreUnavailable, WriteConflict

logger = logging.getLogger(__name__)


def _engine_options(database_url: str) -> dict:
    """Connection options for the configured backend"""
    if not database_url.startswith("sqlite"):
        return {}
    options = {"connect_args": {"check_same_thread": False}}
    # In-memory SQLite lives on a single connection shared by every session
    if database_url in ("sqlite://", "sqlite:///:memory:"):
        options["poolclass"] = StaticPool
    return options


# Create SQLAlchemy engine
engine = create_engine(
    settings.database_url,
    echo=False,
    **_engine_options(settings.database_url)
)

# Create SessionLocal class
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

# Create Base class for models
Base = declarative_base()


def get_db() -> Generator:
    """
    Dependency function to get database session.

    Yields:
        Database session
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


@contextmanager
def session_scope(session_factory=None) -> Iterator[Session]:
    """
    Short-lived session for components that outlive a request.

    Args:
        session_factory: Session factory (defaults to SessionLocal)
    """
    db = (session_factory or SessionLocal)()
    try:
        yield db
    finally:
        db.close()


@contextmanager
def transaction(db: Session) -> Iterator[Session]:
    """
    Run a unit of work: commit on success, roll back on any failure.

    SQLAlchemy failures surface as StoreUnavailable, and a versioned row
    changed by another session surfaces as WriteConflict; other exceptions
    (NotFound, ValueError, ...) propagate unchanged after the rollback.
    """
    try:
        yield db
        db.commit()
    except StaleDataError as e:
        db.rollback()
        logger.warning(f"Concurrent write detected: {e}")
        raise WriteConflict(str(e)) from e
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Store transaction failed: {e}")
        raise StoreUnavailable(str(e)) from e
    except Exception:
        db.rollback()
        raise


@contextmanager
def reading(db: Session) -> Iterator[Session]:
    """
    Run read-only queries, mapping SQLAlchemy failures to StoreUnavailable.
    """
    try:
        yield db
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Store read failed: {e}")
        raise StoreUnavailable(str(e)) from e


def init_db():
    """Initialize database tables."""
    # Register every model on Base.metadata before creating tables
    import streamflow.models  # noqa: F401

    try:
        Base.metadata.create_all(bind=engine)
    except SQLAlchemyError as e:
        raise StoreUnavailable(f"Could not initialize database: {e}") from e
