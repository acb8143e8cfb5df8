import os
from contextlib import contextmanager

import structlog
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker, declarative_base

from mockupdesk.config import settings

logger = structlog.get_logger(__name__)

# Default to a local SQLite database if no DATABASE_URL is provided or usable
BASE_DIR = os.path.dirname(os.path.abspath(__file__))
PROJECT_ROOT = os.path.abspath(os.path.join(BASE_DIR, ".."))
DEFAULT_DB_PATH = os.path.join(PROJECT_ROOT, "mockupdesk.db")


def _build_engine():
    """Create the SQLAlchemy engine, preferring the configured DATABASE_URL."""
    database_url = settings.DATABASE_URL

    if database_url:
        try:
            engine = create_engine(database_url, pool_pre_ping=True)
            with engine.connect():
                pass
            return engine
        except ModuleNotFoundError as exc:
            # The SQL driver for the configured URL is not installed.
            logger.warning("database_driver_missing", error=str(exc))
        except Exception as exc:
            logger.warning("database_unreachable", error=str(exc))

    sqlite_url = f"sqlite:///{DEFAULT_DB_PATH}"
    logger.info("database_sqlite_fallback", path=DEFAULT_DB_PATH)
    return create_engine(sqlite_url, connect_args={"check_same_thread": False})


engine = _build_engine()

# Session factory
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

# Base class for the ORM models
Base = declarative_base()


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


@contextmanager
def transaction(db: Session):
    """Commit the work done inside the block, or roll all of it back."""
    try:
        yield db
        db.commit()
    except Exception:
        db.rollback()
        raise
