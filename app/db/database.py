from contextlib import contextmanager

from sqlalchemy import create_engine, text
from sqlalchemy.orm import DeclarativeBase, sessionmaker
from sqlalchemy.pool import QueuePool

from app.core.config import settings
from app.utils.logging import get_logger

logger = get_logger("eligibility.db")


class Base(DeclarativeBase):
    """Base class for all ORM models."""


engine = create_engine(
    settings.database_url,
    poolclass=QueuePool,
    pool_size=settings.pool_size,
    max_overflow=settings.max_overflow,
    pool_pre_ping=settings.pool_pre_ping,
    pool_recycle=settings.pool_recycle,
    pool_timeout=settings.pool_timeout,
    echo=False,  # Set to True for SQL query logging in development
)

# Plain session factory; create a new Session per request/task
SessionLocal = sessionmaker(
    autocommit=False,
    autoflush=False,
    bind=engine,
    expire_on_commit=False,
)


def get_db():
    """
    Dependency that provides a database session.
    Use it in routes with: Depends(get_db)
    """
    db = SessionLocal()
    try:
        yield db
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()


@contextmanager
def get_db_context():
    """
    Context manager for database sessions (scripts, background jobs).
    Commits on success, rolls back on error.
    """
    db = SessionLocal()
    try:
        yield db
        db.commit()
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()


def check_database() -> bool:
    """Run ``SELECT 1``; False (logged) when the database is unreachable."""
    try:
        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))
    except Exception as e:
        logger.error("[FAIL] Database connection failed: %s", e)
        return False
    return True


def init_db() -> bool:
    """
    Verify the database is reachable.
    Call this during app startup.
    """
    if not check_database():
        return False
    logger.info("[OK] Database connection initialized successfully")
    return True
