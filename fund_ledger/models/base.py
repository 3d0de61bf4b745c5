"""
Database engine, session management, and base model.

This module is the foundation for all database operations.
Every model inherits from Base. Every request gets a session
from get_db().
"""

from datetime import datetime, timezone

from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, DeclarativeBase

from fund_ledger.config import get_settings

settings = get_settings()


def utcnow() -> datetime:
    """Naive UTC timestamp, the form every DateTime column stores."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def _connect_args(database_url: str, timeout_seconds: int) -> dict:
    """
    Per-connection options that bound how long a statement may run.

    PostgreSQL gets a server-side statement_timeout; SQLite gets
    a busy timeout so a locked database fails instead of hanging.
    """
    if database_url.startswith("postgresql"):
        return {"options": f"-c statement_timeout={timeout_seconds * 1000}"}
    if database_url.startswith("sqlite"):
        return {"check_same_thread": False, "timeout": timeout_seconds}
    return {}


# --- Engine ---
# pool_pre_ping=True tests connections before using them,
# which handles cases where the database restarted or a
# connection went stale.
engine = create_engine(
    settings.DATABASE_URL,
    pool_pre_ping=True,
    connect_args=_connect_args(
        settings.DATABASE_URL, settings.STATEMENT_TIMEOUT_SECONDS
    ),
)

# --- Session Factory ---
# autocommit=False: every ledger operation is one explicit
# transaction, committed or rolled back as a whole.
# autoflush=False: SQL is only sent when we flush or commit.
SessionLocal = sessionmaker(
    bind=engine,
    autocommit=False,
    autoflush=False,
)


class Base(DeclarativeBase):
    pass


# --- Dependency for FastAPI ---
def get_db():
    """
    Provide a database session for a single request.

    The try/finally pattern ensures the session is always
    closed, preventing connection leaks.
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
