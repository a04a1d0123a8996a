"""Database engine and helpers.

This module configures the SQLModel/SQLAlchemy engine from the settings
in `config` and provides the per-request session dependency. A single
pooled engine is shared by the process; handlers never touch it
directly and receive a `Session` through FastAPI dependency injection.
"""

from sqlmodel import SQLModel, create_engine, Session
from sqlalchemy import event
from sqlalchemy.engine import Engine

from .config import settings


def _enable_sqlite_foreign_keys(dbapi_conn, _record):
    cursor = dbapi_conn.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def build_engine(url: str, pool_size: int = 5) -> Engine:
    """Create the engine for `url`.

    SQLite (used by tests and quick local runs) needs
    `check_same_thread=False` because FastAPI serves sync routes from a
    thread pool. SQLite connections also switch on foreign key enforcement
    so constraints behave as they do on PostgreSQL. Server databases get
    a sized pool with pre-ping.
    """
    if url.startswith("sqlite"):
        eng = create_engine(url, echo=False, connect_args={"check_same_thread": False})
        event.listen(eng, "connect", _enable_sqlite_foreign_keys)
        return eng
    return create_engine(url, echo=False, pool_size=pool_size, pool_pre_ping=True)


engine = build_engine(settings.database_url, settings.DB_POOL_SIZE)


def create_db_and_tables():
    """Create database tables using SQLModel metadata.

    This function is intended for local development and tests; real
    deployments manage the schema outside the application.
    """
    from . import models  # noqa: F401  registers the tables

    SQLModel.metadata.create_all(engine)


def get_session():
    """Yield a database `Session` for FastAPI dependency injection.

    The generator yields a session and ensures it is closed when the
    request scope finishes.
    """
    with Session(engine) as session:
        yield session
