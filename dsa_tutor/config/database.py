"""
Database configuration and connection management for the conversation store.

SQLite by default through SQLModel; ``DATABASE_URL`` selects another engine.
"""

import os
from typing import Generator
from sqlmodel import SQLModel, create_engine, Session, text


TEST_DATABASE_PATH = "./test_dsa_tutor.db"


def get_database_url() -> str:
    """Get database URL based on environment."""
    if os.getenv("TESTING") == "true":
        return f"sqlite:///{TEST_DATABASE_PATH}"
    return os.getenv("DATABASE_URL", "sqlite:///./dsa_tutor.db")


DATABASE_URL = get_database_url()

_connect_args = {"check_same_thread": False} if DATABASE_URL.startswith("sqlite") else {}

engine = create_engine(
    DATABASE_URL,
    echo=False,
    connect_args=_connect_args
)


def create_db_and_tables() -> None:
    """Create all tables defined in SQLModel models."""
    # Import models so their tables are registered on SQLModel.metadata
    from dsa_tutor.models import session_models  # noqa: F401

    SQLModel.metadata.create_all(engine)


def get_session() -> Generator[Session, None, None]:
    """
    FastAPI dependency that provides one database session per request.

    Yields:
        Session: SQLModel database session
    """
    with Session(engine) as session:
        yield session


def init_database() -> None:
    """Create tables during application startup."""
    create_db_and_tables()


def cleanup_test_database() -> None:
    """Remove the on-disk test database. Only acts when TESTING=true."""
    if os.getenv("TESTING") == "true":
        if os.path.exists(TEST_DATABASE_PATH):
            os.remove(TEST_DATABASE_PATH)


def check_database_connection() -> bool:
    """
    Check if the database connection is working properly.

    Returns:
        bool: True if database connection is healthy, False otherwise
    """
    try:
        with Session(engine) as session:
            result = session.exec(text("SELECT 1")).first()
            return result is not None
    except Exception:
        return False
