"""Database configuration for the recurrence engine."""
from typing import Generator
from sqlmodel import create_engine, Session
from sqlalchemy import event
import logging
import os
from dotenv import load_dotenv

logger = logging.getLogger(__name__)

# Load environment variables but prioritize local development
load_dotenv()

# Use the DATABASE_URL from environment variable, with fallback to SQLite for local dev
DATABASE_URL = os.environ.get("DATABASE_URL", "sqlite:///./recurrence_engine.db")
IS_SQLITE = DATABASE_URL.startswith("sqlite")

if IS_SQLITE:
    logger.info("[DB CONFIG] Using SQLite database: %s", DATABASE_URL)
else:
    logger.info("[DB CONFIG] Using PostgreSQL database")

# SQLite connections are shared across FastAPI's worker threads
connect_args = {"check_same_thread": False} if IS_SQLITE else {}

engine = create_engine(DATABASE_URL, echo=False, connect_args=connect_args)


def enable_sqlite_foreign_keys(target_engine) -> None:
    """Turn on FK enforcement (cascades, SET NULL) for every SQLite connection."""

    @event.listens_for(target_engine, "connect")
    def set_sqlite_pragma(dbapi_connection, connection_record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()


if IS_SQLITE:
    enable_sqlite_foreign_keys(engine)


def get_session() -> Generator[Session, None, None]:
    """Dependency for getting database sessions."""
    with Session(engine) as session:
        yield session
