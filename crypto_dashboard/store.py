"""
store.py
========
Database gateway for the dashboard.

1) Creates the engine for the single SQLite file.
2) Creates the three tables (users, user_preferences, feedback) on startup.
3) Hands out Sessions, both for plain `with` blocks and as a FastAPI dependency.
"""

from contextlib import contextmanager
from typing import Iterator
import os

from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import SQLModel, Session, create_engine

from .errors import StoreError
from .logging_setup import get_logger

logger = get_logger("crypto_dashboard.store")

DB_FILE = os.getenv("DB_FILE", "crypto_dashboard.db")
DB_URL = f"sqlite:///{DB_FILE}"

# Requests are served from a threadpool, so the same connection may cross threads.
engine = create_engine(DB_URL, echo=False, connect_args={"check_same_thread": False})


def init_db() -> None:
    """
    Create any missing tables. Safe to call on every startup; existing data is kept.
    """
    from . import models  # noqa: F401  (import just to register models with SQLModel)

    SQLModel.metadata.create_all(engine)
    logger.info("DB_READY", extra={"db_file": DB_FILE})


def get_session() -> Session:
    """
    Open a Session bound to our engine. Use it as a context manager:

      with get_session() as session:
          session.add(obj)
          session.commit()
    """
    return Session(engine)


def session_dependency() -> Iterator[Session]:
    """FastAPI dependency: one Session per request, closed afterwards."""
    with get_session() as session:
        yield session


@contextmanager
def store_errors(action: str) -> Iterator[None]:
    """
    Translate database failures into StoreError so the request fails with a 500
    while other in-flight requests are unaffected.
    """
    try:
        yield
    except SQLAlchemyError as e:
        logger.error("STORE_FAILURE", extra={"action": action, "error": type(e).__name__})
        raise StoreError(f"Database error while trying to {action}") from e
