"""Engine and session helpers for the local record store."""

from __future__ import annotations

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session

from .models import Base


DEFAULT_DB_URL = "sqlite:///farm_scheduler.db"


def init_database(db_url: str = DEFAULT_DB_URL, echo: bool = False) -> Engine:
    """Create the pages/containers/rows tables if missing and return the engine."""
    engine = create_engine(db_url, echo=echo)
    Base.metadata.create_all(engine)
    return engine


def open_session(db_url: str = DEFAULT_DB_URL) -> Session:
    """Open a session on the store at ``db_url``, initializing it first."""
    return Session(bind=init_database(db_url))
