"""Database engine and session helpers.

This centralizes engine creation so both the app and tests can share the
same configuration. By default we store the SQLite database under the
project root in `data/finance.db` (override with DATABASE_URL).
"""

import os
from typing import Generator, Optional

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker

from tireworks.config import get_settings

from .models import Base


def get_engine(database_url: Optional[str] = None) -> Engine:
    """Return a SQLAlchemy engine, creating data dir as needed."""
    url = database_url or get_settings().database_url
    if url.startswith("sqlite:///"):
        db_location = url.replace("sqlite:///", "")
        if db_location != ":memory:" and db_location:
            os.makedirs(os.path.dirname(db_location) or ".", exist_ok=True)
    return create_engine(url, echo=False, future=True)


def make_session_factory(eng: Engine) -> sessionmaker:
    return sessionmaker(bind=eng, autoflush=False, autocommit=False, expire_on_commit=False)


# Default engine/session for application code
engine = get_engine()
SessionLocal = make_session_factory(engine)


def init_db(engine_override: Optional[Engine] = None) -> None:
    """Create tables if they don't exist.

    The project is intentionally lightweight (no Alembic migrations).
    """
    eng = engine_override or engine
    Base.metadata.create_all(eng)


def get_db(engine_override: Optional[Engine] = None) -> Generator:
    """Session generator for dependency-style usage."""
    eng = engine_override or engine
    Session = make_session_factory(eng)
    db = Session()
    try:
        yield db
    finally:
        db.close()
