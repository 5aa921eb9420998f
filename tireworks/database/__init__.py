"""Database models and session management."""
from .engine import SessionLocal, get_engine, init_db, make_session_factory
from .models import Base
from .repository import (
    delete_row,
    insert_row,
    list_rows,
    row_to_dict,
    update_row,
)

__all__ = [
    "SessionLocal",
    "get_engine",
    "init_db",
    "make_session_factory",
    "Base",
    "delete_row",
    "insert_row",
    "list_rows",
    "row_to_dict",
    "update_row",
]
