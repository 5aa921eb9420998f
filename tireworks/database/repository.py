"""Thin repository helpers shared by every finance table.

These functions provide a small abstraction over SQLAlchemy sessions so the
stores can persist any entity kind the same way. They return ORM rows;
`row_to_dict` turns a row into the plain mapping the store boundary uses.
"""
from typing import Any, Dict, List, Mapping, Optional, Type

from sqlalchemy import select
from sqlalchemy.orm import Session

from .models import Base


def row_to_dict(row: Base) -> Dict[str, Any]:
    """Return the column values of a row keyed by column name."""
    return {col.name: getattr(row, col.name) for col in row.__table__.columns}


def list_rows(
    session: Session,
    model: Type[Base],
    order_by: str = "created_at",
    descending: bool = True,
) -> List[Base]:
    """Return all rows of a table in display order."""
    column = getattr(model, order_by)
    q = select(model).order_by(column.desc() if descending else column.asc())
    return list(session.execute(q).scalars().all())


def insert_row(session: Session, model: Type[Base], values: Mapping[str, Any]) -> Base:
    """Insert a row; id and created_at come from column defaults."""
    row = model(**dict(values))
    session.add(row)
    session.commit()
    session.refresh(row)
    return row


def update_row(
    session: Session,
    model: Type[Base],
    entity_id: str,
    patch: Mapping[str, Any],
) -> Optional[Base]:
    """Apply a partial patch. Returns None if the row does not exist."""
    row = session.get(model, entity_id)
    if row is None:
        return None
    for key, value in patch.items():
        setattr(row, key, value)
    session.commit()
    session.refresh(row)
    return row


def delete_row(session: Session, model: Type[Base], entity_id: str) -> bool:
    """Delete a row by id. Returns False if nothing was deleted."""
    row = session.get(model, entity_id)
    if row is None:
        return False
    session.delete(row)
    session.commit()
    return True
