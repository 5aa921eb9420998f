"""Store abstraction: the async backing store a binding reads and writes.

Bindings only see plain dict rows through the Store protocol, so the
SQLAlchemy store below can be swapped for a remote API client (or a fake in
tests) without touching the dashboard.
"""

from __future__ import annotations

from typing import Any, Callable, Dict, List, Mapping, Optional, Protocol, Type, TypeVar

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from tireworks.database import repository
from tireworks.database.engine import SessionLocal
from tireworks.database.models import Base
from tireworks.errors import StoreUnavailableError, ValidationError
from tireworks.kinds import DataKind, spec_for
from tireworks.utils.logger import get_logger

logger = get_logger(__name__)

T = TypeVar("T")


class Store(Protocol):
    """
    Protocol for the backing store of one data kind.

    `insert` may return None when the backend acknowledges a write without
    echoing the row back; callers decide what that means.
    """

    async def fetch_all(self) -> List[Dict[str, Any]]: ...
    async def insert(self, values: Mapping[str, Any]) -> Optional[Dict[str, Any]]: ...
    async def update(
        self, entity_id: str, patch: Mapping[str, Any]
    ) -> Optional[Dict[str, Any]]: ...
    async def delete(self, entity_id: str) -> bool: ...


class SqlStore:
    """Store backed by one SQLAlchemy table.

    SQLite calls are short and run inline on the event loop.
    """

    def __init__(
        self,
        model: Type[Base],
        session_factory: sessionmaker = SessionLocal,
        order_by: str = "created_at",
        descending: bool = True,
    ):
        self.model = model
        self.session_factory = session_factory
        self.order_by = order_by
        self.descending = descending

    @classmethod
    def for_kind(cls, kind: DataKind, session_factory: sessionmaker = SessionLocal) -> "SqlStore":
        spec = spec_for(kind)
        return cls(spec.model, session_factory, spec.order_by, spec.descending)

    def _run(self, fn: Callable[[Session], T]) -> T:
        db = self.session_factory()
        try:
            return fn(db)
        except IntegrityError as exc:
            db.rollback()
            raise ValidationError(
                f"{self.model.__tablename__}: rejected by store ({exc.orig})"
            ) from exc
        except SQLAlchemyError as exc:
            logger.error("Store %s unavailable: %s", self.model.__tablename__, exc)
            raise StoreUnavailableError(
                f"{self.model.__tablename__}: {exc.__class__.__name__}"
            ) from exc
        finally:
            db.close()

    async def fetch_all(self) -> List[Dict[str, Any]]:
        return self._run(
            lambda db: [
                repository.row_to_dict(row)
                for row in repository.list_rows(db, self.model, self.order_by, self.descending)
            ]
        )

    async def insert(self, values: Mapping[str, Any]) -> Optional[Dict[str, Any]]:
        return self._run(
            lambda db: repository.row_to_dict(repository.insert_row(db, self.model, values))
        )

    async def update(self, entity_id: str, patch: Mapping[str, Any]) -> Optional[Dict[str, Any]]:
        def _update(db: Session) -> Optional[Dict[str, Any]]:
            row = repository.update_row(db, self.model, entity_id, patch)
            return repository.row_to_dict(row) if row is not None else None

        return self._run(_update)

    async def delete(self, entity_id: str) -> bool:
        return self._run(lambda db: repository.delete_row(db, self.model, entity_id))
