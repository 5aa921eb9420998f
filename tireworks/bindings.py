"""Data-source bindings.

A DataSourceBinding wraps the store of one data kind and keeps the snapshot
the dashboard renders from:

- `snapshot()` returns an immutable, ordered tuple of entity read models.
- `is_loading()` is true while a refresh is in flight.
- `add` / `update` / `delete` go to the store and, on success, fold the
  result into the snapshot before returning, so the caller can read its own
  write back immediately.

The snapshot is replaced by a single assignment; observers never see a
half-applied mutation.

BindingRegistry owns every binding of one dashboard session.
"""

from __future__ import annotations

import asyncio
from typing import (
    Any,
    Callable,
    Dict,
    Generic,
    Iterable,
    List,
    Mapping,
    Optional,
    Tuple,
    Type,
    TypeVar,
    Union,
)

from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from tireworks.errors import NotFoundError, ValidationError
from tireworks.kinds import DataKind, KindSpec, spec_for
from tireworks.models.schemas import EntitySchema, validate_patch, validate_schema
from tireworks.stores import Store
from tireworks.utils.logger import get_logger

logger = get_logger(__name__)

EntityT = TypeVar("EntityT", bound=EntitySchema)
Listener = Callable[["DataSourceBinding"], None]


class DataSourceBinding(Generic[EntityT]):
    """Snapshot + loading flag + mutations for one data kind."""

    def __init__(self, spec: KindSpec, store: Store):
        self.spec = spec
        self.store = store
        self._entities: Tuple[EntityT, ...] = ()
        self._refreshing = 0
        self._loaded = False
        self._listeners: List[Listener] = []

    def __repr__(self) -> str:  # pragma: no cover - repr utility
        return f"DataSourceBinding({self.kind.value}, n={len(self._entities)})"

    @property
    def kind(self) -> DataKind:
        return self.spec.kind

    @property
    def entity_schema(self) -> Type[EntityT]:
        return self.spec.entity_schema  # type: ignore[return-value]

    @property
    def loaded(self) -> bool:
        return self._loaded

    # ------------------------------------------------------------------
    # Read side
    # ------------------------------------------------------------------

    def snapshot(self) -> Tuple[EntityT, ...]:
        return self._entities

    def is_loading(self) -> bool:
        return self._refreshing > 0

    def find(self, entity_id: str) -> Optional[EntityT]:
        for entity in self._entities:
            if entity.id == entity_id:
                return entity
        return None

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register a change listener. Returns the matching unsubscribe call."""
        self._listeners.append(listener)

        def _unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _unsubscribe

    async def refresh(self) -> Tuple[EntityT, ...]:
        """Re-read the whole kind from the store."""
        self._refreshing += 1
        self._notify()
        try:
            rows = await self.store.fetch_all()
            entities = tuple(self._parse(row) for row in rows)
            self._replace(entities)
            self._loaded = True
            return entities
        finally:
            self._refreshing -= 1
            self._notify()

    async def load(self) -> Tuple[EntityT, ...]:
        """First read of the kind; same as refresh()."""
        return await self.refresh()

    async def invalidate(self) -> None:
        """External invalidation: drop nothing, just re-read."""
        await self.refresh()

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    async def add(self, payload: Union[BaseModel, Mapping[str, Any]]) -> Optional[EntityT]:
        """Create an entity.

        Returns None when the store acknowledged the insert without echoing a
        usable row: nothing at all, or a row missing its store-assigned
        `id` / `created_at`.
        """
        data = validate_schema(self.spec.input_schema, payload)
        row = await self.store.insert(data.model_dump())
        if not row:
            logger.warning("%s: store returned no row for insert", self.kind.value)
            return None
        if not row.get("id") or row.get("created_at") is None:
            logger.warning("%s: insert echo lacks id/created_at", self.kind.value)
            return None
        entity = self._parse(row)
        self._replace(tuple(e for e in self._entities if e.id != entity.id) + (entity,))
        return entity

    async def update(self, entity_id: str, patch: Mapping[str, Any]) -> EntityT:
        cleaned = validate_patch(self.entity_schema, patch)
        row = await self.store.update(entity_id, cleaned)
        if not row:
            raise NotFoundError(self.kind.value, entity_id)
        entity = self._parse(row)
        if self.find(entity_id) is None:
            self._replace(self._entities + (entity,))
        else:
            self._replace(tuple(entity if e.id == entity_id else e for e in self._entities))
        return entity

    async def delete(self, entity_id: str) -> None:
        if not await self.store.delete(entity_id):
            raise NotFoundError(self.kind.value, entity_id)
        self._replace(tuple(e for e in self._entities if e.id != entity_id))

    def close(self) -> None:
        self._listeners.clear()
        self._entities = ()
        self._loaded = False

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _parse(self, row: Mapping[str, Any]) -> EntityT:
        try:
            return self.entity_schema.model_validate(dict(row))
        except PydanticValidationError as exc:
            raise ValidationError(
                f"{self.kind.value}: store returned a malformed row",
                errors=exc.errors(include_url=False),
            ) from exc

    def _replace(self, entities: Iterable[EntityT]) -> None:
        order_by = self.spec.order_by
        self._entities = tuple(
            sorted(
                entities,
                key=lambda e: getattr(e, order_by),
                reverse=self.spec.descending,
            )
        )
        self._notify()

    def _notify(self) -> None:
        for listener in list(self._listeners):
            try:
                listener(self)
            except Exception:
                logger.exception("%s: binding listener failed", self.kind.value)


class BindingRegistry:
    """All bindings of one dashboard session, created on first request."""

    def __init__(self, stores: Mapping[DataKind, Store]):
        self._stores: Dict[DataKind, Store] = {DataKind(k): v for k, v in stores.items()}
        self._bindings: Dict[DataKind, DataSourceBinding] = {}

    def __contains__(self, kind: object) -> bool:
        return kind in self._stores

    @property
    def kinds(self) -> Tuple[DataKind, ...]:
        return tuple(self._stores)

    def get(self, kind: Union[DataKind, str]) -> DataSourceBinding:
        kind = DataKind(kind)
        binding = self._bindings.get(kind)
        if binding is None:
            if kind not in self._stores:
                raise KeyError(f"No store configured for {kind.value}")
            binding = DataSourceBinding(spec_for(kind), self._stores[kind])
            self._bindings[kind] = binding
        return binding

    def many(self, kinds: Iterable[Union[DataKind, str]]) -> Tuple[DataSourceBinding, ...]:
        return tuple(self.get(k) for k in kinds)

    async def load_all(self, kinds: Optional[Iterable[DataKind]] = None) -> None:
        """Refresh the given kinds (default: all) concurrently.

        Every refresh is awaited; the first failure is re-raised afterwards.
        """
        targets = self.many(kinds if kinds is not None else self._stores)
        results = await asyncio.gather(*(b.refresh() for b in targets), return_exceptions=True)
        failures = [
            (b.kind, r) for b, r in zip(targets, results) if isinstance(r, BaseException)
        ]
        for kind, exc in failures:
            logger.error("Failed to load %s: %s", kind.value, exc)
        if failures:
            raise failures[0][1]

    async def refresh_all(self) -> None:
        """Dashboard-level refresh of every configured kind."""
        await self.load_all()

    def close(self) -> None:
        for binding in self._bindings.values():
            binding.close()
        self._bindings.clear()
