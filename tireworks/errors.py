"""Error taxonomy shared by stores, bindings and dashboard services."""

from __future__ import annotations

from typing import Any, Dict, List, Optional


class FinanceError(Exception):
    """Base class for every failure raised by the finance layer."""


class ValidationError(FinanceError):
    """Input was malformed, or the store rejected it on constraint checks.

    `errors` holds the pydantic error list when the failure came from a
    schema, otherwise an empty list.
    """

    def __init__(self, message: str, errors: Optional[List[Dict[str, Any]]] = None):
        super().__init__(message)
        self.errors = errors or []


class WriteAmbiguousError(FinanceError):
    """The store accepted a write but handed back no usable entity."""


class StoreUnavailableError(FinanceError):
    """Transport or backend failure while talking to the store."""


class NotFoundError(FinanceError):
    """Update/delete target does not exist."""

    def __init__(self, kind: str, entity_id: str):
        super().__init__(f"{kind} {entity_id!r} not found")
        self.kind = kind
        self.entity_id = entity_id
