"""
TireWorks Finance - data layer for the factory finance dashboard.

Bindings over the costs, cash-flow, inventory, production and sales data
sources, plus the stores and schemas they sit on.
"""

__version__ = "1.0.0"

from .errors import (
    FinanceError,
    NotFoundError,
    StoreUnavailableError,
    ValidationError,
    WriteAmbiguousError,
)
from .kinds import DataKind

__all__ = [
    "DataKind",
    "FinanceError",
    "NotFoundError",
    "StoreUnavailableError",
    "ValidationError",
    "WriteAmbiguousError",
]
