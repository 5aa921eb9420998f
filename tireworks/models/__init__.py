"""Data schemas and validation."""
from .schemas import (
    DefectiveTireSale,
    DefectiveTireSaleInput,
    EntitySchema,
    InputSchema,
    validate_patch,
    validate_schema,
)

__all__ = [
    "DefectiveTireSale",
    "DefectiveTireSaleInput",
    "EntitySchema",
    "InputSchema",
    "validate_patch",
    "validate_schema",
]
