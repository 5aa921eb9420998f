"""Pydantic schemas for every finance data kind.

Each kind has two shapes:

- an *input* schema: the fields a caller may supply when creating a record.
  Unknown fields are rejected, which also keeps `id` and `created_at` out of
  caller hands (the store assigns both).
- an *entity* schema: the frozen read model bindings hand to the views. It
  extends the input fields with `id` and `created_at`.
"""
from __future__ import annotations

from datetime import date, datetime
from functools import lru_cache
from typing import Annotated, Any, Dict, List, Literal, Mapping, Optional, Type, TypeVar, Union

from pydantic import AfterValidator, BaseModel, ConfigDict, Field, create_model
from pydantic import ValidationError as PydanticValidationError

from tireworks.errors import ValidationError

SchemaT = TypeVar("SchemaT", bound=BaseModel)


def _nonempty(v: str) -> str:
    if not v:
        raise ValueError("must not be empty")
    return v


Name = Annotated[str, AfterValidator(_nonempty)]
Amount = Annotated[float, Field(ge=0, allow_inf_nan=False)]


class InputSchema(BaseModel):
    model_config = ConfigDict(extra="forbid", str_strip_whitespace=True)


class EntitySchema(BaseModel):
    model_config = ConfigDict(from_attributes=True, frozen=True, extra="ignore")

    id: str = Field(min_length=1)
    created_at: datetime


# ───────────────────────────────────────────────────────────────
# People
# ───────────────────────────────────────────────────────────────


class EmployeeInput(InputSchema):
    name: Name
    position: Optional[str] = None
    salary: Amount = 0.0
    archived: bool = False


class Employee(EmployeeInput, EntitySchema):
    pass


class CustomerInput(InputSchema):
    name: Name
    document: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[str] = None
    archived: bool = False


class Customer(CustomerInput, EntitySchema):
    pass


class SupplierInput(CustomerInput):
    pass


class Supplier(SupplierInput, EntitySchema):
    pass


class SalespersonInput(InputSchema):
    name: Name
    commission_rate: float = Field(default=0.0, ge=0, le=100, allow_inf_nan=False)
    archived: bool = False


class Salesperson(SalespersonInput, EntitySchema):
    pass


# ───────────────────────────────────────────────────────────────
# Inventory & production
# ───────────────────────────────────────────────────────────────


class MaterialInput(InputSchema):
    name: Name
    unit: str = "kg"
    archived: bool = False


class Material(MaterialInput, EntitySchema):
    pass


class ProductInput(InputSchema):
    name: Name
    measures: Optional[str] = None
    archived: bool = False


class Product(ProductInput, EntitySchema):
    pass


class StockItemInput(InputSchema):
    item_id: Name
    item_type: Literal["material", "product"]
    item_name: Name
    quantity: Amount = 0.0
    unit_cost: Amount = 0.0
    total_value: Amount = 0.0
    min_level: Optional[float] = None


class StockItem(StockItemInput, EntitySchema):
    pass


class MaterialUsage(BaseModel):
    material_id: str
    quantity: float = Field(ge=0, allow_inf_nan=False)


class ProductionEntryInput(InputSchema):
    product_id: Optional[str] = None
    product_name: Name
    quantity_produced: int = Field(gt=0)
    production_date: date
    materials_consumed: List[MaterialUsage] = Field(default_factory=list)


class ProductionEntry(ProductionEntryInput, EntitySchema):
    materials_consumed: Optional[List[MaterialUsage]] = None


class RecipeInput(InputSchema):
    product_name: Name
    direct_cost: Amount = 0.0
    ingredients: List[MaterialUsage] = Field(default_factory=list)
    archived: bool = False


class Recipe(RecipeInput, EntitySchema):
    ingredients: Optional[List[MaterialUsage]] = None


class ResaleProductInput(InputSchema):
    name: Name
    supplier_name: Optional[str] = None
    purchase_price: Amount = 0.0
    sale_price: Amount = 0.0
    archived: bool = False


class ResaleProduct(ResaleProductInput, EntitySchema):
    pass


# ───────────────────────────────────────────────────────────────
# Costs, cash flow, sales
# ───────────────────────────────────────────────────────────────


class CostInput(InputSchema):
    name: Name
    amount: Amount
    category: str = "general"
    description: Optional[str] = None
    archived: bool = False


class FixedCostInput(CostInput):
    pass


class FixedCost(FixedCostInput, EntitySchema):
    pass


class VariableCostInput(CostInput):
    pass


class VariableCost(VariableCostInput, EntitySchema):
    pass


class CashFlowEntryInput(InputSchema):
    type: Literal["income", "expense"]
    category: Name
    reference_id: Optional[str] = None
    reference_name: Optional[str] = None
    amount: float = Field(gt=0, allow_inf_nan=False)
    transaction_date: date
    description: Optional[str] = None


class CashFlowEntry(CashFlowEntryInput, EntitySchema):
    pass


class DefectiveTireSaleInput(InputSchema):
    """A defective tire sold at a discount. Store assigns id/created_at."""

    tire_name: Name
    quantity: int = Field(gt=0)
    sale_value: Amount
    sale_date: date
    description: Optional[str] = None


class DefectiveTireSale(DefectiveTireSaleInput, EntitySchema):
    pass


class WarrantyEntryInput(InputSchema):
    customer_name: Name
    product_name: Name
    quantity: int = Field(gt=0)
    warranty_date: date
    description: Optional[str] = None


class WarrantyEntry(WarrantyEntryInput, EntitySchema):
    pass


# ───────────────────────────────────────────────────────────────
# Validation helpers
# ───────────────────────────────────────────────────────────────


def validate_schema(
    schema: Type[SchemaT], payload: Union[SchemaT, BaseModel, Mapping[str, Any]]
) -> SchemaT:
    """Coerce payload into `schema`, raising the finance ValidationError.

    An exact instance of `schema` passes through untouched. Any other
    pydantic model, subclasses included, is re-validated from all of its
    field values, so an entity carrying `id` / `created_at` is rejected by an
    input schema.
    """
    if type(payload) is schema:
        return payload
    if isinstance(payload, BaseModel):
        payload = payload.model_dump()
    try:
        return schema.model_validate(payload)
    except PydanticValidationError as exc:
        raise ValidationError(
            f"Invalid {schema.__name__}: {exc.error_count()} error(s)",
            errors=exc.errors(include_url=False),
        ) from exc


def mutable_fields(entity_schema: Type[EntitySchema]) -> frozenset:
    """Field names a patch may touch (everything but store-assigned ones)."""
    return frozenset(entity_schema.model_fields) - {"id", "created_at"}


@lru_cache(maxsize=None)
def _field_model(entity_schema: Type[EntitySchema], name: str) -> Type[BaseModel]:
    field_info = entity_schema.model_fields[name]
    return create_model(
        f"{entity_schema.__name__}_{name}_patch",
        __config__=ConfigDict(str_strip_whitespace=True),
        **{name: (field_info.annotation, field_info)},
    )


def validate_patch(entity_schema: Type[EntitySchema], patch: Mapping[str, Any]) -> Dict[str, Any]:
    """Check patch keys and validate each value against its field definition."""
    if not patch:
        raise ValidationError("Patch is empty")
    unknown = sorted(set(patch) - mutable_fields(entity_schema))
    if unknown:
        raise ValidationError(
            f"Cannot patch {entity_schema.__name__} fields: {', '.join(unknown)}"
        )

    errors: List[Dict[str, Any]] = []
    cleaned: Dict[str, Any] = {}
    for name, value in patch.items():
        try:
            checked = _field_model(entity_schema, name).model_validate({name: value})
        except PydanticValidationError as exc:
            errors.extend(exc.errors(include_url=False))
            continue
        cleaned[name] = getattr(checked, name)
    if errors:
        raise ValidationError(
            f"Invalid patch for {entity_schema.__name__}: {len(errors)} error(s)",
            errors=errors,
        )
    return cleaned
