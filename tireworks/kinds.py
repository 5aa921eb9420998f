"""Registry of finance data kinds.

One entry per data source the dashboard binds to: which table backs it,
which schemas validate it, and how its snapshot is ordered.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Dict, Type

from tireworks.database import models as db
from tireworks.models import schemas as s


class DataKind(str, Enum):
    EMPLOYEES = "employees"
    CUSTOMERS = "customers"
    SUPPLIERS = "suppliers"
    SALESPEOPLE = "salespeople"
    MATERIALS = "materials"
    PRODUCTS = "products"
    STOCK_ITEMS = "stock_items"
    PRODUCTION_ENTRIES = "production_entries"
    RECIPES = "recipes"
    RESALE_PRODUCTS = "resale_products"
    FIXED_COSTS = "fixed_costs"
    VARIABLE_COSTS = "variable_costs"
    CASH_FLOW = "cash_flow"
    DEFECTIVE_TIRE_SALES = "defective_tire_sales"
    WARRANTY_ENTRIES = "warranty_entries"


@dataclass(frozen=True)
class KindSpec:
    kind: DataKind
    model: Type[db.Base]
    input_schema: Type[s.InputSchema]
    entity_schema: Type[s.EntitySchema]
    order_by: str = "created_at"
    descending: bool = True

    @property
    def archivable(self) -> bool:
        return "archived" in self.entity_schema.model_fields


KIND_SPECS: Dict[DataKind, KindSpec] = {
    spec.kind: spec
    for spec in (
        KindSpec(DataKind.EMPLOYEES, db.Employee, s.EmployeeInput, s.Employee, "name", False),
        KindSpec(DataKind.CUSTOMERS, db.Customer, s.CustomerInput, s.Customer, "name", False),
        KindSpec(DataKind.SUPPLIERS, db.Supplier, s.SupplierInput, s.Supplier, "name", False),
        KindSpec(DataKind.SALESPEOPLE, db.Salesperson, s.SalespersonInput, s.Salesperson, "name", False),
        KindSpec(DataKind.MATERIALS, db.Material, s.MaterialInput, s.Material, "name", False),
        KindSpec(DataKind.PRODUCTS, db.Product, s.ProductInput, s.Product, "name", False),
        KindSpec(DataKind.STOCK_ITEMS, db.StockItem, s.StockItemInput, s.StockItem, "item_name", False),
        KindSpec(
            DataKind.PRODUCTION_ENTRIES,
            db.ProductionEntry,
            s.ProductionEntryInput,
            s.ProductionEntry,
            "production_date",
        ),
        KindSpec(DataKind.RECIPES, db.Recipe, s.RecipeInput, s.Recipe),
        KindSpec(DataKind.RESALE_PRODUCTS, db.ResaleProduct, s.ResaleProductInput, s.ResaleProduct),
        KindSpec(DataKind.FIXED_COSTS, db.FixedCost, s.FixedCostInput, s.FixedCost),
        KindSpec(DataKind.VARIABLE_COSTS, db.VariableCost, s.VariableCostInput, s.VariableCost),
        KindSpec(
            DataKind.CASH_FLOW,
            db.CashFlowEntry,
            s.CashFlowEntryInput,
            s.CashFlowEntry,
            "transaction_date",
        ),
        KindSpec(
            DataKind.DEFECTIVE_TIRE_SALES,
            db.DefectiveTireSale,
            s.DefectiveTireSaleInput,
            s.DefectiveTireSale,
            "sale_date",
        ),
        KindSpec(
            DataKind.WARRANTY_ENTRIES,
            db.WarrantyEntry,
            s.WarrantyEntryInput,
            s.WarrantyEntry,
            "warranty_date",
        ),
    )
}


def spec_for(kind: DataKind) -> KindSpec:
    return KIND_SPECS[DataKind(kind)]
