"""Read-only cost and profit analysis views.

The formulas live in the presentation layer; these views only decide which
data each analysis receives and when it counts as loading.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Tuple

from tireworks.kinds import DataKind

from finance_dashboard.views.base import BaseView, ViewId

# Everything the per-tire cost and presumed profit calculations read.
PRODUCTION_COST_KINDS: Tuple[DataKind, ...] = (
    DataKind.MATERIALS,
    DataKind.EMPLOYEES,
    DataKind.FIXED_COSTS,
    DataKind.VARIABLE_COSTS,
    DataKind.STOCK_ITEMS,
    DataKind.PRODUCTION_ENTRIES,
    DataKind.PRODUCTS,
    DataKind.CASH_FLOW,
    DataKind.RECIPES,
    DataKind.DEFECTIVE_TIRE_SALES,
    DataKind.WARRANTY_ENTRIES,
)


@dataclass(frozen=True)
class TireCostView(BaseView):
    view_id: ViewId = ViewId.TIRE_COST
    title: str = "Cost per Tire"
    entity_kinds: Tuple[DataKind, ...] = PRODUCTION_COST_KINDS


@dataclass(frozen=True)
class PresumedProfitView(BaseView):
    view_id: ViewId = ViewId.PRESUMED_PROFIT
    title: str = "Presumed Profit"
    entity_kinds: Tuple[DataKind, ...] = PRODUCTION_COST_KINDS


@dataclass(frozen=True)
class ResaleProductProfitView(BaseView):
    view_id: ViewId = ViewId.RESALE_PRODUCT_PROFIT
    title: str = "Resale Product Profit"
    entity_kinds: Tuple[DataKind, ...] = (DataKind.CASH_FLOW, DataKind.STOCK_ITEMS)
    # Waits for the resale catalogue too, even though it is not handed over.
    loading_kinds: Tuple[DataKind, ...] = (
        DataKind.CASH_FLOW,
        DataKind.STOCK_ITEMS,
        DataKind.RESALE_PRODUCTS,
    )
