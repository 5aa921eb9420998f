"""Base class for dashboard views.

A view is static configuration: which data kinds it shows, which bindings
make it busy, and which mutation callbacks it hands to the presentation
layer. `build()` turns that configuration into a read-only ViewModel.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import TYPE_CHECKING, Any, Callable, Dict, Mapping, Optional, Tuple

from tireworks.bindings import BindingRegistry
from tireworks.kinds import DataKind

from finance_dashboard.services.loading_service import AggregateLoadingState

if TYPE_CHECKING:  # pragma: no cover
    from finance_dashboard.services.sale_registration_service import SaleRegistrationWorkflow
    from finance_dashboard.services.stock_service import StockService


class ViewId(str, Enum):
    CASHFLOW = "cashflow"
    CASH_BALANCE = "cash-balance"
    RAW_MATERIALS = "raw-materials"
    FIXED_COSTS = "fixed-costs"
    VARIABLE_COSTS = "variable-costs"
    TIRE_COST = "tire-cost"
    DEFECTIVE_TIRE_SALES = "defective-tire-sales"
    PRESUMED_PROFIT = "presumed-profit"
    RESALE_PRODUCT_PROFIT = "resale-product-profit"


@dataclass(frozen=True)
class ViewContext:
    """Session services a view may wire callbacks to."""

    registry: BindingRegistry
    sale_workflow: Optional["SaleRegistrationWorkflow"] = None
    stock_service: Optional["StockService"] = None


@dataclass(frozen=True)
class ViewModel:
    """What the presentation layer receives for one render."""

    view: ViewId
    title: str
    entities: Mapping[str, Tuple[Any, ...]]
    is_loading: bool
    callbacks: Mapping[str, Callable[..., Any]] = field(
        default_factory=lambda: MappingProxyType({})
    )


@dataclass(frozen=True)
class BaseView:
    view_id: ViewId = ViewId.CASHFLOW
    title: str = "base"
    entity_kinds: Tuple[DataKind, ...] = ()
    # Empty means "same as entity_kinds".
    loading_kinds: Tuple[DataKind, ...] = ()

    @property
    def name(self) -> str:
        return self.view_id.value

    @property
    def loading_constituents(self) -> Tuple[DataKind, ...]:
        return self.loading_kinds or self.entity_kinds

    def loading_state(self, registry: BindingRegistry) -> AggregateLoadingState:
        return AggregateLoadingState(registry.many(self.loading_constituents))

    def callbacks(self, context: ViewContext) -> Dict[str, Callable[..., Any]]:
        return {}

    def build(self, context: ViewContext, loading: AggregateLoadingState) -> ViewModel:
        entities = {
            kind.value: context.registry.get(kind).snapshot() for kind in self.entity_kinds
        }
        return ViewModel(
            view=self.view_id,
            title=self.title,
            entities=MappingProxyType(entities),
            is_loading=loading.is_loading(),
            callbacks=MappingProxyType(self.callbacks(context)),
        )
