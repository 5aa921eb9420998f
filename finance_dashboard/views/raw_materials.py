"""Raw material stock view."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Dict, Tuple

from tireworks.kinds import DataKind

from finance_dashboard.views.base import BaseView, ViewContext, ViewId


@dataclass(frozen=True)
class RawMaterialsView(BaseView):
    view_id: ViewId = ViewId.RAW_MATERIALS
    title: str = "Raw Materials"
    entity_kinds: Tuple[DataKind, ...] = (
        DataKind.MATERIALS,
        DataKind.STOCK_ITEMS,
        DataKind.CASH_FLOW,
        DataKind.SUPPLIERS,
    )

    def callbacks(self, context: ViewContext) -> Dict[str, Callable[..., Any]]:
        actions: Dict[str, Callable[..., Any]] = {
            "on_add_cash_flow_entry": context.registry.get(DataKind.CASH_FLOW).add,
        }
        if context.stock_service is not None:
            actions["on_stock_update"] = context.stock_service.update_stock
        return actions
