"""Defective tire sales view."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Dict, Tuple

from tireworks.kinds import DataKind

from finance_dashboard.views.base import BaseView, ViewContext, ViewId


@dataclass(frozen=True)
class DefectiveTireSalesView(BaseView):
    view_id: ViewId = ViewId.DEFECTIVE_TIRE_SALES
    title: str = "Defective Tire Sales"
    entity_kinds: Tuple[DataKind, ...] = (DataKind.DEFECTIVE_TIRE_SALES,)

    def callbacks(self, context: ViewContext) -> Dict[str, Callable[..., Any]]:
        sales = context.registry.get(DataKind.DEFECTIVE_TIRE_SALES)
        actions: Dict[str, Callable[..., Any]] = {"on_delete": sales.delete}
        if context.sale_workflow is not None:
            actions["on_submit"] = context.sale_workflow.submit
        return actions
