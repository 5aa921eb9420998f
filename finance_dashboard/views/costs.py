"""Fixed and variable cost views. Both archive instead of deleting."""

from __future__ import annotations

from dataclasses import dataclass
from functools import partial
from typing import Any, Callable, Dict, Tuple

from tireworks.kinds import DataKind

from finance_dashboard.services.archive_service import toggle_archive
from finance_dashboard.views.base import BaseView, ViewContext, ViewId


@dataclass(frozen=True)
class CostsView(BaseView):
    def callbacks(self, context: ViewContext) -> Dict[str, Callable[..., Any]]:
        (kind,) = self.entity_kinds
        binding = context.registry.get(kind)
        return {"on_submit": binding.add, "on_archive": partial(toggle_archive, binding)}


@dataclass(frozen=True)
class FixedCostsView(CostsView):
    view_id: ViewId = ViewId.FIXED_COSTS
    title: str = "Fixed Costs"
    entity_kinds: Tuple[DataKind, ...] = (DataKind.FIXED_COSTS,)


@dataclass(frozen=True)
class VariableCostsView(CostsView):
    view_id: ViewId = ViewId.VARIABLE_COSTS
    title: str = "Variable Costs"
    entity_kinds: Tuple[DataKind, ...] = (DataKind.VARIABLE_COSTS,)
