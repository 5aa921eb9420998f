"""Cash flow ledger and the cash balance built from it."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Dict, Tuple

from tireworks.kinds import DataKind

from finance_dashboard.views.base import BaseView, ViewContext, ViewId


@dataclass(frozen=True)
class CashFlowView(BaseView):
    view_id: ViewId = ViewId.CASHFLOW
    title: str = "Cash Flow"
    entity_kinds: Tuple[DataKind, ...] = (
        DataKind.CASH_FLOW,
        DataKind.EMPLOYEES,
        DataKind.SUPPLIERS,
        DataKind.CUSTOMERS,
        DataKind.FIXED_COSTS,
        DataKind.VARIABLE_COSTS,
        DataKind.SALESPEOPLE,
    )

    def callbacks(self, context: ViewContext) -> Dict[str, Callable[..., Any]]:
        cash_flow = context.registry.get(DataKind.CASH_FLOW)
        return {"on_submit": cash_flow.add, "on_delete": cash_flow.delete}


@dataclass(frozen=True)
class CashBalanceView(BaseView):
    view_id: ViewId = ViewId.CASH_BALANCE
    title: str = "Cash Balance"
    entity_kinds: Tuple[DataKind, ...] = (DataKind.CASH_FLOW,)
