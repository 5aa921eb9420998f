"""Dashboard views, one per tab."""
from types import MappingProxyType
from typing import Mapping

from .base import BaseView, ViewContext, ViewId, ViewModel
from .cashflow import CashBalanceView, CashFlowView
from .costs import FixedCostsView, VariableCostsView
from .defective_sales import DefectiveTireSalesView
from .profit import PresumedProfitView, ResaleProductProfitView, TireCostView
from .raw_materials import RawMaterialsView

# Tab order as shown in the dashboard.
VIEWS: Mapping[ViewId, BaseView] = MappingProxyType(
    {
        view.view_id: view
        for view in (
            CashFlowView(),
            CashBalanceView(),
            RawMaterialsView(),
            FixedCostsView(),
            VariableCostsView(),
            TireCostView(),
            DefectiveTireSalesView(),
            PresumedProfitView(),
            ResaleProductProfitView(),
        )
    }
)

__all__ = [
    "BaseView",
    "ViewContext",
    "ViewId",
    "ViewModel",
    "VIEWS",
]
