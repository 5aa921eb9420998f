"""Main dashboard application object.

Wires one session together: a binding per data kind, the sale registration
workflow, the stock service, and the tab orchestrator the presentation layer
renders from.
"""

from __future__ import annotations

import asyncio
from typing import Any, Mapping, Optional, Union

from sqlalchemy.engine import Engine

from tireworks.bindings import BindingRegistry
from tireworks.config import Settings, get_settings
from tireworks.database.engine import get_engine, init_db, make_session_factory
from tireworks.kinds import KIND_SPECS, DataKind
from tireworks.models.schemas import DefectiveTireSale, DefectiveTireSaleInput
from tireworks.observability import (
    EventSink,
    FanOutEventSink,
    LoggingEventSink,
    MemoryEventSink,
)
from tireworks.stores import SqlStore, Store

from finance_dashboard.services.sale_registration_service import SaleRegistrationWorkflow
from finance_dashboard.services.stock_service import StockService
from finance_dashboard.state import TabOrchestrator
from finance_dashboard.utils.async_tasks import AsyncioScheduler, Scheduler
from finance_dashboard.utils.logging import logger
from finance_dashboard.views import ViewContext, ViewId, ViewModel


class FinanceDashboardApp:
    """One dashboard session."""

    def __init__(
        self,
        registry: BindingRegistry,
        *,
        settings: Optional[Settings] = None,
        scheduler: Optional[Scheduler] = None,
        sink: Optional[EventSink] = None,
        initial_view: Optional[Union[ViewId, str]] = None,
    ):
        self.settings = settings or get_settings()
        self.registry = registry
        self.scheduler = scheduler or AsyncioScheduler()
        # Recent events stay available for a logs panel.
        self.recent_events = MemoryEventSink(maxlen=self.settings.event_buffer_size)
        self.sink = sink or FanOutEventSink([LoggingEventSink(), self.recent_events])

        self.sale_workflow = SaleRegistrationWorkflow(
            registry.get(DataKind.DEFECTIVE_TIRE_SALES),
            self.scheduler,
            self.sink,
            resync_delay=self.settings.resync_delay_seconds,
        )
        self.stock_service = StockService(registry.get(DataKind.STOCK_ITEMS))
        self.tabs = TabOrchestrator(
            ViewContext(registry, self.sale_workflow, self.stock_service),
            initial_view=initial_view or self.settings.default_view,
        )

    # -- session lifecycle ------------------------------------------------

    async def open(self) -> None:
        """Load every binding of the session."""
        await self.registry.load_all()
        logger.info("Dashboard session opened (%d data sources)", len(self.registry.kinds))

    async def refresh(self) -> None:
        await self.registry.refresh_all()

    def close(self) -> None:
        """Tear down bindings. Already scheduled resyncs still run."""
        self.registry.close()

    def run(self) -> None:
        """Load the session once outside any running event loop."""
        asyncio.run(self.open())

    # -- tabs ---------------------------------------------------------------

    @property
    def active_view(self) -> ViewId:
        return self.tabs.active_view

    def switch_view(self, view_name: Union[ViewId, str]) -> None:
        """Switch the active view."""
        self.tabs.select(view_name)

    def render(self) -> ViewModel:
        return self.tabs.render()

    # -- actions ------------------------------------------------------------

    async def submit_defective_sale(
        self, payload: Union[DefectiveTireSaleInput, Mapping[str, Any]]
    ) -> DefectiveTireSale:
        return await self.sale_workflow.submit(payload)


def build_stores(session_factory) -> Mapping[DataKind, Store]:
    return {kind: SqlStore.for_kind(kind, session_factory) for kind in KIND_SPECS}


def create_app(
    settings: Optional[Settings] = None,
    engine: Optional[Engine] = None,
    **kwargs: Any,
) -> FinanceDashboardApp:
    """Build a dashboard session on the configured SQL database."""
    settings = settings or get_settings()
    eng = engine or get_engine(settings.database_url)
    init_db(eng)
    registry = BindingRegistry(build_stores(make_session_factory(eng)))
    return FinanceDashboardApp(registry, settings=settings, **kwargs)
