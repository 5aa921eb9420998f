"""Tab state for the finance dashboard.

TabOrchestrator owns the only piece of session UI state: which view is
active. The view table itself is static configuration. A view's loading state
is resolved through the registry on every read, so it always watches the
same bindings the rendered entities come from, also after the registry was
closed and reopened.
"""

from __future__ import annotations

from typing import Mapping, Optional, Union

from tireworks.errors import ValidationError

from finance_dashboard.services.loading_service import AggregateLoadingState
from finance_dashboard.views import VIEWS, BaseView, ViewContext, ViewId, ViewModel

DEFAULT_VIEW = ViewId.CASHFLOW


def coerce_view_id(view: Union[ViewId, str]) -> ViewId:
    try:
        return ViewId(view)
    except ValueError as exc:
        raise ValidationError(f"Unknown view {view!r}") from exc


class TabOrchestrator:
    """Active-view holder and router for the dashboard tabs."""

    def __init__(
        self,
        context: ViewContext,
        views: Mapping[ViewId, BaseView] = VIEWS,
        initial_view: Union[ViewId, str] = DEFAULT_VIEW,
    ):
        self.context = context
        self.views = views
        self._active = self._configured(initial_view)

    def _configured(self, view: Union[ViewId, str]) -> ViewId:
        view_id = coerce_view_id(view)
        if view_id not in self.views:
            raise ValidationError(f"View {view_id.value!r} is not configured")
        return view_id

    @property
    def active_view(self) -> ViewId:
        return self._active

    def select(self, view: Union[ViewId, str]) -> ViewId:
        """Make `view` the active tab. Selecting the active tab is a no-op."""
        self._active = self._configured(view)
        return self._active

    def loading_state(self, view: Optional[Union[ViewId, str]] = None) -> AggregateLoadingState:
        view_id = self._active if view is None else self._configured(view)
        return self.views[view_id].loading_state(self.context.registry)

    def view_model(self, view: Union[ViewId, str]) -> ViewModel:
        view_id = self._configured(view)
        return self.views[view_id].build(self.context, self.loading_state(view_id))

    def render(self) -> ViewModel:
        """ViewModel for the active tab, built from current snapshots."""
        return self.view_model(self._active)
