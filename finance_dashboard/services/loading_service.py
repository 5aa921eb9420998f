"""Aggregate loading state for a dashboard view.

A view is busy while any of the bindings it declares is loading. The flag is
derived on every read; nothing is cached between observations.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Protocol, Tuple


class LoadingSource(Protocol):
    def is_loading(self) -> bool: ...


def aggregate_loading(sources: Iterable[LoadingSource]) -> bool:
    """True iff at least one constituent reports is_loading()."""
    return any(source.is_loading() for source in sources)


@dataclass(frozen=True)
class AggregateLoadingState:
    """The enumerated constituents of one view's busy signal."""

    constituents: Tuple[LoadingSource, ...]

    def is_loading(self) -> bool:
        return aggregate_loading(self.constituents)

    def __bool__(self) -> bool:
        return self.is_loading()

    def loading_constituents(self) -> Tuple[LoadingSource, ...]:
        return tuple(c for c in self.constituents if c.is_loading())
