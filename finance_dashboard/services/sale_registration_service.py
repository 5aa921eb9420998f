"""Defective tire sale registration.

Recording a defective tire sale is a write against a store whose read path
can lag its write path. Each submission therefore runs:

    IDLE -> SUBMITTING -> VERIFYING -> SETTLING -> IDLE (succeeded)
    SUBMITTING | VERIFYING --failure--> IDLE (failed, no resync)

- SUBMITTING: the validated input goes to the binding's `add`.
- VERIFYING: an `add` that returns nothing without raising (the store
  echoed no row, or one without its id/created_at) is a write-ambiguous
  failure; it is reported, never treated as success.
- SETTLING: the created sale is returned to the caller right away and one
  refresh of the sales binding is scheduled `resync_delay` seconds later so
  the snapshot converges with the store. That refresh is best effort: a
  failure is reported to the event sink and goes no further.

Concurrent submissions each get their own timer.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional, Union

from tireworks.bindings import DataSourceBinding
from tireworks.errors import FinanceError, WriteAmbiguousError
from tireworks.kinds import DataKind
from tireworks.models.schemas import (
    DefectiveTireSale,
    DefectiveTireSaleInput,
    validate_schema,
)
from tireworks.observability import EventSink, LoggingEventSink, ObservabilityEvent

from finance_dashboard.utils.async_tasks import Scheduler
from finance_dashboard.utils.logging import logger

DEFAULT_RESYNC_DELAY = 2.5  # seconds
EVENT_SOURCE = "defective_tire_sales"


class SubmissionState(str, Enum):
    IDLE = "idle"
    SUBMITTING = "submitting"
    VERIFYING = "verifying"
    SETTLING = "settling"


class SubmissionOutcome(str, Enum):
    PENDING = "pending"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


_TRANSITIONS = {
    SubmissionState.IDLE: {SubmissionState.SUBMITTING},
    SubmissionState.SUBMITTING: {SubmissionState.VERIFYING, SubmissionState.IDLE},
    SubmissionState.VERIFYING: {SubmissionState.SETTLING, SubmissionState.IDLE},
    SubmissionState.SETTLING: {SubmissionState.IDLE},
}


@dataclass
class SaleSubmission:
    """Lifecycle record of one submission."""

    token: str = field(default_factory=lambda: uuid.uuid4().hex[:12])
    state: SubmissionState = SubmissionState.IDLE
    outcome: SubmissionOutcome = SubmissionOutcome.PENDING
    sale_id: Optional[str] = None
    error: Optional[str] = None
    history: List[SubmissionState] = field(default_factory=list)

    def advance(self, state: SubmissionState) -> None:
        if state not in _TRANSITIONS[self.state]:
            raise RuntimeError(f"Illegal submission transition {self.state.value} -> {state.value}")
        self.history.append(self.state)
        self.state = state

    def fail(self, exc: BaseException) -> None:
        self.error = f"{type(exc).__name__}: {exc}"
        self.outcome = SubmissionOutcome.FAILED
        if self.state is not SubmissionState.IDLE:
            self.advance(SubmissionState.IDLE)


class SaleRegistrationWorkflow:
    """Create, verify and resync defective tire sales."""

    def __init__(
        self,
        binding: DataSourceBinding,
        scheduler: Scheduler,
        sink: Optional[EventSink] = None,
        resync_delay: float = DEFAULT_RESYNC_DELAY,
    ):
        if binding.kind is not DataKind.DEFECTIVE_TIRE_SALES:
            raise ValueError(f"Expected the defective tire sales binding, got {binding.kind.value}")
        if resync_delay < 0:
            raise ValueError("resync_delay must be >= 0")
        self.binding = binding
        self.scheduler = scheduler
        self.sink = sink or LoggingEventSink()
        self.resync_delay = resync_delay
        self._active: Dict[str, SaleSubmission] = {}

    @property
    def active_submissions(self) -> List[SaleSubmission]:
        """Submissions not yet back to IDLE (in flight or settling)."""
        return list(self._active.values())

    async def submit(
        self, payload: Union[DefectiveTireSaleInput, Mapping[str, Any]]
    ) -> DefectiveTireSale:
        """Register a sale. Returns the stored entity or raises.

        Raises ValidationError before any write, StoreUnavailableError /
        ValidationError from the store, or WriteAmbiguousError when the
        store returned nothing.
        """
        submission = SaleSubmission()
        try:
            sale_input = validate_schema(DefectiveTireSaleInput, payload)
        except FinanceError as exc:
            submission.fail(exc)
            self._emit("submission_failed", submission, phase="validation", error=submission.error)
            raise

        self._active[submission.token] = submission
        submission.advance(SubmissionState.SUBMITTING)
        self._emit(
            "submission_started",
            submission,
            tire_name=sale_input.tire_name,
            quantity=sale_input.quantity,
            sale_value=sale_input.sale_value,
            sale_date=sale_input.sale_date.isoformat(),
        )

        try:
            created = await self.binding.add(sale_input)
            submission.advance(SubmissionState.VERIFYING)
            sale = self._verify(created)
        except Exception as exc:
            phase = submission.state.value
            submission.fail(exc)
            self._active.pop(submission.token, None)
            self._emit("submission_failed", submission, phase=phase, error=submission.error)
            raise

        submission.sale_id = sale.id
        submission.advance(SubmissionState.SETTLING)
        self._emit("submission_succeeded", submission, sale_id=sale.id)
        self.scheduler.call_later(self.resync_delay, lambda: self._resync(submission))
        self._emit("refresh_scheduled", submission, delay_seconds=self.resync_delay)
        return sale

    def _verify(self, created: Optional[DefectiveTireSale]) -> DefectiveTireSale:
        if created is None:
            raise WriteAmbiguousError("Store accepted the sale but returned no usable record")
        return created

    async def _resync(self, submission: SaleSubmission) -> None:
        try:
            await self.binding.refresh()
        except Exception as exc:
            submission.error = f"{type(exc).__name__}: {exc}"
            self._emit("refresh_failed", submission, error=submission.error)
        else:
            self._emit("refresh_completed", submission, rows=len(self.binding.snapshot()))
        finally:
            submission.outcome = SubmissionOutcome.SUCCEEDED
            submission.advance(SubmissionState.IDLE)
            self._active.pop(submission.token, None)

    def _emit(self, name: str, submission: SaleSubmission, **fields: Any) -> None:
        event = ObservabilityEvent(
            name=name,
            source=EVENT_SOURCE,
            fields={"submission": submission.token, "state": submission.state.value, **fields},
        )
        try:
            self.sink.emit(event)
        except Exception:
            logger.exception("Event sink failed on %s", name)
