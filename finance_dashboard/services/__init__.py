"""Dashboard services: loading aggregation, sale registration, archive, stock."""
from .archive_service import toggle_archive
from .loading_service import AggregateLoadingState, aggregate_loading
from .sale_registration_service import (
    SaleRegistrationWorkflow,
    SaleSubmission,
    SubmissionOutcome,
    SubmissionState,
)
from .stock_service import StockOperation, StockService

__all__ = [
    "AggregateLoadingState",
    "aggregate_loading",
    "SaleRegistrationWorkflow",
    "SaleSubmission",
    "SubmissionOutcome",
    "SubmissionState",
    "StockOperation",
    "StockService",
    "toggle_archive",
]
