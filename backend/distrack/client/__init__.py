from .api_client import ApiError, DistrackClient
from .allocation_session import (
    AllocationError,
    AllocationSession,
    SessionState,
    SessionSummary,
    StockItem,
    SubmissionResult,
    WorkerAllocation,
)

__all__ = [
    "ApiError",
    "DistrackClient",
    "AllocationError",
    "AllocationSession",
    "SessionState",
    "SessionSummary",
    "StockItem",
    "SubmissionResult",
    "WorkerAllocation",
]
