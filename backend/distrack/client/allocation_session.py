# Overview: Client-side allocation workflow; plans several workers' allocations before submitting any.

from __future__ import annotations

import enum
import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Protocol

import httpx

from .api_client import ApiError

logger = logging.getLogger(__name__)
"""
Allocation session

A manager plans a batch of workers locally, then submits them one by one.

States and transitions (see TRANSITIONS):

    COUNT --begin--> ALLOCATION --(last worker completed)--> SUMMARY
      ^                  |                                     |  |
      +------cancel------+-------------cancel------------------+  |
      +----------------------confirm (all submitted)--------------+

Stock rules:
- The snapshot is taken from the server (products with remaining > 0) when
  stock is loaded. Local remaining = snapshot minus what earlier workers in
  this session were given. It only bounds input and feeds the summary.
- The server re-validates every submitted worker against live stock; other
  managers may have distributed since the snapshot was taken.

Submission rules:
- confirm() submits workers in order and stops at the first rejection, keeping
  the server's message verbatim. Workers already accepted stay accepted and are
  not resent when confirm() is called again.
"""


class SessionState(enum.Enum):
    COUNT = "count"
    ALLOCATION = "allocation"
    SUMMARY = "summary"


TRANSITIONS = {
    (SessionState.COUNT, "begin"): SessionState.ALLOCATION,
    (SessionState.ALLOCATION, "finish"): SessionState.SUMMARY,
    (SessionState.ALLOCATION, "cancel"): SessionState.COUNT,
    (SessionState.SUMMARY, "cancel"): SessionState.COUNT,
    (SessionState.SUMMARY, "confirmed"): SessionState.COUNT,
}


class AllocationError(Exception):
    """Operator input rejected locally (nothing was sent to the server)."""


class StockGateway(Protocol):
    def available_products(self) -> List[Dict]: ...

    def submit_distribution(
        self,
        *,
        worker_name: str,
        worker_gender: Optional[str],
        worker_mobile: Optional[str],
        allocations: List[Dict[str, int]],
    ) -> Dict: ...


@dataclass(frozen=True)
class StockItem:
    id: int
    name: str
    category: Optional[str]
    remaining_quantity: int


@dataclass
class WorkerAllocation:
    name: str = ""
    gender: Optional[str] = None
    mobile: Optional[str] = None
    # product_id -> quantity, in the order lines were added
    quantities: Dict[int, int] = field(default_factory=dict)
    submitted: bool = False

    def allocation_lines(self) -> List[Dict[str, int]]:
        return [
            {"product_id": product_id, "quantity": qty}
            for product_id, qty in self.quantities.items()
        ]


@dataclass(frozen=True)
class SessionSummary:
    workers: List[WorkerAllocation]
    totals: Dict[int, int]
    remaining_after: Dict[int, int]


@dataclass(frozen=True)
class SubmissionResult:
    complete: bool
    submitted: int
    failed_worker: Optional[str] = None
    error: Optional[str] = None


class AllocationSession:
    """
    One allocation workflow. Holds no global state; create one per operator
    session, or reuse the same object across rounds (it returns to COUNT).
    """

    def __init__(self, gateway: StockGateway):
        self.gateway = gateway
        self.state = SessionState.COUNT
        self.worker_count = 0
        self.workers: List[WorkerAllocation] = []
        self.last_error: Optional[str] = None
        self._snapshot: Optional[Dict[int, StockItem]] = None
        self._remaining: Dict[int, int] = {}
        self._draft = WorkerAllocation()

    # -- state machine --

    def _transition(self, event: str) -> None:
        key = (self.state, event)
        if key not in TRANSITIONS:
            raise AllocationError(f"Cannot {event} while in {self.state.value} state")
        self.state = TRANSITIONS[key]

    def _require(self, state: SessionState) -> None:
        if self.state is not state:
            raise AllocationError(
                f"Operation requires {state.value} state (current: {self.state.value})"
            )

    def _reset_round(self) -> None:
        self.worker_count = 0
        self.workers = []
        self._draft = WorkerAllocation()
        if self._snapshot is not None:
            self._remaining = {pid: item.remaining_quantity for pid, item in self._snapshot.items()}

    # -- stock --

    def load_stock(self) -> List[StockItem]:
        """Take a fresh snapshot of allocatable stock from the server (COUNT only)."""
        self._require(SessionState.COUNT)
        rows = self.gateway.available_products()
        self._snapshot = {
            int(row["id"]): StockItem(
                id=int(row["id"]),
                name=row["name"],
                category=row.get("category"),
                remaining_quantity=int(row["remaining_quantity"]),
            )
            for row in rows
        }
        self._remaining = {pid: item.remaining_quantity for pid, item in self._snapshot.items()}
        logger.debug("Loaded stock snapshot with %d products", len(self._snapshot))
        return list(self._snapshot.values())

    def remaining(self, product_id: int) -> int:
        """Local remaining stock for a product (0 if it is not in the snapshot)."""
        return self._remaining.get(product_id, 0)

    def available_products(self) -> List[StockItem]:
        """Snapshot products that still have local remaining stock > 0."""
        if self._snapshot is None:
            return []
        return [
            StockItem(
                id=item.id,
                name=item.name,
                category=item.category,
                remaining_quantity=self._remaining[pid],
            )
            for pid, item in self._snapshot.items()
            if self._remaining.get(pid, 0) > 0
        ]

    # -- COUNT --

    def begin(self, worker_count: int) -> None:
        self._require(SessionState.COUNT)
        if isinstance(worker_count, bool) or not isinstance(worker_count, int) or worker_count < 1:
            raise AllocationError("Number of workers must be at least 1")
        if self._snapshot is None:
            self.load_stock()
        if not self.available_products():
            raise AllocationError("No products available for distribution")

        self._reset_round()
        self.worker_count = worker_count
        self.last_error = None
        self._transition("begin")

    # -- ALLOCATION --

    @property
    def current_worker_number(self) -> int:
        """1-based index of the worker being allocated."""
        return len(self.workers) + 1

    @property
    def draft(self) -> WorkerAllocation:
        return self._draft

    def set_worker(self, name: str, gender: Optional[str], mobile: Optional[str] = None) -> None:
        self._require(SessionState.ALLOCATION)
        self._draft.name = (name or "").strip()
        self._draft.gender = (gender or "").strip() or None
        self._draft.mobile = (mobile or "").strip() or None

    def set_quantity(self, product_id: int, quantity: int) -> None:
        """
        Set this worker's quantity for one product. 0 removes the line.

        Bounded by the local remaining stock left over by earlier workers.
        """
        self._require(SessionState.ALLOCATION)
        if isinstance(quantity, bool) or not isinstance(quantity, int) or quantity < 0:
            raise AllocationError("Quantity must be a whole number")

        if quantity == 0:
            self._draft.quantities.pop(product_id, None)
            return

        available = self.remaining(product_id)
        if quantity > available:
            raise AllocationError(f"Cannot exceed available quantity ({available})")
        self._draft.quantities[product_id] = quantity

    def complete_worker(self) -> SessionState:
        """
        Close the current worker and move to the next one, or to SUMMARY after the last.
        """
        self._require(SessionState.ALLOCATION)
        draft = self._draft
        if not draft.name:
            raise AllocationError("Worker name is required")
        if not draft.gender:
            raise AllocationError("Worker gender is required")
        if not draft.quantities:
            raise AllocationError("Allocate at least one product")

        for product_id, qty in draft.quantities.items():
            self._remaining[product_id] = self._remaining.get(product_id, 0) - qty

        self.workers.append(draft)
        self._draft = WorkerAllocation()

        if len(self.workers) >= self.worker_count:
            self._transition("finish")
        return self.state

    # -- SUMMARY --

    def summary(self) -> SessionSummary:
        self._require(SessionState.SUMMARY)
        totals: Dict[int, int] = {}
        for worker in self.workers:
            for product_id, qty in worker.quantities.items():
                totals[product_id] = totals.get(product_id, 0) + qty

        remaining_after = {
            product_id: item.remaining_quantity - totals.get(product_id, 0)
            for product_id, item in self._snapshot.items()
        }
        return SessionSummary(workers=list(self.workers), totals=totals, remaining_after=remaining_after)

    def cancel(self) -> None:
        """Discard planned workers and restore the snapshot taken at load time."""
        self._transition("cancel")
        self._reset_round()
        self.last_error = None

    def confirm(self) -> SubmissionResult:
        """
        Submit every not-yet-submitted worker, in order.

        Stops at the first failure and stays in SUMMARY; call again to resume
        from that worker. On full success returns to COUNT with fresh stock.
        """
        self._require(SessionState.SUMMARY)

        submitted = 0
        for worker in self.workers:
            if worker.submitted:
                continue
            try:
                self.gateway.submit_distribution(
                    worker_name=worker.name,
                    worker_gender=worker.gender,
                    worker_mobile=worker.mobile,
                    allocations=worker.allocation_lines(),
                )
            except (ApiError, httpx.HTTPError) as exc:
                self.last_error = str(exc)
                logger.warning(
                    "Distribution for worker %r rejected: %s", worker.name, self.last_error
                )
                return SubmissionResult(
                    complete=False,
                    submitted=submitted,
                    failed_worker=worker.name,
                    error=self.last_error,
                )
            worker.submitted = True
            submitted += 1

        logger.info("Submitted %d of %d workers", submitted, len(self.workers))
        self._transition("confirmed")
        self._reset_round()
        self.last_error = None
        try:
            self.load_stock()
        except (ApiError, httpx.HTTPError) as exc:
            # every worker is committed; the next begin() fetches stock again
            logger.warning("Stock reload after confirm failed: %s", exc)
            self._snapshot = None
            self._remaining = {}
        return SubmissionResult(complete=True, submitted=submitted)
