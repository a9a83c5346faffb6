# Overview: Service-layer operations for distributions; validates stock and writes distribution rows.

from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence

from flask import current_app
from sqlalchemy import func

from ..extensions import db
from ..models import Distribution
from ..validation import ValidationError
from distrack.time_utils import utcnow, to_utc_z
from .concurrency import run_with_retry
from .stock_service import validate_allocations
"""
Distribution write path

- One Distribution row per (worker, product) allocation.
- Every row of one submission shares the worker identity, the distributing
  user and one server-assigned distributed_at.
- Stock is re-validated here, inside the same request, immediately before
  the insert (stock_service.validate_allocations).
- The rows of one submission are committed in a single transaction: either
  all of them persist or none do.
- Check-then-insert is NOT serialized by default. Two concurrent requests can
  each pass validation and jointly overdraw a product. Setting
  STRICT_STOCK_LOCKING takes product row locks before validating, which closes
  the window on databases that honour SELECT ... FOR UPDATE.
"""


@dataclass(frozen=True)
class WorkerIdentity:
    """Free-text worker identity; two workers are the same only if the strings match."""
    name: str
    gender: str | None = None
    mobile: str | None = None


def _build_distribution_row(
    *,
    company_id: int,
    user_id: int,
    worker: WorkerIdentity,
    product_id: int,
    quantity: int,
    distributed_at,
) -> Distribution:
    return Distribution(
        company_id=company_id,
        product_id=product_id,
        worker_name=worker.name,
        worker_gender=worker.gender,
        worker_mobile=worker.mobile,
        quantity=quantity,
        distributed_by_user_id=user_id,
        distributed_at=distributed_at,
    )


def record_distribution(
    *,
    company_id: int,
    user_id: int,
    worker: WorkerIdentity,
    allocations: Sequence[tuple[int, int]],
    strict_locking: bool | None = None,
) -> int:
    """
    Validate and persist one worker's allocations.

    Returns the number of rows written.

    Raises:
        ValidationError: blank worker name or empty/invalid allocations
        TenantAccessError: a product is missing or owned by another company
        InsufficientStockError: a quantity exceeds current remaining stock
    """
    if not worker.name or not worker.name.strip():
        raise ValidationError("worker_name is required")
    if not allocations:
        raise ValidationError("allocations must be a non-empty list")

    if strict_locking is None:
        strict_locking = bool(current_app.config.get("STRICT_STOCK_LOCKING", False))

    def _op():
        validate_allocations(company_id, allocations, lock=strict_locking)

        distributed_at = utcnow()
        try:
            for product_id, quantity in allocations:
                db.session.add(
                    _build_distribution_row(
                        company_id=company_id,
                        user_id=user_id,
                        worker=worker,
                        product_id=product_id,
                        quantity=quantity,
                        distributed_at=distributed_at,
                    )
                )
            db.session.flush()
            db.session.commit()
        except Exception:
            db.session.rollback()
            raise

        return len(allocations)

    count = run_with_retry(_op)
    current_app.logger.info(
        "Recorded %d distribution rows for worker %r (company=%s, user=%s)",
        count, worker.name, company_id, user_id,
    )
    return count


def list_previous_workers(company_id: int, limit: int = 20) -> list[dict]:
    """
    Distinct worker identities seen in this company, most recently served first.

    Identities are compared as exact (name, gender, mobile) strings; nothing is merged.
    """
    last_at = func.max(Distribution.distributed_at).label("last_distributed_at")
    rows = (
        db.session.query(
            Distribution.worker_name,
            Distribution.worker_gender,
            Distribution.worker_mobile,
            last_at,
        )
        .filter(Distribution.company_id == company_id)
        .group_by(
            Distribution.worker_name,
            Distribution.worker_gender,
            Distribution.worker_mobile,
        )
        .order_by(last_at.desc(), Distribution.worker_name.asc())
        .limit(limit)
        .all()
    )
    return [
        {
            "worker_name": row.worker_name,
            "worker_gender": row.worker_gender,
            "worker_mobile": row.worker_mobile,
            "last_distributed_at": to_utc_z(row.last_distributed_at),
        }
        for row in rows
    ]
