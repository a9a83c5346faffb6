# Overview: Company-wide stock and distribution summary for the dashboard.

from __future__ import annotations

from datetime import date

from sqlalchemy import func

from ..extensions import db
from ..models import Distribution, Product
from distrack.time_utils import day_bounds, month_bounds, utcnow
from .ledger_service import remaining_stock_batch
from . import reporting_service


def _distributed_between(company_id: int, start, end) -> int:
    q = db.session.query(
        func.coalesce(func.sum(Distribution.quantity), 0)
    ).filter(
        Distribution.company_id == company_id,
        Distribution.distributed_at >= start,
        Distribution.distributed_at < end,
    )
    return int(q.scalar() or 0)


def dashboard_summary(company_id: int, *, today: date | None = None) -> dict:
    """
    Totals for the company (not role-scoped).

    - total_stock: sum of initial quantities
    - remaining_stock: sum of derived remaining quantities
    - distributed_today / distributed_month: UTC calendar day / month
    - active_workers: distinct worker names served this month
    """
    today = today or utcnow().date()
    day_start, day_end = day_bounds(today)
    month_start, month_end = month_bounds(today)

    total_stock = db.session.query(
        func.coalesce(func.sum(Product.initial_quantity), 0)
    ).filter(Product.company_id == company_id).scalar()

    active_workers = db.session.query(
        func.count(func.distinct(Distribution.worker_name))
    ).filter(
        Distribution.company_id == company_id,
        Distribution.distributed_at >= month_start,
        Distribution.distributed_at < month_end,
    ).scalar()

    return {
        "total_stock": int(total_stock or 0),
        "remaining_stock": sum(remaining_stock_batch(company_id).values()),
        "distributed_today": _distributed_between(company_id, day_start, day_end),
        "distributed_month": _distributed_between(company_id, month_start, month_end),
        "active_workers": int(active_workers or 0),
    }


def recent_distributions(*, company_id: int, role: str, user_id: int, limit: int = 10) -> list[dict]:
    """Newest distributions visible to the caller."""
    return reporting_service.list_distributions(
        company_id=company_id,
        role=role,
        user_id=user_id,
        limit=limit,
    )
