# Overview: Service-layer operations for reporting; encapsulates business logic and database work.

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Mapping

from sqlalchemy import func

from distrack.extensions import db
from distrack.models import Distribution, Product, User
from distrack.services.permission_service import has_permission
from distrack.time_utils import day_bounds, parse_iso_date, to_utc_z
from distrack.validation import ValidationError


@dataclass(frozen=True)
class ReportFilters:
    """
    Report filters; every omitted field imposes no restriction, present ones are ANDed.

    Dates are inclusive calendar days (UTC) on distributed_at. worker, product and
    category are exact string matches.
    """
    start_date: date | None = None
    end_date: date | None = None
    worker: str | None = None
    product: str | None = None
    category: str | None = None

    @classmethod
    def from_args(cls, args: Mapping[str, str]) -> "ReportFilters":
        try:
            start_date = parse_iso_date(args.get("start_date"))
        except ValueError:
            raise ValidationError("start_date must be YYYY-MM-DD")
        try:
            end_date = parse_iso_date(args.get("end_date"))
        except ValueError:
            raise ValidationError("end_date must be YYYY-MM-DD")

        if start_date and end_date and start_date > end_date:
            raise ValidationError("start_date must be on or before end_date")

        return cls(
            start_date=start_date,
            end_date=end_date,
            worker=_blank_to_none(args.get("worker")),
            product=_blank_to_none(args.get("product")),
            category=_blank_to_none(args.get("category")),
        )


def _blank_to_none(value: str | None) -> str | None:
    if value is None:
        return None
    value = value.strip()
    return value or None


def _scoped(query, *, company_id: int, role: str, user_id: int):
    """
    Company scoping plus role visibility.

    Roles without VIEW_ALL_DISTRIBUTIONS only see rows they recorded themselves.
    """
    query = query.filter(Distribution.company_id == company_id)
    if not has_permission(role, "VIEW_ALL_DISTRIBUTIONS"):
        query = query.filter(Distribution.distributed_by_user_id == user_id)
    return query


def _filtered(query, filters: ReportFilters):
    if filters.start_date:
        start, _ = day_bounds(filters.start_date)
        query = query.filter(Distribution.distributed_at >= start)
    if filters.end_date:
        _, end = day_bounds(filters.end_date)
        query = query.filter(Distribution.distributed_at < end)
    if filters.worker:
        query = query.filter(Distribution.worker_name == filters.worker)
    if filters.product:
        query = query.filter(Product.name == filters.product)
    if filters.category:
        query = query.filter(Product.category == filters.category)
    return query


def list_distributions(
    *,
    company_id: int,
    role: str,
    user_id: int,
    filters: ReportFilters | None = None,
    limit: int | None = None,
) -> list[dict]:
    """Matching distribution rows, newest first."""
    filters = filters or ReportFilters()

    query = (
        db.session.query(
            Distribution,
            Product.name.label("product_name"),
            Product.category.label("product_category"),
            User.name.label("distributed_by"),
        )
        .join(Product, Distribution.product_id == Product.id)
        .join(User, Distribution.distributed_by_user_id == User.id)
    )
    query = _scoped(query, company_id=company_id, role=role, user_id=user_id)
    query = _filtered(query, filters)
    query = query.order_by(Distribution.distributed_at.desc(), Distribution.id.desc())
    if limit is not None:
        query = query.limit(limit)

    return [
        {
            "id": dist.id,
            "product_id": dist.product_id,
            "product_name": product_name,
            "product_category": product_category,
            "worker_name": dist.worker_name,
            "worker_gender": dist.worker_gender,
            "worker_mobile": dist.worker_mobile,
            "quantity": dist.quantity,
            "distributed_by_user_id": dist.distributed_by_user_id,
            "distributed_by": distributed_by,
            "distributed_at": to_utc_z(dist.distributed_at),
        }
        for dist, product_name, product_category, distributed_by in query.all()
    ]


def product_analytics(
    *,
    company_id: int,
    role: str,
    user_id: int,
    filters: ReportFilters | None = None,
) -> list[dict]:
    """Per product: total quantity and number of distribution rows, largest first."""
    filters = filters or ReportFilters()

    total = func.sum(Distribution.quantity).label("total_distributed")
    query = (
        db.session.query(
            Product.id.label("product_id"),
            Product.name.label("product_name"),
            Product.category.label("category"),
            total,
            func.count(Distribution.id).label("distribution_count"),
        )
        .join(Distribution, Distribution.product_id == Product.id)
    )
    query = _scoped(query, company_id=company_id, role=role, user_id=user_id)
    query = _filtered(query, filters)
    rows = (
        query.group_by(Product.id, Product.name, Product.category)
        .order_by(total.desc(), Product.name.asc())
        .all()
    )

    return [
        {
            "product_id": row.product_id,
            "product_name": row.product_name,
            "category": row.category,
            "total_distributed": int(row.total_distributed or 0),
            "distribution_count": int(row.distribution_count or 0),
        }
        for row in rows
    ]


def worker_analytics(
    *,
    company_id: int,
    role: str,
    user_id: int,
    filters: ReportFilters | None = None,
) -> list[dict]:
    """
    Per worker name: total items, number of rows and latest distribution time.

    Grouping is by exact worker_name string; differently typed names stay separate.
    """
    filters = filters or ReportFilters()

    total = func.sum(Distribution.quantity).label("total_items")
    last_at = func.max(Distribution.distributed_at).label("last_distribution")
    query = (
        db.session.query(
            Distribution.worker_name,
            total,
            func.count(Distribution.id).label("distribution_count"),
            last_at,
        )
        .join(Product, Distribution.product_id == Product.id)
    )
    query = _scoped(query, company_id=company_id, role=role, user_id=user_id)
    query = _filtered(query, filters)
    rows = (
        query.group_by(Distribution.worker_name)
        .order_by(total.desc(), Distribution.worker_name.asc())
        .all()
    )

    return [
        {
            "worker_name": row.worker_name,
            "total_items": int(row.total_items or 0),
            "distribution_count": int(row.distribution_count or 0),
            "last_distribution": to_utc_z(row.last_distribution),
        }
        for row in rows
    ]
