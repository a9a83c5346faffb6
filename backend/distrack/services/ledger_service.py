# Overview: Service-layer operations for the stock ledger; derives remaining stock from distributions.

from __future__ import annotations

from sqlalchemy import func

from ..extensions import db
from ..models import Product, Distribution
from .tenant_service import require_product_in_company
"""
Distrack Stock Ledger Invariants (authoritative)

Inventory model:
- Product.initial_quantity is fixed at creation and never mutated.
- Distribution rows are append-only (no update, delete or reversal).
- Remaining stock is never stored. It is always derived as
      initial_quantity - COALESCE(SUM(distributions.quantity), 0)
  at read time. A product with no distributions has remaining == initial.

Reads:
- No memoisation: every call re-aggregates from the distribution rows, so a
  read is always consistent with the history committed at that moment.
- All functions here are pure reads with no side effects.

Writes (see distribution_service):
- Remaining stock must never go negative after a committed write; the stock
  validator re-reads this ledger at write time to enforce it.
"""


def distributed_total(company_id: int, product_id: int) -> int:
    """Total quantity ever distributed for one product."""
    q = db.session.query(
        func.coalesce(func.sum(Distribution.quantity), 0)
    ).filter(
        Distribution.company_id == company_id,
        Distribution.product_id == product_id,
    )
    return int(q.scalar() or 0)


def remaining_for(product: Product) -> int:
    """Remaining stock for an already-loaded product."""
    return product.initial_quantity - distributed_total(product.company_id, product.id)


def remaining_stock(company_id: int, product_id: int) -> int:
    """
    Remaining stock for one product.

    Raises TenantAccessError if the product is missing or belongs to another company.
    """
    product = require_product_in_company(product_id, company_id)
    return remaining_for(product)


def _distributed_by_product(company_id: int):
    return (
        db.session.query(
            Distribution.product_id.label("product_id"),
            func.sum(Distribution.quantity).label("distributed"),
        )
        .filter(Distribution.company_id == company_id)
        .group_by(Distribution.product_id)
        .subquery()
    )


def stock_levels_query(company_id: int):
    """
    Query yielding (Product, remaining) for every product in the company.

    One grouped aggregate joined back to products; callers add filters and ordering.
    """
    distributed = _distributed_by_product(company_id)
    remaining = (
        Product.initial_quantity - func.coalesce(distributed.c.distributed, 0)
    ).label("remaining")

    return (
        db.session.query(Product, remaining)
        .outerjoin(distributed, distributed.c.product_id == Product.id)
        .filter(Product.company_id == company_id)
    ), remaining


def remaining_stock_batch(company_id: int) -> dict[int, int]:
    """Remaining stock for every product in the company, keyed by product id."""
    query, _ = stock_levels_query(company_id)
    return {product.id: int(remaining) for product, remaining in query.all()}
