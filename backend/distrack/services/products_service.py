# backend/distrack/services/products_service.py
"""
Products Service with Multi-Tenant Support

MULTI-TENANT: All product operations are company-scoped.
- Listings only ever query the caller's company
- Created products are stamped with the caller's company_id

Products are insert-only: initial_quantity is fixed at creation and there is
no update or delete path. Remaining stock comes from ledger_service.
"""
from __future__ import annotations

from flask import current_app

from ..extensions import db
from ..models import Product
from ..validation import (
    ModelValidationPolicy,
    ValidationError,
    enforce_rules_product,
    validate_payload,
)
from .ledger_service import stock_levels_query

PRODUCT_POLICY = ModelValidationPolicy(
    writable_fields={"name", "category", "description", "initial_quantity"},
    required_on_create={"name", "initial_quantity"},
)

BULK_PRODUCT_POLICY = ModelValidationPolicy(
    writable_fields={"name", "category", "initial_quantity"},
    required_on_create={"name", "initial_quantity"},
)


def validate_product_payload(payload: dict, *, policy: ModelValidationPolicy = PRODUCT_POLICY) -> dict:
    """Validate a create payload and apply product business rules."""
    patch = validate_payload(model=Product, payload=payload, policy=policy, partial=False)
    enforce_rules_product(patch)
    return patch


def _stock_row(product: Product, remaining: int) -> dict:
    row = product.to_dict()
    row["remaining_quantity"] = int(remaining)
    return row


def list_products(company_id: int) -> dict:
    """
    Every product in the company with initial and remaining quantity, newest first.
    """
    query, _ = stock_levels_query(company_id)
    rows = query.order_by(Product.created_at.desc(), Product.id.desc()).all()
    items = [_stock_row(product, remaining) for product, remaining in rows]
    return {"items": items, "count": len(items)}


def list_available_products(company_id: int) -> list[dict]:
    """
    Products that still have stock to allocate (remaining > 0), by name.

    This is the snapshot an allocation session starts from.
    """
    query, remaining = stock_levels_query(company_id)
    rows = query.filter(remaining > 0).order_by(Product.name.asc(), Product.id.asc()).all()
    return [
        {
            "id": product.id,
            "name": product.name,
            "category": product.category,
            "remaining_quantity": int(qty),
        }
        for product, qty in rows
    ]


def create_product(*, company_id: int, patch: dict) -> dict:
    """
    Create product from a validated patch dict.

    Returns the created product dict (remaining == initial on creation).
    """
    p = Product(company_id=company_id, **patch)
    db.session.add(p)
    db.session.commit()

    current_app.logger.info(
        "Created product %s (%r) for company %s with initial quantity %s",
        p.id, p.name, company_id, p.initial_quantity,
    )
    return _stock_row(p, p.initial_quantity)


def _bulk_row_aliases(row):
    if isinstance(row, dict) and "quantity" in row and "initial_quantity" not in row:
        row = dict(row)
        row["initial_quantity"] = row.pop("quantity")
    return row


def bulk_create_products(*, company_id: int, rows: list) -> int:
    """
    Create many products at once. All rows are validated before anything is
    written, and the inserts share one commit: either every row lands or none.

    Rows may give the starting stock as `quantity` (the import sheet column)
    instead of `initial_quantity`.

    Raises ValidationError naming the first offending row.
    """
    if not isinstance(rows, list) or not rows:
        raise ValidationError("products must be a non-empty list")

    patches = []
    for index, payload in enumerate(rows):
        payload = _bulk_row_aliases(payload)
        try:
            patches.append(validate_product_payload(payload, policy=BULK_PRODUCT_POLICY))
        except ValidationError as e:
            raise ValidationError(f"products[{index}]: {e}")

    try:
        for patch in patches:
            db.session.add(Product(company_id=company_id, **patch))
        db.session.commit()
    except Exception:
        db.session.rollback()
        raise

    current_app.logger.info("Imported %d products for company %s", len(patches), company_id)
    return len(patches)
