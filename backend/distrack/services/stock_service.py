# Overview: Service-layer stock validation; confirms proposed allocations against live remaining stock.

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable

from ..validation import ConflictError, ValidationError
from .ledger_service import remaining_for
from .tenant_service import require_product_in_company


class InsufficientStockError(ConflictError):
    """A requested quantity exceeds the product's current remaining stock."""

    def __init__(self, *, product_id: int, product_name: str, available: int, requested: int):
        self.product_id = product_id
        self.product_name = product_name
        self.available = available
        self.requested = requested
        super().__init__(
            f"Insufficient stock for {product_name}. "
            f"Available: {available}, Requested: {requested}"
        )

    def to_dict(self) -> dict:
        return {
            "error": str(self),
            "product_id": self.product_id,
            "product_name": self.product_name,
            "available": self.available,
            "requested": self.requested,
        }


@dataclass(frozen=True)
class StockCheck:
    product_id: int
    product_name: str
    available: int
    requested: int


def validate_allocations(
    company_id: int,
    allocations: Iterable[tuple[int, int]],
    *,
    lock: bool = False,
) -> list[StockCheck]:
    """
    Check each (product_id, quantity) against the product's current remaining stock.

    - Remaining stock is re-read from the ledger here; client-supplied stock
      figures are never consulted.
    - Each product is checked on its own; there is no shared budget across products.
    - A product may appear only once per call.
    - lock=True takes row locks on the products (honoured by stores that
      support SELECT ... FOR UPDATE) so the check holds until commit.

    Raises:
        ValidationError: non-positive quantity or duplicate product
        TenantAccessError: product missing or owned by another company
        InsufficientStockError: requested > available
    """
    checks: list[StockCheck] = []
    seen: set[int] = set()

    for product_id, requested in allocations:
        if requested <= 0:
            raise ValidationError("quantity must be > 0")
        if product_id in seen:
            raise ValidationError(f"product {product_id} appears more than once")
        seen.add(product_id)

        product = require_product_in_company(product_id, company_id, lock=lock)
        available = remaining_for(product)

        if requested > available:
            raise InsufficientStockError(
                product_id=product.id,
                product_name=product.name,
                available=available,
                requested=requested,
            )

        checks.append(
            StockCheck(
                product_id=product.id,
                product_name=product.name,
                available=available,
                requested=requested,
            )
        )

    return checks
