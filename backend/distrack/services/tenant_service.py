"""
Multi-Tenant Service: Tenant Validation and Scoping Helpers

WHY: Centralize tenant validation logic for reuse across services and routes.
Every request is scoped to a company, and any product id that arrives from
client input must be checked against that company before use.

SECURITY INVARIANTS:
1. Every authenticated request has g.company_id set
2. Product IDs from client input are validated against g.company_id
3. Cross-tenant lookups answer "not found" (never reveal existence elsewhere)
4. Cross-tenant access attempts are logged as security events
"""

from flask import g, has_request_context, request
from ..extensions import db
from ..models import Product
from .concurrency import lock_for_update
from .permission_service import log_security_event


class TenantAccessError(Exception):
    """Raised when a referenced entity is missing or owned by another company."""
    pass


def require_product_in_company(product_id: int, company_id: int, *, lock: bool = False) -> Product:
    """
    Validate that a product belongs to the specified company.

    Raises:
        TenantAccessError if the product doesn't exist or belongs to a different company
    """
    query = db.session.query(Product).filter_by(id=product_id)
    if lock:
        query = lock_for_update(query)
    product = query.first()

    if product is None:
        raise TenantAccessError(f"Product {product_id} not found")

    if product.company_id != company_id:
        _log_cross_tenant_attempt(
            f"Product {product_id} belongs to company {product.company_id}, not {company_id}",
            company_id=company_id,
        )
        raise TenantAccessError(f"Product {product_id} not found")  # Don't reveal it exists elsewhere

    return product


def _log_cross_tenant_attempt(reason: str, *, company_id: int | None) -> None:
    user_id = None
    resource = None
    ip_address = None
    user_agent = None
    if has_request_context():
        current_user = getattr(g, "current_user", None)
        user_id = current_user.id if current_user is not None else None
        resource = request.path
        ip_address = request.remote_addr
        user_agent = request.headers.get("User-Agent")

    log_security_event(
        user_id=user_id,
        event_type="CROSS_TENANT_ACCESS_DENIED",
        success=False,
        resource=resource,
        reason=reason,
        ip_address=ip_address,
        user_agent=user_agent,
        company_id=company_id,
    )
