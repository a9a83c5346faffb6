# Overview: Flask API routes for products operations; parses input and returns JSON responses.

# backend/distrack/routes/products.py
"""
Product management routes with multi-tenant support.

MULTI-TENANT: All product operations are scoped to the caller's company.
The company_id is derived from g.company_id (set by @require_auth).

SECURITY: All routes require authentication.
- Listing requires VIEW_PRODUCTS
- Create and bulk import require MANAGE_PRODUCTS
- The allocatable-stock snapshot requires VIEW_AVAILABLE_STOCK
"""
from flask import Blueprint, request, g, current_app, jsonify
from ..services import products_service
from ..validation import ValidationError
from ..decorators import require_auth, require_permission


products_bp = Blueprint("products", __name__, url_prefix="/api/products")


@products_bp.get("")
@require_auth
@require_permission("VIEW_PRODUCTS")
def list_products():
    """
    List all products with initial and remaining quantity, newest first.

    MULTI-TENANT: Products are filtered to the caller's company.
    """
    try:
        return jsonify(products_service.list_products(g.company_id)), 200
    except Exception:
        current_app.logger.exception("Failed to list products")
        return jsonify({"error": "Internal server error"}), 500


@products_bp.get("/available")
@require_auth
@require_permission("VIEW_AVAILABLE_STOCK")
def list_available_products():
    """Products with remaining stock > 0, ordered by name."""
    try:
        return jsonify(products_service.list_available_products(g.company_id)), 200
    except Exception:
        current_app.logger.exception("Failed to list available products")
        return jsonify({"error": "Internal server error"}), 500


@products_bp.post("")
@require_auth
@require_permission("MANAGE_PRODUCTS")
def create_product_route():
    """
    Create a new product.

    MULTI-TENANT: Product is created in the caller's company.
    initial_quantity is fixed from here on.
    """
    payload = request.get_json(silent=True) or {}

    try:
        patch = products_service.validate_product_payload(payload)
    except ValidationError as e:
        return jsonify({"error": str(e)}), 400

    try:
        created = products_service.create_product(company_id=g.company_id, patch=patch)
    except Exception:
        current_app.logger.exception("Failed to create product")
        return jsonify({"error": "Internal server error"}), 500

    return jsonify(created), 201


@products_bp.post("/bulk")
@require_auth
@require_permission("MANAGE_PRODUCTS")
def bulk_create_products_route():
    """
    Create many products in one request.

    Request body: {"products": [{"name": ..., "category": ..., "quantity": ...}, ...]}
    Each row may use initial_quantity in place of quantity.

    Either every row is created or none is; the error names the offending row.
    """
    payload = request.get_json(silent=True) or {}
    rows = payload.get("products") if isinstance(payload, dict) else None

    try:
        count = products_service.bulk_create_products(company_id=g.company_id, rows=rows)
    except ValidationError as e:
        return jsonify({"error": str(e)}), 400
    except Exception:
        current_app.logger.exception("Failed to import products")
        return jsonify({"error": "Internal server error"}), 500

    return jsonify({"success": True, "count": count}), 201
