# Overview: Flask API routes for distribution reports; parses filters and returns JSON responses.

# backend/distrack/routes/reports.py
"""
Reporting routes with multi-tenant support.

Every report reads the same query filters:
- start_date, end_date: YYYY-MM-DD, both inclusive
- worker, product: exact worker or product name
- category: exact category

Roles without VIEW_ALL_DISTRIBUTIONS only see rows they recorded.
"""
from flask import Blueprint, current_app, g, jsonify, request
from ..services import reporting_service
from ..services.reporting_service import ReportFilters
from ..validation import ValidationError
from ..decorators import require_auth, require_permission


reports_bp = Blueprint("reports", __name__, url_prefix="/api/reports")


def _scope() -> dict:
    return {
        "company_id": g.company_id,
        "role": g.role,
        "user_id": g.current_user.id,
    }


@reports_bp.get("/distributions")
@require_auth
@require_permission("VIEW_REPORTS")
def distributions_report():
    try:
        filters = ReportFilters.from_args(request.args)
    except ValidationError as exc:
        return jsonify({"error": str(exc)}), 400

    try:
        rows = reporting_service.list_distributions(filters=filters, **_scope())
        return jsonify(rows), 200
    except Exception:
        current_app.logger.exception("Failed to build distributions report")
        return jsonify({"error": "Internal server error"}), 500


@reports_bp.get("/product-analytics")
@require_auth
@require_permission("VIEW_REPORTS")
def product_analytics_report():
    try:
        filters = ReportFilters.from_args(request.args)
    except ValidationError as exc:
        return jsonify({"error": str(exc)}), 400

    try:
        rows = reporting_service.product_analytics(filters=filters, **_scope())
        return jsonify(rows), 200
    except Exception:
        current_app.logger.exception("Failed to build product analytics")
        return jsonify({"error": "Internal server error"}), 500


@reports_bp.get("/worker-analytics")
@require_auth
@require_permission("VIEW_REPORTS")
def worker_analytics_report():
    try:
        filters = ReportFilters.from_args(request.args)
    except ValidationError as exc:
        return jsonify({"error": str(exc)}), 400

    try:
        rows = reporting_service.worker_analytics(filters=filters, **_scope())
        return jsonify(rows), 200
    except Exception:
        current_app.logger.exception("Failed to build worker analytics")
        return jsonify({"error": "Internal server error"}), 500
