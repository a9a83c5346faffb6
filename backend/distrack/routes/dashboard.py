# Overview: Flask API routes for the dashboard; returns stock and distribution totals as JSON.

# backend/distrack/routes/dashboard.py
"""
Dashboard routes.

Stats are company-wide for every role. The recent list follows the same row
scoping as reports.
"""
from flask import Blueprint, current_app, g, jsonify
from ..services import dashboard_service
from ..decorators import require_auth, require_permission


dashboard_bp = Blueprint("dashboard", __name__, url_prefix="/api/dashboard")


@dashboard_bp.get("/stats")
@require_auth
@require_permission("VIEW_DASHBOARD")
def dashboard_stats():
    """Company-wide stock and distribution totals (same for every role)."""
    try:
        return jsonify(dashboard_service.dashboard_summary(g.company_id)), 200
    except Exception:
        current_app.logger.exception("Failed to build dashboard summary")
        return jsonify({"error": "Internal server error"}), 500


@dashboard_bp.get("/recent")
@require_auth
@require_permission("VIEW_DASHBOARD")
def dashboard_recent():
    try:
        rows = dashboard_service.recent_distributions(
            company_id=g.company_id,
            role=g.role,
            user_id=g.current_user.id,
        )
        return jsonify(rows), 200
    except Exception:
        current_app.logger.exception("Failed to list recent distributions")
        return jsonify({"error": "Internal server error"}), 500
