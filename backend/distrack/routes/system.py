# backend/distrack/routes/system.py
"""
System health endpoint.

Reports database reachability so a load balancer or operator can tell a
running process from a working one.
"""

import time
from flask import Blueprint, current_app, jsonify
from ..extensions import db
from ..models import Company, Product, Distribution


system_bp = Blueprint("system", __name__)


def check_database_health() -> dict:
    """
    Check database connectivity and basic operations.

    Returns dict with status and details.
    """
    start_time = time.time()
    try:
        company_count = db.session.query(Company).count()
        product_count = db.session.query(Product).count()
        distribution_count = db.session.query(Distribution).count()

        elapsed_ms = (time.time() - start_time) * 1000

        return {
            "status": "healthy",
            "latency_ms": round(elapsed_ms, 2),
            "details": {
                "companies": company_count,
                "products": product_count,
                "distributions": distribution_count,
            }
        }
    except Exception:
        elapsed_ms = (time.time() - start_time) * 1000
        current_app.logger.exception("Database health check failed")
        db.session.rollback()
        return {
            "status": "unhealthy",
            "latency_ms": round(elapsed_ms, 2),
            "error": "Database error"
        }


@system_bp.get("/api/health")
def health():
    database = check_database_health()
    healthy = database["status"] == "healthy"
    body = {
        "status": "ok" if healthy else "degraded",
        "checks": {"database": database},
    }
    return jsonify(body), 200 if healthy else 503
