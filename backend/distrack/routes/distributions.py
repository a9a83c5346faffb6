# Overview: Flask API routes for distribution operations; parses input and returns JSON responses.

# backend/distrack/routes/distributions.py
"""
Distribution routes with multi-tenant support.

POST validates one worker's allocations against live remaining stock and
writes them in a single transaction. Stock figures sent by the client are
never consulted; only product ids and quantities are read from the body.

Status codes:
- 400 malformed body (missing worker_name, bad allocations, duplicate product)
- 404 product missing or owned by another company
- 409 requested quantity exceeds remaining stock
"""
from flask import Blueprint, request, g, current_app, jsonify

from ..models import Distribution
from ..services import distribution_service, reporting_service
from ..services.distribution_service import WorkerIdentity
from ..services.stock_service import InsufficientStockError
from ..services.tenant_service import TenantAccessError
from ..validation import (
    ModelValidationPolicy,
    ValidationError,
    parse_allocations,
    validate_payload,
)
from ..decorators import require_auth, require_permission

WORKER_POLICY = ModelValidationPolicy(
    writable_fields={"worker_name", "worker_gender", "worker_mobile"},
    required_on_create={"worker_name"},
)

distributions_bp = Blueprint("distributions", __name__, url_prefix="/api/distributions")


@distributions_bp.post("")
@require_auth
@require_permission("CREATE_DISTRIBUTION")
def create_distribution_route():
    """
    Record stock handed to one worker.

    Request body:
    {
        "worker_name": "Ravi",
        "worker_gender": "male",        // optional
        "worker_mobile": "98450...",    // optional
        "allocations": [{"product_id": 1, "quantity": 30}, ...]
    }
    """
    payload = request.get_json(silent=True) or {}
    if not isinstance(payload, dict):
        return jsonify({"error": "Invalid JSON payload"}), 400

    worker_fields = {k: v for k, v in payload.items() if k != "allocations"}
    try:
        patch = validate_payload(
            model=Distribution,
            payload=worker_fields,
            policy=WORKER_POLICY,
            partial=False,
        )
        allocations = parse_allocations(payload.get("allocations"))
    except ValidationError as e:
        return jsonify({"error": str(e)}), 400

    worker = WorkerIdentity(
        name=patch["worker_name"],
        gender=patch.get("worker_gender"),
        mobile=patch.get("worker_mobile"),
    )

    try:
        count = distribution_service.record_distribution(
            company_id=g.company_id,
            user_id=g.current_user.id,
            worker=worker,
            allocations=allocations,
        )
    except ValidationError as e:
        return jsonify({"error": str(e)}), 400
    except TenantAccessError as e:
        return jsonify({"error": str(e)}), 404
    except InsufficientStockError as e:
        return jsonify(e.to_dict()), 409
    except Exception:
        current_app.logger.exception("Failed to record distribution")
        return jsonify({"error": "Internal server error"}), 500

    return jsonify({"success": True, "count": count}), 201


@distributions_bp.get("")
@require_auth
@require_permission("VIEW_DISTRIBUTIONS")
def list_distributions_route():
    """
    Distribution history, newest first.

    Roles without VIEW_ALL_DISTRIBUTIONS see only the rows they recorded.
    """
    try:
        rows = reporting_service.list_distributions(
            company_id=g.company_id,
            role=g.role,
            user_id=g.current_user.id,
        )
        return jsonify(rows), 200
    except Exception:
        current_app.logger.exception("Failed to list distributions")
        return jsonify({"error": "Internal server error"}), 500


@distributions_bp.get("/workers")
@require_auth
@require_permission("VIEW_WORKER_DIRECTORY")
def list_previous_workers_route():
    """Recently served worker identities, for prefilling the next allocation."""
    limit = request.args.get("limit", default=20, type=int)
    limit = max(1, min(limit, 100))
    try:
        workers = distribution_service.list_previous_workers(g.company_id, limit=limit)
        return jsonify(workers), 200
    except Exception:
        current_app.logger.exception("Failed to list previous workers")
        return jsonify({"error": "Internal server error"}), 500
