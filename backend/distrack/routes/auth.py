# Overview: Flask API routes for auth operations; parses input and returns JSON responses.

# backend/distrack/routes/auth.py
"""
Authentication API routes

- Registration creates the company on first use and signs the new user in
- Login is scoped by company name; user_id is only unique inside a company
- Failed logins are recorded as security events
- Tokens are bearer tokens; logout revokes them
"""

from flask import Blueprint, request, jsonify, current_app, g

from ..services import auth_service
from ..services import session_service
from ..services import permission_service
from ..services.auth_service import AccountNotFoundError, AuthenticationError
from ..validation import ValidationError, ConflictError
from ..decorators import require_auth, bearer_token


auth_bp = Blueprint("auth", __name__, url_prefix="/api/auth")


def _session_payload(user, token: str, session) -> dict:
    return {
        "user": user.to_dict(),
        "permissions": sorted(permission_service.get_role_permissions(user.role)),
        "token": token,
        "session": session.to_dict(),
        "company_id": user.company_id,
        "company_name": user.company.name,
    }


@auth_bp.post("/register")
def register_route():
    """
    Register a user and return a session token.

    Request body:
    {
        "company_name": "Acme",
        "user_id": "mgr1",
        "password": "secret1",   // at least 6 characters
        "name": "Maria",
        "role": "manager"        // admin | manager | worker
    }
    """
    try:
        data = request.get_json(silent=True) or {}
        if not isinstance(data, dict):
            return jsonify({"error": "Invalid JSON payload"}), 400

        try:
            user = auth_service.register_user(
                company_name=data.get("company_name"),
                user_id=data.get("user_id"),
                password=data.get("password"),
                name=data.get("name"),
                role=data.get("role"),
            )
        except ValidationError as e:
            return jsonify({"error": str(e)}), 400
        except ConflictError as e:
            return jsonify({"error": str(e)}), 409

        session, token = session_service.create_session(user.id)

        current_app.logger.info(
            "Registered user %r (%s) in company %s", user.user_id, user.role, user.company_id
        )
        body = _session_payload(user, token, session)
        body["message"] = "Registration successful"
        return jsonify(body), 201

    except Exception:
        current_app.logger.exception("Failed to register user")
        return jsonify({"error": "Internal server error"}), 500


@auth_bp.post("/login")
def login_route():
    """
    Authenticate user and create session token.

    Returns user info and session token on success.
    Token must be included in Authorization header for protected routes.

    - Unknown company or user_id: 404
    - Wrong password: 401
    """
    try:
        data = request.get_json(silent=True) or {}
        if not isinstance(data, dict):
            return jsonify({"error": "Invalid JSON payload"}), 400
        company_name = data.get("company_name")
        user_id = data.get("user_id")
        password = data.get("password")

        if not all([company_name, user_id, password]):
            return jsonify({"error": "company_name, user_id and password required"}), 400

        try:
            user = auth_service.authenticate(
                company_name=company_name,
                user_id=user_id,
                password=password,
            )
        except (AccountNotFoundError, AuthenticationError) as e:
            company = auth_service.get_company_by_name(str(company_name).strip())
            permission_service.log_security_event(
                user_id=None,
                event_type="LOGIN_FAILED",
                success=False,
                resource=request.path,
                reason=f"{user_id!r}: {e}",
                ip_address=request.remote_addr,
                user_agent=request.headers.get("User-Agent"),
                company_id=company.id if company else None,
            )
            status = 404 if isinstance(e, AccountNotFoundError) else 401
            return jsonify({"error": str(e)}), status

        session, token = session_service.create_session(user.id)

        body = _session_payload(user, token, session)
        body["message"] = "Login successful"
        return jsonify(body), 200

    except Exception:
        current_app.logger.exception("Failed to login user")
        return jsonify({"error": "Internal server error"}), 500


@auth_bp.post("/logout")
def logout_route():
    """
    Revoke session token (logout).

    Expects Authorization header: Bearer <token>
    """
    try:
        token = bearer_token()
        if token is None:
            return jsonify({"error": "Authorization header required"}), 401

        revoked = session_service.revoke_session(token, reason="User logout")

        if not revoked:
            return jsonify({"error": "Invalid or expired token"}), 401

        return jsonify({"message": "Logout successful"}), 200

    except Exception:
        current_app.logger.exception("Failed to logout user")
        return jsonify({"error": "Internal server error"}), 500


@auth_bp.get("/me")
@require_auth
def me_route():
    """Current user, company and the permission codes the role grants."""
    user = g.current_user
    return jsonify({
        "user": user.to_dict(),
        "permissions": sorted(permission_service.get_role_permissions(g.role)),
        "company_id": g.company_id,
        "company_name": user.company.name,
    }), 200
