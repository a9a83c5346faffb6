# Overview: Service-layer operations for permission; encapsulates business logic and database work.

"""
Permission Checking and Security Event Logging with Multi-Tenant Support

WHY: Enforce role-based access control and keep an audit trail of denials.

Every protected operation names one permission code; the role -> permission
table in permissions/roles.py is the single source of truth for which roles
may exercise it. Handlers never branch on role names for authorization.

DESIGN PRINCIPLES:
- Fail closed: unknown roles and unknown codes are denied
- Log denials only: permission grants are not logged
- Tenant isolation: security events carry company_id
"""

from ..extensions import db
from ..models import SecurityEvent
from ..permissions import ROLE_PERMISSIONS, validate_permission_code
from distrack.time_utils import utcnow


class PermissionDeniedError(Exception):
    """Raised when a role lacks the required permission."""
    pass


def log_security_event(
    user_id: int | None,
    event_type: str,
    success: bool,
    resource: str | None = None,
    action: str | None = None,
    reason: str | None = None,
    ip_address: str | None = None,
    user_agent: str | None = None,
    company_id: int | None = None,
) -> SecurityEvent:
    """
    Log security event to audit trail with tenant context.

    event_type examples:
    - PERMISSION_DENIED
    - LOGIN_FAILED
    - CROSS_TENANT_ACCESS_DENIED
    """
    event = SecurityEvent(
        user_id=user_id,
        company_id=company_id,
        event_type=event_type,
        resource=resource,
        action=action,
        success=success,
        reason=reason,
        ip_address=ip_address,
        user_agent=user_agent,
        occurred_at=utcnow()
    )

    db.session.add(event)
    db.session.commit()

    return event


def get_role_permissions(role: str) -> frozenset[str]:
    """Permission codes granted to a role (empty for unknown roles)."""
    return ROLE_PERMISSIONS.get(role, frozenset())


def has_permission(role: str, permission_code: str) -> bool:
    if not validate_permission_code(permission_code):
        return False
    return permission_code in get_role_permissions(role)


def require_permission(
    *,
    user_id: int,
    role: str,
    permission_code: str,
    resource: str | None = None,
    ip_address: str | None = None,
    user_agent: str | None = None,
    company_id: int | None = None,
) -> None:
    """
    Raise PermissionDeniedError unless the role holds permission_code.

    Denials are written to security_events.
    """
    if has_permission(role, permission_code):
        return

    log_security_event(
        user_id=user_id,
        event_type="PERMISSION_DENIED",
        success=False,
        resource=resource,
        action=permission_code,
        reason=f"Role {role!r} lacks permission: {permission_code}",
        ip_address=ip_address,
        user_agent=user_agent,
        company_id=company_id,
    )
    raise PermissionDeniedError(f"Role {role!r} lacks permission: {permission_code}")
