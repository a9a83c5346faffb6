from .tenancy import Company
from .auth import User, SessionToken, ROLES, ROLE_ADMIN, ROLE_MANAGER, ROLE_WORKER
from .inventory import Product, Distribution
from .security import SecurityEvent

__all__ = [
    'Company',
    'User', 'SessionToken', 'ROLES', 'ROLE_ADMIN', 'ROLE_MANAGER', 'ROLE_WORKER',
    'Product', 'Distribution',
    'SecurityEvent',
]
