# Overview: Service-layer operations for auth; encapsulates business logic and database work.

"""
Authentication Service with Multi-Tenant Support

MULTI-TENANT: Users belong to exactly one company. A company is created
implicitly by the first registration that names it; later registrations with
the same company name join it. user_id is unique within a company.

SECURITY NOTES:
- Passwords hashed with bcrypt
- Minimum 6 characters required
- Session tokens managed separately (see session_service.py)
"""

import bcrypt
from sqlalchemy.exc import IntegrityError

from ..extensions import db
from ..models import Company, User, ROLES
from ..validation import ConflictError, ValidationError
from distrack.time_utils import utcnow


MIN_PASSWORD_LENGTH = 6
BCRYPT_ROUNDS = 12


class PasswordValidationError(ValidationError):
    """Raised when password doesn't meet strength requirements."""
    pass


class AccountNotFoundError(Exception):
    """Raised when the company or user named at login does not exist."""
    pass


class AuthenticationError(Exception):
    """Raised when the password does not match."""
    pass


def validate_password_strength(password: str) -> None:
    """
    Validate password meets strength requirements.

    Raises PasswordValidationError if requirements not met.
    """
    if not isinstance(password, str) or len(password) < MIN_PASSWORD_LENGTH:
        raise PasswordValidationError(
            f"Password must be at least {MIN_PASSWORD_LENGTH} characters long"
        )


def hash_password(password: str) -> str:
    """
    Hash password using bcrypt.

    Password is validated for strength before hashing.
    """
    validate_password_strength(password)
    salt = bcrypt.gensalt(rounds=BCRYPT_ROUNDS)
    hashed = bcrypt.hashpw(password.encode('utf-8'), salt)
    return hashed.decode('utf-8')  # Store as string in database


def verify_password(password: str, password_hash: str) -> bool:
    """
    Verify password against bcrypt hash.

    Returns False for malformed hashes instead of raising.
    """
    try:
        return bcrypt.checkpw(password.encode('utf-8'), password_hash.encode('utf-8'))
    except ValueError:
        return False


def _clean_text(value) -> str:
    return value.strip() if isinstance(value, str) else ""


def get_company_by_name(name: str) -> Company | None:
    return db.session.query(Company).filter_by(name=name).first()


def register_user(
    *,
    company_name: str,
    user_id: str,
    password: str,
    name: str,
    role: str,
) -> User:
    """
    Register a user, creating the company on first use.

    Raises:
        ValidationError: missing fields, unknown role, weak password
        ConflictError: user_id already exists in this company
    """
    company_name = _clean_text(company_name)
    user_id = _clean_text(user_id)
    name = _clean_text(name)

    if not company_name:
        raise ValidationError("company_name is required")
    if not user_id:
        raise ValidationError("user_id is required")
    if not name:
        raise ValidationError("name is required")
    if role not in ROLES:
        raise ValidationError(f"role must be one of: {', '.join(ROLES)}")

    # Hash first so a weak password never creates a company as a side effect
    password_hash = hash_password(password)

    company = get_company_by_name(company_name)
    if company is None:
        company = Company(name=company_name)
        db.session.add(company)
        db.session.flush()
    else:
        existing = db.session.query(User).filter_by(
            company_id=company.id,
            user_id=user_id,
        ).first()
        if existing:
            raise ConflictError("User ID already exists in this company")

    user = User(
        company_id=company.id,
        user_id=user_id,
        name=name,
        role=role,
        password_hash=password_hash,
    )
    db.session.add(user)
    try:
        db.session.commit()
    except IntegrityError:
        # Lost a race with a concurrent registration of the same user_id
        db.session.rollback()
        raise ConflictError("User ID already exists in this company")
    return user


def authenticate(*, company_name: str, user_id: str, password: str) -> User:
    """
    Authenticate a user within a company.

    Raises:
        AccountNotFoundError: company or user does not exist
        AuthenticationError: password does not match
    """
    company = get_company_by_name(_clean_text(company_name))
    if company is None:
        raise AccountNotFoundError("Company not found. Please register first.")

    user = db.session.query(User).filter_by(
        company_id=company.id,
        user_id=_clean_text(user_id),
    ).first()
    if user is None:
        raise AccountNotFoundError("User not found")

    if not isinstance(password, str) or not verify_password(password, user.password_hash):
        raise AuthenticationError("Invalid password")

    user.last_login_at = utcnow()
    db.session.commit()
    return user
