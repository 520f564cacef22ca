# Overview: Service-layer operations for auth; encapsulates business logic and database work.

"""
Authentication and User Administration Service

WHY: Every action must be attributable. Uses bcrypt for secure password
hashing and validates password strength.

SECURITY NOTES:
- Passwords hashed with bcrypt (cost factor 12)
- Minimum 8 characters, at least one letter and one digit
- Session tokens managed separately (see session_service.py)
- Suspending a user deletes all of their sessions in the same call
"""

import logging
import re

import bcrypt

from ..extensions import db
from ..models import User
from ..models.auth import USER_ROLES, USER_STATUSES
from ..validation import ConflictError, NotFoundError, ValidationError
from puantaj.time_utils import utcnow
from . import session_service


logger = logging.getLogger(__name__)

EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


class PasswordValidationError(Exception):
    """Raised when password doesn't meet strength requirements."""
    pass


class AccountSuspendedError(Exception):
    """Raised when a suspended user tries to authenticate."""
    pass


def validate_password_strength(password: str) -> None:
    """
    Validate password meets strength requirements.

    Requirements:
    - Minimum 8 characters
    - At least one letter
    - At least one digit

    Raises PasswordValidationError if requirements not met.
    """
    if not password or len(password) < 8:
        raise PasswordValidationError("Password must be at least 8 characters long")

    if not re.search(r'[A-Za-z]', password):
        raise PasswordValidationError("Password must contain at least one letter")

    if not re.search(r'\d', password):
        raise PasswordValidationError("Password must contain at least one digit")


def hash_password(password: str) -> str:
    """
    Hash password using bcrypt with cost factor 12.

    Password is validated for strength before hashing.
    """
    validate_password_strength(password)
    salt = bcrypt.gensalt(rounds=12)
    hashed = bcrypt.hashpw(password.encode('utf-8'), salt)
    return hashed.decode('utf-8')  # Store as string in database


def verify_password(password: str, password_hash: str) -> bool:
    """
    Verify password against bcrypt hash.

    Returns True if password matches hash, False otherwise.
    bcrypt.checkpw() is timing-safe.
    """
    if not password or not password_hash:
        return False
    try:
        return bcrypt.checkpw(password.encode('utf-8'), password_hash.encode('utf-8'))
    except ValueError:
        # Malformed hash (e.g. legacy plaintext rows)
        return False


def normalize_email(email: str | None) -> str:
    return (email or "").strip().lower()


def create_user(
    email: str,
    password: str,
    first_name: str | None = None,
    last_name: str | None = None,
    role: str = "USER",
) -> User:
    """
    Create new user with bcrypt password hashing.

    Raises:
        ValidationError: If the email or role is invalid
        ConflictError: If the email is already registered
        PasswordValidationError: If password doesn't meet requirements
    """
    email = normalize_email(email)
    if not EMAIL_RE.match(email):
        raise ValidationError("A valid email address is required")
    if role not in USER_ROLES:
        raise ValidationError(f"role must be one of: {', '.join(USER_ROLES)}")

    existing = db.session.query(User).filter_by(email=email).first()
    if existing:
        raise ConflictError("Email already registered")

    # Hash password with bcrypt (validates strength automatically)
    password_hash = hash_password(password)

    user = User(
        email=email,
        password_hash=password_hash,
        first_name=(first_name or "").strip() or None,
        last_name=(last_name or "").strip() or None,
        role=role,
        is_admin=role in ("ADMIN", "SUPER_ADMIN"),
        status="ACTIVE",
    )

    db.session.add(user)
    db.session.commit()
    return user


def authenticate(email: str, password: str) -> User | None:
    """
    Authenticate user with email and password.

    Returns User if credentials valid, None otherwise.
    Updates last_login_at timestamp on successful authentication.

    Raises AccountSuspendedError if the credentials are valid but the
    account is suspended.
    """
    user = db.session.query(User).filter_by(email=normalize_email(email)).first()

    if not user:
        return None

    if not verify_password(password, user.password_hash):
        return None

    if user.is_suspended:
        raise AccountSuspendedError("Account is suspended")

    user.last_login_at = utcnow()
    db.session.commit()
    return user


def get_user(user_id: str) -> User:
    user = db.session.get(User, user_id)
    if not user:
        raise NotFoundError("User not found")
    return user


def list_users() -> list[User]:
    return db.session.query(User).order_by(User.created_at.desc()).all()


def set_user_status(user_id: str, status: str, actor: User | None = None) -> User:
    """
    Activate or suspend a user.

    Suspension deletes every session of the user immediately; any token
    still held by a client fails its next request.
    """
    if status not in USER_STATUSES:
        raise ValidationError(f"status must be one of: {', '.join(USER_STATUSES)}")

    user = get_user(user_id)
    if actor is not None and actor.id == user.id and status == "SUSPENDED":
        raise ConflictError("You cannot suspend your own account")

    user.status = status
    db.session.commit()

    if status == "SUSPENDED":
        removed = session_service.delete_user_sessions(user.id)
        logger.info("Suspended user %s; %d sessions removed", user.id, removed)

    return user


def set_user_role(user_id: str, role: str) -> User:
    if role not in USER_ROLES:
        raise ValidationError(f"role must be one of: {', '.join(USER_ROLES)}")

    user = get_user(user_id)
    user.role = role
    # Legacy flag follows the role so old clients keep working
    user.is_admin = role in ("ADMIN", "SUPER_ADMIN")
    db.session.commit()
    return user


def change_password(user: User, current_password: str, new_password: str) -> None:
    if not verify_password(current_password, user.password_hash):
        raise ValidationError("Current password is incorrect")
    user.password_hash = hash_password(new_password)
    db.session.commit()
    session_service.delete_user_sessions(user.id)
