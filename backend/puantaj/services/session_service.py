# Overview: Service-layer operations for session; encapsulates business logic and database work.

"""
Session Token Management Service

WHY: One auth mechanism only: opaque random bearer tokens backed by a
session row. Every authenticated request resolves its token against the
database, so suspending a user takes effect on that user's next request.

SESSION LIFECYCLE:
- Active -> Deleted on logout, expiry (read-time check or sweep),
  or suspension of the owning user
- Rows are deleted, never flagged

SECURITY FEATURES:
- Cryptographically secure random tokens (32 bytes)
- Tokens hashed with SHA-256 before storage (fast, one-way)
- 30-day absolute timeout (SESSION_TTL_DAYS)
- Tracks client IP and user agent for security monitoring
"""

import logging
import secrets
import hashlib
from dataclasses import dataclass
from datetime import timedelta

from flask import current_app, has_app_context

from ..extensions import db
from ..models import SessionToken, User
from puantaj.time_utils import utcnow


logger = logging.getLogger(__name__)

DEFAULT_SESSION_TTL = timedelta(days=30)


@dataclass
class SessionContext:
    """Resolved session: the live user and the session row that authenticated it."""
    user: User
    session: SessionToken


def session_ttl() -> timedelta:
    if has_app_context():
        return timedelta(days=current_app.config.get("SESSION_TTL_DAYS", 30))
    return DEFAULT_SESSION_TTL


def generate_token() -> str:
    """
    Generate cryptographically secure random token.

    Returns 64-character hex string (32 bytes of entropy).
    This is the plaintext token sent to client (never stored).
    """
    return secrets.token_hex(32)


def hash_token(token: str) -> str:
    """
    Hash token for database storage using SHA-256.

    Tokens are already high-entropy (unlike passwords), so a fast hash
    is sufficient.
    """
    return hashlib.sha256(token.encode('utf-8')).hexdigest()


def create_session(
    user_id: str,
    user_agent: str | None = None,
    ip_address: str | None = None
) -> tuple[SessionToken, str]:
    """
    Create new session token for user.

    Returns (session_record, plaintext_token).
    Client receives plaintext_token, database stores only the hash.

    Raises ValueError if the user does not exist or is suspended.
    """
    user = db.session.get(User, user_id)
    if not user:
        raise ValueError("User not found")
    if user.is_suspended:
        raise ValueError("User account is suspended")

    plaintext_token = generate_token()
    now = utcnow()

    session = SessionToken(
        user_id=user_id,
        token_hash=hash_token(plaintext_token),
        created_at=now,
        last_used_at=now,
        expires_at=now + session_ttl(),
        user_agent=user_agent,
        ip_address=ip_address,
    )

    db.session.add(session)
    db.session.commit()

    return session, plaintext_token


def resolve_session(token: str) -> SessionContext | None:
    """
    Resolve a bearer token to its live user.

    Returns None (fail-closed) if:
    - Token is unknown
    - Session has expired (row is deleted)
    - Owning user is missing or SUSPENDED (all of the user's rows are deleted)

    Updates last_used_at on success.
    """
    if not token:
        return None

    session = db.session.query(SessionToken).filter_by(token_hash=hash_token(token)).first()
    if not session:
        return None

    now = utcnow()
    if session.expires_at < now:
        db.session.delete(session)
        db.session.commit()
        return None

    user = session.user
    if not user:
        db.session.delete(session)
        db.session.commit()
        return None

    if user.is_suspended:
        removed = delete_user_sessions(user.id)
        logger.info("Rejected session for suspended user %s (%d sessions removed)", user.id, removed)
        return None

    session.last_used_at = now
    db.session.commit()

    return SessionContext(user=user, session=session)


def delete_session(token: str) -> bool:
    """
    Delete the session for a token (logout).

    Returns True if a row was deleted, False if the token was unknown.
    """
    deleted = db.session.query(SessionToken).filter_by(token_hash=hash_token(token)).delete()
    db.session.commit()
    return deleted > 0


def delete_user_sessions(user_id: str) -> int:
    """
    Delete every session of a user.

    Returns count of sessions deleted.

    WHY: Suspension and password changes must force re-authentication
    on all devices.
    """
    deleted = db.session.query(SessionToken).filter_by(user_id=user_id).delete()
    db.session.commit()
    return deleted


def cleanup_expired_sessions() -> int:
    """
    Delete expired sessions.

    Returns count of sessions deleted. Correctness never depends on this
    running: expiry is also enforced in resolve_session.
    """
    deleted = db.session.query(SessionToken).filter(
        SessionToken.expires_at < utcnow()
    ).delete()

    db.session.commit()
    return deleted
