from __future__ import annotations

import uuid

from ..extensions import db
from puantaj.time_utils import to_utc_z


def new_id() -> str:
    return str(uuid.uuid4())


USER_ROLES = ("USER", "ADMIN", "SUPER_ADMIN")
USER_STATUSES = ("ACTIVE", "SUSPENDED")


class User(db.Model):
    """
    User accounts for authentication and attribution.

    Every customer, ledger entry, contractor, personnel record and project
    belongs to exactly one user (user_id). Email is globally unique.

    ADMIN ACCESS: role ADMIN/SUPER_ADMIN, or the legacy is_admin flag.
    SUSPENSION: status=SUSPENDED blocks login and kills live sessions on
    the next authenticated request.
    """
    __tablename__ = "users"

    id = db.Column(db.String(36), primary_key=True, default=new_id)

    email = db.Column(db.String(255), nullable=False, unique=True, index=True)

    # Bcrypt hashed password
    password_hash = db.Column(db.String(255), nullable=False)

    first_name = db.Column(db.String(128), nullable=True)
    last_name = db.Column(db.String(128), nullable=True)

    role = db.Column(db.String(16), nullable=False, default="USER")
    is_admin = db.Column(db.Boolean, nullable=False, default=False)
    status = db.Column(db.String(16), nullable=False, default="ACTIVE", index=True)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())
    last_login_at = db.Column(db.DateTime(timezone=True), nullable=True)

    @property
    def is_suspended(self) -> bool:
        return self.status == "SUSPENDED"

    @property
    def has_admin_access(self) -> bool:
        return bool(self.is_admin) or self.role in ("ADMIN", "SUPER_ADMIN")

    @property
    def display_name(self) -> str:
        parts = [p for p in (self.first_name, self.last_name) if p]
        return " ".join(parts) if parts else self.email

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "email": self.email,
            "first_name": self.first_name,
            "last_name": self.last_name,
            "role": self.role,
            "is_admin": self.has_admin_access,
            "status": self.status,
            "created_at": to_utc_z(self.created_at),
            "last_login_at": to_utc_z(self.last_login_at) if self.last_login_at else None,
        }


class SessionToken(db.Model):
    """
    Server-side session rows.

    Tokens are opaque random strings (32 bytes = 64 hex chars); only the
    SHA-256 hash is stored. Rows are deleted (not flagged) on logout,
    expiry, and suspension of the owning user.
    """
    __tablename__ = "session_tokens"
    __table_args__ = (
        db.Index("ix_session_tokens_user_expires", "user_id", "expires_at"),
    )

    id = db.Column(db.String(36), primary_key=True, default=new_id)
    user_id = db.Column(db.String(36), db.ForeignKey("users.id"), nullable=False, index=True)

    # Token hash (never store plaintext tokens!)
    token_hash = db.Column(db.String(255), nullable=False, unique=True, index=True)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())
    last_used_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())
    expires_at = db.Column(db.DateTime(timezone=True), nullable=False, index=True)

    # Client information (for security monitoring)
    user_agent = db.Column(db.String(512), nullable=True)
    ip_address = db.Column(db.String(45), nullable=True)  # IPv6 max length

    user = db.relationship("User", backref=db.backref("session_tokens", lazy=True, passive_deletes=True))

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "user_id": self.user_id,
            "created_at": to_utc_z(self.created_at),
            "last_used_at": to_utc_z(self.last_used_at),
            "expires_at": to_utc_z(self.expires_at),
        }
