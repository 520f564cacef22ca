from __future__ import annotations

from ..extensions import db
from .auth import new_id
from puantaj.time_utils import to_utc_z


class Note(db.Model):
    """Free-text note kept by a user."""
    __tablename__ = "notes"

    id = db.Column(db.String(36), primary_key=True, default=new_id)
    user_id = db.Column(db.String(36), db.ForeignKey("users.id"), nullable=False, index=True)

    content = db.Column(db.Text, nullable=False)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "user_id": self.user_id,
            "content": self.content,
            "created_at": to_utc_z(self.created_at),
        }
