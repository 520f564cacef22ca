from __future__ import annotations

from ..extensions import db
from .auth import new_id
from puantaj.time_utils import to_utc_z
from puantaj.validation import decimal_str


PROJECT_TYPES = {"given", "received"}
PROJECT_STATUSES = {"active", "passive", "completed"}


class Project(db.Model):
    """
    Contracted project.

    type "given": work the user hands out; "received": work the user took on.
    """
    __tablename__ = "projects"
    __table_args__ = (
        db.Index("ix_projects_user_type_status", "user_id", "type", "status"),
    )

    id = db.Column(db.String(36), primary_key=True, default=new_id)
    user_id = db.Column(db.String(36), db.ForeignKey("users.id"), nullable=False, index=True)

    name = db.Column(db.String(255), nullable=False)
    type = db.Column(db.String(16), nullable=False)
    amount = db.Column(db.Numeric(12, 2), nullable=False)
    status = db.Column(db.String(16), nullable=False, default="active")
    description = db.Column(db.Text, nullable=True)
    client_name = db.Column(db.String(255), nullable=True)
    start_date = db.Column(db.DateTime(timezone=True), nullable=False)
    end_date = db.Column(db.DateTime(timezone=True), nullable=True)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "user_id": self.user_id,
            "name": self.name,
            "type": self.type,
            "amount": decimal_str(self.amount),
            "status": self.status,
            "description": self.description,
            "client_name": self.client_name,
            "start_date": to_utc_z(self.start_date),
            "end_date": to_utc_z(self.end_date) if self.end_date else None,
            "created_at": to_utc_z(self.created_at),
        }
