from __future__ import annotations

from decimal import Decimal

from ..extensions import db
from .auth import new_id
from puantaj.time_utils import to_utc_z
from puantaj.validation import decimal_str


CONTRACTOR_STATUSES = {"active", "completed"}


class Contractor(db.Model):
    """Subcontractor working for the user; total_amount is the agreed contract value."""
    __tablename__ = "contractors"

    id = db.Column(db.String(36), primary_key=True, default=new_id)
    user_id = db.Column(db.String(36), db.ForeignKey("users.id"), nullable=False, index=True)

    name = db.Column(db.String(255), nullable=False)
    company = db.Column(db.String(255), nullable=True)
    phone = db.Column(db.String(32), nullable=True)
    email = db.Column(db.String(255), nullable=True)
    status = db.Column(db.String(16), nullable=False, default="active", index=True)
    total_amount = db.Column(db.Numeric(12, 2), nullable=False, default=Decimal("0.00"))

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "user_id": self.user_id,
            "name": self.name,
            "company": self.company,
            "phone": self.phone,
            "email": self.email,
            "status": self.status,
            "total_amount": decimal_str(self.total_amount),
            "created_at": to_utc_z(self.created_at),
        }


class ContractorPayment(db.Model):
    """Money paid to a contractor; mirrored as an expense Transaction."""
    __tablename__ = "contractor_payments"

    id = db.Column(db.String(36), primary_key=True, default=new_id)
    contractor_id = db.Column(db.String(36), db.ForeignKey("contractors.id"), nullable=False, index=True)

    amount = db.Column(db.Numeric(12, 2), nullable=False)
    description = db.Column(db.String(500), nullable=False)
    payment_date = db.Column(db.DateTime(timezone=True), nullable=False, index=True)
    payment_method = db.Column(db.String(32), nullable=True)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())

    contractor = db.relationship("Contractor", backref=db.backref("payments", lazy=True))

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "contractor_id": self.contractor_id,
            "amount": decimal_str(self.amount),
            "description": self.description,
            "payment_date": to_utc_z(self.payment_date),
            "payment_method": self.payment_method,
            "created_at": to_utc_z(self.created_at),
        }
