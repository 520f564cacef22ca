from __future__ import annotations

from ..extensions import db
from .auth import new_id
from puantaj.time_utils import to_utc_z
from puantaj.validation import decimal_str


TRANSACTION_TYPES = {"income", "expense"}
PAYMENT_SOURCE_TYPES = {"customer", "contractor", "personnel"}


class Transaction(db.Model):
    """
    Income/expense ledger entry.

    Entries are either typed in by the user or mirrored from a payment.
    Mirrored entries carry (source_payment_type, source_payment_id) so the
    originating payment can remove exactly its own entry on deletion.
    Rows created before that link existed have both columns NULL.
    """
    __tablename__ = "transactions"
    __table_args__ = (
        db.UniqueConstraint("source_payment_type", "source_payment_id", name="uq_transactions_source_payment"),
        db.Index("ix_transactions_user_type_date", "user_id", "type", "date"),
    )

    id = db.Column(db.String(36), primary_key=True, default=new_id)
    user_id = db.Column(db.String(36), db.ForeignKey("users.id"), nullable=False, index=True)

    type = db.Column(db.String(16), nullable=False)  # income, expense
    amount = db.Column(db.Numeric(12, 2), nullable=False)
    description = db.Column(db.String(500), nullable=False)
    category = db.Column(db.String(64), nullable=True, index=True)
    date = db.Column(db.DateTime(timezone=True), nullable=False, index=True)

    source_payment_type = db.Column(db.String(16), nullable=True)  # customer, contractor, personnel
    source_payment_id = db.Column(db.String(36), nullable=True, index=True)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())

    @property
    def is_mirrored(self) -> bool:
        return self.source_payment_id is not None

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "user_id": self.user_id,
            "type": self.type,
            "amount": decimal_str(self.amount),
            "description": self.description,
            "category": self.category,
            "date": to_utc_z(self.date),
            "source_payment_type": self.source_payment_type,
            "source_payment_id": self.source_payment_id,
            "created_at": to_utc_z(self.created_at),
        }
