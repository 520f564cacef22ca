from __future__ import annotations

from decimal import Decimal

from ..extensions import db
from .auth import new_id
from puantaj.time_utils import to_utc_z
from puantaj.validation import decimal_str


CUSTOMER_STATUSES = {"active", "inactive"}
TASK_STATUSES = {"pending", "in_progress", "completed"}
QUOTE_STATUSES = {"pending", "approved", "rejected"}

APPROVED_QUOTE_SUFFIX = " (Onaylanan Teklif)"
DEFAULT_UNIT = "adet"


class Customer(db.Model):
    """
    Customer master data, owned by a single user.

    Owns tasks, quotes and payments. Deletion is refused while any of
    those exist (see customer_service.delete_customer).
    """
    __tablename__ = "customers"
    __table_args__ = (
        db.Index("ix_customers_user_status", "user_id", "status"),
    )

    id = db.Column(db.String(36), primary_key=True, default=new_id)
    user_id = db.Column(db.String(36), db.ForeignKey("users.id"), nullable=False, index=True)

    name = db.Column(db.String(255), nullable=False)
    company = db.Column(db.String(255), nullable=True)
    phone = db.Column(db.String(32), nullable=True)
    email = db.Column(db.String(255), nullable=True)
    address = db.Column(db.Text, nullable=True)
    tax_number = db.Column(db.String(32), nullable=True)
    status = db.Column(db.String(16), nullable=False, default="active")

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())
    updated_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now(), onupdate=db.func.now())

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "user_id": self.user_id,
            "name": self.name,
            "company": self.company,
            "phone": self.phone,
            "email": self.email,
            "address": self.address,
            "tax_number": self.tax_number,
            "status": self.status,
            "created_at": to_utc_z(self.created_at),
            "updated_at": to_utc_z(self.updated_at),
        }


class CustomerTask(db.Model):
    """
    Billable unit of work for a customer.

    DERIVED FIELDS: vat_amount and total_with_vat are recomputed from
    amount/has_vat/vat_rate on every write that touches those fields.
    amount itself is only defaulted from quantity * unit_price on create.

    source_quote_id links tasks derived from an approved quote; the unique
    constraint makes the derivation idempotent at the database level.
    """
    __tablename__ = "customer_tasks"
    __table_args__ = (
        db.UniqueConstraint("source_quote_id", name="uq_customer_tasks_source_quote"),
        db.Index("ix_customer_tasks_customer_status", "customer_id", "status"),
    )

    id = db.Column(db.String(36), primary_key=True, default=new_id)
    customer_id = db.Column(db.String(36), db.ForeignKey("customers.id"), nullable=False, index=True)

    title = db.Column(db.String(300), nullable=False)
    description = db.Column(db.Text, nullable=True)

    quantity = db.Column(db.Numeric(12, 3), nullable=False, default=Decimal("1"))
    unit = db.Column(db.String(32), nullable=False, default=DEFAULT_UNIT)
    unit_price = db.Column(db.Numeric(12, 2), nullable=False, default=Decimal("0.00"))
    amount = db.Column(db.Numeric(12, 2), nullable=False, default=Decimal("0.00"))

    has_vat = db.Column(db.Boolean, nullable=False, default=False)
    vat_rate = db.Column(db.Numeric(5, 2), nullable=False, default=Decimal("20.00"))
    vat_amount = db.Column(db.Numeric(12, 2), nullable=False, default=Decimal("0.00"))
    total_with_vat = db.Column(db.Numeric(12, 2), nullable=False, default=Decimal("0.00"))

    status = db.Column(db.String(16), nullable=False, default="pending", index=True)
    due_date = db.Column(db.DateTime(timezone=True), nullable=True)

    source_quote_id = db.Column(db.String(36), db.ForeignKey("customer_quotes.id", ondelete="SET NULL"), nullable=True)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())
    updated_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now(), onupdate=db.func.now())

    customer = db.relationship("Customer", backref=db.backref("tasks", lazy=True))

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "customer_id": self.customer_id,
            "title": self.title,
            "description": self.description,
            "quantity": decimal_str(self.quantity, 3),
            "unit": self.unit,
            "unit_price": decimal_str(self.unit_price),
            "amount": decimal_str(self.amount),
            "has_vat": self.has_vat,
            "vat_rate": decimal_str(self.vat_rate),
            "vat_amount": decimal_str(self.vat_amount),
            "total_with_vat": decimal_str(self.total_with_vat),
            "status": self.status,
            "due_date": to_utc_z(self.due_date) if self.due_date else None,
            "source_quote_id": self.source_quote_id,
            "created_at": to_utc_z(self.created_at),
            "updated_at": to_utc_z(self.updated_at),
        }


class CustomerQuote(db.Model):
    """
    Proposal to a customer, composed of line items.

    total_amount is always the sum of the current items' total_price
    (recomputed by quote_service.recompute_quote_totals). Moving status to
    pending or rejected clears is_approved.

    Approval does not lock the quote; later edits are allowed.
    """
    __tablename__ = "customer_quotes"
    __table_args__ = (
        db.Index("ix_customer_quotes_customer_status", "customer_id", "status"),
    )

    id = db.Column(db.String(36), primary_key=True, default=new_id)
    customer_id = db.Column(db.String(36), db.ForeignKey("customers.id"), nullable=False, index=True)

    title = db.Column(db.String(255), nullable=False)
    description = db.Column(db.Text, nullable=True)

    total_amount = db.Column(db.Numeric(12, 2), nullable=False, default=Decimal("0.00"))
    has_vat = db.Column(db.Boolean, nullable=False, default=False)
    vat_rate = db.Column(db.Numeric(5, 2), nullable=False, default=Decimal("20.00"))
    vat_amount = db.Column(db.Numeric(12, 2), nullable=False, default=Decimal("0.00"))
    total_with_vat = db.Column(db.Numeric(12, 2), nullable=False, default=Decimal("0.00"))

    status = db.Column(db.String(16), nullable=False, default="pending", index=True)
    is_approved = db.Column(db.Boolean, nullable=False, default=False)

    quote_date = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())
    valid_until = db.Column(db.DateTime(timezone=True), nullable=True)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())
    updated_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now(), onupdate=db.func.now())

    customer = db.relationship("Customer", backref=db.backref("quotes", lazy=True))
    items = db.relationship(
        "CustomerQuoteItem",
        backref="quote",
        lazy=True,
        cascade="all, delete-orphan",
        order_by="CustomerQuoteItem.created_at",
    )

    def to_dict(self, include_items: bool = False) -> dict:
        data = {
            "id": self.id,
            "customer_id": self.customer_id,
            "title": self.title,
            "description": self.description,
            "total_amount": decimal_str(self.total_amount),
            "has_vat": self.has_vat,
            "vat_rate": decimal_str(self.vat_rate),
            "vat_amount": decimal_str(self.vat_amount),
            "total_with_vat": decimal_str(self.total_with_vat),
            "status": self.status,
            "is_approved": self.is_approved,
            "quote_date": to_utc_z(self.quote_date),
            "valid_until": to_utc_z(self.valid_until) if self.valid_until else None,
            "created_at": to_utc_z(self.created_at),
            "updated_at": to_utc_z(self.updated_at),
        }
        if include_items:
            data["items"] = [item.to_dict() for item in self.items]
        return data


class CustomerQuoteItem(db.Model):
    """
    Line item of a quote.

    Item-level status/is_approved is informational only: it neither creates
    tasks nor changes the parent quote's status.
    """
    __tablename__ = "customer_quote_items"

    id = db.Column(db.String(36), primary_key=True, default=new_id)
    quote_id = db.Column(db.String(36), db.ForeignKey("customer_quotes.id"), nullable=False, index=True)

    title = db.Column(db.String(255), nullable=False)
    description = db.Column(db.Text, nullable=True)

    quantity = db.Column(db.Numeric(12, 3), nullable=False, default=Decimal("1"))
    unit = db.Column(db.String(32), nullable=False, default=DEFAULT_UNIT)
    unit_price = db.Column(db.Numeric(12, 2), nullable=False, default=Decimal("0.00"))
    total_price = db.Column(db.Numeric(12, 2), nullable=False, default=Decimal("0.00"))

    status = db.Column(db.String(16), nullable=False, default="pending")
    is_approved = db.Column(db.Boolean, nullable=False, default=False)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())
    updated_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now(), onupdate=db.func.now())

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "quote_id": self.quote_id,
            "title": self.title,
            "description": self.description,
            "quantity": decimal_str(self.quantity, 3),
            "unit": self.unit,
            "unit_price": decimal_str(self.unit_price),
            "total_price": decimal_str(self.total_price),
            "status": self.status,
            "is_approved": self.is_approved,
            "created_at": to_utc_z(self.created_at),
            "updated_at": to_utc_z(self.updated_at),
        }


class CustomerPayment(db.Model):
    """
    Money received from a customer.

    Every row has exactly one mirrored income Transaction
    (source_payment_type="customer", source_payment_id=id).
    """
    __tablename__ = "customer_payments"
    __table_args__ = (
        db.Index("ix_customer_payments_customer_date", "customer_id", "payment_date"),
    )

    id = db.Column(db.String(36), primary_key=True, default=new_id)
    customer_id = db.Column(db.String(36), db.ForeignKey("customers.id"), nullable=False, index=True)

    amount = db.Column(db.Numeric(12, 2), nullable=False)
    description = db.Column(db.String(500), nullable=False)
    payment_date = db.Column(db.DateTime(timezone=True), nullable=False, index=True)
    payment_method = db.Column(db.String(32), nullable=True)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())

    customer = db.relationship("Customer", backref=db.backref("payments", lazy=True))

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "customer_id": self.customer_id,
            "amount": decimal_str(self.amount),
            "description": self.description,
            "payment_date": to_utc_z(self.payment_date),
            "payment_method": self.payment_method,
            "created_at": to_utc_z(self.created_at),
        }
