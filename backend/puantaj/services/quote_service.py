# Overview: Service-layer operations for customer quotes and quote items; owns total aggregation and approval.

"""
Quote Service

TOTALS:
- quote.total_amount == sum(item.total_price) after every item write
- VAT fields follow total_amount/has_vat/vat_rate on every write
- recompute_quote_totals runs inside the item mutation, before its commit,
  so a read right after the mutation sees the new totals

APPROVAL:
A quote update whose patch carries BOTH status="approved" and
is_approved=True derives one pending CustomerTask from the quote.
Setting only one of the two flags never creates a task.

Derivation is best-effort: the quote update is committed first, and a
failure while creating the task is logged and rolled back without
touching the quote.

Idempotency is keyed on customer_tasks.source_quote_id (unique). Tasks
created before that column existed are matched by title.
"""

from __future__ import annotations

import logging
from decimal import Decimal

from sqlalchemy.exc import SQLAlchemyError, IntegrityError

from ..extensions import db
from ..models import Customer, CustomerQuote, CustomerQuoteItem, CustomerTask
from ..models.customers import APPROVED_QUOTE_SUFFIX, DEFAULT_UNIT
from ..validation import NotFoundError, ValidationError, money
from .customer_service import get_customer
from .vat import DEFAULT_VAT_RATE, ZERO, apply_vat


logger = logging.getLogger(__name__)

QUOTE_MUTABLE_FIELDS = {
    "title", "description", "total_amount", "has_vat", "vat_rate",
    "status", "is_approved", "quote_date", "valid_until",
}
ITEM_MUTABLE_FIELDS = {
    "title", "description", "quantity", "unit", "unit_price", "total_price",
    "status", "is_approved",
}

# Statuses that can never coexist with is_approved=True
UNAPPROVED_STATUSES = {"pending", "rejected"}


def _apply_patch(obj, patch: dict, fields: set[str]) -> None:
    for k, v in patch.items():
        if k in fields:
            setattr(obj, k, v)


def apply_quote_vat(quote: CustomerQuote) -> None:
    if quote.total_amount is None:
        quote.total_amount = ZERO
    if quote.vat_rate is None:
        quote.vat_rate = DEFAULT_VAT_RATE
    quote.vat_amount, quote.total_with_vat = apply_vat(quote.total_amount, bool(quote.has_vat), quote.vat_rate)


def is_approval_patch(patch: dict) -> bool:
    """True only when the patch sets status=approved and is_approved=True together."""
    return patch.get("status") == "approved" and patch.get("is_approved") is True


# =============================================================================
# QUOTES
# =============================================================================

def list_quotes(user_id: str, customer_id: str | None = None, status: str | None = None) -> list[CustomerQuote]:
    query = (
        db.session.query(CustomerQuote)
        .join(Customer, CustomerQuote.customer_id == Customer.id)
        .filter(Customer.user_id == user_id)
    )
    if customer_id:
        query = query.filter(CustomerQuote.customer_id == customer_id)
    if status:
        query = query.filter(CustomerQuote.status == status)
    return query.order_by(CustomerQuote.created_at.desc()).all()


def get_quote(user_id: str, quote_id: str) -> CustomerQuote:
    quote = db.session.get(CustomerQuote, quote_id)
    if not quote or not quote.customer or quote.customer.user_id != user_id:
        raise NotFoundError("Quote not found")
    return quote


def create_quote(user_id: str, patch: dict) -> CustomerQuote:
    customer = get_customer(user_id, patch.get("customer_id"))

    quote = CustomerQuote(customer_id=customer.id, status="pending", is_approved=False, has_vat=False)
    _apply_patch(quote, patch, QUOTE_MUTABLE_FIELDS)
    if quote.status in UNAPPROVED_STATUSES:
        quote.is_approved = False
    apply_quote_vat(quote)

    db.session.add(quote)
    db.session.commit()

    if is_approval_patch(patch):
        derive_task_from_quote(quote)

    return quote


def update_quote(user_id: str, quote_id: str, patch: dict) -> CustomerQuote:
    """
    Apply a field patch to a quote and run the approval pipeline.

    The patch is always applied and committed. Task derivation runs
    afterwards and never undoes the quote update. Approved quotes stay
    editable.

    A quote with items keeps total_amount equal to their sum; a client
    supplied total_amount only applies to quotes without items.
    """
    quote = get_quote(user_id, quote_id)

    has_items = (
        db.session.query(CustomerQuoteItem.id).filter(CustomerQuoteItem.quote_id == quote.id).first()
        is not None
    )
    fields = QUOTE_MUTABLE_FIELDS - {"total_amount"} if has_items else QUOTE_MUTABLE_FIELDS

    _apply_patch(quote, patch, fields)
    if "status" in patch and quote.status in UNAPPROVED_STATUSES:
        quote.is_approved = False
    if has_items:
        recompute_quote_totals(quote.id)
    else:
        apply_quote_vat(quote)

    db.session.commit()

    if is_approval_patch(patch):
        derive_task_from_quote(quote)

    return quote


def delete_quote(user_id: str, quote_id: str) -> None:
    """Delete a quote and its items. Tasks derived from it keep existing."""
    quote = get_quote(user_id, quote_id)
    db.session.query(CustomerTask).filter_by(source_quote_id=quote.id).update(
        {"source_quote_id": None}, synchronize_session=False
    )
    db.session.delete(quote)
    db.session.commit()


def find_derived_task(quote: CustomerQuote) -> CustomerTask | None:
    task = db.session.query(CustomerTask).filter_by(source_quote_id=quote.id).first()
    if task:
        return task

    # Legacy rows: matched by title within the same customer
    titles = [quote.title, f"{quote.title}{APPROVED_QUOTE_SUFFIX}"]
    return (
        db.session.query(CustomerTask)
        .filter(
            CustomerTask.customer_id == quote.customer_id,
            CustomerTask.source_quote_id.is_(None),
            CustomerTask.title.in_(titles),
        )
        .first()
    )


def derive_task_from_quote(quote: CustomerQuote) -> CustomerTask | None:
    """
    Create the pending task for an approved quote.

    Returns the new task, or None when a task already exists for the quote
    or creation failed (failure is logged, never raised).
    """
    try:
        if find_derived_task(quote):
            logger.info("Quote %s already has a derived task; skipping", quote.id)
            return None

        if quote.has_vat:
            final_amount = quote.total_with_vat if quote.total_with_vat is not None else quote.total_amount
        else:
            final_amount = quote.total_amount
        final_amount = money(Decimal(final_amount or 0))

        items = list(quote.items)
        total_quantity = sum((Decimal(item.quantity or 0) for item in items), Decimal("0"))
        if total_quantity <= 0:
            total_quantity = Decimal("1")
        unit = items[0].unit if items and items[0].unit else DEFAULT_UNIT

        task = CustomerTask(
            customer_id=quote.customer_id,
            title=f"{quote.title}{APPROVED_QUOTE_SUFFIX}",
            description=quote.description,
            quantity=total_quantity,
            unit=unit,
            unit_price=money(final_amount / total_quantity),
            amount=final_amount,
            has_vat=False,
            vat_rate=quote.vat_rate if quote.vat_rate is not None else DEFAULT_VAT_RATE,
            vat_amount=ZERO,
            total_with_vat=final_amount,
            status="pending",
            due_date=None,
            source_quote_id=quote.id,
        )
        db.session.add(task)
        db.session.commit()
        logger.info("Derived task %s from approved quote %s", task.id, quote.id)
        return task
    except IntegrityError:
        # A concurrent approval already inserted the task for this quote
        db.session.rollback()
        logger.info("Quote %s already has a derived task; skipping", quote.id)
        return None
    except SQLAlchemyError:
        db.session.rollback()
        logger.warning("Failed to derive task from quote %s", quote.id, exc_info=True)
        return None


# =============================================================================
# QUOTE ITEMS
# =============================================================================

def recompute_quote_totals(quote_id: str) -> CustomerQuote | None:
    """
    Set total_amount to the sum of the quote's items and refresh VAT.

    Does not commit; the caller's item mutation commits both together.
    Returns None (and logs a warning) when the quote no longer exists.
    """
    quote = db.session.get(CustomerQuote, quote_id)
    if quote is None:
        logger.warning("Quote %s not found while recomputing totals; skipping", quote_id)
        return None

    db.session.flush()
    total = (
        db.session.query(db.func.coalesce(db.func.sum(CustomerQuoteItem.total_price), 0))
        .filter(CustomerQuoteItem.quote_id == quote_id)
        .scalar()
    )
    quote.total_amount = money(Decimal(str(total)))
    apply_quote_vat(quote)
    return quote


def list_items(user_id: str, quote_id: str) -> list[CustomerQuoteItem]:
    quote = get_quote(user_id, quote_id)
    return list(quote.items)


def get_item(user_id: str, item_id: str) -> CustomerQuoteItem:
    item = db.session.get(CustomerQuoteItem, item_id)
    if not item or not item.quote or not item.quote.customer or item.quote.customer.user_id != user_id:
        raise NotFoundError("Quote item not found")
    return item


def _validate_item_numbers(item: CustomerQuoteItem) -> None:
    if item.quantity is None or item.quantity <= 0:
        raise ValidationError("quantity must be > 0")
    if item.unit_price is None or item.unit_price < 0:
        raise ValidationError("unit_price must be >= 0")
    if item.total_price is None or item.total_price < 0:
        raise ValidationError("total_price must be >= 0")


def create_item(user_id: str, patch: dict) -> CustomerQuoteItem:
    """
    Add a line item and refresh the parent quote's totals.

    total_price is taken from the payload when given, otherwise
    quantity * unit_price.
    """
    quote = get_quote(user_id, patch.get("quote_id"))

    item = CustomerQuoteItem(quote_id=quote.id, status="pending", is_approved=False)
    _apply_patch(item, patch, ITEM_MUTABLE_FIELDS)
    if item.quantity is None:
        item.quantity = Decimal("1")
    if item.unit_price is None:
        item.unit_price = ZERO
    if not item.unit:
        item.unit = DEFAULT_UNIT
    if item.total_price is None:
        item.total_price = money(item.quantity * item.unit_price)
    _validate_item_numbers(item)

    db.session.add(item)
    recompute_quote_totals(quote.id)
    db.session.commit()
    return item


def update_item(user_id: str, item_id: str, patch: dict) -> CustomerQuoteItem:
    """
    Patch a line item and refresh the parent quote's totals.

    Item status/is_approved are stored as given; they do not affect the
    quote or create tasks.
    """
    item = get_item(user_id, item_id)
    _apply_patch(item, patch, ITEM_MUTABLE_FIELDS)
    if "total_price" not in patch and ("quantity" in patch or "unit_price" in patch):
        item.total_price = money(item.quantity * item.unit_price)
    try:
        _validate_item_numbers(item)
    except ValidationError:
        db.session.rollback()
        raise

    recompute_quote_totals(item.quote_id)
    db.session.commit()
    return item


def delete_item(user_id: str, item_id: str) -> None:
    item = get_item(user_id, item_id)
    quote_id = item.quote_id

    quote = item.quote
    if quote is not None and item in quote.items:
        quote.items.remove(item)
    db.session.delete(item)
    recompute_quote_totals(quote_id)
    db.session.commit()
