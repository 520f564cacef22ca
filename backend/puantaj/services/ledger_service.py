# Overview: Service-layer operations for the income/expense ledger.

"""
Ledger Invariants

- One row per income/expense event, owned by a single user.
- Mirrored rows (source_payment_id set) are written inside the same DB
  transaction as the payment they mirror and removed together with it.
- Date filtering is inclusive on both ends: start <= date <= end.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from ..extensions import db
from ..models import Transaction
from ..validation import NotFoundError, ValidationError

TRANSACTION_MUTABLE_FIELDS = {"type", "amount", "description", "category", "date"}


def append_transaction(
    *,
    user_id: str,
    type: str,
    amount,
    description: str,
    date: datetime,
    category: str | None = None,
    source_payment_type: str | None = None,
    source_payment_id: str | None = None,
) -> Transaction:
    """
    Add a ledger row without committing.

    The caller commits, so a payment and its mirror land together.
    """
    tx = Transaction(
        user_id=user_id,
        type=type,
        amount=amount,
        description=description,
        category=category,
        date=date,
        source_payment_type=source_payment_type,
        source_payment_id=source_payment_id,
    )
    db.session.add(tx)
    db.session.flush()  # ensures tx.id is assigned without committing
    return tx


def list_transactions(
    user_id: str,
    type: Optional[str] = None,
    start: Optional[datetime] = None,
    end: Optional[datetime] = None,
) -> list[Transaction]:
    query = db.session.query(Transaction).filter(Transaction.user_id == user_id)
    if type:
        query = query.filter(Transaction.type == type)
    if start is not None:
        query = query.filter(Transaction.date >= start)
    if end is not None:
        query = query.filter(Transaction.date <= end)
    return query.order_by(Transaction.date.desc(), Transaction.created_at.desc()).all()


def get_transaction(user_id: str, transaction_id: str) -> Transaction:
    tx = db.session.get(Transaction, transaction_id)
    if not tx or tx.user_id != user_id:
        raise NotFoundError("Transaction not found")
    return tx


def create_transaction(user_id: str, patch: dict) -> Transaction:
    tx = append_transaction(
        user_id=user_id,
        type=patch["type"],
        amount=patch["amount"],
        description=patch["description"],
        category=patch.get("category"),
        date=patch["date"],
    )
    db.session.commit()
    return tx


def update_transaction(user_id: str, transaction_id: str, patch: dict) -> Transaction:
    """
    Patch a manual ledger row.

    Mirrored rows belong to their payment; edit or delete the payment instead.
    """
    tx = get_transaction(user_id, transaction_id)
    if tx.is_mirrored:
        raise ValidationError("Mirrored payment entries cannot be edited directly")

    for k, v in patch.items():
        if k in TRANSACTION_MUTABLE_FIELDS:
            setattr(tx, k, v)
    db.session.commit()
    return tx


def delete_transaction(user_id: str, transaction_id: str) -> None:
    tx = get_transaction(user_id, transaction_id)
    db.session.delete(tx)
    db.session.commit()
