# Overview: Service-layer operations for customer, contractor and personnel payments; mirrors each into the ledger.

"""
Payment Recorder

Every payment row has exactly one mirrored ledger Transaction:
- customer payment   -> income,  "{name} - Müşteri Ödemesi: {description}"
- contractor payment -> expense, "{name} - Yüklenici Ödemesi: {description}"
- personnel payment  -> expense, "{name} - Maaş Ödemesi: {description}"

DESIGN PRINCIPLES:
- The payment and its mirror are written in one DB transaction
- The mirror carries (source_payment_type, source_payment_id); deletion
  removes exactly that row
- Rows written before the link existed are found by the old heuristic:
  type, payee name and category marker in the description, amount within
  0.01, same calendar day
- A missing mirror is logged and never blocks deleting the payment
- Payee lookup failures fall back to a placeholder name
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from decimal import Decimal

from ..extensions import db
from ..models import (
    Contractor,
    ContractorPayment,
    Customer,
    CustomerPayment,
    Personnel,
    PersonnelPayment,
    Transaction,
)
from ..validation import NotFoundError, ValidationError
from puantaj.time_utils import same_calendar_day
from .contractor_service import get_contractor, resolve_contractor_name
from .customer_service import get_customer, resolve_customer_name
from .ledger_service import append_transaction
from .personnel_service import get_personnel, resolve_personnel_name


logger = logging.getLogger(__name__)

AMOUNT_TOLERANCE = Decimal("0.01")


@dataclass(frozen=True)
class MirrorRule:
    """How one payment kind shows up in the ledger."""
    source_type: str
    transaction_type: str
    category: str
    unknown_name: str


CUSTOMER_MIRROR = MirrorRule("customer", "income", "Müşteri Ödemesi", "Bilinmeyen Müşteri")
CONTRACTOR_MIRROR = MirrorRule("contractor", "expense", "Yüklenici Ödemesi", "Bilinmeyen Yüklenici")
PERSONNEL_MIRROR = MirrorRule("personnel", "expense", "Maaş Ödemesi", "Bilinmeyen Personel")


def mirror_description(rule: MirrorRule, payee_name: str, description: str) -> str:
    return f"{payee_name} - {rule.category}: {description}"


def _validate_payment(patch: dict) -> None:
    amount = patch.get("amount")
    if amount is None or amount <= 0:
        raise ValidationError("amount must be > 0")
    if not (patch.get("description") or "").strip():
        raise ValidationError("description is required")
    if patch.get("payment_date") is None:
        raise ValidationError("payment_date is required")


def _write_mirror(rule: MirrorRule, user_id: str, payment, payee_name: str) -> Transaction:
    return append_transaction(
        user_id=user_id,
        type=rule.transaction_type,
        amount=payment.amount,
        description=mirror_description(rule, payee_name, payment.description),
        category=rule.category,
        date=payment.payment_date,
        source_payment_type=rule.source_type,
        source_payment_id=payment.id,
    )


def find_mirror(rule: MirrorRule, user_id: str, payment, payee_name: str) -> Transaction | None:
    """
    Locate the ledger row a payment produced.

    Linked rows are matched by source id. Unlinked legacy rows fall back
    to the description/amount/same-day heuristic.
    """
    linked = (
        db.session.query(Transaction)
        .filter_by(source_payment_type=rule.source_type, source_payment_id=payment.id)
        .first()
    )
    if linked:
        return linked

    candidates = (
        db.session.query(Transaction)
        .filter(
            Transaction.user_id == user_id,
            Transaction.type == rule.transaction_type,
            Transaction.source_payment_id.is_(None),
        )
        .order_by(Transaction.created_at.asc())
        .all()
    )
    for tx in candidates:
        description = tx.description or ""
        if payee_name not in description or rule.category not in description:
            continue
        if abs(Decimal(tx.amount) - Decimal(payment.amount)) >= AMOUNT_TOLERANCE:
            continue
        if not same_calendar_day(tx.date, payment.payment_date):
            continue
        return tx
    return None


def _delete_with_mirror(rule: MirrorRule, user_id: str, payment, payee_name: str) -> None:
    mirror = find_mirror(rule, user_id, payment, payee_name)
    if mirror is not None:
        db.session.delete(mirror)
    else:
        logger.warning(
            "No ledger entry found for %s payment %s; deleting payment only",
            rule.source_type,
            payment.id,
        )
    db.session.delete(payment)
    db.session.commit()


# =============================================================================
# CUSTOMER PAYMENTS
# =============================================================================

def list_customer_payments(user_id: str, customer_id: str | None = None) -> list[CustomerPayment]:
    query = (
        db.session.query(CustomerPayment)
        .join(Customer, CustomerPayment.customer_id == Customer.id)
        .filter(Customer.user_id == user_id)
    )
    if customer_id:
        query = query.filter(CustomerPayment.customer_id == customer_id)
    return query.order_by(CustomerPayment.payment_date.desc()).all()


def record_customer_payment(user_id: str, patch: dict) -> CustomerPayment:
    """
    Insert a customer payment and its income mirror.

    Both rows commit together; a failure leaves neither behind.
    """
    _validate_payment(patch)
    customer = get_customer(user_id, patch.get("customer_id"))

    payment = CustomerPayment(
        customer_id=customer.id,
        amount=patch["amount"],
        description=patch["description"],
        payment_date=patch["payment_date"],
        payment_method=patch.get("payment_method"),
    )
    try:
        db.session.add(payment)
        db.session.flush()
        payee = resolve_customer_name(customer.id, CUSTOMER_MIRROR.unknown_name)
        _write_mirror(CUSTOMER_MIRROR, user_id, payment, payee)
        db.session.commit()
    except Exception:
        db.session.rollback()
        raise

    logger.info("Recorded customer payment %s (%s)", payment.id, payment.amount)
    return payment


def get_customer_payment(user_id: str, payment_id: str) -> CustomerPayment:
    payment = db.session.get(CustomerPayment, payment_id)
    if not payment or not payment.customer or payment.customer.user_id != user_id:
        raise NotFoundError("Payment not found")
    return payment


def delete_customer_payment(user_id: str, payment_id: str) -> None:
    payment = get_customer_payment(user_id, payment_id)
    payee = resolve_customer_name(payment.customer_id, CUSTOMER_MIRROR.unknown_name)
    _delete_with_mirror(CUSTOMER_MIRROR, user_id, payment, payee)


# =============================================================================
# CONTRACTOR PAYMENTS
# =============================================================================

def list_contractor_payments(user_id: str, contractor_id: str | None = None) -> list[ContractorPayment]:
    query = (
        db.session.query(ContractorPayment)
        .join(Contractor, ContractorPayment.contractor_id == Contractor.id)
        .filter(Contractor.user_id == user_id)
    )
    if contractor_id:
        query = query.filter(ContractorPayment.contractor_id == contractor_id)
    return query.order_by(ContractorPayment.payment_date.desc()).all()


def record_contractor_payment(user_id: str, patch: dict) -> ContractorPayment:
    _validate_payment(patch)
    contractor = get_contractor(user_id, patch.get("contractor_id"))

    payment = ContractorPayment(
        contractor_id=contractor.id,
        amount=patch["amount"],
        description=patch["description"],
        payment_date=patch["payment_date"],
        payment_method=patch.get("payment_method"),
    )
    try:
        db.session.add(payment)
        db.session.flush()
        payee = resolve_contractor_name(contractor.id, CONTRACTOR_MIRROR.unknown_name)
        _write_mirror(CONTRACTOR_MIRROR, user_id, payment, payee)
        db.session.commit()
    except Exception:
        db.session.rollback()
        raise

    logger.info("Recorded contractor payment %s (%s)", payment.id, payment.amount)
    return payment


def get_contractor_payment(user_id: str, payment_id: str) -> ContractorPayment:
    payment = db.session.get(ContractorPayment, payment_id)
    if not payment or not payment.contractor or payment.contractor.user_id != user_id:
        raise NotFoundError("Payment not found")
    return payment


def delete_contractor_payment(user_id: str, payment_id: str) -> None:
    payment = get_contractor_payment(user_id, payment_id)
    payee = resolve_contractor_name(payment.contractor_id, CONTRACTOR_MIRROR.unknown_name)
    _delete_with_mirror(CONTRACTOR_MIRROR, user_id, payment, payee)


# =============================================================================
# PERSONNEL PAYMENTS
# =============================================================================

def list_personnel_payments(user_id: str, personnel_id: str | None = None) -> list[PersonnelPayment]:
    query = (
        db.session.query(PersonnelPayment)
        .join(Personnel, PersonnelPayment.personnel_id == Personnel.id)
        .filter(Personnel.user_id == user_id)
    )
    if personnel_id:
        query = query.filter(PersonnelPayment.personnel_id == personnel_id)
    return query.order_by(PersonnelPayment.payment_date.desc()).all()


def record_personnel_payment(user_id: str, patch: dict) -> PersonnelPayment:
    _validate_payment(patch)
    person = get_personnel(user_id, patch.get("personnel_id"))

    payment = PersonnelPayment(
        personnel_id=person.id,
        amount=patch["amount"],
        description=patch["description"],
        payment_date=patch["payment_date"],
        payment_type=patch.get("payment_type") or "salary",
    )
    try:
        db.session.add(payment)
        db.session.flush()
        payee = resolve_personnel_name(person.id, PERSONNEL_MIRROR.unknown_name)
        _write_mirror(PERSONNEL_MIRROR, user_id, payment, payee)
        db.session.commit()
    except Exception:
        db.session.rollback()
        raise

    logger.info("Recorded personnel payment %s (%s)", payment.id, payment.amount)
    return payment


def get_personnel_payment(user_id: str, payment_id: str) -> PersonnelPayment:
    payment = db.session.get(PersonnelPayment, payment_id)
    if not payment or not payment.personnel or payment.personnel.user_id != user_id:
        raise NotFoundError("Payment not found")
    return payment


def delete_personnel_payment(user_id: str, payment_id: str) -> None:
    payment = get_personnel_payment(user_id, payment_id)
    payee = resolve_personnel_name(payment.personnel_id, PERSONNEL_MIRROR.unknown_name)
    _delete_with_mirror(PERSONNEL_MIRROR, user_id, payment, payee)
