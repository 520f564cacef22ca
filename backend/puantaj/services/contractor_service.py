# Overview: Service-layer operations for contractors.

from __future__ import annotations

from ..extensions import db
from ..models import Contractor, ContractorPayment
from ..validation import ConflictError, NotFoundError


CONTRACTOR_MUTABLE_FIELDS = {"name", "company", "phone", "email", "status", "total_amount"}


def list_contractors(user_id: str, status: str | None = None) -> list[Contractor]:
    query = db.session.query(Contractor).filter(Contractor.user_id == user_id)
    if status:
        query = query.filter(Contractor.status == status)
    return query.order_by(Contractor.name.asc()).all()


def get_contractor(user_id: str, contractor_id: str) -> Contractor:
    contractor = db.session.get(Contractor, contractor_id)
    if not contractor or contractor.user_id != user_id:
        raise NotFoundError("Contractor not found")
    return contractor


def create_contractor(user_id: str, patch: dict) -> Contractor:
    contractor = Contractor(user_id=user_id)
    for k, v in patch.items():
        if k in CONTRACTOR_MUTABLE_FIELDS:
            setattr(contractor, k, v)
    db.session.add(contractor)
    db.session.commit()
    return contractor


def update_contractor(user_id: str, contractor_id: str, patch: dict) -> Contractor:
    contractor = get_contractor(user_id, contractor_id)
    for k, v in patch.items():
        if k in CONTRACTOR_MUTABLE_FIELDS:
            setattr(contractor, k, v)
    db.session.commit()
    return contractor


def delete_contractor(user_id: str, contractor_id: str) -> None:
    """Refused while payments exist; their ledger mirrors would lose their payee."""
    contractor = get_contractor(user_id, contractor_id)
    payments = db.session.query(ContractorPayment).filter_by(contractor_id=contractor.id).count()
    if payments:
        raise ConflictError(f"Contractor still has {payments} payments")
    db.session.delete(contractor)
    db.session.commit()


def resolve_contractor_name(contractor_id: str, fallback: str) -> str:
    contractor = db.session.get(Contractor, contractor_id) if contractor_id else None
    if not contractor or not contractor.name:
        return fallback
    return contractor.name
