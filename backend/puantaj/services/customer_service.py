# Overview: Service-layer operations for customers and customer tasks; encapsulates business logic and database work.

"""
Customer & Task Service

OWNERSHIP: Customers belong to one user. Tasks, quotes and payments are
reached through their customer, so every lookup here checks
customer.user_id against the caller and reports foreign rows as
NotFoundError (never 403, to avoid leaking ids).

TASK MONEY:
- amount defaults to quantity * unit_price on create only
- vat_amount/total_with_vat are recomputed on every write (vat.apply_vat)
"""

from __future__ import annotations

from decimal import Decimal

from ..extensions import db
from ..models import Customer, CustomerTask, CustomerQuote, CustomerPayment
from ..models.customers import DEFAULT_UNIT
from ..validation import ConflictError, NotFoundError, ValidationError, money
from .vat import DEFAULT_VAT_RATE, apply_vat


CUSTOMER_MUTABLE_FIELDS = {"name", "company", "phone", "email", "address", "tax_number", "status"}
TASK_MUTABLE_FIELDS = {
    "title", "description", "quantity", "unit", "unit_price", "amount",
    "has_vat", "vat_rate", "status", "due_date",
}

# Statuses counted as "open" work in listings and the financial summary
OPEN_TASK_STATUSES = {"pending", "active", "in_progress"}


def _apply_patch(obj, patch: dict, fields: set[str]) -> None:
    for k, v in patch.items():
        if k not in fields:
            continue
        setattr(obj, k, v)


# =============================================================================
# CUSTOMERS
# =============================================================================

def list_customers(user_id: str, status: str | None = None) -> list[Customer]:
    query = db.session.query(Customer).filter(Customer.user_id == user_id)
    if status:
        query = query.filter(Customer.status == status)
    return query.order_by(Customer.name.asc()).all()


def get_customer(user_id: str, customer_id: str) -> Customer:
    customer = db.session.get(Customer, customer_id)
    if not customer or customer.user_id != user_id:
        raise NotFoundError("Customer not found")
    return customer


def create_customer(user_id: str, patch: dict) -> Customer:
    customer = Customer(user_id=user_id)
    _apply_patch(customer, patch, CUSTOMER_MUTABLE_FIELDS)
    db.session.add(customer)
    db.session.commit()
    return customer


def update_customer(user_id: str, customer_id: str, patch: dict) -> Customer:
    customer = get_customer(user_id, customer_id)
    _apply_patch(customer, patch, CUSTOMER_MUTABLE_FIELDS)
    db.session.commit()
    return customer


def delete_customer(user_id: str, customer_id: str) -> None:
    """
    Delete a customer with no tasks, quotes or payments.

    Raises ConflictError otherwise; a customer's financial history is
    never orphaned.
    """
    customer = get_customer(user_id, customer_id)

    dependants = {
        "tasks": db.session.query(CustomerTask).filter_by(customer_id=customer.id).count(),
        "quotes": db.session.query(CustomerQuote).filter_by(customer_id=customer.id).count(),
        "payments": db.session.query(CustomerPayment).filter_by(customer_id=customer.id).count(),
    }
    blocking = [f"{count} {name}" for name, count in dependants.items() if count]
    if blocking:
        raise ConflictError(f"Customer still has {', '.join(blocking)}")

    db.session.delete(customer)
    db.session.commit()


def resolve_customer_name(customer_id: str, fallback: str) -> str:
    """Customer display name for ledger descriptions; never raises."""
    customer = db.session.get(Customer, customer_id) if customer_id else None
    if not customer or not customer.name:
        return fallback
    return customer.name


# =============================================================================
# CUSTOMER TASKS
# =============================================================================

def _validate_task_numbers(task: CustomerTask) -> None:
    if task.quantity is None or task.quantity <= 0:
        raise ValidationError("quantity must be > 0")
    if task.unit_price is None or task.unit_price < 0:
        raise ValidationError("unit_price must be >= 0")
    if task.amount is None or task.amount < 0:
        raise ValidationError("amount must be >= 0")


def apply_task_vat(task: CustomerTask) -> None:
    """Recompute the derived VAT fields from amount/has_vat/vat_rate."""
    task.vat_amount, task.total_with_vat = apply_vat(task.amount, bool(task.has_vat), task.vat_rate)


def list_tasks(user_id: str, customer_id: str | None = None, status: str | None = None) -> list[CustomerTask]:
    query = (
        db.session.query(CustomerTask)
        .join(Customer, CustomerTask.customer_id == Customer.id)
        .filter(Customer.user_id == user_id)
    )
    if customer_id:
        query = query.filter(CustomerTask.customer_id == customer_id)
    if status:
        query = query.filter(CustomerTask.status == status)
    return query.order_by(CustomerTask.created_at.desc()).all()


def get_task(user_id: str, task_id: str) -> CustomerTask:
    task = db.session.get(CustomerTask, task_id)
    if not task or not task.customer or task.customer.user_id != user_id:
        raise NotFoundError("Task not found")
    return task


def create_task(user_id: str, patch: dict) -> CustomerTask:
    """
    Create a task for one of the caller's customers.

    amount defaults to quantity * unit_price when not supplied.
    """
    customer = get_customer(user_id, patch.get("customer_id"))

    task = CustomerTask(customer_id=customer.id, status="pending", has_vat=False)
    _apply_patch(task, patch, TASK_MUTABLE_FIELDS)

    if task.quantity is None:
        task.quantity = Decimal("1")
    if not task.unit:
        task.unit = DEFAULT_UNIT
    if task.unit_price is None and task.amount is None:
        raise ValidationError("unit_price or amount is required")
    if task.quantity <= 0:
        raise ValidationError("quantity must be > 0")
    if task.amount is None:
        task.amount = money(task.quantity * task.unit_price)
    elif task.unit_price is None:
        task.unit_price = money(task.amount / task.quantity)
    if task.vat_rate is None:
        task.vat_rate = DEFAULT_VAT_RATE

    _validate_task_numbers(task)
    apply_task_vat(task)

    db.session.add(task)
    db.session.commit()
    return task


def update_task(user_id: str, task_id: str, patch: dict) -> CustomerTask:
    """
    Apply a field patch to a task.

    Changing quantity/unit_price does not touch amount; amount only
    changes when the patch sets it.
    """
    task = get_task(user_id, task_id)
    if "customer_id" in patch and patch["customer_id"] != task.customer_id:
        customer = get_customer(user_id, patch["customer_id"])
        task.customer_id = customer.id

    _apply_patch(task, patch, TASK_MUTABLE_FIELDS)
    try:
        _validate_task_numbers(task)
    except ValidationError:
        db.session.rollback()
        raise
    apply_task_vat(task)

    db.session.commit()
    return task


def delete_task(user_id: str, task_id: str) -> None:
    task = get_task(user_id, task_id)
    db.session.delete(task)
    db.session.commit()
