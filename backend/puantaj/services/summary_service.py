# Overview: Read-only financial summary over a user's ledger, customers, contractors, personnel and projects.

"""
Financial Summary

Pure read: computed on every call, nothing cached, nothing written.

- Every sum is Decimal; amounts are read through validation.to_decimal so
  every field parses and rounds the same way.
- "this_month" is the server's current UTC calendar month, not the user's
  local month.
"""

from __future__ import annotations

from decimal import Decimal
from typing import Iterable

from ..extensions import db
from ..models import (
    Contractor,
    ContractorPayment,
    Customer,
    CustomerPayment,
    CustomerQuote,
    CustomerTask,
    Personnel,
    PersonnelPayment,
    Project,
    Transaction,
)
from ..validation import decimal_str, money, to_decimal
from puantaj.time_utils import month_bounds, utcnow
from .customer_service import OPEN_TASK_STATUSES


ZERO = Decimal("0")


def _sum(values: Iterable) -> Decimal:
    total = ZERO
    for value in values:
        if value is None:
            continue
        total += to_decimal(value)
    return money(total)


def _in_month(value, start, end) -> bool:
    return value is not None and start <= value < end


def get_financial_summary(user_id: str) -> dict:
    """
    Aggregate totals for the dashboard.

    net_balance == total_income - total_expenses, both 0.00 when the ledger
    is empty.
    """
    month_start, month_end = month_bounds(utcnow().date())

    transactions = db.session.query(Transaction).filter(Transaction.user_id == user_id).all()
    total_income = _sum(t.amount for t in transactions if t.type == "income")
    total_expenses = _sum(t.amount for t in transactions if t.type == "expense")

    tasks = (
        db.session.query(CustomerTask)
        .join(Customer, CustomerTask.customer_id == Customer.id)
        .filter(Customer.user_id == user_id)
        .all()
    )
    quotes = (
        db.session.query(CustomerQuote)
        .join(Customer, CustomerQuote.customer_id == Customer.id)
        .filter(Customer.user_id == user_id)
        .all()
    )
    customer_payments = (
        db.session.query(CustomerPayment)
        .join(Customer, CustomerPayment.customer_id == Customer.id)
        .filter(Customer.user_id == user_id)
        .all()
    )
    contractor_payments = (
        db.session.query(ContractorPayment)
        .join(Contractor, ContractorPayment.contractor_id == Contractor.id)
        .filter(Contractor.user_id == user_id)
        .all()
    )
    personnel_payments = (
        db.session.query(PersonnelPayment)
        .join(Personnel, PersonnelPayment.personnel_id == Personnel.id)
        .filter(Personnel.user_id == user_id)
        .all()
    )
    projects = db.session.query(Project).filter(Project.user_id == user_id).all()
    contractors = db.session.query(Contractor).filter(Contractor.user_id == user_id).all()

    approved_quotes = [q for q in quotes if q.is_approved]
    pending_quotes = [q for q in quotes if not q.is_approved]
    given = [p for p in projects if p.type == "given"]
    received = [p for p in projects if p.type == "received"]

    return {
        "total_income": decimal_str(total_income),
        "total_expenses": decimal_str(total_expenses),
        "net_balance": decimal_str(total_income - total_expenses),
        "customer_tasks": {
            "total": decimal_str(_sum(t.amount for t in tasks)),
            "pending": sum(1 for t in tasks if t.status in OPEN_TASK_STATUSES),
            "completed": sum(1 for t in tasks if t.status == "completed"),
            "count": len(tasks),
        },
        "customer_quotes": {
            "pending": decimal_str(_sum(q.total_amount for q in pending_quotes)),
            "approved": decimal_str(_sum(q.total_amount for q in approved_quotes)),
            "pending_count": len(pending_quotes),
            "approved_count": len(approved_quotes),
        },
        "customer_payments": {
            "total": decimal_str(_sum(p.amount for p in customer_payments)),
            "this_month": decimal_str(_sum(
                p.amount for p in customer_payments if _in_month(p.payment_date, month_start, month_end)
            )),
            "count": len(customer_payments),
        },
        "contractor_payments": {
            "total": decimal_str(_sum(p.amount for p in contractor_payments)),
            "this_month": decimal_str(_sum(
                p.amount for p in contractor_payments if _in_month(p.payment_date, month_start, month_end)
            )),
        },
        "personnel_payments": {
            "total": decimal_str(_sum(p.amount for p in personnel_payments)),
            "this_month": decimal_str(_sum(
                p.amount for p in personnel_payments if _in_month(p.payment_date, month_start, month_end)
            )),
        },
        "given_projects": {
            "total": decimal_str(_sum(p.amount for p in given)),
            "active": sum(1 for p in given if p.status == "active"),
            "passive": sum(1 for p in given if p.status == "passive"),
        },
        "received_projects": {
            "total": decimal_str(_sum(p.amount for p in received)),
            "active": sum(1 for p in received if p.status == "active"),
            "completed": sum(1 for p in received if p.status == "completed"),
        },
        "contractors": {
            "total": decimal_str(_sum(c.total_amount for c in contractors)),
            "active": sum(1 for c in contractors if c.status == "active"),
            "completed": sum(1 for c in contractors if c.status == "completed"),
            "count": len(contractors),
        },
    }
