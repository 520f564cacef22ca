# Overview: Service-layer operations for personnel and timesheets.

"""
Personnel & Timesheet Service

TIMESHEET HOURS:
- start_time/end_time are "HH:MM" wall-clock strings
- total_hours = (end - start) in hours, rounded to 2 places
- end earlier than start means the shift crossed midnight (+24h)
- an explicit total_hours in the payload wins over the computed value
"""

from __future__ import annotations

import re
from decimal import Decimal

from ..extensions import db
from ..models import Personnel, PersonnelPayment, Timesheet
from ..validation import ConflictError, NotFoundError, ValidationError, quantize


PERSONNEL_MUTABLE_FIELDS = {"name", "position", "start_date", "phone", "email", "salary", "is_active"}
TIMESHEET_MUTABLE_FIELDS = {"date", "start_time", "end_time", "total_hours", "notes"}

HHMM_RE = re.compile(r"^([01]\d|2[0-3]):([0-5]\d)$")


# =============================================================================
# PERSONNEL
# =============================================================================

def list_personnel(user_id: str, active_only: bool = False) -> list[Personnel]:
    query = db.session.query(Personnel).filter(Personnel.user_id == user_id)
    if active_only:
        query = query.filter(Personnel.is_active.is_(True))
    return query.order_by(Personnel.name.asc()).all()


def get_personnel(user_id: str, personnel_id: str) -> Personnel:
    person = db.session.get(Personnel, personnel_id)
    if not person or person.user_id != user_id:
        raise NotFoundError("Personnel not found")
    return person


def create_personnel(user_id: str, patch: dict) -> Personnel:
    person = Personnel(user_id=user_id, is_active=True)
    for k, v in patch.items():
        if k in PERSONNEL_MUTABLE_FIELDS:
            setattr(person, k, v)
    db.session.add(person)
    db.session.commit()
    return person


def update_personnel(user_id: str, personnel_id: str, patch: dict) -> Personnel:
    person = get_personnel(user_id, personnel_id)
    for k, v in patch.items():
        if k in PERSONNEL_MUTABLE_FIELDS:
            setattr(person, k, v)
    db.session.commit()
    return person


def delete_personnel(user_id: str, personnel_id: str) -> None:
    """
    Delete an employee with no payments.

    Timesheets go with the employee; payments block deletion (set
    is_active=False instead).
    """
    person = get_personnel(user_id, personnel_id)
    payments = db.session.query(PersonnelPayment).filter_by(personnel_id=person.id).count()
    if payments:
        raise ConflictError(f"Personnel still has {payments} payments")

    db.session.query(Timesheet).filter_by(personnel_id=person.id).delete()
    db.session.delete(person)
    db.session.commit()


def resolve_personnel_name(personnel_id: str, fallback: str) -> str:
    person = db.session.get(Personnel, personnel_id) if personnel_id else None
    if not person or not person.name:
        return fallback
    return person.name


# =============================================================================
# TIMESHEETS
# =============================================================================

def _minutes(value: str, field_name: str) -> int:
    match = HHMM_RE.match(value or "")
    if not match:
        raise ValidationError(f"{field_name} must be HH:MM")
    return int(match.group(1)) * 60 + int(match.group(2))


def compute_hours(start_time: str, end_time: str) -> Decimal:
    start = _minutes(start_time, "start_time")
    end = _minutes(end_time, "end_time")
    if end < start:
        end += 24 * 60
    return quantize(Decimal(end - start) / Decimal(60), 2)


def list_timesheets(user_id: str, personnel_id: str | None = None) -> list[Timesheet]:
    query = (
        db.session.query(Timesheet)
        .join(Personnel, Timesheet.personnel_id == Personnel.id)
        .filter(Personnel.user_id == user_id)
    )
    if personnel_id:
        query = query.filter(Timesheet.personnel_id == personnel_id)
    return query.order_by(Timesheet.date.desc()).all()


def get_timesheet(user_id: str, timesheet_id: str) -> Timesheet:
    sheet = db.session.get(Timesheet, timesheet_id)
    if not sheet or not sheet.personnel or sheet.personnel.user_id != user_id:
        raise NotFoundError("Timesheet not found")
    return sheet


def create_timesheet(user_id: str, patch: dict) -> Timesheet:
    person = get_personnel(user_id, patch.get("personnel_id"))

    sheet = Timesheet(personnel_id=person.id)
    for k, v in patch.items():
        if k in TIMESHEET_MUTABLE_FIELDS:
            setattr(sheet, k, v)

    computed = compute_hours(sheet.start_time, sheet.end_time)
    if sheet.total_hours is None:
        sheet.total_hours = computed

    db.session.add(sheet)
    db.session.commit()
    return sheet


def update_timesheet(user_id: str, timesheet_id: str, patch: dict) -> Timesheet:
    sheet = get_timesheet(user_id, timesheet_id)
    for k, v in patch.items():
        if k in TIMESHEET_MUTABLE_FIELDS:
            setattr(sheet, k, v)

    try:
        computed = compute_hours(sheet.start_time, sheet.end_time)
    except ValidationError:
        db.session.rollback()
        raise
    if "total_hours" not in patch and ("start_time" in patch or "end_time" in patch):
        sheet.total_hours = computed

    db.session.commit()
    return sheet


def delete_timesheet(user_id: str, timesheet_id: str) -> None:
    sheet = get_timesheet(user_id, timesheet_id)
    db.session.delete(sheet)
    db.session.commit()
