from __future__ import annotations

from ..extensions import db
from .auth import new_id
from puantaj.time_utils import to_utc_z
from puantaj.validation import decimal_str


PERSONNEL_PAYMENT_TYPES = {"salary", "advance", "bonus"}


class Personnel(db.Model):
    """
    Employee record.

    is_active=False keeps historical timesheets and payments readable
    after the person leaves.
    """
    __tablename__ = "personnel"

    id = db.Column(db.String(36), primary_key=True, default=new_id)
    user_id = db.Column(db.String(36), db.ForeignKey("users.id"), nullable=False, index=True)

    name = db.Column(db.String(255), nullable=False)
    position = db.Column(db.String(128), nullable=False)
    start_date = db.Column(db.DateTime(timezone=True), nullable=False)
    phone = db.Column(db.String(32), nullable=True)
    email = db.Column(db.String(255), nullable=True)
    salary = db.Column(db.Numeric(12, 2), nullable=True)
    is_active = db.Column(db.Boolean, nullable=False, default=True, index=True)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "user_id": self.user_id,
            "name": self.name,
            "position": self.position,
            "start_date": to_utc_z(self.start_date),
            "phone": self.phone,
            "email": self.email,
            "salary": decimal_str(self.salary),
            "is_active": self.is_active,
            "created_at": to_utc_z(self.created_at),
        }


class Timesheet(db.Model):
    """
    One worked shift.

    start_time/end_time are wall-clock "HH:MM" strings; total_hours is
    derived from them unless given explicitly. An end before the start
    means the shift crossed midnight.
    """
    __tablename__ = "timesheets"
    __table_args__ = (
        db.Index("ix_timesheets_personnel_date", "personnel_id", "date"),
    )

    id = db.Column(db.String(36), primary_key=True, default=new_id)
    personnel_id = db.Column(db.String(36), db.ForeignKey("personnel.id"), nullable=False, index=True)

    date = db.Column(db.DateTime(timezone=True), nullable=False)
    start_time = db.Column(db.String(5), nullable=False)
    end_time = db.Column(db.String(5), nullable=False)
    total_hours = db.Column(db.Numeric(5, 2), nullable=False)
    notes = db.Column(db.Text, nullable=True)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())

    personnel = db.relationship("Personnel", backref=db.backref("timesheets", lazy=True))

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "personnel_id": self.personnel_id,
            "date": to_utc_z(self.date),
            "start_time": self.start_time,
            "end_time": self.end_time,
            "total_hours": decimal_str(self.total_hours),
            "notes": self.notes,
            "created_at": to_utc_z(self.created_at),
        }


class PersonnelPayment(db.Model):
    """Salary, advance or bonus paid to an employee; mirrored as an expense Transaction."""
    __tablename__ = "personnel_payments"

    id = db.Column(db.String(36), primary_key=True, default=new_id)
    personnel_id = db.Column(db.String(36), db.ForeignKey("personnel.id"), nullable=False, index=True)

    amount = db.Column(db.Numeric(12, 2), nullable=False)
    description = db.Column(db.String(500), nullable=False)
    payment_date = db.Column(db.DateTime(timezone=True), nullable=False, index=True)
    payment_type = db.Column(db.String(16), nullable=False, default="salary")

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())

    personnel = db.relationship("Personnel", backref=db.backref("payments", lazy=True))

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "personnel_id": self.personnel_id,
            "amount": decimal_str(self.amount),
            "description": self.description,
            "payment_date": to_utc_z(self.payment_date),
            "payment_type": self.payment_type,
            "created_at": to_utc_z(self.created_at),
        }
