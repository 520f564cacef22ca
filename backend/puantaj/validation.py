from __future__ import annotations
from datetime import datetime
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from puantaj.time_utils import parse_iso_datetime

from dataclasses import dataclass, field
from typing import Any

from sqlalchemy import Boolean, Integer, Numeric, String, Text, DateTime
from sqlalchemy.orm import DeclarativeMeta


# Maximum amount: 9,999,999,999.99 (Numeric(12, 2))
MAX_AMOUNT = Decimal("9999999999.99")


class ValidationError(ValueError):
    """400-level input problem."""


class ConflictError(ValueError):
    """409-level business rule conflict (e.g., deleting a referenced customer)."""


class NotFoundError(LookupError):
    """404-level missing entity."""


def to_decimal(value: Any, field_name: str = "value", places: int | None = None) -> Decimal:
    """
    The one decimal parser for money, quantities and rates.

    Accepts Decimal, int, float (via its shortest repr) and numeric strings
    ("1200", "1200.50", " 1,5 " with a comma decimal separator).
    Rejects bools, blanks, NaN/Infinity and anything else.
    """
    if isinstance(value, bool) or value is None:
        raise ValidationError(f"{field_name} must be a number")
    if isinstance(value, Decimal):
        result = value
    elif isinstance(value, int):
        result = Decimal(value)
    elif isinstance(value, float):
        result = Decimal(str(value))
    elif isinstance(value, str):
        text = value.strip().replace(",", ".")
        if not text:
            raise ValidationError(f"{field_name} must be a number")
        try:
            result = Decimal(text)
        except InvalidOperation:
            raise ValidationError(f"{field_name} must be a number")
    else:
        raise ValidationError(f"{field_name} must be a number")

    if not result.is_finite():
        raise ValidationError(f"{field_name} must be a finite number")
    if places is not None:
        result = quantize(result, places)
    return result


def quantize(value: Decimal, places: int = 2) -> Decimal:
    return value.quantize(Decimal(1).scaleb(-places), rounding=ROUND_HALF_UP)


def money(value: Decimal) -> Decimal:
    return quantize(value, 2)


@dataclass(frozen=True)
class ModelValidationPolicy:
    """
    Central policy layer:
    - writable_fields: what clients are allowed to set (security boundary)
    - required_on_create: fields required for POST
    - choices: allowed values for enum-like string columns
    """
    writable_fields: set[str]
    required_on_create: set[str] = field(default_factory=set)
    choices: dict[str, set[str]] = field(default_factory=dict)


def _columns_by_key(model: DeclarativeMeta) -> dict[str, Any]:
    mapper = model.__mapper__
    return {c.key: c for c in mapper.columns}


def _coerce_value(col, value: Any):
    coltype = col.type

    if value is None:
        return None

    # Numerics (money, quantities, rates) - Decimal only, never float
    if isinstance(coltype, Numeric):
        dec = to_decimal(value, col.key)
        if coltype.scale is not None:
            dec = quantize(dec, coltype.scale)
        if abs(dec) > MAX_AMOUNT:
            raise ValidationError(f"{col.key} is out of range")
        return dec

    # Integers - strict validation to reject floats and scientific notation
    if isinstance(coltype, Integer):
        if isinstance(value, int) and not isinstance(value, bool):
            return value
        if isinstance(value, str):
            stripped = value.strip()
            if not stripped or not stripped.lstrip("-").isdigit():
                raise ValidationError(f"{col.key} must be an integer")
            return int(stripped)
        raise ValidationError(f"{col.key} must be an integer")

    # Booleans
    if isinstance(coltype, Boolean):
        if isinstance(value, bool):
            return value
        if isinstance(value, str) and value.strip().lower() in ("true", "false", "1", "0"):
            return value.strip().lower() in ("true", "1")
        if isinstance(value, int):
            return bool(value)
        raise ValidationError(f"{col.key} must be a boolean")

    # Datetimes (accept ISO-8601 strings; normalize to UTC)
    if isinstance(coltype, DateTime):
        if isinstance(value, datetime):
            return value
        if isinstance(value, str):
            try:
                dt = parse_iso_datetime(value)
            except ValueError:
                raise ValidationError(f"{col.key} must be an ISO-8601 datetime")
            if dt is None:
                raise ValidationError(f"{col.key} must be an ISO-8601 datetime")
            return dt
        raise ValidationError(f"{col.key} must be a datetime")

    # Strings / Text
    if isinstance(coltype, (String, Text)):
        return str(value).strip()

    # Default: leave as-is
    return value


def validate_payload(
    *,
    model: DeclarativeMeta,
    payload: dict,
    policy: ModelValidationPolicy,
    partial: bool,
) -> dict:
    """
    Validates + normalizes incoming JSON against:
    - SQLAlchemy column metadata (nullable, type, String length)
    - a policy allowlist (writable_fields)
    - required_on_create (if partial=False)
    - enum choices
    Returns a cleaned patch dict with only writable fields.

    partial=False: create semantics (enforce required_on_create)
    partial=True: patch semantics (validate only provided keys)
    """
    if payload is None:
        payload = {}
    if not isinstance(payload, dict):
        raise ValidationError("Invalid JSON payload")

    if not partial:
        missing = sorted(f for f in policy.required_on_create if payload.get(f) in (None, ""))
        if missing:
            raise ValidationError(f"Missing required fields: {', '.join(missing)}")

    cols = _columns_by_key(model)

    # Reject unknown / non-writable fields
    for k in payload.keys():
        if k not in policy.writable_fields:
            raise ValidationError(f"Field not allowed: {k}")
        if k not in cols:
            raise ValidationError(f"Unknown field: {k}")

    patch: dict = {}

    for k, raw in payload.items():
        col = cols[k]

        # NULL handling
        if raw is None:
            if not col.nullable and col.default is None:
                raise ValidationError(f"{k} cannot be null")
            if not col.nullable:
                # fall back to the column default on create, ignore on patch
                continue
            patch[k] = None
            continue

        val = _coerce_value(col, raw)

        # Blank string check for non-nullable text fields
        if isinstance(col.type, (String, Text)) and not col.nullable:
            if isinstance(val, str) and val == "":
                raise ValidationError(f"{k} cannot be blank")

        # Max length check for String(n)
        if isinstance(col.type, String) and col.type.length and isinstance(val, str):
            if len(val) > col.type.length:
                raise ValidationError(f"{k} exceeds max length {col.type.length}")

        allowed = policy.choices.get(k)
        if allowed is not None and val not in allowed:
            raise ValidationError(f"{k} must be one of: {', '.join(sorted(allowed))}")

        patch[k] = val

    return patch


def require_positive(patch: dict, *fields: str) -> None:
    for name in fields:
        if name in patch and patch[name] is not None and patch[name] <= 0:
            raise ValidationError(f"{name} must be > 0")


def require_non_negative(patch: dict, *fields: str) -> None:
    for name in fields:
        if name in patch and patch[name] is not None and patch[name] < 0:
            raise ValidationError(f"{name} must be >= 0")


def enforce_rules_vat_rate(patch: dict) -> None:
    rate = patch.get("vat_rate")
    if rate is not None and not (Decimal("0") <= rate <= Decimal("100")):
        raise ValidationError("vat_rate must be between 0 and 100")


def decimal_str(value: Decimal | None, places: int = 2) -> str | None:
    """Fixed-precision string for JSON output ("1200.00")."""
    if value is None:
        return None
    return str(quantize(to_decimal(value), places))
