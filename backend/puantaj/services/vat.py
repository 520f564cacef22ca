# Overview: Pure VAT arithmetic shared by task and quote mutation paths.

"""
VAT Calculator

All inputs go through validation.to_decimal so task, quote and summary
paths parse and round money identically.

- vat_amount = round_half_up(base * rate / 100, 2)
- total_with_vat = base + vat_amount
- has_vat=False: vat_amount is 0.00 and total_with_vat is the base itself
"""

from __future__ import annotations

from decimal import Decimal
from typing import Any

from ..validation import money, to_decimal


DEFAULT_VAT_RATE = Decimal("20.00")
ZERO = Decimal("0.00")


def vat_amount(base: Any, rate_percent: Any) -> Decimal:
    base_dec = to_decimal(base, "amount")
    rate_dec = to_decimal(rate_percent, "vat_rate")
    return money(base_dec * rate_dec / Decimal(100))


def total_with_vat(base: Any, rate_percent: Any) -> Decimal:
    base_dec = to_decimal(base, "amount")
    return money(base_dec + vat_amount(base_dec, rate_percent))


def apply_vat(amount: Any, has_vat: bool, vat_rate: Any = None) -> tuple[Decimal, Decimal]:
    """
    Return (vat_amount, total_with_vat) for an amount.

    Bases are not validated here; callers reject negative amounts.
    """
    base = to_decimal(amount, "amount")
    if not has_vat:
        return ZERO, base
    rate = DEFAULT_VAT_RATE if vat_rate is None else vat_rate
    vat = vat_amount(base, rate)
    return vat, money(base + vat)
