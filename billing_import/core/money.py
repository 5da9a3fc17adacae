"""Decimal helpers for yen amounts carried as strings."""
from __future__ import annotations

import re
import unicodedata
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

TAX_RATE = Decimal("1.1")

_CURRENCY_NOISE = re.compile(r"[¥￥,円\s]")


def clean_number(raw: object) -> str:
    """Strip currency marks, separators and whitespace; return ``""`` if not numeric.

    Full-width digits are folded to ASCII and the result is always plain
    decimal notation (``"１，０００"`` and ``"1e3"`` both give ``"1000"``).
    """

    if raw is None:
        return ""
    if isinstance(raw, bool):
        return ""
    if isinstance(raw, (int, float, Decimal)):
        return format_amount(Decimal(str(raw)))

    cleaned = _CURRENCY_NOISE.sub("", unicodedata.normalize("NFKC", str(raw)))
    if not cleaned:
        return ""
    try:
        value = Decimal(cleaned)
    except InvalidOperation:
        return ""
    if not value.is_finite():
        return ""
    return format_amount(value)


def to_decimal(raw: object) -> Decimal:
    cleaned = clean_number(raw)
    return Decimal(cleaned) if cleaned else Decimal(0)


def is_nonzero_amount(raw: object) -> bool:
    cleaned = clean_number(raw)
    return bool(cleaned) and Decimal(cleaned) != 0


def round_half_up(value: Decimal) -> Decimal:
    """Round to a whole yen, halves away from zero (``1.5`` -> ``2``)."""

    return value.quantize(Decimal(1), rounding=ROUND_HALF_UP)


def format_amount(value: Decimal) -> str:
    """Render a decimal without exponent; integral values without a fraction."""

    if value == value.to_integral_value():
        return str(value.quantize(Decimal(1)))
    return format(value.normalize(), "f")


def tax_inclusive(amount: str) -> str:
    """Return ``round_half_up(amount * 1.1)`` as a string, or ``""`` for no amount."""

    if not clean_number(amount):
        return ""
    return format_amount(round_half_up(to_decimal(amount) * TAX_RATE))


def tax_exclusive(amount: str) -> str:
    if not clean_number(amount):
        return ""
    return format_amount(round_half_up(to_decimal(amount) / TAX_RATE))


def unit_price_from(amount: str, quantity: str) -> str:
    """Derive a unit price as ``round_half_up(amount / quantity)``."""

    qty = to_decimal(quantity) or Decimal(1)
    if qty <= 0 or not clean_number(amount):
        return ""
    return format_amount(round_half_up(to_decimal(amount) / qty))
