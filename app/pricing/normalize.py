"""Coercion of raw form values into numeric domain values."""

from __future__ import annotations

import re
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Any

ZERO = Decimal("0")
CENT = Decimal("0.01")

# "Ã—" is "×" read back through a latin-1 decoder; some sources still carry it.
_MOJIBAKE_TIMES = "Ã—"
_PACK_SEPARATOR = re.compile(r"[×xX*]")
_INT_PREFIX = re.compile(r"^\s*([+-]?\d+)")


def is_blank(value: Any) -> bool:
    if value is None:
        return True
    return isinstance(value, str) and value.strip() == ""


def to_decimal(value: Any) -> Decimal:
    """Return `value` as a Decimal; blanks and garbage become 0."""
    if is_blank(value):
        return ZERO
    if isinstance(value, Decimal):
        return value if value.is_finite() else ZERO
    text = str(value).strip().replace(",", "")
    try:
        d = Decimal(text)
    except (InvalidOperation, ValueError):
        return ZERO
    return d if d.is_finite() else ZERO


def parse_int_prefix(value: Any) -> int | None:
    """Leading integer of `value` ("07" -> 7, "3a" -> 3), or None."""
    if is_blank(value):
        return None
    match = _INT_PREFIX.match(str(value))
    return int(match.group(1)) if match else None


def parse_pack_units(pack: Any) -> int:
    """Units per container from a descriptor like "1×10" or "2*5"; 1 when unparsable."""
    if is_blank(pack):
        return 1
    text = str(pack).replace(_MOJIBAKE_TIMES, "×")
    parts = _PACK_SEPARATOR.split(text)
    if len(parts) != 2:
        return 1
    first, second = (parse_int_prefix(p) for p in parts)
    if first is None or second is None:
        return 1
    units = first * second
    return units if units >= 1 else 1


def money(value: Decimal) -> Decimal:
    return value.quantize(CENT, rounding=ROUND_HALF_UP)
