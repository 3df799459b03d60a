"""Row completeness checks for medicine line items."""

from __future__ import annotations

from datetime import date

from app.pricing.normalize import is_blank, parse_int_prefix, to_decimal
from app.schemas.dto import FieldError, LineItemInput, ValidationResult


def full_year(yy: int) -> int:
    return 2000 + yy if yy < 50 else 1900 + yy


def _expiry_errors(item: LineItemInput, today: date) -> list[FieldError]:
    errors: list[FieldError] = []

    month = parse_int_prefix(item.expiry_mm)
    if is_blank(item.expiry_mm):
        errors.append(FieldError(field="expiry_mm", message="Expiry Month is required"))
    elif month is None or not 1 <= month <= 12:
        errors.append(FieldError(field="expiry_mm", message="Expiry Month must be between 01-12"))

    year = parse_int_prefix(item.expiry_yy)
    if is_blank(item.expiry_yy):
        errors.append(FieldError(field="expiry_yy", message="Expiry Year is required"))
    elif year is None or not 0 <= year <= 99:
        errors.append(FieldError(field="expiry_yy", message="Expiry Year must be between 00-99"))
    else:
        expiry_year = full_year(year)
        # An unparsable month only fails the year part of the comparison.
        if expiry_year < today.year or (
            expiry_year == today.year and month is not None and month < today.month
        ):
            errors.append(FieldError(field="expiry_yy", message="Expiry date cannot be in the past"))
    return errors


def validate_line(item: LineItemInput, today: date | None = None) -> ValidationResult:
    today = today or date.today()
    errors: list[FieldError] = []

    if is_blank(item.product_name):
        errors.append(FieldError(field="product_name", message="Product Name is required"))
    if is_blank(item.batch):
        errors.append(FieldError(field="batch", message="Batch is required"))

    errors.extend(_expiry_errors(item, today))

    if is_blank(item.pack):
        errors.append(FieldError(field="pack", message="Pack is required"))
    if is_blank(item.qty) or to_decimal(item.qty) <= 0:
        errors.append(FieldError(field="qty", message="Quantity must be greater than 0"))
    if is_blank(item.free) or to_decimal(item.free) < 0:
        errors.append(FieldError(field="free", message="Free quantity is required (can be 0)"))
    if is_blank(item.mrp) or to_decimal(item.mrp) <= 0:
        errors.append(FieldError(field="mrp", message="MRP must be greater than 0"))
    if is_blank(item.rate) or to_decimal(item.rate) <= 0:
        errors.append(FieldError(field="rate", message="Rate must be greater than 0"))

    return ValidationResult(is_valid=not errors, errors=errors)


def is_row_complete(item: LineItemInput, today: date | None = None) -> bool:
    return validate_line(item, today).is_valid


def get_field_error(item: LineItemInput, field: str, today: date | None = None) -> str | None:
    for error in validate_line(item, today).errors:
        if error.field == field:
            return error.message
    return None


def has_any_data(item: LineItemInput) -> bool:
    """True for a partially filled row, False for an untouched blank one."""
    texts = (item.product_name, item.batch, item.expiry_mm, item.expiry_yy, item.pack)
    if any(not is_blank(t) for t in texts):
        return True
    if any(not is_blank(v) and to_decimal(v) > 0 for v in (item.qty, item.mrp, item.rate)):
        return True
    return not is_blank(item.free) and to_decimal(item.free) >= 0
