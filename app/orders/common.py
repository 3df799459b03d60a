"""Pieces shared by purchase and sell order assembly."""

from __future__ import annotations

from datetime import date
from decimal import Decimal
from typing import Iterable

from app.pricing.normalize import money, parse_int_prefix
from app.pricing.validation import full_year, has_any_data, is_row_complete
from app.schemas.dto import LineItemInput


class OrderError(Exception):
    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class OrderValidationError(OrderError):
    pass


class DuplicateInvoiceError(OrderError):
    pass


class SubmissionError(OrderError):
    pass


def partition_rows(items: Iterable[LineItemInput],
                   today: date | None = None) -> tuple[list[LineItemInput], list[LineItemInput]]:
    """Split rows into (complete, partially filled). Untouched blank rows are dropped."""
    complete: list[LineItemInput] = []
    incomplete: list[LineItemInput] = []
    for item in items:
        if is_row_complete(item, today):
            complete.append(item)
        elif has_any_data(item):
            incomplete.append(item)
    return complete, incomplete


def require_complete_rows(items: Iterable[LineItemInput], today: date | None = None) -> list[LineItemInput]:
    complete, incomplete = partition_rows(items, today)
    if incomplete:
        raise OrderValidationError(
            f"Please complete all required fields for {len(incomplete)} medicine row(s) before submitting."
        )
    if not complete:
        raise OrderValidationError("Please add at least one complete medicine entry before submitting.")
    return complete


def as_float(value: Decimal) -> float:
    return float(money(value))


def expiry_iso(item: LineItemInput) -> str:
    """First day of the expiry month, e.g. "2027-03-01"."""
    year = full_year(parse_int_prefix(item.expiry_yy) or 0)
    month = parse_int_prefix(item.expiry_mm) or 1
    return f"{year:04d}-{month:02d}-01"
