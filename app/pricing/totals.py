"""Order-level totals folded from priced line items."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Iterable, Sequence

from app.pricing.engine import ItemCount, LineAmounts, PricingConfig, price_line
from app.pricing.normalize import ZERO, money, to_decimal
from app.pricing.validation import is_row_complete
from app.schemas.dto import LineItemInput, OrderTotals


@dataclass(frozen=True)
class PricedLine:
    item: LineItemInput
    amounts: LineAmounts


def price_lines(items: Iterable[LineItemInput], config: PricingConfig) -> list[PricedLine]:
    return [PricedLine(item=it, amounts=price_line(it, config)) for it in items]


def aggregate(lines: Sequence[PricedLine], item_count: ItemCount) -> OrderTotals:
    """Sum already-priced lines.

    `ItemCount.UNITS` counts expanded units (purchase orders), `ItemCount.ROWS`
    counts lines (sell orders and the card form).
    """
    total_amount = total_quantity = total_free = total_discount = total_tax = ZERO
    total_units = ZERO
    for line in lines:
        total_amount += line.amounts.final_amount
        total_quantity += to_decimal(line.item.qty)
        total_free += to_decimal(line.item.free)
        total_discount += line.amounts.discount_amount
        total_tax += line.amounts.tax_amount
        total_units += line.amounts.total_units

    items = total_units if item_count is ItemCount.UNITS else Decimal(len(lines))
    return OrderTotals(
        total_amount=money(total_amount),
        total_items=items,
        total_quantity=total_quantity,
        total_free=total_free,
        total_discount=money(total_discount),
        total_tax=money(total_tax),
    )


def summarize(items: Iterable[LineItemInput], config: PricingConfig,
              today: date | None = None) -> OrderTotals:
    complete = [it for it in items if is_row_complete(it, today)]
    return aggregate(price_lines(complete, config), config.item_count)
