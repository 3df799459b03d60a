from datetime import date
from decimal import Decimal

from app.pricing.engine import CARD, PURCHASE, SELL, ItemCount
from app.pricing.totals import aggregate, price_lines, summarize
from app.schemas.dto import LineItemInput

TODAY = date(2026, 10, 19)


def row(**overrides) -> LineItemInput:
    data = {
        "product_name": "Amoxicillin",
        "batch": "A1",
        "expiry_mm": "06",
        "expiry_yy": "28",
        "pack": "1x10",
        "qty": 10,
        "free": 2,
        "mrp": 3,
        "rate": 2,
        "disc": 10,
    }
    data.update(overrides)
    return LineItemInput(**data)


def test_purchase_totals_count_expanded_units():
    lines = price_lines([row(), row(qty=1, free=0, disc=0)], PURCHASE)
    totals = aggregate(lines, ItemCount.UNITS)
    assert totals.total_items == Decimal("130")
    assert totals.total_quantity == Decimal("11")
    assert totals.total_free == Decimal("2")
    # 226.80 + 10 units x 2 x 1.05
    assert totals.total_amount == Decimal("247.80")
    assert totals.total_discount == Decimal("24.00")


def test_sell_totals_count_rows():
    lines = price_lines([row(), row(qty=3)], SELL)
    totals = aggregate(lines, ItemCount.ROWS)
    assert totals.total_items == 2
    assert totals.total_quantity == Decimal("13")


def test_totals_reuse_line_amounts():
    lines = price_lines([row(), row(rate="2.333", disc="7.5")], PURCHASE)
    totals = aggregate(lines, ItemCount.UNITS)
    line_sum = sum(line.amounts.final_amount for line in lines)
    assert abs(totals.total_amount - line_sum) < Decimal("0.005")


def test_recomputing_totals_is_idempotent():
    items = [row(), row(qty=4, pack="2*5"), LineItemInput()]
    first = summarize(items, PURCHASE, TODAY)
    second = summarize(items, PURCHASE, TODAY)
    assert first == second


def test_summarize_skips_incomplete_rows():
    items = [row(), row(qty=0), LineItemInput(batch="half-typed")]
    totals = summarize(items, CARD, TODAY)
    assert totals.total_items == 1


def test_empty_order_totals_are_zero():
    totals = aggregate([], ItemCount.ROWS)
    assert totals.total_amount == 0
    assert totals.total_items == 0
