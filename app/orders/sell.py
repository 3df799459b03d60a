"""Sell order assembly and submission."""

from __future__ import annotations

import logging
from datetime import date
from decimal import Decimal
from typing import Any

from app.orders.common import (
    DuplicateInvoiceError,
    OrderValidationError,
    SubmissionError,
    as_float,
    require_complete_rows,
)
from app.pricing.engine import SELL, PricingConfig
from app.pricing.normalize import ZERO, money, to_decimal
from app.pricing.totals import PricedLine, aggregate, price_lines
from app.remote.client import ApiError, AuthenticationRequired, PharmacyApiClient
from app.schemas.dto import SellOrderRequest, SellTotals

logger = logging.getLogger(__name__)


def sell_totals(lines: list[PricedLine], order_discount: Decimal, amount_paid: Decimal,
                config: PricingConfig = SELL) -> SellTotals:
    totals = aggregate(lines, config.item_count)
    final_amount = max(ZERO, totals.total_amount - order_discount)
    return SellTotals(
        **totals.model_dump(),
        order_discount=money(order_discount),
        final_amount=money(final_amount),
        amount_paid=money(amount_paid),
        amount_due=money(max(ZERO, final_amount - amount_paid)),
    )


def build_sell_payload(order: SellOrderRequest, config: PricingConfig = SELL,
                       today: date | None = None) -> dict[str, Any]:
    if not order.customer_name.strip():
        raise OrderValidationError("Please select a customer.")
    if not order.invoice_no.strip():
        raise OrderValidationError("Please enter an invoice number.")

    lines = price_lines(require_complete_rows(order.items, today), config)
    totals = sell_totals(lines, order.discount_amount, order.amount_paid, config)

    medicines = []
    for line in lines:
        item, amounts = line.item, line.amounts.rounded()
        medicines.append(
            {
                "medicine_id": item.medicine_id or "",
                "med_name": item.product_name.strip(),
                "batch": item.batch.strip(),
                "pack": item.pack,
                "expiry_mm": item.expiry_mm.zfill(2),
                "expiry_yy": item.expiry_yy.zfill(2),
                "qty": float(to_decimal(item.qty)),
                "free": float(to_decimal(item.free)),
                "rate": float(to_decimal(item.rate)),
                "mrp": float(to_decimal(item.mrp)),
                "disc": float(to_decimal(item.disc)),
                "margin": float(amounts.margin_percent),
                "amount": float(amounts.final_amount),
            }
        )

    invoice_date = order.invoice_date or today or date.today()
    return {
        "customer_id": order.customer_id,
        "customer_name": order.customer_name.strip(),
        "customer_mobile": order.customer_mobile,
        "invoice_no": order.invoice_no.strip(),
        "invoice_date": invoice_date.isoformat(),
        "payment_method": order.payment_method,
        "amount_paid": as_float(order.amount_paid),
        "discount_amount": as_float(order.discount_amount),
        "total_amount": float(totals.final_amount),
        "total_item_count": float(totals.total_items),
        "medicines": medicines,
    }


def submit_sell(client: PharmacyApiClient, order: SellOrderRequest,
                config: PricingConfig = SELL, today: date | None = None) -> tuple[dict[str, Any], dict[str, Any]]:
    payload = build_sell_payload(order, config, today)
    try:
        available, message = client.check_duplicate_sell_invoice(payload["invoice_no"])
    except AuthenticationRequired:
        raise
    except ApiError as exc:
        raise DuplicateInvoiceError("Invoice number not available") from exc
    if not available:
        raise DuplicateInvoiceError(message or "Invoice number not available")

    try:
        response = client.create_sell_order(payload)
    except AuthenticationRequired:
        raise
    except ApiError as exc:
        raise SubmissionError(exc.message or "Failed to save sale. Please try again.") from exc
    logger.info("Created sell order %s (%d lines, total %s)",
                payload["invoice_no"], len(payload["medicines"]), payload["total_amount"])
    return payload, response
