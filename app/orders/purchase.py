"""Purchase order assembly and submission."""

from __future__ import annotations

import logging
from datetime import date
from typing import Any

from app.orders.common import (
    DuplicateInvoiceError,
    OrderValidationError,
    SubmissionError,
    as_float,
    expiry_iso,
    require_complete_rows,
)
from app.pricing.engine import PURCHASE, PricingConfig
from app.pricing.normalize import to_decimal
from app.pricing.totals import aggregate, price_lines
from app.remote.client import ApiError, AuthenticationRequired, PharmacyApiClient
from app.schemas.dto import PurchaseOrderRequest

logger = logging.getLogger(__name__)


def check_header(order: PurchaseOrderRequest) -> None:
    if not order.distributor_name.strip() or not order.distributor_id.strip():
        raise OrderValidationError("Please select a distributor.")
    if not order.invoice_no.strip():
        raise OrderValidationError("Please enter an invoice number.")
    if order.invoice_date is None:
        raise OrderValidationError("Please select an invoice date.")
    if order.payment_due_date is None:
        raise OrderValidationError("Please select a payment due date.")
    if order.payment_due_date < order.invoice_date:
        raise OrderValidationError("Payment due date cannot be before invoice date.")


def build_purchase_payload(order: PurchaseOrderRequest, config: PricingConfig = PURCHASE,
                           today: date | None = None) -> dict[str, Any]:
    check_header(order)
    lines = price_lines(require_complete_rows(order.items, today), config)
    totals = aggregate(lines, config.item_count)

    medicines = []
    for line in lines:
        item, amounts = line.item, line.amounts.rounded()
        medicines.append(
            {
                "med_name": item.product_name.strip(),
                "batch": item.batch.strip(),
                "pack": item.pack,
                "expiry_mm": item.expiry_mm.zfill(2),
                "expiry_yy": item.expiry_yy.zfill(2),
                "expiry": expiry_iso(item),
                "qty": float(to_decimal(item.qty)),
                "free": float(to_decimal(item.free)),
                "rate": float(to_decimal(item.rate)),
                "mrp": float(to_decimal(item.mrp)),
                "disc": float(to_decimal(item.disc)),
                "margin": float(amounts.margin_percent),
                "amount": float(amounts.final_amount),
            }
        )

    return {
        "distributor_id": order.distributor_id,
        "invoice_no": order.invoice_no.strip(),
        "invoice_date": order.invoice_date.isoformat(),
        "payment_due_date": order.payment_due_date.isoformat(),
        "total_amount": as_float(totals.total_amount),
        "total_item_count": float(totals.total_items),
        "medicines": medicines,
    }


def ensure_invoice_available(client: PharmacyApiClient, invoice_no: str, distributor_id: str) -> None:
    try:
        available, message = client.check_duplicate_invoice(invoice_no, distributor_id)
    except AuthenticationRequired:
        raise
    except ApiError as exc:
        logger.warning("Duplicate invoice check failed for %s: %s", invoice_no, exc.message)
        raise DuplicateInvoiceError("Invoice number not available") from exc
    if not available:
        raise DuplicateInvoiceError(message or "Invoice number not available")


def submit_purchase(client: PharmacyApiClient, order: PurchaseOrderRequest,
                    config: PricingConfig = PURCHASE, today: date | None = None) -> tuple[dict[str, Any], dict[str, Any]]:
    """Validate, check the invoice number and create the order. Returns (payload, response)."""
    payload = build_purchase_payload(order, config, today)
    ensure_invoice_available(client, payload["invoice_no"], payload["distributor_id"])
    try:
        response = client.create_purchase_order(payload)
    except AuthenticationRequired:
        raise
    except ApiError as exc:
        raise SubmissionError(exc.message or "Failed to save purchase. Please try again.") from exc
    logger.info(
        "Created purchase order %s for distributor %s (%d lines, total %s)",
        payload["invoice_no"], payload["distributor_id"], len(payload["medicines"]), payload["total_amount"],
    )
    return payload, response
