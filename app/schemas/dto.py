from datetime import date
from decimal import Decimal
from typing import Literal, Union

from pydantic import BaseModel, field_validator

# Raw numeric form value: "" means untouched, 0 means explicitly zero.
RawNumber = Union[Decimal, int, float, str, None]

PaymentMethod = Literal["cash", "card", "upi", "bank_transfer", "other"]


class LineItemInput(BaseModel):
    product_name: str = ""
    medicine_id: str | None = None
    batch: str = ""
    expiry_mm: str = ""
    expiry_yy: str = ""
    pack: str = ""
    qty: RawNumber = ""
    free: RawNumber = ""
    mrp: RawNumber = ""
    rate: RawNumber = ""
    disc: RawNumber = ""
    scheme_percent: RawNumber = ""
    discount_amount: RawNumber = ""
    gst_percent: RawNumber = ""

    @field_validator("product_name", "batch", "expiry_mm", "expiry_yy", "pack", mode="before")
    @classmethod
    def _text(cls, v):
        if v is None:
            return ""
        if isinstance(v, (int, float, Decimal)):
            return str(v)
        return v


class FieldError(BaseModel):
    field: str
    message: str


class ValidationResult(BaseModel):
    is_valid: bool
    errors: list[FieldError]


class PricedLineResponse(BaseModel):
    containers: Decimal
    units_per_container: int
    total_units: Decimal
    gross_amount: Decimal
    discount_amount: Decimal
    net_amount: Decimal
    tax_amount: Decimal
    final_amount: Decimal
    margin_percent: Decimal


class OrderTotals(BaseModel):
    total_amount: Decimal
    total_items: Decimal
    total_quantity: Decimal
    total_free: Decimal
    total_discount: Decimal
    total_tax: Decimal


class SellTotals(OrderTotals):
    order_discount: Decimal
    final_amount: Decimal
    amount_paid: Decimal
    amount_due: Decimal


class PriceLineRequest(BaseModel):
    variant: Literal["purchase", "sell", "card"] = "purchase"
    item: LineItemInput


class TotalsRequest(BaseModel):
    variant: Literal["purchase", "sell", "card"] = "purchase"
    items: list[LineItemInput]


class PurchaseOrderRequest(BaseModel):
    distributor_id: str = ""
    distributor_name: str = ""
    invoice_no: str = ""
    invoice_date: date | None = None
    payment_due_date: date | None = None
    items: list[LineItemInput]


class SellOrderRequest(BaseModel):
    customer_id: str | None = None
    customer_name: str = ""
    customer_mobile: str | None = None
    invoice_no: str = ""
    invoice_date: date | None = None
    payment_method: PaymentMethod = "cash"
    discount_amount: Decimal = Decimal("0")
    amount_paid: Decimal = Decimal("0")
    items: list[LineItemInput]


class OrderSubmitResponse(BaseModel):
    status: str
    message: str
    total_amount: Decimal
    total_item_count: Decimal


class ImportResult(BaseModel):
    success: bool
    items: list[LineItemInput]
    errors: list[str]


class LoginRequest(BaseModel):
    mobile: str
    password: str


class BatchOption(BaseModel):
    value: str
    label: str
    batch: str
    expiry_mm: str
    expiry_yy: str
    mrp: Decimal | None = None
    rate: Decimal | None = None
    disc: Decimal | None = None
    qty_available: Decimal


class MedicineOption(BaseModel):
    value: str
    label: str
    pack: str
    batches: list[BatchOption]
