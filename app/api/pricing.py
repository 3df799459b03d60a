from dataclasses import asdict

from fastapi import APIRouter, Depends

from app.core.config import get_settings
from app.core.security import api_key_auth
from app.pricing.engine import config_for, price_line
from app.pricing.totals import summarize
from app.pricing.validation import validate_line
from app.schemas.dto import (
    LineItemInput,
    OrderTotals,
    PricedLineResponse,
    PriceLineRequest,
    TotalsRequest,
    ValidationResult,
)

router = APIRouter(dependencies=[Depends(api_key_auth)])


@router.post("/line", response_model=PricedLineResponse)
def price_single_line(payload: PriceLineRequest) -> PricedLineResponse:
    config = config_for(payload.variant, get_settings().GST_PERCENT)
    amounts = price_line(payload.item, config).rounded()
    return PricedLineResponse(**asdict(amounts))


@router.post("/validate", response_model=ValidationResult)
def validate_single_line(item: LineItemInput) -> ValidationResult:
    return validate_line(item)


@router.post("/totals", response_model=OrderTotals)
def order_totals(payload: TotalsRequest) -> OrderTotals:
    """Totals over the complete rows of an order; incomplete rows are ignored."""
    config = config_for(payload.variant, get_settings().GST_PERCENT)
    return summarize(payload.items, config)
