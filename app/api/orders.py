from decimal import Decimal
from typing import Any

from fastapi import APIRouter, Depends, HTTPException, status

from app.api.deps import get_authenticated_client
from app.core.config import get_settings
from app.core.security import api_key_auth
from app.orders.common import DuplicateInvoiceError, OrderError, OrderValidationError
from app.orders.purchase import submit_purchase
from app.orders.sell import submit_sell
from app.pricing.engine import config_for
from app.remote.client import AuthenticationRequired, PharmacyApiClient
from app.schemas.dto import OrderSubmitResponse, PurchaseOrderRequest, SellOrderRequest

router = APIRouter(dependencies=[Depends(api_key_auth)])


def _http_error(exc: Exception) -> HTTPException:
    if isinstance(exc, AuthenticationRequired):
        return HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=exc.message)
    if isinstance(exc, OrderValidationError):
        return HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=exc.message)
    if isinstance(exc, DuplicateInvoiceError):
        return HTTPException(status_code=status.HTTP_409_CONFLICT, detail=exc.message)
    return HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=getattr(exc, "message", str(exc)))


def _to_response(payload: dict[str, Any], response: dict[str, Any], default_message: str) -> OrderSubmitResponse:
    return OrderSubmitResponse(
        status="created",
        message=response.get("message") or default_message,
        total_amount=Decimal(str(payload["total_amount"])),
        total_item_count=Decimal(str(payload["total_item_count"])),
    )


@router.post("/purchase", response_model=OrderSubmitResponse, status_code=status.HTTP_201_CREATED)
def create_purchase(
    order: PurchaseOrderRequest, client: PharmacyApiClient = Depends(get_authenticated_client)
) -> OrderSubmitResponse:
    try:
        payload, response = submit_purchase(client, order, config_for("purchase", get_settings().GST_PERCENT))
    except (OrderError, AuthenticationRequired) as exc:
        raise _http_error(exc) from exc
    return _to_response(payload, response, "Purchase saved successfully!")


@router.post("/sell", response_model=OrderSubmitResponse, status_code=status.HTTP_201_CREATED)
def create_sell(
    order: SellOrderRequest, client: PharmacyApiClient = Depends(get_authenticated_client)
) -> OrderSubmitResponse:
    try:
        payload, response = submit_sell(client, order, config_for("sell", get_settings().GST_PERCENT))
    except (OrderError, AuthenticationRequired) as exc:
        raise _http_error(exc) from exc
    return _to_response(payload, response, "Sale saved successfully!")
