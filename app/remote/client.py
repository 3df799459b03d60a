"""Client for the remote pharmacy billing API.

Responses use a `{code, message, data}` envelope. Every call authenticates with
the bearer token and datastore key from the injected `CredentialsProvider`.
"""

from __future__ import annotations

import logging
from typing import Any

import requests

from app.remote import endpoints
from app.remote.credentials import CredentialsProvider

logger = logging.getLogger(__name__)

DATASTORE_KEY_HEADER = "X-Datastore-Key"


class ApiError(Exception):
    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class AuthenticationRequired(ApiError):
    """Remote API answered 401; the user has to log in again."""


class PharmacyApiClient:
    def __init__(
        self,
        base_url: str,
        credentials: CredentialsProvider,
        *,
        timeout: float = 10.0,
        session: requests.Session | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.credentials = credentials
        self.timeout = timeout
        self._session = session or requests.Session()

    def _headers(self) -> dict[str, str]:
        headers = {"Accept": "application/json"}
        token = self.credentials.get_token()
        if token:
            headers["Authorization"] = f"Bearer {token}"
        datastore_key = self.credentials.get_datastore_key()
        if datastore_key:
            headers[DATASTORE_KEY_HEADER] = datastore_key
        return headers

    def _request(self, method: str, path: str, *, json: Any = None,
                 params: dict[str, Any] | None = None) -> dict[str, Any]:
        url = f"{self.base_url}/{path.lstrip('/')}"
        try:
            resp = self._session.request(
                method, url, json=json, params=params, headers=self._headers(), timeout=self.timeout
            )
        except requests.RequestException as exc:
            logger.warning("%s %s failed: %s", method, path, exc)
            raise ApiError(f"Could not reach pharmacy API: {exc}") from exc

        try:
            body = resp.json()
        except ValueError:
            body = {}
        if not isinstance(body, dict):
            body = {"data": body}

        if resp.status_code == 401:
            logger.info("%s %s returned 401, login required", method, path)
            raise AuthenticationRequired(body.get("message") or "Login required", status_code=401)
        if resp.status_code >= 400:
            message = body.get("message") or f"Request failed with status {resp.status_code}"
            logger.warning("%s %s returned %s: %s", method, path, resp.status_code, message)
            raise ApiError(message, status_code=resp.status_code)
        return body

    # Auth / store

    def login(self, mobile: str, password: str) -> dict[str, Any]:
        body = self._request("POST", endpoints.LOGIN, json={"mobile": mobile, "password": password})
        return body.get("data") or {}

    def register(self, data: dict[str, Any]) -> dict[str, Any]:
        return self._request("POST", endpoints.REGISTER, json=data)

    def get_store_details(self) -> dict[str, Any]:
        return self._request("GET", endpoints.STORE_DETAILS).get("data") or {}

    # Distributors

    def list_distributors(self) -> list[dict[str, Any]]:
        data = self._request("GET", endpoints.GET_DISTRIBUTORS).get("data") or {}
        return data.get("distributors") or []

    def search_distributors(self, search: str) -> list[dict[str, Any]]:
        data = self._request("GET", endpoints.SEARCH_DISTRIBUTORS, params={"search": search}).get("data") or {}
        return data.get("distributors") or []

    def add_distributor(self, data: dict[str, Any]) -> dict[str, Any]:
        return self._request("POST", endpoints.ADD_DISTRIBUTOR, json=data)

    def update_distributor(self, distributor_id: str, data: dict[str, Any]) -> dict[str, Any]:
        return self._request("PUT", f"{endpoints.UPDATE_DISTRIBUTOR}/{distributor_id}", json=data)

    # Customers

    def list_customers(self) -> list[dict[str, Any]]:
        data = self._request("GET", endpoints.GET_CUSTOMERS).get("data") or {}
        return data.get("customers") or []

    def add_customer(self, data: dict[str, Any]) -> dict[str, Any]:
        return self._request("POST", endpoints.ADD_CUSTOMER, json=data)

    def update_customer(self, customer_id: str, data: dict[str, Any]) -> dict[str, Any]:
        return self._request("PUT", f"{endpoints.UPDATE_CUSTOMER}/{customer_id}", json=data)

    # Stock

    def search_medicines_stock(self, search: str) -> list[dict[str, Any]]:
        data = self._request("POST", endpoints.SEARCH_MEDICINES_STOCK, json={"search": search}).get("data") or {}
        return data.get("medicines") or []

    # Purchase orders

    def check_duplicate_invoice(self, invoice_no: str, distributor_id: str) -> tuple[bool, str]:
        """Return (available, server message) for an invoice number at a distributor."""
        body = self._request(
            "POST",
            endpoints.CHECK_DUPLICATE_INVOICE,
            json={"invoice_no": invoice_no, "distributor_id": distributor_id},
        )
        available = bool((body.get("data") or {}).get("isInvoiceAvailable"))
        return available, body.get("message") or ""

    def create_purchase_order(self, payload: dict[str, Any]) -> dict[str, Any]:
        return self._request("POST", endpoints.CREATE_PURCHASE_ORDER, json=payload)

    def get_purchase_order(self, order_id: str) -> dict[str, Any]:
        return self._request("GET", f"{endpoints.PURCHASE_ORDER}/{order_id}").get("data") or {}

    def update_purchase_order(self, order_id: str, payload: dict[str, Any]) -> dict[str, Any]:
        return self._request("PUT", f"{endpoints.PURCHASE_ORDER}/{order_id}", json=payload)

    def delete_purchase_order(self, order_id: str) -> dict[str, Any]:
        return self._request("DELETE", f"{endpoints.PURCHASE_ORDER}/{order_id}")

    # Sell orders

    def check_duplicate_sell_invoice(self, invoice_no: str) -> tuple[bool, str]:
        body = self._request("POST", endpoints.CHECK_DUPLICATE_SELL_INVOICE, json={"invoice_no": invoice_no})
        available = bool((body.get("data") or {}).get("isInvoiceAvailable"))
        return available, body.get("message") or ""

    def create_sell_order(self, payload: dict[str, Any]) -> dict[str, Any]:
        return self._request("POST", endpoints.CREATE_SELL_ORDER, json=payload)
