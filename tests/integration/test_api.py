from __future__ import annotations

from decimal import Decimal

import pytest
from fastapi.testclient import TestClient

from app.api.deps import get_api_client, get_authenticated_client, get_credentials_store
from app.core.config import get_settings
from app.main import app
from app.remote.client import ApiError, AuthenticationRequired
from app.remote.credentials import FileCredentialsStore

ITEM = {
    "product_name": "Dolo 650",
    "batch": "DL1",
    "expiry_mm": "03",
    "expiry_yy": "30",
    "pack": "1x10",
    "qty": 10,
    "free": 2,
    "mrp": 3,
    "rate": 2,
    "disc": 10,
}


class FakeRemote:
    def __init__(self):
        self.available = True
        self.create_error = None
        self.orders = []

    def login(self, mobile, password):
        if password != "secret":
            raise ApiError("Invalid credentials", status_code=400)
        return {"token": "tok-1", "datastore_key": "ds-1", "user": {"mobile": mobile}}

    def check_duplicate_invoice(self, invoice_no, distributor_id):
        return self.available, "Invoice already exists"

    def check_duplicate_sell_invoice(self, invoice_no):
        return self.available, "Invoice already exists"

    def create_purchase_order(self, payload):
        if self.create_error:
            raise self.create_error
        self.orders.append(payload)
        return {"code": 200, "message": "Purchase order created"}

    create_sell_order = create_purchase_order

    def search_medicines_stock(self, search):
        return [
            {
                "_id": "m1",
                "name": "Dolo 650",
                "manufacturer": "Micro Labs",
                "pack_size": "1x15",
                "batches": [
                    {"_id": "b1", "batch": "DL1", "expiry_mm": "03", "expiry_yy": "28", "qty_available": 40, "mrp": 30},
                    {"_id": "b2", "batch": "DL0", "expiry_mm": "01", "expiry_yy": "27", "qty_available": 0},
                ],
            }
        ]


@pytest.fixture()
def remote():
    return FakeRemote()


@pytest.fixture()
def store(tmp_path):
    return FileCredentialsStore(tmp_path / "session.json")


@pytest.fixture()
def client(remote, store):
    app.dependency_overrides[get_credentials_store] = lambda: store
    app.dependency_overrides[get_api_client] = lambda: remote
    with TestClient(app, headers={"X-API-Key": get_settings().API_KEY}) as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture()
def logged_in(client, store):
    store.save({"token": "tok-1", "datastore_key": "ds-1"})
    return client


def test_health_is_open_and_echoes_request_id():
    with TestClient(app) as c:
        resp = c.get("/health", headers={"X-Request-ID": "abc123"})
    assert resp.status_code == 200
    assert resp.json() == {"status": "ok"}
    assert resp.headers["X-Request-ID"] == "abc123"


def test_api_key_required():
    with TestClient(app) as c:
        resp = c.post("/pricing/line", json={"item": ITEM}, headers={"X-API-Key": "wrong"})
    assert resp.status_code == 401


def test_price_line(client):
    resp = client.post("/pricing/line", json={"variant": "purchase", "item": ITEM})
    assert resp.status_code == 200
    body = resp.json()
    assert Decimal(body["total_units"]) == 120
    assert Decimal(body["final_amount"]) == Decimal("226.80")
    assert Decimal(body["margin_percent"]) == Decimal("33.33")


def test_validate_reports_field_errors(client):
    resp = client.post("/pricing/validate", json={**ITEM, "qty": "", "batch": ""})
    body = resp.json()
    assert body["is_valid"] is False
    assert {e["field"] for e in body["errors"]} == {"qty", "batch"}


def test_totals_ignores_incomplete_rows(client):
    resp = client.post("/pricing/totals", json={"variant": "sell", "items": [ITEM, {**ITEM, "rate": ""}]})
    body = resp.json()
    assert Decimal(body["total_items"]) == 1
    # 10 x 2 less 10% plus 5% GST
    assert Decimal(body["total_amount"]) == Decimal("18.90")


def test_import_csv_upload(client):
    content = b"Product Name,Batch,Expiry,Pack,Qty,Free,MRP,Rate\nDolo 650,DL1,03/28,1x15,5,1,30,20\n"
    resp = client.post("/imports/medicines", files={"file": ("stock.csv", content, "text/csv")})
    body = resp.json()
    assert body["success"] is True
    assert body["items"][0]["product_name"] == "Dolo 650"
    assert body["items"][0]["expiry_mm"] == "03"
    assert body["items"][0]["expiry_yy"] == "28"


def test_import_rejects_unknown_format(client):
    resp = client.post("/imports/medicines", files={"file": ("stock.txt", b"x", "text/plain")})
    assert resp.json()["success"] is False


def test_login_persists_session_and_logout_clears(client, store):
    resp = client.post("/auth/login", json={"mobile": "9999999999", "password": "secret"})
    assert resp.status_code == 200
    assert store.get_token() == "tok-1"
    assert store.get_datastore_key() == "ds-1"

    client.post("/auth/logout")
    assert store.is_authenticated() is False


def test_login_failure_passes_status_through(client, store):
    resp = client.post("/auth/login", json={"mobile": "9999999999", "password": "nope"})
    assert resp.status_code == 400
    assert resp.json()["detail"] == "Invalid credentials"
    assert store.is_authenticated() is False


def purchase_body(**overrides):
    body = {
        "distributor_id": "d1",
        "distributor_name": "Apex Pharma",
        "invoice_no": "INV-9",
        "invoice_date": "2026-10-19",
        "payment_due_date": "2026-11-18",
        "items": [ITEM],
    }
    body.update(overrides)
    return body


def test_orders_need_login(client):
    resp = client.post("/orders/purchase", json=purchase_body())
    assert resp.status_code == 401
    assert resp.json()["detail"] == "Login required"


def test_create_purchase(logged_in, remote):
    resp = logged_in.post("/orders/purchase", json=purchase_body())
    assert resp.status_code == 201
    body = resp.json()
    assert body["message"] == "Purchase order created"
    assert Decimal(body["total_amount"]) == Decimal("226.8")
    assert remote.orders[0]["invoice_no"] == "INV-9"


def test_create_purchase_duplicate_invoice(logged_in, remote):
    remote.available = False
    resp = logged_in.post("/orders/purchase", json=purchase_body())
    assert resp.status_code == 409
    assert resp.json()["detail"] == "Invoice already exists"
    assert remote.orders == []


def test_create_purchase_incomplete_row(logged_in):
    resp = logged_in.post("/orders/purchase", json=purchase_body(items=[ITEM, {**ITEM, "mrp": ""}]))
    assert resp.status_code == 422
    assert "1 medicine row(s)" in resp.json()["detail"]


def test_create_purchase_remote_rejection(logged_in, remote):
    remote.create_error = ApiError("Distributor is inactive", status_code=400)
    resp = logged_in.post("/orders/purchase", json=purchase_body())
    assert resp.status_code == 502
    assert resp.json()["detail"] == "Distributor is inactive"


def test_create_purchase_session_expired(logged_in, remote):
    remote.create_error = AuthenticationRequired("Session expired", status_code=401)
    resp = logged_in.post("/orders/purchase", json=purchase_body())
    assert resp.status_code == 401


def test_create_sell(logged_in, remote):
    body = {
        "customer_name": "Walk-in",
        "invoice_no": "S-9",
        "invoice_date": "2026-10-19",
        "discount_amount": "0.9",
        "items": [{**ITEM, "free": 0}],
    }
    resp = logged_in.post("/orders/sell", json=body)
    assert resp.status_code == 201
    assert Decimal(resp.json()["total_amount"]) == Decimal("18")
    assert remote.orders[0]["total_item_count"] == 1


def test_search_medicines(logged_in):
    resp = logged_in.get("/search/medicines", params={"q": "do"})
    options = resp.json()
    assert len(options) == 1
    assert options[0]["label"] == "Dolo 650 - Micro Labs"
    assert [b["batch"] for b in options[0]["batches"]] == ["DL1"]


def test_search_short_term_returns_nothing(logged_in):
    resp = logged_in.get("/search/medicines", params={"q": "d"})
    assert resp.json() == []
