from decimal import Decimal
from types import SimpleNamespace

import pytest

from app.remote.client import ApiError, AuthenticationRequired
from app.remote.search import LatestOnlySearch, batch_options, medicine_options

MEDICINE = {
    "_id": "m1",
    "name": "Dolo 650",
    "manufacturer": "Micro Labs",
    "pack_size": "1x15",
    "batches": [
        {"_id": "b1", "batch": "DL1", "expiry_mm": "03", "expiry_yy": "28", "mrp": 30, "rate": 24,
         "disc": 0, "qty_available": 40},
        {"_id": "b2", "batch": "DL0", "expiry_mm": "01", "expiry_yy": "27", "mrp": 30, "qty_available": 0},
    ],
}


def test_medicine_options_labels_and_in_stock_batches():
    [option] = medicine_options([MEDICINE])
    assert option.value == "m1"
    assert option.label == "Dolo 650 - Micro Labs"
    assert option.pack == "1x15"
    assert [b.value for b in option.batches] == ["b1"]
    assert option.batches[0].label == "DL1 - Exp: 03/28 - Qty: 40 - MRP: ₹30"
    assert option.batches[0].rate == Decimal("24")


def test_batch_options_without_batches():
    assert batch_options({"name": "X"}) == []


def test_stale_response_is_discarded():
    search = LatestOnlySearch(client=SimpleNamespace())
    first = search.begin()
    second = search.begin()
    newer = medicine_options([MEDICINE])
    assert search.apply(second, newer) is True
    assert search.apply(first, []) is False
    assert search.options == newer


def test_short_terms_do_not_hit_the_api():
    calls = []
    client = SimpleNamespace(search_medicines_stock=lambda term: calls.append(term) or [])
    assert LatestOnlySearch(client).search("d") == []
    assert calls == []


def test_network_failure_degrades_to_empty_options():
    def boom(term):
        raise ApiError("Could not reach pharmacy API")

    search = LatestOnlySearch(SimpleNamespace(search_medicines_stock=boom))
    search.options = medicine_options([MEDICINE])
    assert search.search("dolo") == []


def test_authentication_failure_propagates():
    def unauthorized(term):
        raise AuthenticationRequired("Login required", status_code=401)

    with pytest.raises(AuthenticationRequired):
        LatestOnlySearch(SimpleNamespace(search_medicines_stock=unauthorized)).search("dolo")
