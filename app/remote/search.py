"""Stock search where only the newest request may update the option list."""

from __future__ import annotations

import itertools
import logging
from decimal import Decimal
from typing import Any

from app.pricing.normalize import is_blank, to_decimal
from app.remote.client import ApiError, AuthenticationRequired, PharmacyApiClient
from app.schemas.dto import BatchOption, MedicineOption

logger = logging.getLogger(__name__)

MIN_SEARCH_LENGTH = 2


def _optional_decimal(value: Any) -> Decimal | None:
    return None if is_blank(value) else to_decimal(value)


def batch_options(medicine: dict[str, Any]) -> list[BatchOption]:
    """Batches with stock left, labelled for a picker."""
    options: list[BatchOption] = []
    for b in medicine.get("batches") or []:
        qty_available = to_decimal(b.get("qty_available"))
        if qty_available <= 0:
            continue
        expiry_mm = str(b.get("expiry_mm") or "")
        expiry_yy = str(b.get("expiry_yy") or "")
        options.append(
            BatchOption(
                value=str(b.get("_id") or ""),
                label=(
                    f"{b.get('batch') or ''} - Exp: {expiry_mm}/{expiry_yy} - "
                    f"Qty: {qty_available} - MRP: ₹{b.get('mrp') or 0}"
                ),
                batch=str(b.get("batch") or ""),
                expiry_mm=expiry_mm,
                expiry_yy=expiry_yy,
                mrp=_optional_decimal(b.get("mrp")),
                rate=_optional_decimal(b.get("rate")),
                disc=_optional_decimal(b.get("disc")),
                qty_available=qty_available,
            )
        )
    return options


def medicine_options(medicines: list[dict[str, Any]]) -> list[MedicineOption]:
    options: list[MedicineOption] = []
    for m in medicines:
        label = m.get("name") or ""
        if m.get("manufacturer"):
            label = f"{label} - {m['manufacturer']}"
        options.append(
            MedicineOption(
                value=str(m.get("_id") or ""),
                label=label,
                pack=m.get("pack_size") or "",
                batches=batch_options(m),
            )
        )
    return options


class LatestOnlySearch:
    """Holds the visible option list for one editing session.

    Each search takes a token; a response is applied only while its token is
    the newest one issued, so slow responses to superseded terms are dropped.
    Callers keep one instance per editing session; a fresh instance per
    request never sees a stale token.
    """

    def __init__(self, client: PharmacyApiClient) -> None:
        self.client = client
        self.options: list[MedicineOption] = []
        self._tokens = itertools.count(1)
        self._latest = 0

    def begin(self) -> int:
        self._latest = next(self._tokens)
        return self._latest

    def apply(self, token: int, options: list[MedicineOption]) -> bool:
        if token != self._latest:
            logger.debug("Discarding stale search response %d (latest %d)", token, self._latest)
            return False
        self.options = options
        return True

    def fetch(self, term: str) -> list[MedicineOption]:
        """Options for `term`; empty on short terms and on network failure."""
        if len(term.strip()) < MIN_SEARCH_LENGTH:
            return []
        try:
            return medicine_options(self.client.search_medicines_stock(term.strip()))
        except AuthenticationRequired:
            raise
        except ApiError as exc:
            logger.warning("Medicine search for %r failed: %s", term, exc.message)
            return []

    def search(self, term: str) -> list[MedicineOption]:
        token = self.begin()
        self.apply(token, self.fetch(term))
        return self.options
