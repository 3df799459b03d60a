"""Read medicine line items from CSV and spreadsheet uploads."""

from __future__ import annotations

import csv
import io
import logging
import re
from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal, InvalidOperation
from pathlib import Path
from typing import Any, Sequence

from openpyxl import load_workbook

from app.schemas.dto import LineItemInput

logger = logging.getLogger(__name__)

# canonical field -> header fragments, tried in order against lower-cased headers
HEADER_ALIASES: dict[str, tuple[str, ...]] = {
    "product_name": ("product", "productname", "name", "medicine", "item"),
    "batch": ("batch", "batchno", "batchnumber"),
    "expiry": ("expiry", "exp", "expdate"),
    "expiry_mm": ("expirymm", "month", "mm"),
    "expiry_yy": ("expiryyy", "year", "yy"),
    "pack": ("pack", "packing", "package"),
    "qty": ("qty", "quantity", "strips"),
    "free": ("free", "freeqty"),
    "mrp": ("mrp", "price", "maxretailprice"),
    "rate": ("rate", "purchaserate", "cost"),
    "disc": ("disc", "discount", "discountpercent", "disc%"),
}

DEFAULT_PACK = "1×10"

_EXPIRY = re.compile(r"(\d{1,2})[/-]?(\d{2,4})")


@dataclass
class ParsedMedicines:
    success: bool
    items: list[LineItemInput] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)


class HeaderMap:
    """Column index per canonical field, resolved once per file."""

    def __init__(self, headers: Sequence[str]) -> None:
        keys = [_header_key(h) for h in headers]
        exact = {
            canonical: list(dict.fromkeys(keys.index(a) for a in aliases if a in keys))
            for canonical, aliases in HEADER_ALIASES.items()
        }
        claimed = {i for columns in exact.values() for i in columns}
        self._candidates: dict[str, list[int]] = {}
        for canonical, aliases in HEADER_ALIASES.items():
            if exact[canonical]:
                self._candidates[canonical] = exact[canonical]
                continue
            # substring fallback never borrows another field's exact column ("Free Qty" is not "qty")
            partial = [i for a in aliases for i, k in enumerate(keys) if a in k and i not in claimed]
            self._candidates[canonical] = list(dict.fromkeys(partial))

    def text(self, canonical: str, values: Sequence[str]) -> str:
        # first alias whose column holds a value wins
        for idx in self._candidates[canonical]:
            if idx < len(values) and values[idx]:
                return values[idx]
        return ""

    def number(self, canonical: str, values: Sequence[str]) -> Decimal | str:
        raw = self.text(canonical, values)
        if not raw:
            return ""
        match = re.match(r"^\s*[+-]?(\d+(\.\d*)?|\.\d+)", raw)
        if not match:
            return ""
        try:
            return Decimal(match.group(0).strip())
        except InvalidOperation:
            return ""


def _header_key(header: str) -> str:
    return re.sub(r"[^a-z0-9%]", "", header.lower())


def _split_expiry(value: str) -> tuple[str, str]:
    match = _EXPIRY.search(value)
    if not match:
        return "", ""
    return match.group(1).zfill(2), match.group(2)[-2:]


def parse_row(header_map: HeaderMap, values: Sequence[str]) -> LineItemInput:
    expiry_mm, expiry_yy = _split_expiry(header_map.text("expiry", values))
    disc = header_map.number("disc", values)
    return LineItemInput(
        product_name=header_map.text("product_name", values),
        batch=header_map.text("batch", values),
        expiry_mm=expiry_mm or header_map.text("expiry_mm", values),
        expiry_yy=expiry_yy or header_map.text("expiry_yy", values),
        pack=header_map.text("pack", values) or DEFAULT_PACK,
        qty=header_map.number("qty", values),
        free=header_map.number("free", values),
        mrp=header_map.number("mrp", values),
        rate=header_map.number("rate", values),
        disc=disc or Decimal("0"),
    )


def _cell_text(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, date):
        # date-typed expiry cells read as MM/YY
        return f"{value.month:02d}/{value.year % 100:02d}"
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    return str(value).strip()


def _parse_rows(rows: list[list[str]], kind: str) -> ParsedMedicines:
    rows = [r for r in rows if any(c.strip() for c in r)]
    if len(rows) < 2:
        return ParsedMedicines(
            success=False,
            errors=[f"{kind} file must contain a header row and at least one data row"],
        )

    header_map = HeaderMap(rows[0])
    items: list[LineItemInput] = []
    errors: list[str] = []
    for i, values in enumerate(rows[1:], start=2):
        try:
            items.append(parse_row(header_map, [v.strip() for v in values]))
        except ValueError as exc:
            errors.append(f"Row {i}: {exc}")

    if errors:
        logger.info("Import skipped %d %s row(s)", len(errors), kind)
    return ParsedMedicines(success=bool(items), items=items, errors=errors)


def parse_csv(content: bytes) -> ParsedMedicines:
    text = content.decode("utf-8-sig", errors="replace")
    rows = [list(r) for r in csv.reader(io.StringIO(text))]
    return _parse_rows(rows, "CSV")


def parse_excel(content: bytes) -> ParsedMedicines:
    try:
        wb = load_workbook(filename=io.BytesIO(content), data_only=True, read_only=True)
    except Exception as exc:
        logger.warning("Unreadable spreadsheet upload: %s", exc)
        return ParsedMedicines(success=False, errors=[f"Failed to parse Excel: {exc}"])
    try:
        ws = wb.worksheets[0]
        rows = [[_cell_text(c) for c in row] for row in ws.iter_rows(values_only=True)]
    finally:
        wb.close()
    return _parse_rows(rows, "Excel")


def parse_pdf(content: bytes) -> ParsedMedicines:
    return ParsedMedicines(
        success=False,
        errors=["PDF parsing is not yet implemented. Please use CSV or Excel files."],
    )


def parse_import_file(filename: str, content: bytes) -> ParsedMedicines:
    suffix = Path(filename).suffix.lower()
    if suffix == ".csv":
        return parse_csv(content)
    if suffix in {".xlsx", ".xlsm"}:
        return parse_excel(content)
    if suffix == ".pdf":
        return parse_pdf(content)
    if suffix == ".xls":
        # openpyxl only reads the OOXML formats
        return ParsedMedicines(
            success=False,
            errors=["Legacy .xls files are not supported. Please save the sheet as .xlsx or CSV."],
        )
    return ParsedMedicines(
        success=False,
        errors=["Unsupported file format. Please use CSV, Excel, or PDF files."],
    )
