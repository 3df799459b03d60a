"""Price an import file (CSV / XLSX) offline and print lines plus totals.

Usage:
  python scripts/price_file.py <path> [variant]

Examples:
  python scripts/price_file.py sample/purchase.csv
  python scripts/price_file.py sample/counter.xlsx sell
"""

from __future__ import annotations

import sys
from pathlib import Path
from typing import Optional

from app.core.config import get_settings
from app.core.logging_config import setup_logging
from app.imports.parsers import parse_import_file
from app.pricing.engine import config_for
from app.pricing.totals import aggregate, price_lines
from app.pricing.validation import is_row_complete


def main(argv: Optional[list[str]] = None) -> int:
    argv = list(sys.argv[1:] if argv is None else argv)
    if not argv:
        print(__doc__)
        return 2
    path = Path(argv[0])
    variant = argv[1] if len(argv) >= 2 else "purchase"

    settings = get_settings()
    setup_logging(settings.LOG_LEVEL)
    config = config_for(variant, settings.GST_PERCENT)

    parsed = parse_import_file(path.name, path.read_bytes())
    for err in parsed.errors:
        print(f"! {err}")

    complete = [it for it in parsed.items if is_row_complete(it)]
    lines = price_lines(complete, config)
    for line in lines:
        amounts = line.amounts.rounded()
        print(f"{line.item.product_name:<30} {line.item.batch:<12} "
              f"{amounts.final_amount:>12} {amounts.margin_percent:>8}%")

    totals = aggregate(lines, config.item_count)
    print({"file": str(path), "variant": variant, "rows": len(parsed.items),
           "complete": len(complete), **totals.model_dump(mode="json")})
    return 0


if __name__ == "__main__":
    sys.exit(main())
