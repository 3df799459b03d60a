"""Line-item pricing for purchase, sell and card-form entries.

All three order flows share `price_line`; what differs between them is the
`PricingConfig`:

* purchase rows expand packs (strips x units per strip), charge free strips,
  take `disc` as a percentage of the gross value and measure margin on gross;
* sell rows price the billed quantity only, take `disc` as a percentage of
  quantity x rate and measure margin against the landed cost per unit;
* the card form applies a scheme percentage, then an absolute currency
  discount, and takes GST from the line itself.

Amounts are kept unrounded; call `LineAmounts.rounded()` at the edge.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from decimal import Decimal
from enum import Enum

from app.pricing.normalize import ZERO, money, parse_pack_units, to_decimal
from app.schemas.dto import LineItemInput

HUNDRED = Decimal("100")
DEFAULT_GST_PERCENT = Decimal("5")


class DiscountMode(str, Enum):
    PERCENT_OF_GROSS = "percentOfGross"
    PERCENT_OF_RATE = "percentOfRate"
    ABSOLUTE = "absolute"


class MarginMode(str, Enum):
    ON_GROSS = "onGross"
    COST_PER_UNIT = "costPerUnit"


class ItemCount(str, Enum):
    UNITS = "units"
    ROWS = "rows"


@dataclass(frozen=True)
class PricingConfig:
    name: str
    discount_mode: DiscountMode
    pack_expansion: bool
    margin_mode: MarginMode
    item_count: ItemCount
    # None: read gst_percent from each line
    fixed_gst_percent: Decimal | None = None


PURCHASE = PricingConfig(
    name="purchase",
    discount_mode=DiscountMode.PERCENT_OF_GROSS,
    pack_expansion=True,
    margin_mode=MarginMode.ON_GROSS,
    item_count=ItemCount.UNITS,
    fixed_gst_percent=DEFAULT_GST_PERCENT,
)

SELL = PricingConfig(
    name="sell",
    discount_mode=DiscountMode.PERCENT_OF_RATE,
    pack_expansion=False,
    margin_mode=MarginMode.COST_PER_UNIT,
    item_count=ItemCount.ROWS,
    fixed_gst_percent=DEFAULT_GST_PERCENT,
)

CARD = PricingConfig(
    name="card",
    discount_mode=DiscountMode.ABSOLUTE,
    pack_expansion=False,
    margin_mode=MarginMode.COST_PER_UNIT,
    item_count=ItemCount.ROWS,
)

VARIANTS: dict[str, PricingConfig] = {c.name: c for c in (PURCHASE, SELL, CARD)}


def config_for(variant: str, gst_percent: Decimal | None = None) -> PricingConfig:
    """Named config, with the deployment GST rate swapped in where GST is fixed."""
    try:
        config = VARIANTS[variant]
    except KeyError:
        raise ValueError(f"Unknown pricing variant: {variant!r}") from None
    if gst_percent is not None and config.fixed_gst_percent is not None:
        config = replace(config, fixed_gst_percent=gst_percent)
    return config


@dataclass(frozen=True)
class LineAmounts:
    containers: Decimal
    units_per_container: int
    total_units: Decimal
    gross_amount: Decimal
    discount_amount: Decimal
    net_amount: Decimal
    tax_amount: Decimal
    final_amount: Decimal
    margin_percent: Decimal

    def rounded(self) -> LineAmounts:
        return replace(
            self,
            gross_amount=money(self.gross_amount),
            discount_amount=money(self.discount_amount),
            net_amount=money(self.net_amount),
            tax_amount=money(self.tax_amount),
            final_amount=money(self.final_amount),
            margin_percent=money(self.margin_percent),
        )


def _margin(config: PricingConfig, *, mrp: Decimal, total_units: Decimal,
            gross: Decimal, final: Decimal) -> Decimal:
    if mrp <= 0 or total_units <= 0:
        return ZERO
    if config.margin_mode is MarginMode.ON_GROSS:
        mrp_value = total_units * mrp
        return (mrp_value - gross) / mrp_value * HUNDRED
    cost_per_unit = final / total_units
    return (mrp - cost_per_unit) / mrp * HUNDRED


def price_line(item: LineItemInput, config: PricingConfig = PURCHASE) -> LineAmounts:
    qty = to_decimal(item.qty)
    free = to_decimal(item.free)
    rate = to_decimal(item.rate)
    mrp = to_decimal(item.mrp)

    containers = qty + free
    if config.pack_expansion:
        units_per_container = parse_pack_units(item.pack)
        total_units = containers * units_per_container
        billable = total_units
    else:
        units_per_container = 1
        total_units = containers
        billable = qty

    gross = billable * rate
    if config.discount_mode is DiscountMode.ABSOLUTE:
        discount = gross * to_decimal(item.scheme_percent) / HUNDRED + to_decimal(item.discount_amount)
    else:
        discount = gross * to_decimal(item.disc) / HUNDRED

    gst_percent = config.fixed_gst_percent
    if gst_percent is None:
        gst_percent = to_decimal(item.gst_percent)

    net = gross - discount
    tax = net * gst_percent / HUNDRED
    final = max(ZERO, net + tax)

    return LineAmounts(
        containers=containers,
        units_per_container=units_per_container,
        total_units=total_units,
        gross_amount=gross,
        discount_amount=discount,
        net_amount=net,
        tax_amount=tax,
        final_amount=final,
        margin_percent=_margin(config, mrp=mrp, total_units=total_units, gross=gross, final=final),
    )
