"""Vendor payout formula.

``payout_amount`` is the single canonical formula for what a vendor is owed
on an item. It is sensitive to the price actually collected from the client:
every 100 currency units the sale falls short of the item's max sales
price reduce the payout by 1% of the max cost.

    adjustment_factor = clamp(1 - (max_sales_price - collected) * 0.0001, 0, 1)
    payout            = adjustment_factor * max_cost

The factor is clamped so the payout always lies in ``[0, max_cost]``; left
unclamped a large shortfall produced negative payouts and an overpayment
produced payouts above cost.

Two older approximations are still used in places and are kept here, named
as legacy, so their gap to the canonical figure can be reported:

* ``legacy_range_snapshot``: summed cost range of unpaid items, which is
  what the dashboard shows as its pending-payout range.
* ``legacy_flat_vendor_share``: a flat 70% of the collected amount, which
  older "ready payouts" totals relied on.

They are never blended with the canonical formula.
"""

from dataclasses import dataclass
from decimal import Decimal
from typing import Iterable

from consignment.utils.money import ZERO, MoneyRange, quantize_money, to_decimal

PAYOUT_SHORTFALL_RATE = Decimal("0.0001")
ADJUSTMENT_FACTOR_FLOOR = Decimal("0")
ADJUSTMENT_FACTOR_CEILING = Decimal("1")
LEGACY_VENDOR_SHARE = Decimal("0.70")


@dataclass(frozen=True)
class PayoutQuote:
    adjustment_factor: Decimal
    amount: Decimal
    max_cost: Decimal
    max_sales_price: Decimal
    collected: Decimal


def adjustment_factor(max_sales_price: Decimal, collected: Decimal) -> Decimal:
    factor = ADJUSTMENT_FACTOR_CEILING - (max_sales_price - collected) * PAYOUT_SHORTFALL_RATE
    return min(max(factor, ADJUSTMENT_FACTOR_FLOOR), ADJUSTMENT_FACTOR_CEILING)


def quote_payout(cost: MoneyRange, price: MoneyRange, collected) -> PayoutQuote:
    collected = to_decimal(collected)
    max_cost = cost.preferred
    max_price = price.preferred
    factor = adjustment_factor(max_price, collected)
    return PayoutQuote(
        adjustment_factor=factor,
        amount=factor * max_cost,
        max_cost=max_cost,
        max_sales_price=max_price,
        collected=collected,
    )


def payout_amount(cost: MoneyRange, price: MoneyRange, collected) -> Decimal:
    return quote_payout(cost, price, collected).amount


def legacy_range_snapshot(costs: Iterable[MoneyRange]) -> MoneyRange:
    return MoneyRange.total(costs)


def legacy_flat_vendor_share(collected) -> Decimal:
    return to_decimal(collected) * LEGACY_VENDOR_SHARE


def reconcile_payout(cost: MoneyRange, price: MoneyRange, collected) -> dict:
    """Canonical payout next to the legacy figures, with the gap to each."""
    quote = quote_payout(cost, price, collected)
    flat_share = legacy_flat_vendor_share(quote.collected)
    return {
        "adjustment_factor": quote.adjustment_factor.quantize(Decimal("0.0001")),
        "payout_amount": quantize_money(quote.amount),
        "legacy_cost_range": cost.quantized(),
        "legacy_flat_share": quantize_money(flat_share),
        "delta_vs_flat_share": quantize_money(quote.amount - flat_share),
        "delta_vs_max_cost": quantize_money(quote.amount - cost.max),
        "delta_vs_min_cost": quantize_money(quote.amount - cost.min),
    }


def total_payout(quotes: Iterable[PayoutQuote]) -> Decimal:
    return sum((quote.amount for quote in quotes), ZERO)
