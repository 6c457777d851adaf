from decimal import Decimal

from consignment.payouts.formula import (
    adjustment_factor,
    legacy_flat_vendor_share,
    legacy_range_snapshot,
    payout_amount,
    quote_payout,
    reconcile_payout,
)
from consignment.utils.money import MoneyRange

COST = MoneyRange.from_bounds(Decimal("400"), Decimal("600"))
PRICE = MoneyRange.from_bounds(Decimal("900"), Decimal("1000"))


def test_full_price_pays_max_cost():
    quote = quote_payout(COST, PRICE, Decimal("1000"))
    assert quote.adjustment_factor == Decimal("1")
    assert quote.amount == Decimal("600")


def test_shortfall_reduces_payout():
    quote = quote_payout(COST, PRICE, Decimal("800"))
    assert quote.adjustment_factor == Decimal("0.98")
    assert quote.amount == Decimal("588.00")


def test_adjustment_factor_is_clamped():
    assert adjustment_factor(Decimal("20000"), Decimal("0")) == Decimal("0")
    assert adjustment_factor(Decimal("1000"), Decimal("1500")) == Decimal("1")
    assert payout_amount(COST, PRICE, Decimal("1500")) == Decimal("600")


def test_payout_is_monotonic_in_collected_amount():
    price = MoneyRange.from_bounds(None, Decimal("15000"))
    previous = Decimal("-1")
    for collected in range(0, 20001, 250):
        amount = payout_amount(COST, price, Decimal(collected))
        assert amount >= previous
        assert Decimal("0") <= amount <= Decimal("600")
        previous = amount


def test_payout_uses_min_cost_when_max_cost_missing():
    cost = MoneyRange.from_bounds(Decimal("500"), None)
    assert payout_amount(cost, PRICE, Decimal("1000")) == Decimal("500")


def test_legacy_variants():
    snapshot = legacy_range_snapshot(
        [
            MoneyRange.from_bounds(Decimal("100"), None),
            MoneyRange.from_bounds(Decimal("200"), Decimal("260")),
        ]
    )
    assert snapshot == MoneyRange(Decimal("300"), Decimal("360"))
    assert legacy_flat_vendor_share(Decimal("1000")) == Decimal("700.00")


def test_reconcile_reports_canonical_amount_next_to_legacy_figures():
    result = reconcile_payout(COST, PRICE, Decimal("800"))

    assert result["adjustment_factor"] == Decimal("0.9800")
    assert result["payout_amount"] == Decimal("588.00")
    assert result["legacy_cost_range"] == {"min": Decimal("400.00"), "max": Decimal("600.00")}
    assert result["legacy_flat_share"] == Decimal("560.00")
    assert result["delta_vs_flat_share"] == Decimal("28.00")
    assert result["delta_vs_max_cost"] == Decimal("-12.00")
    assert result["delta_vs_min_cost"] == Decimal("188.00")
