from decimal import Decimal

from consignment.utils.money import MoneyRange, percent, quantize_money, safe_div, to_decimal


def test_quantize_money_rounds_half_up():
    assert quantize_money(Decimal("137.423")) == Decimal("137.42")
    assert quantize_money(Decimal("137.425")) == Decimal("137.43")


def test_quantize_money_accepts_common_types_and_none():
    assert quantize_money(12) == Decimal("12.00")
    assert quantize_money(12.3) == Decimal("12.30")
    assert quantize_money("12.345") == Decimal("12.35")
    assert quantize_money(None) is None


def test_to_decimal_treats_none_as_zero():
    assert to_decimal(None) == Decimal("0")
    assert to_decimal("5.10") == Decimal("5.10")


def test_safe_div_and_percent_return_zero_for_zero_denominator():
    assert safe_div(Decimal("10"), Decimal("0")) == Decimal("0")
    assert percent(Decimal("25"), Decimal("0")) == Decimal("0")
    assert percent(Decimal("25"), Decimal("200")) == Decimal("12.5")


def test_money_range_falls_back_to_the_other_bound():
    assert MoneyRange.from_bounds(None, Decimal("80")) == MoneyRange(Decimal("80"), Decimal("80"))
    assert MoneyRange.from_bounds(Decimal("50"), None) == MoneyRange(Decimal("50"), Decimal("50"))
    assert MoneyRange.from_bounds(None, None).is_zero


def test_money_range_total_and_subtract_from():
    total = MoneyRange.total(
        [
            MoneyRange(Decimal("100"), Decimal("150")),
            MoneyRange(Decimal("20"), Decimal("30")),
        ]
    )
    assert total == MoneyRange(Decimal("120"), Decimal("180"))

    net = total.subtract_from(Decimal("1000"))
    assert net == MoneyRange(Decimal("820"), Decimal("880"))
    assert net.quantized() == {"min": Decimal("820.00"), "max": Decimal("880.00")}


def test_money_range_preferred_is_max_bound():
    assert MoneyRange.from_bounds(Decimal("10"), Decimal("15")).preferred == Decimal("15")
    assert MoneyRange.from_bounds(Decimal("10"), None).preferred == Decimal("10")
