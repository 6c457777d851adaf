from decimal import Decimal

from consignment.ledger.status import derive_item_status, next_item_status
from consignment.utils.money import MoneyRange

PRICE = MoneyRange.from_bounds(Decimal("800"), Decimal("1000"))


def test_no_payment_keeps_item_in_store():
    assert derive_item_status(PRICE, Decimal("0")) == "in-store"


def test_partial_payment_reserves_item():
    assert derive_item_status(PRICE, Decimal("999.99")) == "reserved"


def test_payment_covering_max_price_sells_item():
    assert derive_item_status(PRICE, Decimal("1000")) == "sold"
    assert derive_item_status(PRICE, Decimal("1200")) == "sold"


def test_min_price_is_used_when_max_is_missing():
    price = MoneyRange.from_bounds(Decimal("500"), None)
    assert derive_item_status(price, Decimal("400")) == "reserved"
    assert derive_item_status(price, Decimal("500")) == "sold"


def test_zero_price_sells_on_any_positive_payment():
    assert derive_item_status(MoneyRange.from_bounds(None, None), Decimal("0.01")) == "sold"
    assert derive_item_status(MoneyRange.from_bounds(None, None), Decimal("0")) == "in-store"


def test_status_rule_is_idempotent():
    for total in (Decimal("0"), Decimal("300"), Decimal("1000")):
        first = derive_item_status(PRICE, total)
        assert next_item_status(first, PRICE, total) == first


def test_returned_items_keep_their_status():
    assert next_item_status("returned-to-vendor", PRICE, Decimal("1000")) == "returned-to-vendor"
    assert next_item_status("sold", PRICE, Decimal("0")) == "in-store"
