from datetime import date, datetime
from decimal import Decimal

import pytest

from consignment.dashboard.service import get_dashboard_metrics, get_payment_metrics, list_overdue_installments
from consignment.payouts.service import get_payout_metrics, list_upcoming_payouts

AS_OF = date(2024, 4, 15)


@pytest.fixture
def shop(db, ledger):
    vendor = ledger.vendor("Atelier")
    client = ledger.client("Alice")

    ledger.item(vendor, min_cost="100", max_cost="150", min_price="300", max_price="400", title="In store A")
    ledger.item(vendor, max_price="200", title="In store B")
    sold_full = ledger.item(vendor, min_cost="400", max_cost="600", min_price="900", max_price="1000", status="sold")
    sold_short = ledger.item(vendor, min_cost="300", max_price="500", status="sold")
    paid_out = ledger.item(vendor, min_cost="200", max_cost="250", max_price="400", status="sold")
    sold_unpaid = ledger.item(vendor, min_cost="50", max_cost="80", status="sold")
    reserved = ledger.item(vendor, min_cost="70", max_price="300", status="reserved")

    ledger.payment(sold_full, client, "1000", datetime(2024, 4, 1, 10, 0))
    ledger.payment(sold_short, client, "480", datetime(2024, 4, 5, 10, 0))
    ledger.payment(paid_out, client, "400", datetime(2024, 3, 1, 10, 0))
    ledger.payment(reserved, client, "100", datetime(2024, 2, 1, 10, 0))
    ledger.payout(paid_out, "250", datetime(2024, 3, 2, 10, 0))
    ledger.expense(None, "120", date(2024, 3, 1), expense_type="rent")

    ledger.installment(reserved, client, "300", date(2024, 4, 1), paid_amount="100")
    ledger.installment(reserved, client, "100", date(2024, 5, 1))
    ledger.installment(reserved, client, "100", date(2024, 6, 30))
    ledger.installment(sold_full, client, "500", date(2024, 4, 1), status="paid", paid_amount="500")
    db.commit()
    return {"sold_full": sold_full, "sold_short": sold_short, "sold_unpaid": sold_unpaid}


def test_dashboard_metrics(db, shop):
    metrics = get_dashboard_metrics(db)

    assert metrics["total_revenue"] == Decimal("1980.00")
    assert metrics["active_items"] == 2
    assert metrics["pending_payouts"] == {"min": Decimal("750.00"), "max": Decimal("980.00")}
    assert metrics["net_profit"] == {"min": Decimal("880.00"), "max": Decimal("1110.00")}
    assert metrics["incoming_payments"] == Decimal("1880.00")
    assert metrics["upcoming_payouts"] == Decimal("899.40")
    assert metrics["cost_range"] == {"min": Decimal("100.00"), "max": Decimal("150.00")}
    assert metrics["inventory_value_range"] == {"min": Decimal("500.00"), "max": Decimal("600.00")}


def test_dashboard_metrics_on_empty_ledger(db):
    metrics = get_dashboard_metrics(db)

    assert metrics["total_revenue"] == Decimal("0.00")
    assert metrics["active_items"] == 0
    assert metrics["pending_payouts"] == {"min": Decimal("0.00"), "max": Decimal("0.00")}
    assert metrics["upcoming_payouts"] == Decimal("0.00")


def test_payment_metrics(db, shop):
    metrics = get_payment_metrics(db, as_of=AS_OF)

    assert metrics["total_payments_count"] == 4
    assert metrics["total_payments_amount"] == Decimal("1980.00")
    assert metrics["average_payment_amount"] == Decimal("495.00")
    assert metrics["overdue_installments"] == 1
    assert metrics["upcoming_installments"] == 1
    assert metrics["monthly_payment_trend"] == Decimal("270.00")


def test_overdue_installments(db, shop):
    rows = list_overdue_installments(db, as_of=AS_OF)

    assert len(rows) == 1
    assert rows[0]["remaining_amount"] == Decimal("200.00")
    assert rows[0]["days_overdue"] == 14
    assert rows[0]["client_name"] == "Alice"


def test_upcoming_payouts_use_canonical_formula(db, shop):
    rows = {row["item_id"]: row for row in list_upcoming_payouts(db)}

    assert set(rows) == {shop["sold_full"].id, shop["sold_short"].id, shop["sold_unpaid"].id}
    assert rows[shop["sold_full"].id]["payout_amount"] == Decimal("600.00")
    assert rows[shop["sold_short"].id]["adjustment_factor"] == Decimal("0.9980")
    assert rows[shop["sold_short"].id]["payout_amount"] == Decimal("299.40")
    assert rows[shop["sold_short"].id]["payment_progress"] == Decimal("96.00")
    assert rows[shop["sold_unpaid"].id]["collected"] == Decimal("0.00")


def test_payout_metrics(db, shop):
    metrics = get_payout_metrics(db, as_of=AS_OF)

    assert metrics["total_payouts_count"] == 1
    assert metrics["total_payouts_amount"] == Decimal("250.00")
    assert metrics["average_payout_amount"] == Decimal("250.00")
    assert metrics["pending_payouts_count"] == 3
    # The unpriced item with no payment is quoted at its full max cost (80).
    assert metrics["pending_payouts_amount"] == Decimal("979.40")
    assert metrics["monthly_payout_trend"] == Decimal("-100.00")
