from datetime import date
from decimal import Decimal

import pytest

from consignment.analytics.kpis import build_kpi_report
from consignment.errors import InvalidRange

AS_OF = date(2024, 4, 15)


def test_kpi_report_for_march(db, sample_ledger):
    report = build_kpi_report(db, "2024-03-01", "2024-03-31", as_of=AS_OF)

    assert report["revenue"] == Decimal("1550.00")
    assert report["cogs"] == Decimal("700.00")
    assert report["gross_profit"] == Decimal("850.00")
    assert report["gross_margin"] == Decimal("54.84")
    assert report["total_expenses"] == Decimal("50.00")
    assert report["net_profit"] == Decimal("800.00")
    assert report["net_margin"] == Decimal("51.61")
    assert report["items_sold"] == 3
    assert report["payment_count"] == 4
    assert report["unique_clients"] == 2
    assert report["average_order_value"] == Decimal("387.50")
    assert report["average_days_to_sell"] == Decimal("51.00")
    assert report["inventory_turnover"] == Decimal("6.64")


def test_kpi_report_compares_with_previous_window(db, sample_ledger):
    report = build_kpi_report(db, "2024-03-01", "2024-03-31", as_of=AS_OF)

    assert report["revenue_change"] == Decimal("1450.00")
    # Previous net profit is negative, so there is no base to compare against.
    assert report["profit_change"] == Decimal("0.00")
    assert report["top_performing_brand"] == "Hermes"
    assert report["top_performing_vendor"] == "Atelier"
    assert report["pending_installments"] == 1
    assert report["overdue_installments"] == 1


def test_cost_is_charged_once_per_item(db, sample_ledger):
    # Kelly is paid twice in March but its 500 cost counts once.
    report = build_kpi_report(db, "2024-03-01", "2024-03-31", {"vendor_ids": [sample_ledger.atelier.id]}, as_of=AS_OF)

    assert report["revenue"] == Decimal("1250.00")
    assert report["cogs"] == Decimal("700.00")
    assert report["items_sold"] == 2


def test_filters_restrict_payments(db, sample_ledger):
    by_client = build_kpi_report(db, "2024-03-01", "2024-03-31", {"client_ids": [sample_ledger.bob.id]}, as_of=AS_OF)
    by_status = build_kpi_report(db, "2024-03-01", "2024-03-31", {"item_statuses": ["sold"]}, as_of=AS_OF)

    assert by_client["revenue"] == Decimal("550.00")
    assert by_status["revenue"] == Decimal("1300.00")


def test_last_day_of_range_is_inclusive(db, sample_ledger):
    report = build_kpi_report(db, "2024-03-31", "2024-03-31", as_of=AS_OF)
    assert report["revenue"] == Decimal("300.00")


def test_empty_range_yields_zeroes(db, sample_ledger):
    report = build_kpi_report(db, "2023-01-01", "2023-01-31", as_of=AS_OF)

    assert report["revenue"] == Decimal("0.00")
    assert report["gross_margin"] == Decimal("0.00")
    assert report["net_margin"] == Decimal("0.00")
    assert report["average_order_value"] == Decimal("0.00")
    assert report["inventory_turnover"] == Decimal("0.00")
    assert report["top_performing_brand"] == "N/A"
    assert report["top_performing_vendor"] == "N/A"


def test_end_before_start_is_rejected(db):
    with pytest.raises(InvalidRange):
        build_kpi_report(db, "2024-03-31", "2024-03-01")


def test_open_ended_range_reaches_last_calendar_day(db, sample_ledger):
    report = build_kpi_report(db, "2024-01-01", "9999-12-31", as_of=AS_OF)

    assert report["revenue"] == Decimal("1700.00")
    assert report["payment_count"] == 6
    # The previous window is cut short at 0001-01-01 and holds no payments.
    assert report["revenue_change"] == Decimal("0.00")


def test_range_starting_on_first_calendar_day_has_no_previous_window(db, sample_ledger):
    report = build_kpi_report(db, "0001-01-01", "2024-03-31", as_of=AS_OF)

    assert report["revenue"] == Decimal("1650.00")
    assert report["revenue_change"] == Decimal("0.00")
    assert report["profit_change"] == Decimal("0.00")
