from decimal import Decimal

import pytest

from consignment.analytics.kpis import build_kpi_report
from consignment.analytics.reports import build_time_series
from consignment.errors import InvalidFilter


def _values(points):
    return [point["value"] for point in points]


def test_weekly_revenue_buckets_start_on_monday(db, sample_ledger):
    points = build_time_series(db, "revenue", "week", "2024-03-01", "2024-03-31")

    assert [point["period"] for point in points] == [
        "2024-02-26",
        "2024-03-04",
        "2024-03-11",
        "2024-03-18",
        "2024-03-25",
    ]
    assert _values(points) == [
        Decimal("0.00"),
        Decimal("600.00"),
        Decimal("250.00"),
        Decimal("400.00"),
        Decimal("300.00"),
    ]


def test_daily_series_is_zero_filled(db, sample_ledger):
    points = build_time_series(db, "payments", "day", "2024-03-01", "2024-03-31")

    assert len(points) == 31
    assert points[0] == {"period": "2024-03-01", "value": 0, "count": 0}
    assert points[-1] == {"period": "2024-03-31", "value": 1, "count": 1}


@pytest.mark.parametrize("granularity", ["day", "week", "month"])
def test_series_totals_match_kpi_report(db, sample_ledger, granularity):
    kpis = build_kpi_report(db, "2024-03-01", "2024-03-31")

    revenue = build_time_series(db, "revenue", granularity, "2024-03-01", "2024-03-31")
    payments = build_time_series(db, "payments", granularity, "2024-03-01", "2024-03-31")
    items_sold = build_time_series(db, "itemsSold", granularity, "2024-03-01", "2024-03-31")
    expenses = build_time_series(db, "expenses", granularity, "2024-03-01", "2024-03-31")

    assert sum(_values(revenue)) == kpis["revenue"]
    assert sum(_values(payments)) == kpis["payment_count"]
    assert sum(_values(items_sold)) == kpis["items_sold"]
    assert sum(_values(expenses)) == kpis["total_expenses"]


def test_items_sold_counts_first_payment_bucket(db, sample_ledger):
    points = build_time_series(db, "itemsSold", "week", "2024-03-01", "2024-03-31")
    assert _values(points) == [0, 1, 1, 0, 1]


def test_monthly_profit_subtracts_cost_and_expenses(db, sample_ledger):
    points = build_time_series(db, "profit", "month", "2024-03-01", "2024-03-31")
    assert points == [{"period": "2024-03-01", "value": Decimal("800.00"), "count": 4}]


def test_unknown_metric_and_granularity_are_rejected(db):
    with pytest.raises(InvalidFilter):
        build_time_series(db, "margin", "day", "2024-03-01", "2024-03-31")
    with pytest.raises(InvalidFilter):
        build_time_series(db, "revenue", "quarter", "2024-03-01", "2024-03-31")


def test_monthly_series_at_end_of_calendar(db, sample_ledger):
    points = build_time_series(db, "revenue", "month", "9999-11-01", "9999-12-31")

    assert [point["period"] for point in points] == ["9999-11-01", "9999-12-01"]
    assert _values(points) == [Decimal("0.00"), Decimal("0.00")]
