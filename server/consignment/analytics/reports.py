"""Time series, grouped metrics, item profitability and payment method reports."""

from __future__ import annotations

from collections import defaultdict
from datetime import date
from decimal import Decimal
from typing import Any, Dict, List, Optional, Sequence, Set

from sqlalchemy.orm import Session

from consignment.analytics.engine import (
    change_percent,
    generate_period_range,
    period_label,
    period_start,
    validate_granularity,
)
from consignment.analytics.filters import DateRange, ReportFilters
from consignment.analytics.snapshot import LedgerSnapshot, PaymentRecord, load_ledger_snapshot
from consignment.errors import InvalidFilter
from consignment.utils.money import ZERO, percent, quantize_money, safe_div

D = Decimal

TIME_SERIES_METRICS = ("revenue", "profit", "itemsSold", "payments", "expenses")
GROUP_DIMENSIONS = {
    "brand": "Unknown Brand",
    "vendor": "Unknown Vendor",
    "client": "Unknown Client",
    "category": "Unknown Category",
}
GROUP_METRICS = ("revenue", "profit", "itemsSold", "avgOrderValue")
DEFAULT_PAGE_SIZE = 50
MAX_PAGE_SIZE = 1000


# ---------------------------------------------------------------------------
# Time series
# ---------------------------------------------------------------------------


def build_time_series(
    db: Session,
    metric: str,
    granularity: str,
    start_date: date | str,
    end_date: date | str,
    filters: ReportFilters | dict | None = None,
) -> List[Dict[str, Any]]:
    """One point per bucket of the partition, zero-filled.

    Buckets are labelled by their first day; the first and last buckets of a
    week or month series may extend past the requested range, but only
    in-range activity is counted.
    """
    if metric not in TIME_SERIES_METRICS:
        raise InvalidFilter(f"Unknown metric '{metric}'. Use one of: {', '.join(TIME_SERIES_METRICS)}.")
    granularity = validate_granularity(granularity)
    period = DateRange.parse(start_date, end_date)
    snapshot = load_ledger_snapshot(db, period, filters, with_names=False)

    buckets = generate_period_range(period.start, period.end, granularity)
    values: Dict[date, Decimal] = {bucket: ZERO for bucket in buckets}
    counts: Dict[date, int] = {bucket: 0 for bucket in buckets}

    if metric == "itemsSold":
        for first_paid in snapshot.first_payment_dates().values():
            bucket = period_start(first_paid, granularity)
            counts[bucket] += 1
            values[bucket] += 1
    elif metric == "expenses":
        for expense in snapshot.expenses:
            bucket = period_start(expense.incurred_at.date(), granularity)
            counts[bucket] += 1
            values[bucket] += expense.amount
    else:
        by_bucket: Dict[date, List[PaymentRecord]] = defaultdict(list)
        for payment in snapshot.payments:
            by_bucket[period_start(payment.paid_on, granularity)].append(payment)
        for bucket, payments in by_bucket.items():
            revenue = sum((payment.amount for payment in payments), ZERO)
            counts[bucket] = len(payments)
            if metric == "revenue":
                values[bucket] = revenue
            elif metric == "payments":
                values[bucket] = D(len(payments))
            else:
                # An item paid across several buckets is charged in each of them.
                values[bucket] = revenue - snapshot.charge_for(payment.item_id for payment in payments)

    integral = metric in ("itemsSold", "payments")
    return [
        {
            "period": period_label(bucket),
            "value": int(values[bucket]) if integral else quantize_money(values[bucket]),
            "count": counts[bucket],
        }
        for bucket in buckets
    ]


# ---------------------------------------------------------------------------
# Grouped metrics
# ---------------------------------------------------------------------------


def _group_key(snapshot: LedgerSnapshot, payment: PaymentRecord, group_by: str) -> Optional[str]:
    if group_by == "client":
        return payment.client_id
    item = snapshot.items.get(payment.item_id)
    if item is None:
        return None
    return getattr(item, f"{group_by}_id")


def _group_names(snapshot: LedgerSnapshot, group_by: str) -> Dict[str, str]:
    return {
        "brand": snapshot.names.brands,
        "vendor": snapshot.names.vendors,
        "client": snapshot.names.clients,
        "category": snapshot.names.categories,
    }[group_by]


def _revenue_by_group(snapshot: LedgerSnapshot, group_by: str) -> Dict[Optional[str], Decimal]:
    totals: Dict[Optional[str], Decimal] = defaultdict(lambda: ZERO)
    for payment in snapshot.payments:
        totals[_group_key(snapshot, payment, group_by)] += payment.amount
    return totals


def _validate_group_metrics(metrics: Sequence[str] | None) -> List[str]:
    requested = [metric.strip() for metric in (metrics or []) if metric and metric.strip()]
    unknown = [metric for metric in requested if metric not in GROUP_METRICS]
    if unknown:
        raise InvalidFilter(f"Unknown metric: {', '.join(unknown)}. Use any of: {', '.join(GROUP_METRICS)}.")
    if not requested:
        raise InvalidFilter("At least one metric is required.")
    return requested


def build_grouped_metrics(
    db: Session,
    group_by: str,
    metrics: Sequence[str] | None,
    start_date: date | str,
    end_date: date | str,
    filters: ReportFilters | dict | None = None,
) -> List[Dict[str, Any]]:
    if group_by not in GROUP_DIMENSIONS:
        raise InvalidFilter(f"Unknown groupBy '{group_by}'. Use one of: {', '.join(GROUP_DIMENSIONS)}.")
    requested = _validate_group_metrics(metrics)
    period = DateRange.parse(start_date, end_date)
    filters = ReportFilters.coerce(filters)

    snapshot = load_ledger_snapshot(db, period, filters)
    previous_period = period.previous()
    previous_revenue: Dict[Optional[str], Decimal] = {}
    if previous_period is not None:
        previous_revenue = _revenue_by_group(
            load_ledger_snapshot(db, previous_period, filters, with_names=False), group_by
        )
    names = _group_names(snapshot, group_by)

    revenue: Dict[Optional[str], Decimal] = defaultdict(lambda: ZERO)
    payment_count: Dict[Optional[str], int] = defaultdict(int)
    item_ids: Dict[Optional[str], Set[str]] = defaultdict(set)
    for payment in snapshot.payments:
        key = _group_key(snapshot, payment, group_by)
        revenue[key] += payment.amount
        payment_count[key] += 1
        item_ids[key].add(payment.item_id)

    rows = []
    for key in revenue:
        group_revenue = revenue[key]
        profit = group_revenue - snapshot.charge_for(item_ids[key])
        row: Dict[str, Any] = {
            "group_id": key,
            "group_name": names.get(key, GROUP_DIMENSIONS[group_by]) if key else GROUP_DIMENSIONS[group_by],
            "item_count": len(item_ids[key]),
            "profit_margin": quantize_money(percent(profit, group_revenue)),
            "change": quantize_money(change_percent(group_revenue, previous_revenue.get(key, ZERO))),
        }
        if "revenue" in requested:
            row["revenue"] = quantize_money(group_revenue)
        if "profit" in requested:
            row["profit"] = quantize_money(profit)
        if "itemsSold" in requested:
            row["items_sold"] = len(item_ids[key])
        if "avgOrderValue" in requested:
            row["avg_order_value"] = quantize_money(safe_div(group_revenue, D(payment_count[key])))
        rows.append((key, row))

    if "revenue" in requested:
        rows.sort(key=lambda pair: (-revenue[pair[0]], pair[1]["group_name"], pair[0] or ""))
    else:
        rows.sort(key=lambda pair: (-payment_count[pair[0]], pair[1]["group_name"], pair[0] or ""))
    return [row for _, row in rows]


# ---------------------------------------------------------------------------
# Item profitability
# ---------------------------------------------------------------------------


def _validate_page(limit: int, offset: int) -> None:
    if limit < 1 or limit > MAX_PAGE_SIZE:
        raise InvalidFilter(f"limit must be between 1 and {MAX_PAGE_SIZE}.")
    if offset < 0:
        raise InvalidFilter("offset must not be negative.")


def build_item_profitability(
    db: Session,
    start_date: date | str,
    end_date: date | str,
    filters: ReportFilters | dict | None = None,
    limit: int = DEFAULT_PAGE_SIZE,
    offset: int = 0,
) -> Dict[str, Any]:
    _validate_page(limit, offset)
    period = DateRange.parse(start_date, end_date)
    snapshot = load_ledger_snapshot(db, period, filters)

    expenses = snapshot.expenses_by_item()
    first_dates = snapshot.first_payment_dates()
    rows = []
    for item_id, payments in snapshot.payments_by_item().items():
        item = snapshot.items.get(item_id)
        revenue = sum((payment.amount for payment in payments), ZERO)
        cost = snapshot.item_cost(item_id) + expenses.get(item_id, ZERO)
        profit = revenue - cost
        sold_date = first_dates[item_id]
        acquired = item.acquired_on if item else None
        rows.append(
            {
                "item_id": item_id,
                "title": (item.title if item else None) or "",
                "model": (item.model if item else None) or "",
                "brand": snapshot.names.brands.get(item.brand_id, "") if item and item.brand_id else "",
                "vendor": snapshot.names.vendors.get(item.vendor_id, "") if item and item.vendor_id else "",
                "status": item.status if item else None,
                "acquisition_date": item.acquisition_date if item else None,
                "revenue": revenue,
                "cost": cost,
                "profit": profit,
                "margin": percent(profit, revenue),
                "sold_date": sold_date,
                "days_to_sell": (sold_date - acquired).days if acquired else None,
            }
        )

    rows.sort(key=lambda row: (-row["revenue"], row["item_id"]))
    page = rows[offset : offset + limit]
    for row in page:
        for key in ("revenue", "cost", "profit", "margin"):
            row[key] = quantize_money(row[key])

    return {
        "items": page,
        "total_count": len(rows),
        "limit": limit,
        "offset": offset,
        "has_more": offset + len(page) < len(rows),
    }


# ---------------------------------------------------------------------------
# Payment methods
# ---------------------------------------------------------------------------


def build_payment_method_breakdown(
    db: Session,
    start_date: date | str,
    end_date: date | str,
    filters: ReportFilters | dict | None = None,
) -> List[Dict[str, Any]]:
    period = DateRange.parse(start_date, end_date)
    snapshot = load_ledger_snapshot(db, period, filters, with_names=False)

    totals: Dict[str, Decimal] = defaultdict(lambda: ZERO)
    counts: Dict[str, int] = defaultdict(int)
    for payment in snapshot.payments:
        totals[payment.method] += payment.amount
        counts[payment.method] += 1
    grand_total = sum(totals.values(), ZERO)

    methods = sorted(totals, key=lambda method: (-totals[method], method))
    return [
        {
            "method": method,
            "total": quantize_money(totals[method]),
            "count": counts[method],
            "percentage": quantize_money(percent(totals[method], grand_total)),
            "average": quantize_money(safe_div(totals[method], D(counts[method]))),
        }
        for method in methods
    ]
