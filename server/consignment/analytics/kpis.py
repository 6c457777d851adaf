"""KPI report over a date range.

Revenue is cash collected in the range. COGS charges each distinct item that
received a payment in the range once, at its preferred (max, else min) cost,
regardless of how many payments it received.
"""

from __future__ import annotations

from collections import defaultdict
from datetime import date
from decimal import Decimal
from typing import Any, Dict, Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

from consignment.analytics.engine import change_percent
from consignment.analytics.filters import DateRange, ReportFilters
from consignment.analytics.snapshot import LedgerSnapshot, load_ledger_snapshot
from consignment.ledger.status import INSTALLMENT_PENDING
from consignment.models import InstallmentPlan
from consignment.utils.money import ZERO, percent, quantize_money, safe_div

D = Decimal
NOT_AVAILABLE = "N/A"


def compute_kpis(snapshot: LedgerSnapshot) -> Dict[str, Any]:
    """Unrounded KPI figures for one snapshot."""
    revenue = sum((payment.amount for payment in snapshot.payments), ZERO)
    paid_item_ids = {payment.item_id for payment in snapshot.payments}
    cogs = sum((snapshot.item_cost(item_id) for item_id in paid_item_ids), ZERO)
    total_expenses = sum((expense.amount for expense in snapshot.expenses), ZERO)

    gross_profit = revenue - cogs
    net_profit = gross_profit - total_expenses
    items_sold = len(paid_item_ids)
    payment_count = len(snapshot.payments)
    unique_clients = len({payment.client_id for payment in snapshot.payments})

    first_dates = snapshot.first_payment_dates()
    days_to_sell = []
    for item_id in paid_item_ids:
        item = snapshot.items.get(item_id)
        if item is None or item.acquisition_date is None or item_id not in first_dates:
            continue
        days_to_sell.append((first_dates[item_id] - item.acquisition_date).days)
    average_days_to_sell = safe_div(D(sum(days_to_sell)), D(len(days_to_sell)))

    # Approximation: revenue over average unit cost of the items sold, not COGS / average inventory.
    inventory_turnover = safe_div(revenue, safe_div(cogs, D(items_sold)))

    return {
        "revenue": revenue,
        "cogs": cogs,
        "gross_profit": gross_profit,
        "gross_margin": percent(gross_profit, revenue),
        "total_expenses": total_expenses,
        "net_profit": net_profit,
        "net_margin": percent(net_profit, revenue),
        "items_sold": items_sold,
        "payment_count": payment_count,
        "unique_clients": unique_clients,
        "average_order_value": safe_div(revenue, D(payment_count)),
        "average_days_to_sell": average_days_to_sell,
        "inventory_turnover": inventory_turnover,
    }


def _top_performer(snapshot: LedgerSnapshot, attribute: str, names: Dict[str, str]) -> str:
    revenue_by_key: Dict[str, Decimal] = defaultdict(lambda: ZERO)
    for payment in snapshot.payments:
        item = snapshot.items.get(payment.item_id)
        key = getattr(item, attribute, None) if item else None
        if key:
            revenue_by_key[key] += payment.amount
    if not revenue_by_key:
        return NOT_AVAILABLE
    top_key = max(sorted(revenue_by_key), key=lambda key: revenue_by_key[key])
    return names.get(top_key, NOT_AVAILABLE)


def _installment_counts(db: Session, as_of: date) -> Dict[str, int]:
    pending = (
        db.query(func.count(InstallmentPlan.id))
        .filter(InstallmentPlan.status == INSTALLMENT_PENDING, InstallmentPlan.due_date >= as_of)
        .scalar()
    )
    overdue = (
        db.query(func.count(InstallmentPlan.id))
        .filter(InstallmentPlan.status == INSTALLMENT_PENDING, InstallmentPlan.due_date < as_of)
        .scalar()
    )
    return {"pending_installments": int(pending or 0), "overdue_installments": int(overdue or 0)}


def build_kpi_report(
    db: Session,
    start_date: date | str,
    end_date: date | str,
    filters: ReportFilters | dict | None = None,
    *,
    as_of: Optional[date] = None,
) -> Dict[str, Any]:
    period = DateRange.parse(start_date, end_date)
    filters = ReportFilters.coerce(filters)
    today = as_of or date.today()

    snapshot = load_ledger_snapshot(db, period, filters)
    current = compute_kpis(snapshot)
    previous_revenue = previous_profit = ZERO
    previous_period = period.previous()
    if previous_period is not None:
        previous = compute_kpis(load_ledger_snapshot(db, previous_period, filters, with_names=False))
        previous_revenue, previous_profit = previous["revenue"], previous["net_profit"]

    report: Dict[str, Any] = {
        "start_date": period.start,
        "end_date": period.end,
        "revenue": quantize_money(current["revenue"]),
        "cogs": quantize_money(current["cogs"]),
        "gross_profit": quantize_money(current["gross_profit"]),
        "gross_margin": quantize_money(current["gross_margin"]),
        "total_expenses": quantize_money(current["total_expenses"]),
        "net_profit": quantize_money(current["net_profit"]),
        "net_margin": quantize_money(current["net_margin"]),
        "items_sold": current["items_sold"],
        "payment_count": current["payment_count"],
        "unique_clients": current["unique_clients"],
        "average_order_value": quantize_money(current["average_order_value"]),
        "average_days_to_sell": quantize_money(current["average_days_to_sell"]),
        "inventory_turnover": quantize_money(current["inventory_turnover"]),
        "revenue_change": quantize_money(change_percent(current["revenue"], previous_revenue)),
        "profit_change": quantize_money(change_percent(current["net_profit"], previous_profit)),
        "top_performing_brand": _top_performer(snapshot, "brand_id", snapshot.names.brands),
        "top_performing_vendor": _top_performer(snapshot, "vendor_id", snapshot.names.vendors),
    }
    report.update(_installment_counts(db, today))
    return report
