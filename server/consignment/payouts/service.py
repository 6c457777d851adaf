from __future__ import annotations

from datetime import date, timedelta
from decimal import Decimal
from typing import Dict, List, Optional

from sqlalchemy import func
from sqlalchemy.orm import Session, joinedload

from consignment.analytics.engine import change_percent
from consignment.analytics.filters import DateRange
from consignment.ledger.status import SOLD
from consignment.models import Item, Payment, Payout
from consignment.payouts.formula import quote_payout
from consignment.utils.money import ZERO, percent, quantize_money, safe_div, to_decimal

TREND_WINDOW_DAYS = 30


def _unpaid_sold_items(db: Session) -> List[Item]:
    return (
        db.query(Item)
        .options(joinedload(Item.vendor), joinedload(Item.brand))
        .outerjoin(Payout, Payout.item_id == Item.id)
        .filter(Item.status == SOLD, Payout.id.is_(None))
        .order_by(Item.created_at, Item.id)
        .all()
    )


def _payment_totals(db: Session, item_ids: List[str]) -> Dict[str, tuple]:
    if not item_ids:
        return {}
    rows = (
        db.query(
            Payment.item_id,
            func.coalesce(func.sum(Payment.amount), 0),
            func.min(Payment.paid_at),
            func.max(Payment.paid_at),
        )
        .filter(Payment.item_id.in_(item_ids))
        .group_by(Payment.item_id)
        .all()
    )
    return {item_id: (to_decimal(total), first, last) for item_id, total, first, last in rows}


def list_upcoming_payouts(db: Session) -> List[dict]:
    """Sold items still owed to their vendor, with the canonical payout for each."""
    items = _unpaid_sold_items(db)
    totals = _payment_totals(db, [item.id for item in items])

    results = []
    for item in items:
        collected, first_paid, last_paid = totals.get(item.id, (ZERO, None, None))
        quote = quote_payout(item.cost_range, item.price_range, collected)
        results.append(
            {
                "item_id": item.id,
                "title": item.title or "",
                "model": item.model or "",
                "brand": item.brand.name if item.brand else "",
                "vendor_id": item.vendor_id,
                "vendor_name": item.vendor.name if item.vendor else None,
                "min_cost": quantize_money(item.cost_range.min),
                "max_cost": quantize_money(quote.max_cost),
                "max_sales_price": quantize_money(quote.max_sales_price),
                "collected": quantize_money(collected),
                "adjustment_factor": quote.adjustment_factor.quantize(Decimal("0.0001")),
                "payout_amount": quantize_money(quote.amount),
                "payment_progress": quantize_money(min(percent(collected, quote.max_sales_price), Decimal("100"))),
                "first_payment_at": first_paid,
                "last_payment_at": last_paid,
            }
        )
    return results


def _payouts_between(db: Session, period: DateRange) -> Decimal:
    start, end = period.bounds()
    total = (
        db.query(func.coalesce(func.sum(Payout.amount), 0))
        .filter(Payout.paid_at >= start, Payout.paid_at < end)
        .scalar()
    )
    return to_decimal(total)


def get_payout_metrics(db: Session, as_of: Optional[date] = None) -> dict:
    today = as_of or date.today()

    payout_count, payout_total = db.query(
        func.count(Payout.id), func.coalesce(func.sum(Payout.amount), 0)
    ).one()
    payout_total = to_decimal(payout_total)

    pending = list_upcoming_payouts(db)
    pending_amount = sum((row["payout_amount"] for row in pending), ZERO)

    current_window = DateRange(today - timedelta(days=TREND_WINDOW_DAYS - 1), today)
    current_amount = _payouts_between(db, current_window)
    previous_amount = _payouts_between(db, current_window.previous())

    return {
        "total_payouts_count": int(payout_count or 0),
        "total_payouts_amount": quantize_money(payout_total),
        "average_payout_amount": quantize_money(safe_div(payout_total, Decimal(payout_count or 0))),
        "pending_payouts_count": len(pending),
        "pending_payouts_amount": quantize_money(pending_amount),
        "monthly_payout_trend": quantize_money(change_percent(current_amount, previous_amount)),
    }
