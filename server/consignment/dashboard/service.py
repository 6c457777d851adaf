from __future__ import annotations

from datetime import date, timedelta
from decimal import Decimal
from typing import List, Optional

from sqlalchemy import func
from sqlalchemy.orm import Session, joinedload

from consignment.analytics.engine import change_percent
from consignment.analytics.filters import DateRange
from consignment.ledger.status import IN_STORE, INSTALLMENT_PENDING, SOLD
from consignment.models import Expense, InstallmentPlan, Item, Payment, Payout
from consignment.payouts.formula import legacy_range_snapshot, quote_payout, total_payout
from consignment.utils.money import ZERO, MoneyRange, quantize_money, safe_div, to_decimal

UPCOMING_INSTALLMENT_DAYS = 30
TREND_WINDOW_DAYS = 30


def _sum(db: Session, column, *conditions) -> Decimal:
    query = db.query(func.coalesce(func.sum(column), 0))
    if conditions:
        query = query.filter(*conditions)
    return to_decimal(query.scalar())


def _collected_by_item(db: Session, item_ids: List[str]) -> dict:
    if not item_ids:
        return {}
    rows = (
        db.query(Payment.item_id, func.coalesce(func.sum(Payment.amount), 0))
        .filter(Payment.item_id.in_(item_ids))
        .group_by(Payment.item_id)
        .all()
    )
    return {item_id: to_decimal(total) for item_id, total in rows}


def get_dashboard_metrics(db: Session) -> dict:
    total_revenue = _sum(db, Payment.amount)
    total_expenses = _sum(db, Expense.amount)

    active_items = db.query(func.count(Item.id)).filter(Item.status == IN_STORE).scalar()

    unpaid_sold = (
        db.query(Item)
        .outerjoin(Payout, Payout.item_id == Item.id)
        .filter(Item.status == SOLD, Payout.id.is_(None))
        .all()
    )
    pending_payouts = legacy_range_snapshot(item.cost_range for item in unpaid_sold)
    net_profit = pending_payouts.subtract_from(total_revenue - total_expenses)

    incoming_payments = to_decimal(
        db.query(func.coalesce(func.sum(Payment.amount), 0))
        .join(Item, Item.id == Payment.item_id)
        .filter(Item.status == SOLD)
        .scalar()
    )

    collected = _collected_by_item(db, [item.id for item in unpaid_sold])
    upcoming_payouts = total_payout(
        quote_payout(item.cost_range, item.price_range, collected[item.id])
        for item in unpaid_sold
        if item.id in collected
    )

    in_store = db.query(Item).filter(Item.status == IN_STORE).all()
    cost_range = MoneyRange.total(item.cost_range for item in in_store)
    inventory_value_range = MoneyRange.total(item.price_range for item in in_store)

    return {
        "total_revenue": quantize_money(total_revenue),
        "active_items": int(active_items or 0),
        "pending_payouts": pending_payouts.quantized(),
        "net_profit": net_profit.quantized(),
        "incoming_payments": quantize_money(incoming_payments),
        "upcoming_payouts": quantize_money(upcoming_payouts),
        "cost_range": cost_range.quantized(),
        "inventory_value_range": inventory_value_range.quantized(),
    }


def _revenue_between(db: Session, period: DateRange) -> Decimal:
    start, end = period.bounds()
    return _sum(db, Payment.amount, Payment.paid_at >= start, Payment.paid_at < end)


def get_payment_metrics(db: Session, as_of: Optional[date] = None) -> dict:
    today = as_of or date.today()

    payment_count, payment_total = db.query(
        func.count(Payment.id), func.coalesce(func.sum(Payment.amount), 0)
    ).one()
    payment_total = to_decimal(payment_total)

    overdue = (
        db.query(func.count(InstallmentPlan.id))
        .filter(InstallmentPlan.status == INSTALLMENT_PENDING, InstallmentPlan.due_date < today)
        .scalar()
    )
    upcoming = (
        db.query(func.count(InstallmentPlan.id))
        .filter(
            InstallmentPlan.status == INSTALLMENT_PENDING,
            InstallmentPlan.due_date >= today,
            InstallmentPlan.due_date <= today + timedelta(days=UPCOMING_INSTALLMENT_DAYS),
        )
        .scalar()
    )

    current_window = DateRange(today - timedelta(days=TREND_WINDOW_DAYS - 1), today)
    current = _revenue_between(db, current_window)
    previous = _revenue_between(db, current_window.previous())

    return {
        "total_payments_count": int(payment_count or 0),
        "total_payments_amount": quantize_money(payment_total),
        "average_payment_amount": quantize_money(safe_div(payment_total, Decimal(payment_count or 0))),
        "overdue_installments": int(overdue or 0),
        "upcoming_installments": int(upcoming or 0),
        "monthly_payment_trend": quantize_money(change_percent(current, previous)),
    }


def list_overdue_installments(db: Session, as_of: Optional[date] = None) -> List[dict]:
    today = as_of or date.today()
    plans = (
        db.query(InstallmentPlan)
        .options(joinedload(InstallmentPlan.item), joinedload(InstallmentPlan.client))
        .filter(InstallmentPlan.status == INSTALLMENT_PENDING, InstallmentPlan.due_date < today)
        .order_by(InstallmentPlan.due_date, InstallmentPlan.id)
        .all()
    )
    results = []
    for plan in plans:
        amount = to_decimal(plan.amount)
        paid = to_decimal(plan.paid_amount)
        results.append(
            {
                "id": plan.id,
                "item_id": plan.item_id,
                "item_title": plan.item.title if plan.item else None,
                "client_id": plan.client_id,
                "client_name": plan.client.name if plan.client else None,
                "amount": quantize_money(amount),
                "paid_amount": quantize_money(paid),
                "remaining_amount": quantize_money(max(amount - paid, ZERO)),
                "due_date": plan.due_date,
                "days_overdue": (today - plan.due_date).days,
            }
        )
    return results
