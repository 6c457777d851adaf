"""Composite financial health score.

Five factors, each on a 0..100 scale, are combined with
``HEALTH_FACTOR_WEIGHTS`` (timeliness 25, cash flow 25, turnover 20, margin
20, retention 10). An older 40/25/20/10/5 weighting is not supported; scores
computed with it are not comparable with these.
"""

from __future__ import annotations

import logging
from datetime import date, timedelta
from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Dict, List, Mapping, Optional, Tuple

from sqlalchemy import func
from sqlalchemy.orm import Session

from consignment.analytics.filters import DateRange
from consignment.ledger.status import INSTALLMENT_PAID, SOLD
from consignment.models import Expense, InstallmentPlan, Item, Payment, Payout
from consignment.utils.money import HUNDRED, ZERO, quantize_money, safe_div, to_decimal

logger = logging.getLogger(__name__)

D = Decimal

HEALTH_FACTOR_WEIGHTS: Dict[str, int] = {
    "payment_timeliness": 25,
    "cash_flow": 25,
    "inventory_turnover": 20,
    "profit_margin": 20,
    "client_retention": 10,
}

RECOMMENDATION_THRESHOLDS: Dict[str, Tuple[Decimal, str]] = {
    "payment_timeliness": (
        D("80"),
        "Many installments are unpaid. Consider automated payment reminders.",
    ),
    "cash_flow": (
        D("60"),
        "Revenue is falling compared with the previous 30 days. Review collection processes.",
    ),
    "inventory_turnover": (
        D("50"),
        "Low inventory turnover. Consider promotions or adjusting pricing strategy.",
    ),
    "profit_margin": (
        D("30"),
        "Low profit margins. Review pricing strategy and cost management.",
    ),
    "client_retention": (
        D("40"),
        "Few clients come back. Consider loyalty programs or improved customer service.",
    ),
}
MAINTAIN_MESSAGE = "Financial health is strong. Maintain current performance."

GRADE_THRESHOLDS = ((90, "A+"), (80, "A"), (70, "B"), (60, "C"), (50, "D"))
CASH_FLOW_WINDOW_DAYS = 30


def _clamp(value: Decimal) -> Decimal:
    return max(ZERO, min(HUNDRED, value))


def payment_timeliness_factor(paid_installments: int, total_installments: int) -> Decimal:
    if total_installments == 0:
        return HUNDRED
    return _clamp(safe_div(D(paid_installments), D(total_installments)) * HUNDRED)


def cash_flow_factor(current_revenue: Decimal, previous_revenue: Decimal) -> Decimal:
    if previous_revenue <= 0:
        return D("50")
    return _clamp(safe_div(current_revenue, previous_revenue) * D("50"))


def inventory_turnover_factor(sold_items: int, total_items: int) -> Decimal:
    return _clamp(safe_div(D(sold_items), D(total_items)) * HUNDRED)


def profit_margin_factor(revenue: Decimal, payouts: Decimal, expenses: Decimal) -> Tuple[Decimal, Decimal]:
    """Return ``(raw_margin, scored_margin)``; only the scored value is clamped."""
    raw = safe_div(revenue - payouts - expenses, revenue) * HUNDRED
    return raw, _clamp(raw)


def client_retention_factor(repeat_clients: int, paying_clients: int) -> Decimal:
    return _clamp(safe_div(D(repeat_clients), D(paying_clients)) * HUNDRED)


def composite_score(factors: Mapping[str, Decimal], weights: Mapping[str, int] = HEALTH_FACTOR_WEIGHTS) -> int:
    weighted = sum((D(weights[name]) * factors[name] for name in weights), ZERO)
    return int((weighted / HUNDRED).quantize(D("1"), rounding=ROUND_HALF_UP))


def grade_for(score: int) -> str:
    for threshold, grade in GRADE_THRESHOLDS:
        if score >= threshold:
            return grade
    return "F"


def recommendations_for(factors: Mapping[str, Decimal]) -> List[str]:
    recommendations = [
        message
        for name, (threshold, message) in RECOMMENDATION_THRESHOLDS.items()
        if factors[name] < threshold
    ]
    return recommendations or [MAINTAIN_MESSAGE]


def _revenue_between(db: Session, period: DateRange) -> Decimal:
    start, end = period.bounds()
    total = (
        db.query(func.coalesce(func.sum(Payment.amount), 0))
        .filter(Payment.paid_at >= start, Payment.paid_at < end)
        .scalar()
    )
    return to_decimal(total)


def _count(db: Session, column, *conditions) -> int:
    return int(db.query(func.count(column)).filter(*conditions).scalar() or 0)


def get_financial_health_score(db: Session, as_of: Optional[date] = None) -> Dict[str, Any]:
    today = as_of or date.today()

    total_installments = _count(db, InstallmentPlan.id)
    paid_installments = _count(db, InstallmentPlan.id, InstallmentPlan.status == INSTALLMENT_PAID)

    current_window = DateRange(today - timedelta(days=CASH_FLOW_WINDOW_DAYS - 1), today)
    current_revenue = _revenue_between(db, current_window)
    previous_revenue = _revenue_between(db, current_window.previous())

    total_items = _count(db, Item.id)
    sold_items = _count(db, Item.id, Item.status == SOLD)

    revenue = to_decimal(db.query(func.coalesce(func.sum(Payment.amount), 0)).scalar())
    payouts = to_decimal(db.query(func.coalesce(func.sum(Payout.amount), 0)).scalar())
    expenses = to_decimal(db.query(func.coalesce(func.sum(Expense.amount), 0)).scalar())
    raw_margin, scored_margin = profit_margin_factor(revenue, payouts, expenses)

    payments_per_client = (
        db.query(Payment.client_id, func.count(Payment.id)).group_by(Payment.client_id).all()
    )
    paying_clients = len(payments_per_client)
    repeat_clients = sum(1 for _, payment_count in payments_per_client if payment_count > 1)

    factors = {
        "payment_timeliness": payment_timeliness_factor(paid_installments, total_installments),
        "cash_flow": cash_flow_factor(current_revenue, previous_revenue),
        "inventory_turnover": inventory_turnover_factor(sold_items, total_items),
        "profit_margin": scored_margin,
        "client_retention": client_retention_factor(repeat_clients, paying_clients),
    }
    score = composite_score(factors)
    grade = grade_for(score)
    logger.debug("Financial health as of %s: score=%s grade=%s", today, score, grade)

    return {
        "as_of": today,
        "score": score,
        "grade": grade,
        "factors": {name: quantize_money(value) for name, value in factors.items()},
        "raw_profit_margin": quantize_money(raw_margin),
        "weights": dict(HEALTH_FACTOR_WEIGHTS),
        "recommendations": recommendations_for(factors),
    }
