"""Calendar bucketing and period comparison primitives for the reports."""

from __future__ import annotations

from datetime import date, timedelta
from decimal import Decimal
from typing import List, Literal

from consignment.errors import InvalidFilter
from consignment.utils.money import HUNDRED, ZERO, safe_div

# ---------------------------------------------------------------------------
# Date helpers
# ---------------------------------------------------------------------------

Granularity = Literal["day", "week", "month"]
GRANULARITIES = ("day", "week", "month")


def validate_granularity(granularity: str) -> Granularity:
    if granularity not in GRANULARITIES:
        raise InvalidFilter(f"Unknown granularity '{granularity}'. Use one of: {', '.join(GRANULARITIES)}.")
    return granularity  # type: ignore[return-value]


def period_start(d: date, granularity: Granularity) -> date:
    if granularity == "day":
        return d
    if granularity == "week":
        return d - timedelta(days=d.weekday())  # Monday
    return date(d.year, d.month, 1)


def add_periods(d: date, n: int, granularity: Granularity) -> date:
    if granularity == "day":
        return d + timedelta(days=n)
    if granularity == "week":
        return d + timedelta(weeks=n)
    return add_months(d, n)


def add_months(d: date, months: int) -> date:
    m = d.month - 1 + months
    y = d.year + m // 12
    m = m % 12 + 1
    return date(y, m, 1)


def is_last_period(d: date, granularity: Granularity) -> bool:
    """True when no later bucket fits before ``date.max``."""
    if granularity == "month":
        return (d.year, d.month) == (date.max.year, date.max.month)
    step = 7 if granularity == "week" else 1
    return (date.max - d).days < step


def generate_period_range(start: date, end: date, granularity: Granularity) -> List[date]:
    periods: List[date] = []
    current = period_start(start, granularity)
    while current <= end:
        periods.append(current)
        if is_last_period(current, granularity):
            break
        current = add_periods(current, 1, granularity)
    return periods


def period_label(d: date) -> str:
    return d.isoformat()


# ---------------------------------------------------------------------------
# Period-over-period comparison
# ---------------------------------------------------------------------------


def change_percent(current: Decimal, previous: Decimal) -> Decimal:
    """Growth of ``current`` over ``previous`` in percent, 0 without a positive base."""
    if previous <= 0:
        return ZERO
    return safe_div(current - previous, previous) * HUNDRED
