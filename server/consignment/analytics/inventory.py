from __future__ import annotations

from collections import defaultdict
from datetime import date
from decimal import Decimal
from typing import Any, Dict, List, Optional

from sqlalchemy.orm import Session

from consignment.analytics.filters import ReportFilters
from consignment.analytics.snapshot import ItemRecord, NameLookup, load_item_records
from consignment.ledger.status import CURRENT_STOCK_STATUSES, IN_STORE, RESERVED, RETURNED, SOLD
from consignment.utils.money import ZERO, quantize_money, safe_div

D = Decimal

SLOW_MOVING_DAYS = 90
FAST_MOVING_DAYS = 30
UNCATEGORIZED = "Uncategorized"


def _aging_bucket(age: int) -> str:
    if age < 30:
        return "under_30_days"
    if age <= 90:
        return "days_30_to_90"
    if age <= 180:
        return "days_91_to_180"
    return "over_180_days"


def _average_age(ages: List[int]) -> Decimal:
    return quantize_money(safe_div(D(sum(ages)), D(len(ages))))


def build_inventory_health(
    db: Session,
    filters: ReportFilters | dict | None = None,
    *,
    as_of: Optional[date] = None,
) -> Dict[str, Any]:
    """Stock snapshot as of ``as_of`` (today by default), independent of any date range.

    Status counts cover every filtered item. Value, age, the category
    breakdown and the aging buckets only cover current stock (in-store and
    reserved items).
    """
    today = as_of or date.today()
    records = load_item_records(db, filters)

    status_counts = {status: 0 for status in (IN_STORE, RESERVED, SOLD, RETURNED)}
    for record in records:
        status_counts[record.status] = status_counts.get(record.status, 0) + 1

    stock: List[ItemRecord] = [record for record in records if record.status in CURRENT_STOCK_STATUSES]
    aging = {"under_30_days": 0, "days_30_to_90": 0, "days_91_to_180": 0, "over_180_days": 0}
    ages: List[int] = []
    category_items: Dict[Optional[str], List[ItemRecord]] = defaultdict(list)
    slow_moving = 0
    total_value = ZERO
    for record in stock:
        total_value += record.price.preferred
        category_items[record.category_id].append(record)
        age = record.age_days(today)
        if age is None:
            continue
        ages.append(age)
        aging[_aging_bucket(age)] += 1
        if age > SLOW_MOVING_DAYS:
            slow_moving += 1

    fast_moving = 0
    for record in records:
        if record.status != SOLD:
            continue
        age = record.age_days(today)
        if age is not None and age < FAST_MOVING_DAYS:
            fast_moving += 1

    names = NameLookup.load(db, category_ids=(key for key in category_items if key))
    categories = []
    for category_id, items in category_items.items():
        item_ages = [age for age in (item.age_days(today) for item in items) if age is not None]
        categories.append(
            {
                "category_id": category_id,
                "category_name": names.categories.get(category_id, UNCATEGORIZED) if category_id else UNCATEGORIZED,
                "item_count": len(items),
                "total_value": quantize_money(sum((item.price.preferred for item in items), ZERO)),
                "average_age": _average_age(item_ages),
            }
        )
    categories.sort(key=lambda row: (-row["item_count"], row["category_name"]))

    return {
        "total_items": len(records),
        "in_store_items": status_counts[IN_STORE],
        "reserved_items": status_counts[RESERVED],
        "sold_items": status_counts[SOLD],
        "returned_items": status_counts[RETURNED],
        "total_value": quantize_money(total_value),
        "average_age": _average_age(ages),
        "slow_moving_items": slow_moving,
        "fast_moving_items": fast_moving,
        "categories_breakdown": categories,
        "aging_analysis": aging,
    }
