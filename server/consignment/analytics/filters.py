"""Report inputs shared by every aggregation: date range and dimension filters.

Inputs are validated up front so a report either fails fast with
``InvalidRange`` / ``InvalidFilter`` or runs to completion.
"""

from __future__ import annotations

import re
import uuid
from dataclasses import dataclass, field, fields
from datetime import date, datetime, time, timedelta
from typing import Iterable, List, Optional, Sequence, Tuple

from consignment.errors import InvalidFilter, InvalidRange
from consignment.ledger.status import ITEM_STATUSES
from consignment.models import Item, Payment

ISO_DATE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")


def parse_date(value: date | str, label: str = "date") -> date:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not isinstance(value, str) or not ISO_DATE_RE.match(value):
        raise InvalidRange(f"Invalid {label} format. Use YYYY-MM-DD.")
    try:
        return date.fromisoformat(value)
    except ValueError as exc:
        raise InvalidRange(f"Invalid {label}: {value}.") from exc


@dataclass(frozen=True)
class DateRange:
    """Inclusive calendar range ``[start, end]``."""

    start: date
    end: date

    @classmethod
    def parse(cls, start: date | str, end: date | str) -> "DateRange":
        start_date = parse_date(start, "startDate")
        end_date = parse_date(end, "endDate")
        if end_date < start_date:
            raise InvalidRange("endDate must not be earlier than startDate.")
        return cls(start_date, end_date)

    @property
    def days(self) -> int:
        return (self.end - self.start).days + 1

    def bounds(self) -> Tuple[datetime, datetime]:
        """Half-open timestamp bounds covering every moment of the range.

        A range ending on ``date.max`` has no following midnight, so its
        upper bound is capped at ``datetime.max``.
        """
        if self.end == date.max:
            upper = datetime.max
        else:
            upper = datetime.combine(self.end + timedelta(days=1), time.min)
        return datetime.combine(self.start, time.min), upper

    def previous(self) -> Optional["DateRange"]:
        """The window of the same length ending the day before ``start``.

        The window is cut short at ``date.min``; a range starting on
        ``date.min`` has no previous window and gets ``None``.
        """
        if self.start == date.min:
            return None
        prev_end = self.start - timedelta(days=1)
        available = (prev_end - date.min).days
        return DateRange(prev_end - timedelta(days=min(self.days - 1, available)), prev_end)


def _clean_ids(values: Optional[Iterable[str]], label: str) -> Tuple[str, ...]:
    if not values:
        return ()
    cleaned: List[str] = []
    for value in values:
        value = str(value).strip()
        if not value:
            continue
        try:
            uuid.UUID(value)
        except ValueError as exc:
            raise InvalidFilter(f"Invalid UUID format for {label}: {value}") from exc
        cleaned.append(value)
    return tuple(cleaned)


def _clean_statuses(values: Optional[Iterable[str]]) -> Tuple[str, ...]:
    if not values:
        return ()
    cleaned = tuple(str(value).strip() for value in values if str(value).strip())
    unknown = [value for value in cleaned if value not in ITEM_STATUSES]
    if unknown:
        raise InvalidFilter(f"Unknown item status: {', '.join(unknown)}")
    return cleaned


def split_csv(value: Optional[str]) -> Optional[List[str]]:
    if value is None or value == "":
        return None
    return [part for part in value.split(",") if part.strip()]


@dataclass(frozen=True)
class ReportFilters:
    """Allow-lists per dimension; an empty tuple means unrestricted."""

    vendor_ids: Tuple[str, ...] = field(default_factory=tuple)
    client_ids: Tuple[str, ...] = field(default_factory=tuple)
    brand_ids: Tuple[str, ...] = field(default_factory=tuple)
    category_ids: Tuple[str, ...] = field(default_factory=tuple)
    item_statuses: Tuple[str, ...] = field(default_factory=tuple)

    @classmethod
    def build(
        cls,
        vendor_ids: Optional[Sequence[str]] = None,
        client_ids: Optional[Sequence[str]] = None,
        brand_ids: Optional[Sequence[str]] = None,
        category_ids: Optional[Sequence[str]] = None,
        item_statuses: Optional[Sequence[str]] = None,
    ) -> "ReportFilters":
        return cls(
            vendor_ids=_clean_ids(vendor_ids, "vendorIds"),
            client_ids=_clean_ids(client_ids, "clientIds"),
            brand_ids=_clean_ids(brand_ids, "brandIds"),
            category_ids=_clean_ids(category_ids, "categoryIds"),
            item_statuses=_clean_statuses(item_statuses),
        )

    @classmethod
    def coerce(cls, filters: "ReportFilters | dict | None") -> "ReportFilters":
        if filters is None:
            return cls()
        if isinstance(filters, ReportFilters):
            return filters
        unknown = sorted(set(filters) - {item.name for item in fields(cls)})
        if unknown:
            raise InvalidFilter(f"Unknown filter: {', '.join(unknown)}")
        return cls.build(**filters)

    def item_conditions(self) -> list:
        conditions = []
        if self.vendor_ids:
            conditions.append(Item.vendor_id.in_(self.vendor_ids))
        if self.brand_ids:
            conditions.append(Item.brand_id.in_(self.brand_ids))
        if self.category_ids:
            conditions.append(Item.category_id.in_(self.category_ids))
        if self.item_statuses:
            conditions.append(Item.status.in_(self.item_statuses))
        return conditions

    def payment_conditions(self, period: Optional[DateRange] = None) -> list:
        conditions = []
        if self.client_ids:
            conditions.append(Payment.client_id.in_(self.client_ids))
        if period is not None:
            start, end = period.bounds()
            conditions.append(Payment.paid_at >= start)
            conditions.append(Payment.paid_at < end)
        return conditions
