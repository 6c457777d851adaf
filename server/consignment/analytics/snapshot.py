"""One read of the ledger shared by every report.

``load_ledger_snapshot`` pulls the payments in a period (with the item and
client filters applied), the items those payments touch and the in-period
expenses on those items. Reports are pure transforms over the result.
"""

from __future__ import annotations

import logging
from collections import defaultdict
from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal
from typing import Dict, Iterable, List, Optional

from sqlalchemy.orm import Session

from consignment.analytics.filters import DateRange, ReportFilters
from consignment.models import Brand, Category, Client, Expense, Item, Payment, Vendor
from consignment.utils.money import ZERO, MoneyRange, to_decimal

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ItemRecord:
    id: str
    vendor_id: Optional[str]
    brand_id: Optional[str]
    category_id: Optional[str]
    title: Optional[str]
    model: Optional[str]
    status: str
    cost: MoneyRange
    price: MoneyRange
    acquisition_date: Optional[date]
    created_at: Optional[datetime]

    @classmethod
    def from_model(cls, item: Item) -> "ItemRecord":
        record = cls(
            id=item.id,
            vendor_id=item.vendor_id,
            brand_id=item.brand_id,
            category_id=item.category_id,
            title=item.title,
            model=item.model,
            status=item.status,
            cost=item.cost_range,
            price=item.price_range,
            acquisition_date=item.acquisition_date,
            created_at=item.created_at,
        )
        if record.cost.is_zero:
            logger.debug("Item %s has no cost data, costing it at 0", item.id)
        return record

    @property
    def acquired_on(self) -> Optional[date]:
        if self.acquisition_date is not None:
            return self.acquisition_date
        if self.created_at is not None:
            return self.created_at.date()
        return None

    def age_days(self, as_of: date) -> Optional[int]:
        acquired = self.acquired_on
        if acquired is None:
            return None
        return (as_of - acquired).days


@dataclass(frozen=True)
class PaymentRecord:
    id: str
    item_id: str
    client_id: str
    method: str
    amount: Decimal
    paid_at: datetime

    @property
    def paid_on(self) -> date:
        return self.paid_at.date()


@dataclass(frozen=True)
class ExpenseRecord:
    id: str
    item_id: Optional[str]
    amount: Decimal
    incurred_at: datetime


@dataclass
class NameLookup:
    vendors: Dict[str, str] = field(default_factory=dict)
    clients: Dict[str, str] = field(default_factory=dict)
    brands: Dict[str, str] = field(default_factory=dict)
    categories: Dict[str, str] = field(default_factory=dict)

    @classmethod
    def load(
        cls,
        db: Session,
        *,
        vendor_ids: Iterable[str] = (),
        client_ids: Iterable[str] = (),
        brand_ids: Iterable[str] = (),
        category_ids: Iterable[str] = (),
    ) -> "NameLookup":
        def fetch(model, ids) -> Dict[str, str]:
            ids = {value for value in ids if value}
            if not ids:
                return {}
            rows = db.query(model.id, model.name).filter(model.id.in_(ids)).all()
            return {row_id: name for row_id, name in rows if name}

        return cls(
            vendors=fetch(Vendor, vendor_ids),
            clients=fetch(Client, client_ids),
            brands=fetch(Brand, brand_ids),
            categories=fetch(Category, category_ids),
        )


@dataclass
class LedgerSnapshot:
    period: DateRange
    filters: ReportFilters
    items: Dict[str, ItemRecord]
    payments: List[PaymentRecord]
    expenses: List[ExpenseRecord]
    names: NameLookup

    def payments_by_item(self) -> Dict[str, List[PaymentRecord]]:
        grouped: Dict[str, List[PaymentRecord]] = defaultdict(list)
        for payment in self.payments:
            grouped[payment.item_id].append(payment)
        return grouped

    def expenses_by_item(self) -> Dict[str, Decimal]:
        totals: Dict[str, Decimal] = defaultdict(lambda: ZERO)
        for expense in self.expenses:
            if expense.item_id is not None:
                totals[expense.item_id] += expense.amount
        return totals

    def first_payment_dates(self) -> Dict[str, date]:
        first: Dict[str, date] = {}
        for payment in self.payments:
            paid_on = payment.paid_on
            if payment.item_id not in first or paid_on < first[payment.item_id]:
                first[payment.item_id] = paid_on
        return first

    def item_cost(self, item_id: str) -> Decimal:
        item = self.items.get(item_id)
        return item.cost.preferred if item else ZERO

    def charge_for(self, item_ids: Iterable[str]) -> Decimal:
        """Cost plus in-period expenses, charged once per distinct item."""
        expenses = self.expenses_by_item()
        return sum((self.item_cost(item_id) + expenses.get(item_id, ZERO) for item_id in set(item_ids)), ZERO)


def load_ledger_snapshot(
    db: Session,
    period: DateRange,
    filters: ReportFilters | None = None,
    *,
    with_names: bool = True,
) -> LedgerSnapshot:
    filters = ReportFilters.coerce(filters)
    payment_rows = (
        db.query(
            Payment.id,
            Payment.item_id,
            Payment.client_id,
            Payment.method,
            Payment.amount,
            Payment.paid_at,
        )
        .join(Item, Item.id == Payment.item_id)
        .filter(*filters.item_conditions(), *filters.payment_conditions(period))
        .order_by(Payment.paid_at, Payment.id)
        .all()
    )
    payments = [
        PaymentRecord(
            id=row.id,
            item_id=row.item_id,
            client_id=row.client_id,
            method=row.method or "Unknown",
            amount=to_decimal(row.amount),
            paid_at=row.paid_at,
        )
        for row in payment_rows
    ]

    item_ids = {payment.item_id for payment in payments}
    items: Dict[str, ItemRecord] = {}
    expenses: List[ExpenseRecord] = []
    if item_ids:
        items = {
            item.id: ItemRecord.from_model(item)
            for item in db.query(Item).filter(Item.id.in_(item_ids)).all()
        }
        start, end = period.bounds()
        expense_rows = (
            db.query(Expense.id, Expense.item_id, Expense.amount, Expense.incurred_at)
            .filter(Expense.item_id.in_(item_ids))
            .filter(Expense.incurred_at >= start, Expense.incurred_at < end)
            .all()
        )
        expenses = [
            ExpenseRecord(id=row.id, item_id=row.item_id, amount=to_decimal(row.amount), incurred_at=row.incurred_at)
            for row in expense_rows
        ]

    names = NameLookup()
    if with_names:
        names = NameLookup.load(
            db,
            vendor_ids=(item.vendor_id for item in items.values()),
            client_ids=(payment.client_id for payment in payments),
            brand_ids=(item.brand_id for item in items.values()),
            category_ids=(item.category_id for item in items.values()),
        )
    return LedgerSnapshot(
        period=period,
        filters=filters,
        items=items,
        payments=payments,
        expenses=expenses,
        names=names,
    )


def load_item_records(db: Session, filters: ReportFilters | None = None) -> List[ItemRecord]:
    filters = ReportFilters.coerce(filters)
    query = db.query(Item).filter(*filters.item_conditions()).order_by(Item.created_at, Item.id)
    return [ItemRecord.from_model(item) for item in query.all()]
