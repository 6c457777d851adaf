from datetime import date, datetime
from decimal import Decimal
from types import SimpleNamespace

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from consignment.db import Base, get_db
from consignment.main import app
from consignment.models import Brand, Category, Client, Expense, InstallmentPlan, Item, Payment, Payout, Vendor


def create_session():
    engine = create_engine("sqlite+pysqlite:///:memory:")
    Base.metadata.create_all(engine)
    return sessionmaker(bind=engine, autoflush=False, autocommit=False)()


def _money(value):
    return None if value is None else Decimal(str(value))


class LedgerBuilder:
    """Inserts ledger rows directly, bypassing the ledger service."""

    def __init__(self, db):
        self.db = db

    def _add(self, row):
        self.db.add(row)
        self.db.flush()
        return row

    def vendor(self, name="Vendor"):
        return self._add(Vendor(name=name))

    def client(self, name="Client"):
        return self._add(Client(name=name))

    def brand(self, name="Brand"):
        return self._add(Brand(name=name))

    def category(self, name="Category"):
        return self._add(Category(name=name))

    def item(
        self,
        vendor,
        *,
        min_cost=None,
        max_cost=None,
        min_price=None,
        max_price=None,
        status="in-store",
        brand=None,
        category=None,
        acquisition_date=None,
        created_at=None,
        title="Item",
    ):
        return self._add(
            Item(
                vendor_id=vendor.id,
                brand_id=brand.id if brand else None,
                category_id=category.id if category else None,
                title=title,
                min_cost=_money(min_cost),
                max_cost=_money(max_cost),
                min_sales_price=_money(min_price),
                max_sales_price=_money(max_price),
                status=status,
                acquisition_date=acquisition_date,
                created_at=created_at or datetime(2024, 1, 1),
            )
        )

    def payment(self, item, client, amount, paid_at, method="cash"):
        if isinstance(paid_at, date) and not isinstance(paid_at, datetime):
            paid_at = datetime(paid_at.year, paid_at.month, paid_at.day, 12, 0)
        return self._add(
            Payment(item_id=item.id, client_id=client.id, method=method, amount=_money(amount), paid_at=paid_at)
        )

    def expense(self, item, amount, incurred_at, expense_type="repair"):
        if isinstance(incurred_at, date) and not isinstance(incurred_at, datetime):
            incurred_at = datetime(incurred_at.year, incurred_at.month, incurred_at.day, 9, 0)
        return self._add(
            Expense(
                item_id=item.id if item else None,
                expense_type=expense_type,
                amount=_money(amount),
                incurred_at=incurred_at,
            )
        )

    def payout(self, item, amount, paid_at):
        return self._add(Payout(item_id=item.id, vendor_id=item.vendor_id, amount=_money(amount), paid_at=paid_at))

    def installment(self, item, client, amount, due_date, status="pending", paid_amount="0"):
        return self._add(
            InstallmentPlan(
                item_id=item.id,
                client_id=client.id,
                amount=_money(amount),
                due_date=due_date,
                paid_amount=_money(paid_amount),
                status=status,
            )
        )


@pytest.fixture
def db():
    session = create_session()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def ledger(db):
    return LedgerBuilder(db)


@pytest.fixture
def sample_ledger(db, ledger):
    """A small March 2024 ledger shared by the report tests.

    In range (2024-03-01..2024-03-31): four payments totalling 1550 on three
    items, one 50 expense on the Kelly bag. One payment before and one after
    the range, plus a general expense with no item.
    """
    atelier = ledger.vendor("Atelier")
    maison = ledger.vendor("Maison")
    hermes = ledger.brand("Hermes")
    chanel = ledger.brand("Chanel")
    bags = ledger.category("Bags")
    alice = ledger.client("Alice")
    bob = ledger.client("Bob")

    kelly = ledger.item(
        atelier,
        min_cost="400",
        max_cost="500",
        min_price="900",
        max_price="1000",
        status="sold",
        brand=hermes,
        category=bags,
        acquisition_date=date(2024, 1, 1),
        title="Kelly 28",
    )
    flap = ledger.item(
        atelier,
        min_cost="200",
        max_price="600",
        status="reserved",
        brand=chanel,
        category=bags,
        acquisition_date=date(2024, 2, 1),
        title="Classic Flap",
    )
    scarf = ledger.item(
        maison,
        max_price="300",
        status="sold",
        brand=hermes,
        created_at=datetime(2024, 1, 1, 10, 0),
        title="Silk Scarf",
    )
    wallet = ledger.item(
        maison,
        min_cost="100",
        max_cost="150",
        max_price="400",
        acquisition_date=date(2023, 12, 1),
        title="Wallet",
    )

    ledger.payment(kelly, alice, "600", datetime(2024, 3, 4, 10, 0), method="card")
    ledger.payment(kelly, alice, "400", datetime(2024, 3, 20, 15, 0), method="card")
    ledger.payment(flap, bob, "250", datetime(2024, 3, 11, 11, 0), method="cash")
    ledger.payment(scarf, bob, "300", datetime(2024, 3, 31, 23, 30), method="cash")
    ledger.payment(kelly, alice, "100", datetime(2024, 2, 20, 10, 0), method="card")
    ledger.payment(scarf, alice, "50", datetime(2024, 4, 1, 0, 0), method="cash")

    ledger.expense(kelly, "50", date(2024, 3, 10))
    ledger.expense(flap, "20", date(2024, 2, 15))
    ledger.expense(None, "999", date(2024, 3, 5), expense_type="rent")

    ledger.installment(flap, bob, "350", date(2024, 4, 1))
    ledger.installment(flap, bob, "350", date(2024, 5, 1))
    ledger.installment(kelly, alice, "500", date(2024, 3, 1), status="paid", paid_amount="500")
    db.commit()

    return SimpleNamespace(
        atelier=atelier,
        maison=maison,
        hermes=hermes,
        chanel=chanel,
        bags=bags,
        alice=alice,
        bob=bob,
        kelly=kelly,
        flap=flap,
        scarf=scarf,
        wallet=wallet,
    )


@pytest.fixture
def api():
    """A TestClient bound to a fresh in-memory database, plus its session factory."""
    engine = create_engine(
        "sqlite+pysqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    TestingSessionLocal = sessionmaker(bind=engine, autoflush=False, autocommit=False)
    Base.metadata.create_all(engine)

    def override_get_db():
        session = TestingSessionLocal()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    try:
        yield TestClient(app), TestingSessionLocal
    finally:
        app.dependency_overrides.pop(get_db, None)
