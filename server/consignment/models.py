import uuid
from datetime import datetime

from sqlalchemy import (
    Column,
    Date,
    DateTime,
    Enum,
    ForeignKey,
    Numeric,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import relationship

from .db import Base
from .utils.money import MoneyRange


def _new_id() -> str:
    return str(uuid.uuid4())


class Vendor(Base):
    __tablename__ = "vendors"

    id = Column(String(36), primary_key=True, default=_new_id)
    name = Column(String(200), nullable=True)
    phone = Column(String(50), nullable=True)
    email = Column(String(255), nullable=True)
    bank_account_number = Column(String(100), nullable=True)
    bank_name = Column(String(100), nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    items = relationship("Item", back_populates="vendor")


class Client(Base):
    __tablename__ = "clients"

    id = Column(String(36), primary_key=True, default=_new_id)
    name = Column(String(200), nullable=True)
    phone = Column(String(50), nullable=True)
    email = Column(String(255), nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    payments = relationship("Payment", back_populates="client")


class Brand(Base):
    __tablename__ = "brands"

    id = Column(String(36), primary_key=True, default=_new_id)
    name = Column(String(200), nullable=False, unique=True)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)


class Category(Base):
    __tablename__ = "categories"

    id = Column(String(36), primary_key=True, default=_new_id)
    name = Column(String(200), nullable=False, unique=True)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)


class Item(Base):
    __tablename__ = "items"

    id = Column(String(36), primary_key=True, default=_new_id)
    vendor_id = Column(String(36), ForeignKey("vendors.id"), nullable=False)
    brand_id = Column(String(36), ForeignKey("brands.id"), nullable=True)
    category_id = Column(String(36), ForeignKey("categories.id"), nullable=True)
    title = Column(String(255), nullable=True)
    model = Column(String(255), nullable=True)
    serial_no = Column(String(100), nullable=True)
    condition = Column(String(50), nullable=True)
    acquisition_date = Column(Date, nullable=True)
    min_cost = Column(Numeric(12, 2), nullable=True)
    max_cost = Column(Numeric(12, 2), nullable=True)
    min_sales_price = Column(Numeric(12, 2), nullable=True)
    max_sales_price = Column(Numeric(12, 2), nullable=True)
    status = Column(
        Enum("in-store", "reserved", "sold", "returned-to-vendor", name="item_status"),
        nullable=False,
        default="in-store",
    )
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    vendor = relationship("Vendor", back_populates="items")
    brand = relationship("Brand")
    category = relationship("Category")
    payments = relationship("Payment", back_populates="item")
    payout = relationship("Payout", back_populates="item", uselist=False)
    expenses = relationship("Expense", back_populates="item")

    @property
    def cost_range(self) -> MoneyRange:
        return MoneyRange.from_bounds(self.min_cost, self.max_cost)

    @property
    def price_range(self) -> MoneyRange:
        return MoneyRange.from_bounds(self.min_sales_price, self.max_sales_price)


class Payment(Base):
    __tablename__ = "payments"

    id = Column(String(36), primary_key=True, default=_new_id)
    item_id = Column(String(36), ForeignKey("items.id"), nullable=False, index=True)
    client_id = Column(String(36), ForeignKey("clients.id"), nullable=False, index=True)
    method = Column(String(50), nullable=False)
    amount = Column(Numeric(12, 2), nullable=False)
    paid_at = Column(DateTime, nullable=False, index=True)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    item = relationship("Item", back_populates="payments")
    client = relationship("Client", back_populates="payments")


class Payout(Base):
    __tablename__ = "payouts"

    id = Column(String(36), primary_key=True, default=_new_id)
    item_id = Column(String(36), ForeignKey("items.id"), nullable=False)
    vendor_id = Column(String(36), ForeignKey("vendors.id"), nullable=False, index=True)
    amount = Column(Numeric(12, 2), nullable=False)
    paid_at = Column(DateTime, nullable=False)
    bank_account = Column(String(100), nullable=True)
    transfer_id = Column(String(100), nullable=True)
    notes = Column(Text, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    item = relationship("Item", back_populates="payout")
    vendor = relationship("Vendor")

    __table_args__ = (
        UniqueConstraint("item_id", name="uq_payout_item"),
    )


class Expense(Base):
    __tablename__ = "expenses"

    id = Column(String(36), primary_key=True, default=_new_id)
    item_id = Column(String(36), ForeignKey("items.id"), nullable=True, index=True)
    expense_type = Column(String(50), nullable=False)
    amount = Column(Numeric(12, 2), nullable=False)
    incurred_at = Column(DateTime, nullable=False)
    notes = Column(Text, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    item = relationship("Item", back_populates="expenses")


class InstallmentPlan(Base):
    __tablename__ = "installment_plans"

    id = Column(String(36), primary_key=True, default=_new_id)
    item_id = Column(String(36), ForeignKey("items.id"), nullable=False)
    client_id = Column(String(36), ForeignKey("clients.id"), nullable=False)
    amount = Column(Numeric(12, 2), nullable=False)
    due_date = Column(Date, nullable=False)
    paid_amount = Column(Numeric(12, 2), nullable=False, default=0)
    status = Column(
        Enum("pending", "paid", name="installment_status"),
        nullable=False,
        default="pending",
    )
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    item = relationship("Item")
    client = relationship("Client")
