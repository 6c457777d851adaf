"""Ledger writes that keep item status and payouts consistent.

Each write only flushes; the caller commits, so the ledger row and the
derived item status land in the same transaction or not at all.
"""

from __future__ import annotations

import logging
from datetime import date, datetime
from decimal import Decimal
from typing import Optional

from sqlalchemy import func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from consignment.errors import ConflictError, NotFoundError
from consignment.ledger.status import INSTALLMENT_PAID, INSTALLMENT_PENDING, RETURNED, SOLD, next_item_status
from consignment.models import Client, InstallmentPlan, Item, Payment, Payout
from consignment.payouts.formula import payout_amount
from consignment.utils.money import quantize_money, to_decimal

logger = logging.getLogger(__name__)


def _as_datetime(value: date | datetime | None) -> datetime:
    if value is None:
        return datetime.utcnow()
    if isinstance(value, datetime):
        return value
    return datetime(value.year, value.month, value.day)


def _validate_amount(amount) -> Decimal:
    amount = to_decimal(amount)
    if amount <= 0:
        raise ValueError("Payment amount must be greater than 0.")
    return amount


def get_item_total_paid(db: Session, item_id: str) -> Decimal:
    total = (
        db.query(func.coalesce(func.sum(Payment.amount), 0))
        .filter(Payment.item_id == item_id)
        .scalar()
    )
    return to_decimal(total)


def apply_item_status(db: Session, item: Item) -> str:
    """Recompute the item's total paid and persist the derived status."""
    total_paid = get_item_total_paid(db, item.id)
    previous = item.status
    item.status = next_item_status(previous, item.price_range, total_paid)
    if item.status != previous:
        logger.info(
            "Item status changed item_id=%s %s -> %s total_paid=%s",
            item.id,
            previous,
            item.status,
            total_paid,
        )
    return item.status


def _get_item(db: Session, item_id: str) -> Item:
    item = db.query(Item).filter(Item.id == item_id).first()
    if not item:
        raise NotFoundError("Item", item_id)
    return item


def record_payment(db: Session, payload: dict) -> Payment:
    item = _get_item(db, payload["item_id"])
    if item.status == RETURNED:
        raise ValueError("Cannot record payment for an item returned to its vendor.")
    client = db.query(Client).filter(Client.id == payload["client_id"]).first()
    if not client:
        raise NotFoundError("Client", payload["client_id"])
    amount = _validate_amount(payload["amount"])

    payment = Payment(
        item_id=item.id,
        client_id=client.id,
        method=payload["method"],
        amount=amount,
        paid_at=_as_datetime(payload.get("paid_at")),
    )
    db.add(payment)
    db.flush()
    apply_item_status(db, item)
    logger.info("Recorded payment payment_id=%s item_id=%s amount=%s", payment.id, item.id, amount)
    return payment


def update_payment(db: Session, payment_id: str, changes: dict) -> Payment:
    payment = db.query(Payment).filter(Payment.id == payment_id).first()
    if not payment:
        raise NotFoundError("Payment", payment_id)
    if changes.get("amount") is not None:
        payment.amount = _validate_amount(changes["amount"])
    if changes.get("method") is not None:
        payment.method = changes["method"]
    if changes.get("paid_at") is not None:
        payment.paid_at = _as_datetime(changes["paid_at"])
    db.flush()
    apply_item_status(db, payment.item)
    return payment


def delete_payment(db: Session, payment_id: str) -> Item:
    payment = db.query(Payment).filter(Payment.id == payment_id).first()
    if not payment:
        raise NotFoundError("Payment", payment_id)
    item = payment.item
    db.delete(payment)
    db.flush()
    apply_item_status(db, item)
    logger.info("Deleted payment payment_id=%s item_id=%s", payment_id, item.id)
    return item


def create_payout(db: Session, payload: dict) -> Payout:
    """Pay the vendor for a sold item, at most once per item.

    The item must be sold and not yet paid out; ``payouts.item_id`` is unique
    so a concurrent second payout fails at flush time as well.
    """
    item = _get_item(db, payload["item_id"])
    if item.status != SOLD:
        raise ConflictError("Payouts can only be created for sold items.")
    existing = db.query(Payout.id).filter(Payout.item_id == item.id).first()
    if existing:
        raise ConflictError("Item has already been paid out.")

    amount: Optional[Decimal] = payload.get("amount")
    if amount is None:
        collected = get_item_total_paid(db, item.id)
        amount = quantize_money(payout_amount(item.cost_range, item.price_range, collected))
    elif to_decimal(amount) < 0:
        raise ValueError("Payout amount cannot be negative.")

    payout = Payout(
        item_id=item.id,
        vendor_id=payload.get("vendor_id") or item.vendor_id,
        amount=amount,
        paid_at=_as_datetime(payload.get("paid_at")),
        bank_account=payload.get("bank_account"),
        transfer_id=payload.get("transfer_id"),
        notes=payload.get("notes"),
    )
    if payout.vendor_id != item.vendor_id:
        raise ValueError("Payout vendor does not match the item's vendor.")
    db.add(payout)
    try:
        db.flush()
    except IntegrityError as exc:
        db.rollback()
        raise ConflictError("Item has already been paid out.") from exc
    logger.info("Created payout payout_id=%s item_id=%s amount=%s", payout.id, item.id, amount)
    return payout


def mark_installment_paid(db: Session, installment_id: str, paid_amount=None) -> InstallmentPlan:
    plan = db.query(InstallmentPlan).filter(InstallmentPlan.id == installment_id).first()
    if not plan:
        raise NotFoundError("Installment plan", installment_id)
    amount_due = to_decimal(plan.amount)
    if paid_amount is None:
        paid_amount = amount_due - to_decimal(plan.paid_amount)
    paid_amount = to_decimal(paid_amount)
    if paid_amount <= 0:
        raise ValueError("Paid amount must be greater than 0.")
    total_paid = to_decimal(plan.paid_amount) + paid_amount
    plan.paid_amount = total_paid
    plan.status = INSTALLMENT_PAID if total_paid >= amount_due else INSTALLMENT_PENDING
    db.flush()
    return plan
