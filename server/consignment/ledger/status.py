from decimal import Decimal
from typing import Optional

from consignment.utils.money import MoneyRange

IN_STORE = "in-store"
RESERVED = "reserved"
SOLD = "sold"
RETURNED = "returned-to-vendor"

ITEM_STATUSES = (IN_STORE, RESERVED, SOLD, RETURNED)
CURRENT_STOCK_STATUSES = (IN_STORE, RESERVED)

INSTALLMENT_PENDING = "pending"
INSTALLMENT_PAID = "paid"


def derive_item_status(price: MoneyRange, total_paid: Decimal) -> str:
    """Map an item's total collected amount to its lifecycle status.

    The reference price is the max sales price, falling back to the min.
    With no usable price any positive payment settles the item.
    """
    if total_paid <= 0:
        return IN_STORE
    reference_price = price.preferred
    if reference_price <= 0 or total_paid >= reference_price:
        return SOLD
    return RESERVED


def next_item_status(current: Optional[str], price: MoneyRange, total_paid: Decimal) -> str:
    if current == RETURNED:
        return RETURNED
    return derive_item_status(price, total_paid)
