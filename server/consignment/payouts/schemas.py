from datetime import datetime
from decimal import Decimal
from typing import Dict, Optional

from pydantic import BaseModel, ConfigDict, Field, condecimal


DecimalValue = condecimal(max_digits=14, decimal_places=2)


class PayoutQuoteRequest(BaseModel):
    min_cost: Optional[DecimalValue] = None
    max_cost: Optional[DecimalValue] = None
    min_sales_price: Optional[DecimalValue] = None
    max_sales_price: Optional[DecimalValue] = None
    collected: DecimalValue = Field(..., ge=0)


class PayoutQuoteResponse(BaseModel):
    adjustment_factor: Decimal
    payout_amount: DecimalValue
    legacy_cost_range: Dict[str, DecimalValue]
    legacy_flat_share: DecimalValue
    delta_vs_flat_share: DecimalValue
    delta_vs_max_cost: DecimalValue
    delta_vs_min_cost: DecimalValue


class PayoutCreate(BaseModel):
    item_id: str
    vendor_id: Optional[str] = None
    amount: Optional[DecimalValue] = None
    paid_at: Optional[datetime] = None
    bank_account: Optional[str] = Field(None, max_length=100)
    transfer_id: Optional[str] = Field(None, max_length=100)
    notes: Optional[str] = None


class PayoutResponse(BaseModel):
    id: str
    item_id: str
    vendor_id: str
    amount: DecimalValue
    paid_at: datetime
    bank_account: Optional[str] = None
    transfer_id: Optional[str] = None
    notes: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)


class UpcomingPayoutResponse(BaseModel):
    item_id: str
    title: str
    model: str
    brand: str
    vendor_id: str
    vendor_name: Optional[str] = None
    min_cost: DecimalValue
    max_cost: DecimalValue
    max_sales_price: DecimalValue
    collected: DecimalValue
    adjustment_factor: Decimal
    payout_amount: DecimalValue
    payment_progress: Decimal
    first_payment_at: Optional[datetime] = None
    last_payment_at: Optional[datetime] = None


class PayoutMetricsResponse(BaseModel):
    total_payouts_count: int
    total_payouts_amount: DecimalValue
    average_payout_amount: DecimalValue
    pending_payouts_count: int
    pending_payouts_amount: DecimalValue
    monthly_payout_trend: Decimal
