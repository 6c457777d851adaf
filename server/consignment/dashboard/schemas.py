from datetime import date
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, ConfigDict, condecimal


DecimalValue = condecimal(max_digits=14, decimal_places=2)


class MoneyRangeResponse(BaseModel):
    min: DecimalValue
    max: DecimalValue


class DashboardMetricsResponse(BaseModel):
    total_revenue: DecimalValue
    active_items: int
    pending_payouts: MoneyRangeResponse
    net_profit: MoneyRangeResponse
    incoming_payments: DecimalValue
    upcoming_payouts: DecimalValue
    cost_range: MoneyRangeResponse
    inventory_value_range: MoneyRangeResponse


class PaymentMetricsResponse(BaseModel):
    total_payments_count: int
    total_payments_amount: DecimalValue
    average_payment_amount: DecimalValue
    overdue_installments: int
    upcoming_installments: int
    monthly_payment_trend: Decimal


class OverdueInstallmentResponse(BaseModel):
    id: str
    item_id: str
    item_title: Optional[str] = None
    client_id: str
    client_name: Optional[str] = None
    amount: DecimalValue
    paid_amount: DecimalValue
    remaining_amount: DecimalValue
    due_date: date
    days_overdue: int

    model_config = ConfigDict(from_attributes=True)
