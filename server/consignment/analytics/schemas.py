"""Pydantic schemas for report API responses."""

from __future__ import annotations

from datetime import date
from decimal import Decimal
from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, condecimal

DecimalValue = condecimal(max_digits=14, decimal_places=2)


# ---------------------------------------------------------------------------
# KPI report
# ---------------------------------------------------------------------------


class KpiReportResponse(BaseModel):
    start_date: date
    end_date: date
    revenue: DecimalValue
    cogs: DecimalValue
    gross_profit: DecimalValue
    gross_margin: Decimal
    total_expenses: DecimalValue
    net_profit: DecimalValue
    net_margin: Decimal
    items_sold: int
    payment_count: int
    unique_clients: int
    average_order_value: DecimalValue
    average_days_to_sell: Decimal
    inventory_turnover: Decimal
    revenue_change: Decimal
    profit_change: Decimal
    top_performing_brand: str
    top_performing_vendor: str
    pending_installments: int
    overdue_installments: int


# ---------------------------------------------------------------------------
# Time series / grouped metrics
# ---------------------------------------------------------------------------


class TimeSeriesPoint(BaseModel):
    period: str
    value: Decimal
    count: int = 0


class GroupedMetricRow(BaseModel):
    group_id: Optional[str] = None
    group_name: str
    item_count: int
    profit_margin: Decimal
    change: Decimal
    revenue: Optional[DecimalValue] = None
    profit: Optional[DecimalValue] = None
    items_sold: Optional[int] = None
    avg_order_value: Optional[DecimalValue] = None


# ---------------------------------------------------------------------------
# Item profitability
# ---------------------------------------------------------------------------


class ItemProfitabilityRow(BaseModel):
    item_id: str
    title: str
    model: str
    brand: str
    vendor: str
    status: Optional[str] = None
    acquisition_date: Optional[date] = None
    revenue: DecimalValue
    cost: DecimalValue
    profit: DecimalValue
    margin: Decimal
    sold_date: Optional[date] = None
    days_to_sell: Optional[int] = None

    model_config = ConfigDict(from_attributes=True)


class ItemProfitabilityResponse(BaseModel):
    items: List[ItemProfitabilityRow]
    total_count: int
    limit: int
    offset: int
    has_more: bool


# ---------------------------------------------------------------------------
# Inventory health
# ---------------------------------------------------------------------------


class CategoryBreakdown(BaseModel):
    category_id: Optional[str] = None
    category_name: str
    item_count: int
    total_value: DecimalValue
    average_age: Decimal


class AgingAnalysis(BaseModel):
    under_30_days: int
    days_30_to_90: int
    days_91_to_180: int
    over_180_days: int


class InventoryHealthResponse(BaseModel):
    total_items: int
    in_store_items: int
    reserved_items: int
    sold_items: int
    returned_items: int
    total_value: DecimalValue
    average_age: Decimal
    slow_moving_items: int
    fast_moving_items: int
    categories_breakdown: List[CategoryBreakdown]
    aging_analysis: AgingAnalysis


# ---------------------------------------------------------------------------
# Payment methods / financial health
# ---------------------------------------------------------------------------


class PaymentMethodRow(BaseModel):
    method: str
    total: DecimalValue
    count: int
    percentage: Decimal
    average: DecimalValue


class HealthFactors(BaseModel):
    payment_timeliness: Decimal
    cash_flow: Decimal
    inventory_turnover: Decimal
    profit_margin: Decimal
    client_retention: Decimal


class FinancialHealthResponse(BaseModel):
    as_of: date
    score: int
    grade: str
    factors: HealthFactors
    raw_profit_margin: Decimal
    weights: Dict[str, int]
    recommendations: List[str]
