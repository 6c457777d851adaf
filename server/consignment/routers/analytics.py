"""Report API endpoints.

KPI report, time series, grouped metrics, item profitability, inventory
health, payment method breakdown and the financial health score. List
filters are comma-separated query parameters.
"""

from __future__ import annotations

from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from consignment.analytics.filters import ReportFilters, split_csv
from consignment.analytics.health import get_financial_health_score
from consignment.analytics.inventory import build_inventory_health
from consignment.analytics.kpis import build_kpi_report
from consignment.analytics.reports import (
    DEFAULT_PAGE_SIZE,
    build_grouped_metrics,
    build_item_profitability,
    build_payment_method_breakdown,
    build_time_series,
)
from consignment.analytics.schemas import (
    FinancialHealthResponse,
    GroupedMetricRow,
    InventoryHealthResponse,
    ItemProfitabilityResponse,
    KpiReportResponse,
    PaymentMethodRow,
    TimeSeriesPoint,
)
from consignment.db import get_db

router = APIRouter(prefix="/api/reports", tags=["reports"])
health_router = APIRouter(prefix="/api", tags=["reports"])


def report_filters(
    vendor_ids: Optional[str] = Query(None, alias="vendorIds"),
    client_ids: Optional[str] = Query(None, alias="clientIds"),
    brand_ids: Optional[str] = Query(None, alias="brandIds"),
    category_ids: Optional[str] = Query(None, alias="categoryIds"),
    item_statuses: Optional[str] = Query(None, alias="itemStatuses"),
) -> ReportFilters:
    try:
        return ReportFilters.build(
            vendor_ids=split_csv(vendor_ids),
            client_ids=split_csv(client_ids),
            brand_ids=split_csv(brand_ids),
            category_ids=split_csv(category_ids),
            item_statuses=split_csv(item_statuses),
        )
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc))


# ---------------------------------------------------------------------------
# KPI report
# ---------------------------------------------------------------------------


@router.get("/kpis", response_model=KpiReportResponse)
def kpi_report(
    start_date: str = Query(..., alias="startDate"),
    end_date: str = Query(..., alias="endDate"),
    filters: ReportFilters = Depends(report_filters),
    db: Session = Depends(get_db),
):
    try:
        return build_kpi_report(db, start_date, end_date, filters)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc))


# ---------------------------------------------------------------------------
# Time series / grouped metrics
# ---------------------------------------------------------------------------


@router.get("/timeseries", response_model=List[TimeSeriesPoint])
def time_series(
    metric: str = Query(...),
    granularity: str = Query("month"),
    start_date: str = Query(..., alias="startDate"),
    end_date: str = Query(..., alias="endDate"),
    filters: ReportFilters = Depends(report_filters),
    db: Session = Depends(get_db),
):
    try:
        return build_time_series(db, metric, granularity, start_date, end_date, filters)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc))


@router.get("/grouped", response_model=List[GroupedMetricRow], response_model_exclude_none=True)
def grouped_metrics(
    group_by: str = Query(..., alias="groupBy"),
    metrics: str = Query("revenue"),
    start_date: str = Query(..., alias="startDate"),
    end_date: str = Query(..., alias="endDate"),
    filters: ReportFilters = Depends(report_filters),
    db: Session = Depends(get_db),
):
    try:
        return build_grouped_metrics(db, group_by, split_csv(metrics), start_date, end_date, filters)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc))


# ---------------------------------------------------------------------------
# Items / inventory / payment methods
# ---------------------------------------------------------------------------


@router.get("/items", response_model=ItemProfitabilityResponse)
def item_profitability(
    start_date: str = Query(..., alias="startDate"),
    end_date: str = Query(..., alias="endDate"),
    limit: int = Query(DEFAULT_PAGE_SIZE),
    offset: int = Query(0),
    filters: ReportFilters = Depends(report_filters),
    db: Session = Depends(get_db),
):
    try:
        return build_item_profitability(db, start_date, end_date, filters, limit=limit, offset=offset)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc))


@router.get("/inventory", response_model=InventoryHealthResponse)
def inventory_health(
    filters: ReportFilters = Depends(report_filters),
    db: Session = Depends(get_db),
):
    return build_inventory_health(db, filters)


@router.get("/payment-methods", response_model=List[PaymentMethodRow])
def payment_methods(
    start_date: str = Query(..., alias="startDate"),
    end_date: str = Query(..., alias="endDate"),
    filters: ReportFilters = Depends(report_filters),
    db: Session = Depends(get_db),
):
    try:
        return build_payment_method_breakdown(db, start_date, end_date, filters)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc))


# ---------------------------------------------------------------------------
# Financial health
# ---------------------------------------------------------------------------


@health_router.get("/financial-health", response_model=FinancialHealthResponse)
def financial_health(db: Session = Depends(get_db)):
    return get_financial_health_score(db)
