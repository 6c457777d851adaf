from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from consignment.dashboard.schemas import DashboardMetricsResponse, PaymentMetricsResponse
from consignment.dashboard.service import get_dashboard_metrics, get_payment_metrics
from consignment.db import get_db

router = APIRouter(prefix="/api/dashboard", tags=["dashboard"])


@router.get("/metrics", response_model=DashboardMetricsResponse)
def dashboard_metrics(db: Session = Depends(get_db)):
    return get_dashboard_metrics(db)


@router.get("/payment-metrics", response_model=PaymentMetricsResponse)
def payment_metrics(db: Session = Depends(get_db)):
    return get_payment_metrics(db)
