from typing import List

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from consignment.db import get_db
from consignment.errors import ConflictError, NotFoundError
from consignment.ledger.service import create_payout
from consignment.payouts import schemas
from consignment.payouts.formula import reconcile_payout
from consignment.payouts.service import get_payout_metrics, list_upcoming_payouts
from consignment.utils.money import MoneyRange

router = APIRouter(prefix="/api/payouts", tags=["payouts"])


@router.get("/upcoming", response_model=List[schemas.UpcomingPayoutResponse])
def upcoming_payouts(db: Session = Depends(get_db)):
    return list_upcoming_payouts(db)


@router.get("/metrics", response_model=schemas.PayoutMetricsResponse)
def payout_metrics(db: Session = Depends(get_db)):
    return get_payout_metrics(db)


@router.post("/quote", response_model=schemas.PayoutQuoteResponse)
def quote_payout_endpoint(payload: schemas.PayoutQuoteRequest):
    cost = MoneyRange.from_bounds(payload.min_cost, payload.max_cost)
    price = MoneyRange.from_bounds(payload.min_sales_price, payload.max_sales_price)
    return reconcile_payout(cost, price, payload.collected)


@router.post("", response_model=schemas.PayoutResponse, status_code=status.HTTP_201_CREATED)
def create_payout_endpoint(payload: schemas.PayoutCreate, db: Session = Depends(get_db)):
    try:
        payout = create_payout(db, payload.model_dump())
    except NotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc))
    except ConflictError as exc:
        raise HTTPException(status_code=409, detail=str(exc))
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc))
    db.commit()
    db.refresh(payout)
    return payout
