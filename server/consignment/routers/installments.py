from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from consignment.dashboard.schemas import OverdueInstallmentResponse
from consignment.dashboard.service import list_overdue_installments
from consignment.db import get_db
from consignment.errors import NotFoundError
from consignment.ledger.schemas import InstallmentMarkPaid, InstallmentResponse
from consignment.ledger.service import mark_installment_paid

router = APIRouter(prefix="/api/installments", tags=["installments"])


@router.get("/overdue", response_model=List[OverdueInstallmentResponse])
def overdue_installments(db: Session = Depends(get_db)):
    return list_overdue_installments(db)


@router.post("/{installment_id}/mark-paid", response_model=InstallmentResponse)
def mark_paid(
    installment_id: str,
    payload: Optional[InstallmentMarkPaid] = None,
    db: Session = Depends(get_db),
):
    paid_amount = payload.paid_amount if payload else None
    try:
        plan = mark_installment_paid(db, installment_id, paid_amount)
    except NotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc))
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc))
    db.commit()
    db.refresh(plan)
    return plan
