from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from consignment.db import get_db
from consignment.errors import NotFoundError
from consignment.ledger import schemas
from consignment.ledger.service import delete_payment, record_payment, update_payment
from consignment.models import Payment

router = APIRouter(prefix="/api/payments", tags=["payments"])


def _payment_response(payment: Payment) -> schemas.PaymentResponse:
    return schemas.PaymentResponse(
        id=payment.id,
        item_id=payment.item_id,
        client_id=payment.client_id,
        method=payment.method,
        amount=payment.amount,
        paid_at=payment.paid_at,
        item_status=payment.item.status,
    )


@router.post("", response_model=schemas.PaymentResponse, status_code=status.HTTP_201_CREATED)
def create_payment_endpoint(payload: schemas.PaymentCreate, db: Session = Depends(get_db)):
    try:
        payment = record_payment(db, payload.model_dump())
    except NotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc))
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc))
    db.commit()
    db.refresh(payment)
    return _payment_response(payment)


@router.put("/{payment_id}", response_model=schemas.PaymentResponse)
def update_payment_endpoint(payment_id: str, payload: schemas.PaymentUpdate, db: Session = Depends(get_db)):
    try:
        payment = update_payment(db, payment_id, payload.model_dump(exclude_unset=True))
    except NotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc))
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc))
    db.commit()
    db.refresh(payment)
    return _payment_response(payment)


@router.delete("/{payment_id}", response_model=schemas.PaymentDeleteResponse)
def delete_payment_endpoint(payment_id: str, db: Session = Depends(get_db)):
    try:
        item = delete_payment(db, payment_id)
    except NotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc))
    db.commit()
    return schemas.PaymentDeleteResponse(id=payment_id, item_id=item.id, item_status=item.status)
