from datetime import date, datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, condecimal


DecimalValue = condecimal(max_digits=14, decimal_places=2)


class PaymentCreate(BaseModel):
    item_id: str
    client_id: str
    method: str = Field(..., max_length=50)
    amount: DecimalValue
    paid_at: Optional[datetime] = None


class PaymentUpdate(BaseModel):
    method: Optional[str] = Field(None, max_length=50)
    amount: Optional[DecimalValue] = None
    paid_at: Optional[datetime] = None


class PaymentResponse(BaseModel):
    id: str
    item_id: str
    client_id: str
    method: str
    amount: DecimalValue
    paid_at: datetime
    item_status: str

    model_config = ConfigDict(from_attributes=True)


class PaymentDeleteResponse(BaseModel):
    id: str
    item_id: str
    item_status: str


class InstallmentMarkPaid(BaseModel):
    paid_amount: Optional[DecimalValue] = None


class InstallmentResponse(BaseModel):
    id: str
    item_id: str
    client_id: str
    amount: DecimalValue
    paid_amount: DecimalValue
    due_date: date
    status: str

    model_config = ConfigDict(from_attributes=True)
