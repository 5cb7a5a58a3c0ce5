from pydantic import BaseModel, Field
from typing import List, Optional
from datetime import datetime
from decimal import Decimal


class CustomerBase(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    contact: str = Field(..., min_length=1, max_length=50)


class CustomerCreate(CustomerBase):
    credit: Decimal = Field(..., ge=0)


class CustomerUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    contact: Optional[str] = Field(None, min_length=1, max_length=50)
    credit: Optional[Decimal] = Field(None, ge=0)


class CustomerResponse(CustomerBase):
    id: str
    credit: Decimal
    join_date: Optional[datetime] = None
    last_purchase: Optional[datetime] = None
    sales_count: int = 0
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class CustomerDetailResponse(CustomerResponse):
    sales: List[dict] = []
    payments: List[dict] = []


class CustomerListResponse(BaseModel):
    total: int
    customers: list[CustomerResponse]


class CreditAdjustRequest(BaseModel):
    customer_id: str
    amount: Decimal


class PaymentCreate(BaseModel):
    amount_received: Decimal = Field(default=Decimal("0"), ge=0)
    other_amount: Decimal = Field(default=Decimal("0"), ge=0)
    description: Optional[str] = None
    date: Optional[datetime] = None
    payment_method: Optional[str] = "cash"


class PaymentRecord(BaseModel):
    id: str
    amount_received: Decimal
    other_amount: Decimal
    total_amount: Decimal
    description: Optional[str] = None
    payment_method: Optional[str] = None
    date: datetime


class PaymentListResponse(BaseModel):
    total: int
    page: int
    total_pages: int
    payments: List[PaymentRecord]


class ReconcileResponse(BaseModel):
    message: str
    corrected: int
