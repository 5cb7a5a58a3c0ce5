from decimal import Decimal
from pydantic import BaseModel, Field
from typing import List, Optional
from datetime import datetime
from bookkeeper.models.vendor import PurchaseUnit


class VendorCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    contact: str = Field(..., min_length=1, max_length=50)
    credit: Decimal = Decimal("0")
    items: List[str] = Field(default_factory=list)


class VendorUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    contact: Optional[str] = Field(None, min_length=1, max_length=50)
    credit: Optional[Decimal] = None
    items: Optional[List[str]] = None


class VendorResponse(BaseModel):
    id: str
    name: str
    contact: str
    credit: Decimal
    items: List[str] = []
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class VendorListResponse(BaseModel):
    total: int
    vendors: List[VendorResponse]


class PurchaseCreate(BaseModel):
    item: str = Field(..., min_length=1, max_length=255)
    vendor_id: str = Field(..., min_length=1)
    vendor_name: Optional[str] = None
    quantity: Decimal = Field(..., gt=0)
    unit: PurchaseUnit
    price_per_unit: Decimal = Field(..., gt=0)
    total_price: Optional[Decimal] = Field(None, ge=0)
    amount_paid: Decimal = Field(default=Decimal("0"), ge=0)
    updated_credit: Optional[Decimal] = None
    date: Optional[datetime] = None


class PurchaseUpdate(BaseModel):
    item: Optional[str] = Field(None, min_length=1, max_length=255)
    vendor_id: Optional[str] = None
    vendor_name: Optional[str] = None
    quantity: Optional[Decimal] = Field(None, gt=0)
    unit: Optional[PurchaseUnit] = None
    price_per_unit: Optional[Decimal] = Field(None, gt=0)
    total_price: Optional[Decimal] = Field(None, ge=0)
    amount_paid: Optional[Decimal] = Field(None, ge=0)
    updated_credit: Optional[Decimal] = None
    date: Optional[datetime] = None


class PurchaseResponse(BaseModel):
    id: str
    item: str
    vendor_id: Optional[str] = None
    vendor_name: str
    quantity: Decimal
    unit: PurchaseUnit
    price_per_unit: Decimal
    total_price: Decimal
    amount_paid: Decimal
    updated_credit: Decimal
    date: datetime

    class Config:
        from_attributes = True


class PurchaseListResponse(BaseModel):
    total: int
    total_amount: Decimal
    purchases: List[PurchaseResponse]
