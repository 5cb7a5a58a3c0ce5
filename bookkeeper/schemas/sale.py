from decimal import Decimal
from pydantic import BaseModel, Field
from typing import List, Optional
from datetime import datetime

from bookkeeper.schemas.customer import CustomerResponse


class SaleProduct(BaseModel):
    product_id: Optional[str] = None
    product_name: Optional[str] = None
    quantity: Decimal = Field(..., gt=0)
    price: Decimal = Field(..., ge=0)


class SaleCreate(BaseModel):
    customer_id: Optional[str] = None
    sale_type: Optional[str] = None
    products: List[SaleProduct] = Field(default_factory=list)
    total_price: Decimal = Field(..., ge=0)
    payment_method: Optional[str] = None
    amount_received: Decimal = Field(default=Decimal("0"), ge=0)
    date: Optional[datetime] = None
    # Client-computed values; the server re-derives last_purchase after writing
    updated_credit: Optional[Decimal] = None
    last_purchase: Optional[datetime] = None


class SaleUpdate(BaseModel):
    sale_type: Optional[str] = None
    products: Optional[List[SaleProduct]] = None
    total_price: Optional[Decimal] = Field(None, ge=0)
    payment_method: Optional[str] = None
    amount_received: Optional[Decimal] = Field(None, ge=0)
    date: Optional[datetime] = None
    updated_credit: Optional[Decimal] = None


class SaleResponse(BaseModel):
    id: str
    customer_id: Optional[str] = None
    customer_name: Optional[str] = None
    sale_type: Optional[str] = None
    products: List[SaleProduct] = []
    total_price: Decimal
    payment_method: Optional[str] = None
    amount_received: Decimal
    date: datetime

    class Config:
        from_attributes = True


class SaleRecordedResponse(BaseModel):
    message: str
    sale: SaleResponse
    customer: Optional[CustomerResponse] = None


class SaleListResponse(BaseModel):
    total: int
    page: int
    total_pages: int
    sales: List[SaleResponse]


class SaleGroupTotal(BaseModel):
    key: Optional[str] = None
    total: Decimal
    count: int


class SaleSummaryResponse(BaseModel):
    total_sales: Decimal
    total_received: Decimal
    count: int
    sales_by_payment_method: List[SaleGroupTotal]
    sales_by_type: List[SaleGroupTotal]
