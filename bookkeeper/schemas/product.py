from decimal import Decimal
from pydantic import BaseModel, Field
from typing import List, Optional
from datetime import datetime


class ProductBase(BaseModel):
    product_name: str = Field(..., min_length=1, max_length=255)
    price_per_pack: Decimal = Field(default=Decimal("0"), ge=0)
    kgs_per_pack: Decimal = Field(default=Decimal("0"), ge=0)
    price_per_kg: Decimal = Field(default=Decimal("0"), ge=0)


class ProductCreate(ProductBase):
    pass


class ProductUpdate(BaseModel):
    product_name: Optional[str] = Field(None, min_length=1, max_length=255)
    price_per_pack: Optional[Decimal] = Field(None, ge=0)
    kgs_per_pack: Optional[Decimal] = Field(None, ge=0)
    price_per_kg: Optional[Decimal] = Field(None, ge=0)


class ProductResponse(ProductBase):
    id: str
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class ProductListResponse(BaseModel):
    total: int
    products: List[ProductResponse]


class PriceUpdateRequest(BaseModel):
    product_id: str
    new_price_per_pack: Decimal = Field(..., gt=0)
    new_price_per_kg: Decimal = Field(..., gt=0)
    reason: Optional[str] = None


class PriceHistoryResponse(BaseModel):
    id: str
    product_id: str
    old_price_per_pack: Decimal
    new_price_per_pack: Decimal
    old_price_per_kg: Decimal
    new_price_per_kg: Decimal
    updated_by_id: Optional[int] = None
    reason: str
    update_date: Optional[datetime] = None

    class Config:
        from_attributes = True


class PriceUpdateResponse(BaseModel):
    message: str
    product: ProductResponse
    price_history: PriceHistoryResponse
