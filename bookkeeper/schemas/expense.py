from decimal import Decimal
from pydantic import BaseModel, Field
from typing import List, Optional
from datetime import date, datetime

# Alias to avoid field name 'date' shadowing type 'date' in annotations (Pydantic v2)
DateType = date


class ExpenseCreate(BaseModel):
    """Single expense create - date defaults to today on server if not provided."""
    date: Optional[DateType] = None  # default to today in service
    amount: Decimal = Field(..., gt=0)
    category: str = Field(..., min_length=1, max_length=100)
    subcategory: str = Field(..., min_length=1, max_length=100)
    description: Optional[str] = None
    photo: Optional[str] = Field(None, max_length=500)


class ExpenseUpdate(BaseModel):
    date: Optional[DateType] = None
    amount: Optional[Decimal] = Field(None, gt=0)
    category: Optional[str] = Field(None, min_length=1, max_length=100)
    subcategory: Optional[str] = Field(None, min_length=1, max_length=100)
    description: Optional[str] = None
    photo: Optional[str] = Field(None, max_length=500)


class ExpenseResponse(BaseModel):
    id: str
    date: DateType
    amount: Decimal
    category: str
    subcategory: str
    description: Optional[str] = None
    photo: Optional[str] = None
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class ExpenseListResponse(BaseModel):
    total: int
    total_amount: Decimal
    expenses: List[ExpenseResponse]


class ExpenseDeleteResponse(BaseModel):
    message: str
