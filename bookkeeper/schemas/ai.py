from decimal import Decimal
from pydantic import BaseModel, Field
from typing import List, Optional
from datetime import date

DateType = date


class ExpenseData(BaseModel):
    amount: Decimal = Decimal("0")
    category: Optional[str] = None
    date: Optional[DateType] = None


class SaleData(BaseModel):
    amount: Decimal = Decimal("0")
    date: Optional[DateType] = None


class CategoryData(BaseModel):
    name: str


class AppData(BaseModel):
    expenses: List[ExpenseData] = Field(default_factory=list)
    sales: List[SaleData] = Field(default_factory=list)
    categories: List[CategoryData] = Field(default_factory=list)


class ChatRequest(BaseModel):
    message: str = Field(..., min_length=1)
    app_data: Optional[AppData] = None
    context: Optional[str] = None


class ChatResponse(BaseModel):
    response: str
