from decimal import Decimal
from pydantic import BaseModel, Field
from typing import List, Optional
from datetime import date, datetime
from bookkeeper.models.ledger import LedgerKind

# Alias to avoid field name 'date' shadowing type 'date' in annotations (Pydantic v2)
DateType = date


class LedgerTypeCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)


class LedgerTypeUpdate(LedgerTypeCreate):
    pass


class LedgerEntryCreate(BaseModel):
    """Entry create/update - date defaults to today on server if not provided."""
    type_id: str = Field(..., min_length=1)
    date: Optional[DateType] = None
    amount: Decimal
    # Income entries only
    is_from_savings: bool = False
    savings_type_id: Optional[str] = None


class LedgerEntryUpdate(LedgerEntryCreate):
    pass


class LedgerEntryResponse(BaseModel):
    id: str
    kind: LedgerKind
    type_id: str
    type_name: Optional[str] = None
    date: DateType
    amount: Decimal
    is_from_savings: bool = False
    savings_type_id: Optional[str] = None
    savings_type_name: Optional[str] = None
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class LedgerTypeEntryRef(BaseModel):
    id: str
    date: DateType
    amount: Decimal
    type_id: str

    class Config:
        from_attributes = True


class LedgerTypeResponse(BaseModel):
    id: str
    kind: LedgerKind
    name: str
    total_amount: Decimal
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class LedgerTypeDetailResponse(LedgerTypeResponse):
    entries: List[LedgerTypeEntryRef] = []


class LedgerTypeListResponse(BaseModel):
    total: int
    total_amount: Decimal
    types: List[LedgerTypeDetailResponse]


class LedgerEntryListResponse(BaseModel):
    total: int
    total_amount: Decimal
    entries: List[LedgerEntryResponse]
