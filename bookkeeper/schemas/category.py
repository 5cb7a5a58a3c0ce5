from pydantic import BaseModel, Field
from typing import List, Optional
from datetime import datetime


class CategoryBase(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)


class CategoryCreate(CategoryBase):
    subcategories: List[str] = Field(default_factory=list)


class CategoryUpdate(CategoryBase):
    subcategories: Optional[List[str]] = None


class SubcategoryRequest(BaseModel):
    subcategory: str = Field(..., min_length=1, max_length=100)


class SubcategoryResponse(BaseModel):
    id: str
    name: str
    position: int

    class Config:
        from_attributes = True


class CategoryResponse(CategoryBase):
    id: str
    name: str
    subcategories: List[SubcategoryResponse] = []
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class CategoryListResponse(BaseModel):
    total: int
    categories: list[CategoryResponse]


class CategoryMessageResponse(BaseModel):
    message: str
    category: Optional[CategoryResponse] = None
