from datetime import date
from fastapi import APIRouter, Depends, HTTPException, status, Query
from sqlalchemy.orm import Session
from typing import Optional

from bookkeeper.core.dependencies import get_db, get_current_active_user
from bookkeeper.models.user import User
from bookkeeper.schemas.expense import (
    ExpenseCreate,
    ExpenseDeleteResponse,
    ExpenseListResponse,
    ExpenseResponse,
    ExpenseUpdate,
)
from bookkeeper.services.expense_service import (
    create_expense,
    delete_expense,
    get_all_expenses,
    get_expense_by_id,
    update_expense,
)
from bookkeeper.logger_config import logger

router = APIRouter()


@router.post("", response_model=ExpenseResponse, status_code=status.HTTP_201_CREATED)
def create_single_expense(
    data: ExpenseCreate,
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db),
):
    """Create a single expense; date defaults to today if not provided."""
    try:
        expense = create_expense(
            db,
            owner_id=current_user.id,
            amount=data.amount,
            category=data.category,
            subcategory=data.subcategory,
            description=data.description,
            photo=data.photo,
            expense_date=data.date,
        )
        return ExpenseResponse.model_validate(expense)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except Exception as e:
        logger.exception("Error creating expense")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to add expense.",
        )


@router.get("", response_model=ExpenseListResponse)
def list_expenses(
    skip: int = Query(0, ge=0),
    limit: int = Query(50, ge=1, le=500),
    category: Optional[str] = Query(None),
    subcategory: Optional[str] = Query(None),
    start_date: Optional[date] = Query(None),
    end_date: Optional[date] = Query(None),
    search: Optional[str] = Query(None, description="Search description, category or subcategory"),
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db),
):
    """List expenses newest first, with filters. Returns total_count and total_amount."""
    try:
        rows, total, total_amount = get_all_expenses(
            db,
            owner_id=current_user.id,
            skip=skip,
            limit=limit,
            category=category,
            subcategory=subcategory,
            start_date=start_date,
            end_date=end_date,
            search=search,
        )
        return ExpenseListResponse(
            total=total,
            total_amount=total_amount,
            expenses=[ExpenseResponse.model_validate(r) for r in rows],
        )
    except Exception as e:
        logger.exception("Error listing expenses")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to fetch expenses.",
        )


@router.get("/{expense_id}", response_model=ExpenseResponse)
def get_expense(
    expense_id: str,
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db),
):
    expense = get_expense_by_id(db, expense_id, current_user.id)
    if not expense:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Expense not found")
    return ExpenseResponse.model_validate(expense)


@router.put("/{expense_id}", response_model=ExpenseResponse)
def update_single_expense(
    expense_id: str,
    data: ExpenseUpdate,
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db),
):
    try:
        expense = update_expense(db, current_user.id, expense_id, **data.model_dump())
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    if not expense:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Expense not found")
    return ExpenseResponse.model_validate(expense)


@router.delete("/{expense_id}", response_model=ExpenseDeleteResponse)
def delete_single_expense(
    expense_id: str,
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db),
):
    try:
        deleted = delete_expense(db, current_user.id, expense_id)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(e))
    if not deleted:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Expense not found")
    return ExpenseDeleteResponse(message="Expense deleted successfully")
