from datetime import date
from decimal import Decimal
from typing import List, Optional, Tuple

from sqlalchemy import func, or_
from sqlalchemy.orm import Session

from bookkeeper.logger_config import logger
from bookkeeper.models.expense import Expense


def _today() -> date:
    return date.today()


def get_expense_by_id(db: Session, expense_id: str, owner_id: int) -> Optional[Expense]:
    return (
        db.query(Expense)
        .filter(Expense.id == expense_id, Expense.owner_id == owner_id)
        .first()
    )


def create_expense(
    db: Session,
    owner_id: int,
    amount: Decimal,
    category: str,
    subcategory: str,
    description: Optional[str] = None,
    photo: Optional[str] = None,
    expense_date: Optional[date] = None,
) -> Expense:
    """Create a single expense; date defaults to today."""
    if not amount or not category or not subcategory:
        raise ValueError("Missing required fields.")

    expense = Expense(
        date=expense_date or _today(),
        amount=amount,
        category=category,
        subcategory=subcategory,
        description=description,
        photo=photo,
        owner_id=owner_id,
    )
    db.add(expense)
    try:
        db.commit()
        db.refresh(expense)
        return expense
    except Exception as e:
        db.rollback()
        logger.exception("Error creating expense")
        raise ValueError("Failed to add expense.") from e


def get_all_expenses(
    db: Session,
    owner_id: int,
    skip: int = 0,
    limit: int = 50,
    category: Optional[str] = None,
    subcategory: Optional[str] = None,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    search: Optional[str] = None,
) -> Tuple[List[Expense], int, Decimal]:
    """List expenses with filters: category, subcategory, date range, search. Returns (rows, total_count, total_amount)."""
    query = db.query(Expense).filter(Expense.owner_id == owner_id)
    if category:
        query = query.filter(Expense.category == category)
    if subcategory:
        query = query.filter(Expense.subcategory == subcategory)
    if start_date is not None:
        query = query.filter(Expense.date >= start_date)
    if end_date is not None:
        query = query.filter(Expense.date <= end_date)
    if search and search.strip():
        term = f"%{search.strip()}%"
        query = query.filter(
            or_(
                Expense.description.ilike(term),
                Expense.category.ilike(term),
                Expense.subcategory.ilike(term),
            )
        )

    total_count = query.count()
    total_row = query.with_entities(func.coalesce(func.sum(Expense.amount), 0)).first()
    total_amount = Decimal(str(total_row[0])) if total_row else Decimal("0")

    rows = (
        query.order_by(Expense.date.desc(), Expense.created_at.desc())
        .offset(skip)
        .limit(limit)
        .all()
    )
    return rows, total_count, total_amount


def update_expense(db: Session, owner_id: int, expense_id: str, **fields) -> Optional[Expense]:
    """Update expense fields that are not None."""
    expense = get_expense_by_id(db, expense_id, owner_id)
    if not expense:
        return None

    for key in ("date", "amount", "category", "subcategory", "description", "photo"):
        value = fields.get(key)
        if value is not None:
            setattr(expense, key, value)

    try:
        db.commit()
        db.refresh(expense)
        return expense
    except Exception as e:
        db.rollback()
        logger.exception("Error updating expense")
        raise ValueError("Failed to update expense.") from e


def delete_expense(db: Session, owner_id: int, expense_id: str) -> bool:
    expense = get_expense_by_id(db, expense_id, owner_id)
    if not expense:
        return False
    db.delete(expense)
    try:
        db.commit()
        return True
    except Exception as e:
        db.rollback()
        logger.exception("Error deleting expense")
        raise ValueError("Failed to delete expense.") from e
