"""
Ledger service: savings, income, payables and money lent.

Each kind is a pair of a named type and its dated, signed entries. A type's
total_amount is a cached aggregate: after every entry create, update or delete
the owning type (and the previous type, when an entry is moved) is recomputed
by summing all of its entries. Every public mutation commits once, so the entry
write and the recomputed totals land together or not at all.
"""

from datetime import date
from decimal import Decimal
from typing import List, Optional, Tuple

from sqlalchemy import func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, joinedload

from bookkeeper.common.exceptions import InsufficientBalanceError, NotFoundError
from bookkeeper.logger_config import logger
from bookkeeper.models.ledger import LedgerEntry, LedgerKind, LedgerType

KIND_LABELS = {
    LedgerKind.savings: "Savings",
    LedgerKind.income: "Income",
    LedgerKind.payable: "Payable",
    LedgerKind.money_lent: "Money lent",
}

ZERO = Decimal("0")


def _today() -> date:
    return date.today()


def _label(kind: LedgerKind) -> str:
    return KIND_LABELS[kind]


def validate_amount(kind: LedgerKind, amount: Optional[Decimal]) -> Decimal:
    """Savings accept signed amounts (negative = withdrawal); other kinds must be positive."""
    if amount is None:
        raise ValueError("Valid type_id and amount are required")
    if kind == LedgerKind.savings:
        if amount == 0:
            raise ValueError("Valid type_id and amount are required")
    elif amount <= 0:
        raise ValueError("Valid type_id and amount are required")
    return amount


# ==================== AGGREGATION ====================

def sum_entries(db: Session, type_id: str) -> Decimal:
    """Fresh SQL sum over all of a type's entries."""
    db.flush()
    total = (
        db.query(func.coalesce(func.sum(LedgerEntry.amount), 0))
        .filter(LedgerEntry.type_id == type_id)
        .scalar()
    )
    return Decimal(total)


def recompute_total(db: Session, type_id: str) -> Decimal:
    """
    Recompute a type's total_amount from all of its entries and write it back.

    The caller owns the transaction. If the type row is gone the sum is still
    returned and a warning is logged; the entry mutation is not rolled back.
    """
    total = sum_entries(db, type_id)
    ledger_type = db.query(LedgerType).filter(LedgerType.id == type_id).first()
    if ledger_type is None:
        logger.warning(f"Ledger type {type_id} not found while recomputing total ({total})")
        return total

    ledger_type.total_amount = total
    db.flush()
    logger.debug(f"Ledger type {type_id} total recomputed: {total}")
    return total


# ==================== TYPE QUERIES ====================

def get_type_by_id(db: Session, kind: LedgerKind, type_id: str, owner_id: int) -> Optional[LedgerType]:
    """Get a ledger type of the given kind owned by owner_id."""
    return (
        db.query(LedgerType)
        .filter(
            LedgerType.id == type_id,
            LedgerType.kind == kind,
            LedgerType.owner_id == owner_id,
        )
        .first()
    )


def get_type_by_name(db: Session, kind: LedgerKind, owner_id: int, name: str) -> Optional[LedgerType]:
    return (
        db.query(LedgerType)
        .filter(
            LedgerType.name == name,
            LedgerType.kind == kind,
            LedgerType.owner_id == owner_id,
        )
        .first()
    )


def get_all_types(db: Session, kind: LedgerKind, owner_id: int) -> Tuple[List[LedgerType], Decimal]:
    """
    All types of a kind with their entries. Returns (types, grand_total).

    Each total is recomputed from its entries before returning, which also
    repairs any stored total a failed write left stale.
    """
    types = (
        db.query(LedgerType)
        .options(joinedload(LedgerType.entries))
        .filter(LedgerType.kind == kind, LedgerType.owner_id == owner_id)
        .order_by(LedgerType.created_at, LedgerType.name)
        .all()
    )
    for ledger_type in types:
        recompute_total(db, ledger_type.id)

    try:
        db.commit()
    except Exception as e:
        db.rollback()
        logger.exception(f"Error saving recomputed {kind.value} totals")
        raise ValueError(f"Failed to recompute {_label(kind).lower()} totals") from e

    grand_total = sum((Decimal(t.total_amount) for t in types), ZERO)
    return types, grand_total


# ==================== TYPE MUTATIONS ====================

def create_type(db: Session, kind: LedgerKind, owner_id: int, name: str) -> LedgerType:
    """Create a new ledger type with a zero total."""
    name = (name or "").strip()
    if not name:
        raise ValueError("Name is required")

    if get_type_by_name(db, kind, owner_id, name):
        raise ValueError(f"{_label(kind)} type with this name already exists")

    ledger_type = LedgerType(kind=kind, name=name, owner_id=owner_id, total_amount=ZERO)
    db.add(ledger_type)

    try:
        db.commit()
        db.refresh(ledger_type)
        return ledger_type
    except IntegrityError as e:
        db.rollback()
        logger.error(f"Error creating {kind.value} type: {str(e)}")
        raise ValueError(f"Failed to create {_label(kind).lower()} type. Name may already exist.")


def rename_type(db: Session, kind: LedgerKind, owner_id: int, type_id: str, name: str) -> Optional[LedgerType]:
    """Rename a ledger type. Returns None when it does not exist."""
    name = (name or "").strip()
    if not name:
        raise ValueError("Name is required")

    ledger_type = get_type_by_id(db, kind, type_id, owner_id)
    if not ledger_type:
        return None

    existing = get_type_by_name(db, kind, owner_id, name)
    if existing and existing.id != type_id:
        raise ValueError(f"{_label(kind)} type name is already taken")

    ledger_type.name = name

    try:
        db.commit()
        db.refresh(ledger_type)
        return ledger_type
    except IntegrityError as e:
        db.rollback()
        logger.error(f"Error renaming {kind.value} type {type_id}: {str(e)}")
        raise ValueError(f"Failed to update {_label(kind).lower()} type.")


def delete_type(db: Session, kind: LedgerKind, owner_id: int, type_id: str) -> bool:
    """Delete a ledger type together with all of its entries."""
    ledger_type = get_type_by_id(db, kind, type_id, owner_id)
    if not ledger_type:
        return False

    # Income entries funded from this savings type keep their amount but lose the link
    db.query(LedgerEntry).filter(LedgerEntry.savings_type_id == type_id).update(
        {LedgerEntry.savings_type_id: None}, synchronize_session="fetch"
    )
    removed = len(ledger_type.entries)
    db.delete(ledger_type)

    try:
        db.commit()
        logger.info(f"{_label(kind)} type {type_id} deleted with {removed} entries")
        return True
    except Exception as e:
        db.rollback()
        logger.error(f"Error deleting {kind.value} type {type_id}: {str(e)}")
        raise ValueError(f"Failed to delete {_label(kind).lower()} type.")


# ==================== ENTRY QUERIES ====================

def get_entry_by_id(db: Session, kind: LedgerKind, entry_id: str, owner_id: int) -> Optional[LedgerEntry]:
    return (
        db.query(LedgerEntry)
        .filter(
            LedgerEntry.id == entry_id,
            LedgerEntry.kind == kind,
            LedgerEntry.owner_id == owner_id,
        )
        .first()
    )


def get_all_entries(
    db: Session,
    kind: LedgerKind,
    owner_id: int,
    skip: int = 0,
    limit: int = 100,
    type_id: Optional[str] = None,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
) -> Tuple[List[LedgerEntry], int, Decimal]:
    """Entries newest first. Returns (rows, total_count, total_amount)."""
    query = db.query(LedgerEntry).filter(LedgerEntry.kind == kind, LedgerEntry.owner_id == owner_id)
    if type_id:
        query = query.filter(LedgerEntry.type_id == type_id)
    if start_date is not None:
        query = query.filter(LedgerEntry.date >= start_date)
    if end_date is not None:
        query = query.filter(LedgerEntry.date <= end_date)

    total_count = query.count()
    total_amount = Decimal(
        query.with_entities(func.coalesce(func.sum(LedgerEntry.amount), 0)).scalar()
    )
    rows = (
        query.options(joinedload(LedgerEntry.type), joinedload(LedgerEntry.savings_type))
        .order_by(LedgerEntry.date.desc(), LedgerEntry.created_at.desc())
        .offset(skip)
        .limit(limit)
        .all()
    )
    return rows, total_count, total_amount


# ==================== ENTRY MUTATIONS ====================

def _require_type(db: Session, kind: LedgerKind, type_id: Optional[str], owner_id: int) -> LedgerType:
    if not type_id:
        raise ValueError("Valid type_id and amount are required")
    ledger_type = get_type_by_id(db, kind, type_id, owner_id)
    if not ledger_type:
        raise NotFoundError(f"{_label(kind)} type not found")
    return ledger_type


def create_entry(
    db: Session,
    kind: LedgerKind,
    owner_id: int,
    type_id: str,
    amount: Decimal,
    entry_date: Optional[date] = None,
    is_from_savings: bool = False,
    savings_type_id: Optional[str] = None,
) -> LedgerEntry:
    """Create an entry and recompute its type's total."""
    amount = validate_amount(kind, amount)
    _require_type(db, kind, type_id, owner_id)

    if kind == LedgerKind.income and is_from_savings and savings_type_id:
        return record_income_from_savings(
            db,
            owner_id=owner_id,
            type_id=type_id,
            savings_type_id=savings_type_id,
            amount=amount,
            entry_date=entry_date,
        )

    entry = LedgerEntry(
        kind=kind,
        type_id=type_id,
        date=entry_date or _today(),
        amount=amount,
        owner_id=owner_id,
    )
    db.add(entry)
    db.flush()
    recompute_total(db, type_id)

    try:
        db.commit()
        db.refresh(entry)
        logger.info(f"{_label(kind)} entry {entry.id} created on {type_id} ({amount})")
        return entry
    except Exception as e:
        db.rollback()
        logger.exception(f"Error creating {kind.value} entry")
        raise ValueError(f"Failed to create {_label(kind).lower()} entry.") from e


def record_income_from_savings(
    db: Session,
    owner_id: int,
    type_id: str,
    savings_type_id: str,
    amount: Decimal,
    entry_date: Optional[date] = None,
) -> LedgerEntry:
    """
    Record income funded from savings.

    Checks the savings balance with a fresh scan, then writes a compensating
    negative savings entry and the income entry, and recomputes both totals.
    Raises InsufficientBalanceError when the savings balance is below amount.
    """
    amount = validate_amount(LedgerKind.income, amount)
    _require_type(db, LedgerKind.income, type_id, owner_id)
    _require_type(db, LedgerKind.savings, savings_type_id, owner_id)

    available = sum_entries(db, savings_type_id)
    if available < amount:
        logger.warning(
            f"Insufficient savings on {savings_type_id}: available={available}, requested={amount}"
        )
        raise InsufficientBalanceError(available=available, requested=amount)

    d = entry_date or _today()
    deduction = LedgerEntry(
        kind=LedgerKind.savings,
        type_id=savings_type_id,
        date=d,
        amount=-amount,
        owner_id=owner_id,
    )
    income = LedgerEntry(
        kind=LedgerKind.income,
        type_id=type_id,
        date=d,
        amount=amount,
        owner_id=owner_id,
        is_from_savings=True,
        savings_type_id=savings_type_id,
    )
    db.add_all([deduction, income])
    db.flush()
    recompute_total(db, savings_type_id)
    recompute_total(db, type_id)

    try:
        db.commit()
        db.refresh(income)
        logger.info(f"Income {income.id} of {amount} funded from savings {savings_type_id}")
        return income
    except Exception as e:
        db.rollback()
        logger.exception("Error recording income from savings")
        raise ValueError("Failed to create income entry.") from e


def update_entry(
    db: Session,
    kind: LedgerKind,
    owner_id: int,
    entry_id: str,
    type_id: str,
    amount: Decimal,
    entry_date: Optional[date] = None,
) -> Optional[LedgerEntry]:
    """
    Update amount, date or type of an entry. Recomputes the new type's total
    and, when the entry moved, the previous type's total as well.
    Returns None when the entry does not exist.
    """
    amount = validate_amount(kind, amount)
    _require_type(db, kind, type_id, owner_id)

    entry = get_entry_by_id(db, kind, entry_id, owner_id)
    if not entry:
        return None

    previous_type_id = entry.type_id
    entry.type_id = type_id
    entry.amount = amount
    if entry_date is not None:
        entry.date = entry_date
    db.flush()

    recompute_total(db, type_id)
    if previous_type_id != type_id:
        recompute_total(db, previous_type_id)

    try:
        db.commit()
        db.refresh(entry)
        return entry
    except Exception as e:
        db.rollback()
        logger.exception(f"Error updating {kind.value} entry {entry_id}")
        raise ValueError(f"Failed to update {_label(kind).lower()} entry.") from e


def delete_entry(db: Session, kind: LedgerKind, owner_id: int, entry_id: str) -> bool:
    """Delete an entry and recompute its type's total."""
    entry = get_entry_by_id(db, kind, entry_id, owner_id)
    if not entry:
        return False

    type_id = entry.type_id
    db.delete(entry)
    db.flush()
    recompute_total(db, type_id)

    try:
        db.commit()
        return True
    except Exception as e:
        db.rollback()
        logger.exception(f"Error deleting {kind.value} entry {entry_id}")
        raise ValueError(f"Failed to delete {_label(kind).lower()} entry.") from e
