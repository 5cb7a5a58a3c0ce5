# bookkeeper/services/purchase_service.py

from datetime import datetime
from decimal import Decimal
from typing import List, Optional, Tuple

from sqlalchemy import func
from sqlalchemy.orm import Session, joinedload

from bookkeeper.common.exceptions import NotFoundError
from bookkeeper.logger_config import logger
from bookkeeper.models.vendor import Purchase, PurchaseUnit
from bookkeeper.utils.datetimes import utc_naive, utc_now
from bookkeeper.services.vendor_service import get_vendor_by_id


# ==================== HELPER FUNCTIONS ====================

def calculate_total(quantity: Decimal, price_per_unit: Decimal) -> Decimal:
    return (Decimal(quantity) * Decimal(price_per_unit)).quantize(Decimal("0.01"))


def _default_credit(vendor_credit, total_price, amount_paid) -> Decimal:
    """Vendor credit after a purchase when the client does not supply one."""
    return Decimal(vendor_credit or 0) + Decimal(total_price or 0) - Decimal(amount_paid or 0)


# ==================== QUERIES ====================

def get_purchase_by_id(db: Session, purchase_id: str, owner_id: int) -> Optional[Purchase]:
    return (
        db.query(Purchase)
        .options(joinedload(Purchase.vendor))
        .filter(Purchase.id == purchase_id, Purchase.owner_id == owner_id)
        .first()
    )


def get_all_purchases(
    db: Session,
    owner_id: int,
    vendor_id: Optional[str] = None,
    skip: int = 0,
    limit: int = 100,
) -> Tuple[List[Purchase], int, Decimal]:
    """Purchases newest first. Returns (rows, total_count, total_amount)."""
    query = db.query(Purchase).filter(Purchase.owner_id == owner_id)
    if vendor_id:
        query = query.filter(Purchase.vendor_id == vendor_id)

    total = query.count()
    total_amount = Decimal(query.with_entities(func.coalesce(func.sum(Purchase.total_price), 0)).scalar())
    purchases = query.order_by(Purchase.date.desc()).offset(skip).limit(limit).all()
    return purchases, total, total_amount


# ==================== MUTATIONS ====================

def create_purchase(
    db: Session,
    owner_id: int,
    item: str,
    vendor_id: str,
    quantity: Decimal,
    unit: PurchaseUnit,
    price_per_unit: Decimal,
    vendor_name: Optional[str] = None,
    total_price: Optional[Decimal] = None,
    amount_paid: Decimal = Decimal("0"),
    updated_credit: Optional[Decimal] = None,
    purchase_date: Optional[datetime] = None,
) -> Purchase:
    """
    Record a purchase and set the vendor's credit.

    The vendor's credit becomes updated_credit when supplied, otherwise
    credit + total_price - amount_paid.
    """
    if not item or not vendor_id or not quantity or not price_per_unit:
        raise ValueError("Missing required fields")

    vendor = get_vendor_by_id(db, vendor_id, owner_id)
    if not vendor:
        raise NotFoundError("Vendor not found")

    if total_price is None:
        total_price = calculate_total(quantity, price_per_unit)
    if updated_credit is None:
        updated_credit = _default_credit(vendor.credit, total_price, amount_paid)

    purchase = Purchase(
        item=item,
        vendor_id=vendor.id,
        vendor_name=vendor_name or vendor.name,
        quantity=quantity,
        unit=unit,
        price_per_unit=price_per_unit,
        total_price=total_price,
        amount_paid=amount_paid or Decimal("0"),
        updated_credit=updated_credit,
        date=utc_naive(purchase_date) or utc_now(),
        owner_id=owner_id,
    )
    db.add(purchase)
    vendor.credit = updated_credit

    try:
        db.commit()
        db.refresh(purchase)
        logger.info(f"Purchase {purchase.id} from {vendor.id}: {total_price}, vendor credit {updated_credit}")
        return purchase
    except Exception as e:
        db.rollback()
        logger.exception("Error creating purchase")
        raise ValueError("Failed to create purchase.") from e


def update_purchase(db: Session, owner_id: int, purchase_id: str, **fields) -> Optional[Purchase]:
    """
    Update a purchase. When updated_credit is given it is also written to the
    purchase's vendor.
    """
    purchase = get_purchase_by_id(db, purchase_id, owner_id)
    if not purchase:
        return None

    vendor_id = fields.get("vendor_id")
    if vendor_id:
        vendor = get_vendor_by_id(db, vendor_id, owner_id)
        if not vendor:
            raise NotFoundError("Vendor not found")
        purchase.vendor_id = vendor.id
        purchase.vendor = vendor

    for key in ("item", "vendor_name", "quantity", "unit", "price_per_unit", "total_price"):
        value = fields.get(key)
        if value:
            setattr(purchase, key, value)
    if fields.get("amount_paid") is not None:
        purchase.amount_paid = fields["amount_paid"]
    if fields.get("date") is not None:
        purchase.date = utc_naive(fields["date"])

    updated_credit = fields.get("updated_credit")
    if updated_credit is not None:
        purchase.updated_credit = updated_credit
        if purchase.vendor is not None:
            purchase.vendor.credit = updated_credit

    try:
        db.commit()
        db.refresh(purchase)
        return purchase
    except Exception as e:
        db.rollback()
        logger.exception(f"Error updating purchase {purchase_id}")
        raise ValueError("Failed to update purchase.") from e


def delete_purchase(db: Session, owner_id: int, purchase_id: str) -> bool:
    """Delete a purchase. The vendor's credit is left as it is."""
    purchase = get_purchase_by_id(db, purchase_id, owner_id)
    if not purchase:
        return False

    db.delete(purchase)
    try:
        db.commit()
        return True
    except Exception as e:
        db.rollback()
        logger.error(f"Error deleting purchase: {str(e)}")
        raise ValueError("Failed to delete purchase.")
