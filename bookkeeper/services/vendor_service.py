from decimal import Decimal
from typing import List, Optional, Tuple

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from bookkeeper.logger_config import logger
from bookkeeper.models.vendor import Vendor


def get_vendor_by_id(db: Session, vendor_id: str, owner_id: int) -> Optional[Vendor]:
    return (
        db.query(Vendor)
        .filter(Vendor.id == vendor_id, Vendor.owner_id == owner_id)
        .first()
    )


def get_all_vendors(db: Session, owner_id: int) -> Tuple[List[Vendor], int]:
    """Vendors of the owner, newest first."""
    vendors = (
        db.query(Vendor)
        .filter(Vendor.owner_id == owner_id)
        .order_by(Vendor.created_at.desc(), Vendor.name)
        .all()
    )
    return vendors, len(vendors)


def create_vendor(
    db: Session,
    owner_id: int,
    name: str,
    contact: str,
    credit: Optional[Decimal] = None,
    items: Optional[List[str]] = None,
) -> Vendor:
    if not name or not contact:
        raise ValueError("Name and contact are required")

    vendor = Vendor(
        name=name,
        contact=contact,
        credit=credit or Decimal("0"),
        items=list(items or []),
        owner_id=owner_id,
    )
    db.add(vendor)

    try:
        db.commit()
        db.refresh(vendor)
        return vendor
    except IntegrityError as e:
        db.rollback()
        logger.error(f"Error creating vendor: {str(e)}")
        raise ValueError("Failed to create vendor.")


def update_vendor(
    db: Session,
    owner_id: int,
    vendor_id: str,
    name: Optional[str] = None,
    contact: Optional[str] = None,
    credit: Optional[Decimal] = None,
    items: Optional[List[str]] = None,
) -> Optional[Vendor]:
    vendor = get_vendor_by_id(db, vendor_id, owner_id)
    if not vendor:
        return None

    if name:
        vendor.name = name
    if contact:
        vendor.contact = contact
    if credit is not None:
        vendor.credit = credit
    if items is not None:
        vendor.items = list(items)

    try:
        db.commit()
        db.refresh(vendor)
        return vendor
    except IntegrityError as e:
        db.rollback()
        logger.error(f"Error updating vendor: {str(e)}")
        raise ValueError("Failed to update vendor.")


def delete_vendor(db: Session, owner_id: int, vendor_id: str) -> bool:
    """Delete a vendor. Its purchases keep vendor_name and lose the link."""
    vendor = get_vendor_by_id(db, vendor_id, owner_id)
    if not vendor:
        return False

    db.delete(vendor)
    try:
        db.commit()
        return True
    except Exception as e:
        db.rollback()
        logger.error(f"Error deleting vendor: {str(e)}")
        raise ValueError("Failed to delete vendor.")
