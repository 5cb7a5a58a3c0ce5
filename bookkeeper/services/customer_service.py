from datetime import datetime
from decimal import Decimal
from typing import List, Optional, Tuple

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from bookkeeper.logger_config import logger
from bookkeeper.models.customer import Customer
from bookkeeper.models.ids import generate_custom_id
from bookkeeper.models.sale import Sale
from bookkeeper.utils.datetimes import parse_iso, utc_naive, utc_now

SORT_OPTIONS = ("recent", "oldest", "credit")


# ==================== QUERIES ====================

def get_customer_by_id(db: Session, customer_id: str) -> Optional[Customer]:
    """Get customer by ID (e.g., 'CUS-ABCDEFGH')."""
    return db.query(Customer).filter(Customer.id == customer_id).first()


def get_all_customers(
    db: Session,
    skip: int = 0,
    limit: int = 100,
    search: Optional[str] = None,
    sort: Optional[str] = None,
) -> Tuple[List[Customer], int]:
    """Customers with optional name search and sort (recent | oldest | credit)."""
    query = db.query(Customer)

    if search:
        query = query.filter(Customer.name.ilike(f"%{search}%"))

    if sort == "recent":
        query = query.order_by(Customer.last_purchase.desc())
    elif sort == "oldest":
        query = query.order_by(Customer.last_purchase.asc())
    elif sort == "credit":
        query = query.order_by(Customer.credit.desc())
    else:
        query = query.order_by(Customer.created_at.desc(), Customer.name)

    total = query.count()
    customers = query.offset(skip).limit(limit).all()
    return customers, total


# ==================== MUTATIONS ====================

def create_customer(db: Session, name: str, contact: str, credit: Decimal) -> Customer:
    """Create a new customer."""
    if not name or not contact or credit is None:
        raise ValueError("All fields are required")

    customer = Customer(name=name, contact=contact, credit=credit, sales=[], payments=[])
    db.add(customer)

    try:
        db.commit()
        db.refresh(customer)
        return customer
    except IntegrityError as e:
        db.rollback()
        logger.error(f"Error creating customer: {str(e)}")
        raise ValueError("Failed to create customer.")


def update_customer(
    db: Session,
    customer_id: str,
    name: Optional[str] = None,
    contact: Optional[str] = None,
    credit: Optional[Decimal] = None,
) -> Optional[Customer]:
    """Update customer information."""
    customer = get_customer_by_id(db, customer_id)
    if not customer:
        return None

    if name is not None:
        customer.name = name
    if contact is not None:
        customer.contact = contact
    if credit is not None:
        customer.credit = credit

    try:
        db.commit()
        db.refresh(customer)
        return customer
    except IntegrityError as e:
        db.rollback()
        logger.error(f"Error updating customer: {str(e)}")
        raise ValueError("Failed to update customer.")


def delete_customer(db: Session, customer_id: str) -> bool:
    """Delete a customer. Their sale rows stay, detached from the customer."""
    customer = get_customer_by_id(db, customer_id)
    if not customer:
        return False

    db.delete(customer)
    try:
        db.commit()
        return True
    except Exception as e:
        db.rollback()
        logger.error(f"Error deleting customer: {str(e)}")
        raise ValueError("Failed to delete customer.")


def adjust_credit(db: Session, customer_id: str, amount: Decimal) -> Optional[Customer]:
    """Add amount to the customer's credit and stamp last_purchase with now."""
    customer = get_customer_by_id(db, customer_id)
    if not customer:
        return None

    customer.credit = Decimal(customer.credit or 0) + amount
    customer.last_purchase = utc_now()

    try:
        db.commit()
        db.refresh(customer)
        return customer
    except Exception as e:
        db.rollback()
        logger.error(f"Error adjusting credit for {customer_id}: {str(e)}")
        raise ValueError("Failed to update sale.")


# ==================== RECONCILIATION ====================

def latest_sale_date(customer: Customer) -> Optional[datetime]:
    dates = [d for d in (parse_iso(s.get("date")) for s in customer.sales or []) if d]
    return max(dates) if dates else None


def reconcile_last_purchase(customer: Customer) -> bool:
    """
    Re-derive last_purchase as the latest date over the embedded sales.

    Returns True when the stored value was corrected. Customers without
    embedded sales are left untouched. Does not commit.
    """
    if not customer.sales:
        return False

    latest = latest_sale_date(customer)
    if latest is None:
        return False

    if utc_naive(customer.last_purchase) != latest:
        logger.info(
            f"Customer {customer.id} last_purchase corrected: {customer.last_purchase} -> {latest}"
        )
        customer.last_purchase = latest
        return True
    return False


def reconcile_all_customers(db: Session) -> int:
    """Apply the last_purchase correction to every customer. Returns how many changed."""
    corrected = 0
    for customer in db.query(Customer).all():
        if reconcile_last_purchase(customer):
            corrected += 1

    try:
        db.commit()
    except Exception as e:
        db.rollback()
        logger.error(f"Error reconciling customers: {str(e)}")
        raise ValueError("Failed to reconcile customers.")

    logger.info(f"Reconciled last_purchase for {corrected} customers")
    return corrected


# ==================== PAYMENTS ====================

def record_payment(
    db: Session,
    customer_id: str,
    amount_received: Decimal = Decimal("0"),
    other_amount: Decimal = Decimal("0"),
    description: Optional[str] = None,
    payment_date: Optional[datetime] = None,
    payment_method: Optional[str] = "cash",
) -> Optional[Customer]:
    """
    Record a payment against the customer's credit.

    Credit is floored at zero; any overpayment is not carried forward.
    Returns None when the customer does not exist.
    """
    amount_received = Decimal(amount_received or 0)
    other_amount = Decimal(other_amount or 0)
    total = amount_received + other_amount
    if total <= 0:
        raise ValueError("Payment amount must be greater than zero")

    customer = get_customer_by_id(db, customer_id)
    if not customer:
        return None

    current = Decimal(customer.credit or 0)
    if total > current:
        logger.warning(f"Overpayment on {customer_id}: credit={current}, paid={total}")
    customer.credit = max(Decimal("0"), current - total)

    customer.payments.append({
        "id": generate_custom_id("PAY"),
        "amount_received": str(amount_received),
        "other_amount": str(other_amount),
        "total_amount": str(total),
        "description": description,
        "payment_method": payment_method,
        "date": (utc_naive(payment_date) or utc_now()).isoformat(),
    })

    try:
        db.commit()
        db.refresh(customer)
        return customer
    except Exception as e:
        db.rollback()
        logger.error(f"Error recording payment for {customer_id}: {str(e)}")
        raise ValueError("Failed to record payment.")


def get_customer_payments(
    db: Session, customer_id: str, page: int = 1, limit: int = 20
) -> Optional[Tuple[List[dict], int]]:
    """Embedded payments newest first, one page at a time."""
    customer = get_customer_by_id(db, customer_id)
    if not customer:
        return None

    payments = sorted(customer.payments or [], key=lambda p: p.get("date") or "", reverse=True)
    start = (page - 1) * limit
    return payments[start:start + limit], len(payments)


def get_customer_sales(
    db: Session, customer_id: str, page: int = 1, limit: int = 20
) -> Optional[Tuple[List[Sale], int]]:
    """Sale rows for a customer, newest first."""
    if not get_customer_by_id(db, customer_id):
        return None

    query = db.query(Sale).filter(Sale.customer_id == customer_id)
    total = query.count()
    sales = (
        query.order_by(Sale.date.desc())
        .offset((page - 1) * limit)
        .limit(limit)
        .all()
    )
    return sales, total
