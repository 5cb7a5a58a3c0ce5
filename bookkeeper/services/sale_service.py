"""
Sale recording and the customer-side bookkeeping that goes with it.

A sale is stored as its own row and a summary of it is embedded on the
customer. After every write the customer's last_purchase is re-derived from
the embedded summaries rather than trusted from the client.
"""

from datetime import date, datetime, time, timedelta
from decimal import Decimal
from typing import List, Optional, Tuple

from sqlalchemy import func
from sqlalchemy.orm import Session, joinedload

from bookkeeper.common.exceptions import NotFoundError
from bookkeeper.logger_config import logger
from bookkeeper.models.customer import Customer
from bookkeeper.models.sale import Sale
from bookkeeper.services.customer_service import get_customer_by_id, reconcile_last_purchase
from bookkeeper.utils.datetimes import utc_naive, utc_now


def _products_payload(products) -> list:
    payload = []
    for p in products or []:
        item = p if isinstance(p, dict) else p.model_dump()
        payload.append({
            "product_id": item.get("product_id"),
            "product_name": item.get("product_name"),
            "quantity": str(item.get("quantity")),
            "price": str(item.get("price")),
        })
    return payload


def sale_summary(sale: Sale) -> dict:
    """Denormalised copy of a sale as embedded on the customer."""
    return {
        "sale_id": sale.id,
        "sale_type": sale.sale_type,
        "products": list(sale.products or []),
        "total_price": str(sale.total_price),
        "payment_method": sale.payment_method,
        "amount_received": str(sale.amount_received),
        "date": utc_naive(sale.date).isoformat(),
    }


def _outstanding(total_price, amount_received) -> Decimal:
    return Decimal(total_price or 0) - Decimal(amount_received or 0)


# ==================== QUERIES ====================

def get_sale_by_id(db: Session, sale_id: str) -> Optional[Sale]:
    return (
        db.query(Sale)
        .options(joinedload(Sale.customer))
        .filter(Sale.id == sale_id)
        .first()
    )


def _filtered_query(
    db: Session,
    from_date: Optional[date] = None,
    to_date: Optional[date] = None,
    sale_type: Optional[str] = None,
    payment_method: Optional[str] = None,
    customer_id: Optional[str] = None,
    customer_name: Optional[str] = None,
):
    query = db.query(Sale)
    if from_date is not None:
        query = query.filter(Sale.date >= datetime.combine(from_date, time.min))
    if to_date is not None:
        query = query.filter(Sale.date < datetime.combine(to_date + timedelta(days=1), time.min))
    if sale_type:
        query = query.filter(Sale.sale_type == sale_type)
    if payment_method:
        query = query.filter(Sale.payment_method == payment_method)
    if customer_id:
        query = query.filter(Sale.customer_id == customer_id)
    if customer_name:
        query = query.join(Customer, Sale.customer_id == Customer.id).filter(
            Customer.name.ilike(f"%{customer_name}%")
        )
    return query


def get_all_sales(
    db: Session,
    page: int = 1,
    limit: int = 20,
    **filters,
) -> Tuple[List[Sale], int]:
    """Sales newest first with optional date range, type, method and customer filters."""
    query = _filtered_query(db, **filters)
    total = query.count()
    sales = (
        query.options(joinedload(Sale.customer))
        .order_by(Sale.date.desc())
        .offset((page - 1) * limit)
        .limit(limit)
        .all()
    )
    return sales, total


def get_sales_summary(db: Session, **filters) -> dict:
    """Totals overall, by payment method and by sale type."""
    base = _filtered_query(db, **filters)

    total_sales, total_received, count = base.with_entities(
        func.coalesce(func.sum(Sale.total_price), 0),
        func.coalesce(func.sum(Sale.amount_received), 0),
        func.count(Sale.id),
    ).one()

    def grouped(column):
        rows = (
            base.with_entities(column, func.coalesce(func.sum(Sale.total_price), 0), func.count(Sale.id))
            .group_by(column)
            .order_by(column)
            .all()
        )
        return [{"key": key, "total": Decimal(total), "count": n} for key, total, n in rows]

    return {
        "total_sales": Decimal(total_sales),
        "total_received": Decimal(total_received),
        "count": count,
        "sales_by_payment_method": grouped(Sale.payment_method),
        "sales_by_type": grouped(Sale.sale_type),
    }


# ==================== MUTATIONS ====================

def record_sale(
    db: Session,
    customer_id: Optional[str],
    products=None,
    total_price: Decimal = Decimal("0"),
    amount_received: Decimal = Decimal("0"),
    sale_type: Optional[str] = None,
    payment_method: Optional[str] = None,
    sale_date: Optional[datetime] = None,
    updated_credit: Optional[Decimal] = None,
    last_purchase: Optional[datetime] = None,
) -> Tuple[Sale, Optional[Customer]]:
    """
    Persist a sale and fold it into the customer record.

    The customer's credit becomes updated_credit when the client supplies it,
    otherwise credit + total_price - amount_received. last_purchase is written
    from the client value (or the sale date) and then reconciled against the
    embedded sales. Walk-in sales (no customer_id) only create the sale row.
    """
    customer = None
    if customer_id:
        customer = get_customer_by_id(db, customer_id)
        if not customer:
            raise NotFoundError("Customer not found")

    sale = Sale(
        customer_id=customer_id,
        sale_type=sale_type,
        products=_products_payload(products),
        total_price=total_price,
        payment_method=payment_method,
        amount_received=amount_received,
        date=utc_naive(sale_date) or utc_now(),
    )
    db.add(sale)
    db.flush()

    if customer is not None:
        customer.sales.append(sale_summary(sale))
        if updated_credit is not None:
            customer.credit = updated_credit
        else:
            customer.credit = Decimal(customer.credit or 0) + _outstanding(total_price, amount_received)
        customer.last_purchase = utc_naive(last_purchase) or sale.date
        reconcile_last_purchase(customer)

    try:
        db.commit()
        db.refresh(sale)
        if customer is not None:
            db.refresh(customer)
        logger.info(f"Sale {sale.id} recorded for customer {customer_id or '-'} ({total_price})")
        return sale, customer
    except Exception as e:
        db.rollback()
        logger.exception("Error recording sale")
        raise ValueError("Failed to record sale.") from e


def update_sale(
    db: Session,
    sale_id: str,
    sale_type: Optional[str] = None,
    products=None,
    total_price: Optional[Decimal] = None,
    payment_method: Optional[str] = None,
    amount_received: Optional[Decimal] = None,
    sale_date: Optional[datetime] = None,
    updated_credit: Optional[Decimal] = None,
) -> Optional[Sale]:
    """
    Update a sale and re-sync the customer's embedded copy and credit.

    Without updated_credit the customer's credit moves by the change in the
    sale's outstanding amount (total_price - amount_received).
    """
    sale = get_sale_by_id(db, sale_id)
    if not sale:
        return None

    previous_outstanding = _outstanding(sale.total_price, sale.amount_received)

    if sale_type is not None:
        sale.sale_type = sale_type
    if products is not None:
        sale.products = _products_payload(products)
    if total_price is not None:
        sale.total_price = total_price
    if payment_method is not None:
        sale.payment_method = payment_method
    if amount_received is not None:
        sale.amount_received = amount_received
    if sale_date is not None:
        sale.date = utc_naive(sale_date)
    db.flush()

    customer = sale.customer
    if customer is not None:
        summary = sale_summary(sale)
        for index, embedded in enumerate(customer.sales):
            if embedded.get("sale_id") == sale.id:
                customer.sales[index] = summary
                break
        else:
            customer.sales.append(summary)

        if updated_credit is not None:
            customer.credit = updated_credit
        else:
            delta = _outstanding(sale.total_price, sale.amount_received) - previous_outstanding
            customer.credit = Decimal(customer.credit or 0) + delta
        reconcile_last_purchase(customer)

    try:
        db.commit()
        db.refresh(sale)
        return sale
    except Exception as e:
        db.rollback()
        logger.exception(f"Error updating sale {sale_id}")
        raise ValueError("Failed to update sale.") from e


def delete_sale(db: Session, sale_id: str) -> bool:
    """Delete the sale row. The summary embedded on the customer is kept."""
    sale = db.query(Sale).filter(Sale.id == sale_id).first()
    if not sale:
        return False

    db.delete(sale)
    try:
        db.commit()
        return True
    except Exception as e:
        db.rollback()
        logger.error(f"Error deleting sale {sale_id}: {str(e)}")
        raise ValueError("Failed to delete sale.")
