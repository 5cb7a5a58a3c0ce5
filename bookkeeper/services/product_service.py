from decimal import Decimal
from typing import List, Optional, Tuple

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from bookkeeper.core.cache import cache
from bookkeeper.logger_config import logger
from bookkeeper.models.product import PriceHistory, Product

CACHE_COLLECTION = "products"
PRODUCTS_LIST_KEY = f"{CACHE_COLLECTION}:list"
PRICE_HISTORY_LIMIT = 50


def get_product_by_id(db: Session, product_id: str) -> Optional[Product]:
    return db.query(Product).filter(Product.id == product_id).first()


def get_all_products(db: Session) -> Tuple[List[Product], int]:
    products = db.query(Product).order_by(Product.product_name).all()
    return products, len(products)


def create_product(
    db: Session,
    product_name: str,
    price_per_pack: Decimal = Decimal("0"),
    kgs_per_pack: Decimal = Decimal("0"),
    price_per_kg: Decimal = Decimal("0"),
) -> Product:
    """Create a new product."""
    product = Product(
        product_name=product_name,
        price_per_pack=price_per_pack,
        kgs_per_pack=kgs_per_pack,
        price_per_kg=price_per_kg,
    )
    db.add(product)

    try:
        db.commit()
        db.refresh(product)
    except IntegrityError as e:
        db.rollback()
        logger.error(f"Error creating product: {str(e)}")
        raise ValueError("Failed to add product.")

    cache.invalidate(CACHE_COLLECTION)
    return product


def update_product(db: Session, product_id: str, **fields) -> Optional[Product]:
    """Update product fields that are not None. Does not write price history."""
    product = get_product_by_id(db, product_id)
    if not product:
        return None

    for key in ("product_name", "price_per_pack", "kgs_per_pack", "price_per_kg"):
        value = fields.get(key)
        if value is not None:
            setattr(product, key, value)

    try:
        db.commit()
        db.refresh(product)
    except IntegrityError as e:
        db.rollback()
        logger.error(f"Error updating product: {str(e)}")
        raise ValueError("Failed to update product.")

    cache.invalidate(CACHE_COLLECTION)
    return product


def delete_product(db: Session, product_id: str) -> bool:
    """Delete a product. Its price history rows are kept."""
    product = get_product_by_id(db, product_id)
    if not product:
        return False

    db.delete(product)
    try:
        db.commit()
    except Exception as e:
        db.rollback()
        logger.error(f"Error deleting product: {str(e)}")
        raise ValueError("Failed to delete product.")

    cache.invalidate(CACHE_COLLECTION)
    return True


def update_price(
    db: Session,
    product_id: str,
    new_price_per_pack: Decimal,
    new_price_per_kg: Decimal,
    reason: Optional[str] = None,
    updated_by_id: Optional[int] = None,
) -> Optional[Tuple[Product, PriceHistory]]:
    """
    Change a product's prices and append a price history record.
    Returns None when the product does not exist.
    """
    if not new_price_per_pack or not new_price_per_kg:
        raise ValueError("Missing required fields")

    product = get_product_by_id(db, product_id)
    if not product:
        return None

    old_pack = Decimal(product.price_per_pack)
    old_kg = Decimal(product.price_per_kg)
    if old_pack == Decimal(new_price_per_pack) and old_kg == Decimal(new_price_per_kg):
        raise ValueError("No price change detected")

    product.price_per_pack = new_price_per_pack
    product.price_per_kg = new_price_per_kg
    history = PriceHistory(
        product_id=product.id,
        old_price_per_pack=old_pack,
        new_price_per_pack=new_price_per_pack,
        old_price_per_kg=old_kg,
        new_price_per_kg=new_price_per_kg,
        updated_by_id=updated_by_id,
        reason=reason or "Price update",
    )
    db.add(history)

    try:
        db.commit()
        db.refresh(product)
        db.refresh(history)
    except Exception as e:
        db.rollback()
        logger.exception(f"Error updating price for product {product_id}")
        raise ValueError("Failed to update product price.") from e

    cache.invalidate(CACHE_COLLECTION)
    logger.info(f"Price of {product_id} changed: pack {old_pack} -> {new_price_per_pack}, kg {old_kg} -> {new_price_per_kg}")
    return product, history


def get_price_history(db: Session, product_id: str, limit: int = PRICE_HISTORY_LIMIT) -> List[PriceHistory]:
    """Latest price changes for a product, newest first."""
    return (
        db.query(PriceHistory)
        .filter(PriceHistory.product_id == product_id)
        .order_by(PriceHistory.update_date.desc(), PriceHistory.id)
        .limit(limit)
        .all()
    )
