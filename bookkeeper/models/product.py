from sqlalchemy import Column, DateTime, ForeignKey, Integer, Numeric, String, Text
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from bookkeeper.core.database import Base
from bookkeeper.models.ids import generate_custom_id


class Product(Base):
    __tablename__ = "products"

    id = Column(String(20), primary_key=True, default=lambda: generate_custom_id("PRD"))
    product_name = Column(String(255), nullable=False, default="", index=True)
    price_per_pack = Column(Numeric(15, 2), nullable=False, default=0)
    kgs_per_pack = Column(Numeric(15, 3), nullable=False, default=0)
    price_per_kg = Column(Numeric(15, 2), nullable=False, default=0)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())


class PriceHistory(Base):
    """Append-only audit trail of product price changes. Kept after the product is deleted."""
    __tablename__ = "price_history"

    id = Column(String(20), primary_key=True, default=lambda: generate_custom_id("PHS"))
    product_id = Column(String(20), nullable=False, index=True)
    old_price_per_pack = Column(Numeric(15, 2), nullable=False)
    new_price_per_pack = Column(Numeric(15, 2), nullable=False)
    old_price_per_kg = Column(Numeric(15, 2), nullable=False)
    new_price_per_kg = Column(Numeric(15, 2), nullable=False)
    updated_by_id = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    reason = Column(Text, nullable=False, default="Price update")
    update_date = Column(DateTime(timezone=True), server_default=func.now(), index=True)

    updated_by = relationship("User")
