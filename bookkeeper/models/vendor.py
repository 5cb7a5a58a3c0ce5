import enum
from sqlalchemy import Column, DateTime, Enum, ForeignKey, Integer, JSON, Numeric, String
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from bookkeeper.core.database import Base
from bookkeeper.models.ids import generate_custom_id


class PurchaseUnit(str, enum.Enum):
    packs = "packs"
    kgs = "kgs"


class Vendor(Base):
    __tablename__ = "vendors"

    id = Column(String(20), primary_key=True, default=lambda: generate_custom_id("VEN"))
    name = Column(String(255), nullable=False)
    contact = Column(String(50), nullable=False)
    # Amount currently owed to this vendor
    credit = Column(Numeric(15, 2), nullable=False, default=0)
    items = Column(JSON, nullable=False, default=list)
    owner_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    purchases = relationship("Purchase", back_populates="vendor", passive_deletes=True)


class Purchase(Base):
    __tablename__ = "purchases"

    id = Column(String(20), primary_key=True, default=lambda: generate_custom_id("PUR"))
    item = Column(String(255), nullable=False)
    vendor_id = Column(String(20), ForeignKey("vendors.id", ondelete="SET NULL"), nullable=True, index=True)
    vendor_name = Column(String(255), nullable=False)
    quantity = Column(Numeric(15, 3), nullable=False)
    unit = Column(Enum(PurchaseUnit), nullable=False)
    price_per_unit = Column(Numeric(15, 2), nullable=False)
    total_price = Column(Numeric(15, 2), nullable=False)
    amount_paid = Column(Numeric(15, 2), nullable=False, default=0)
    updated_credit = Column(Numeric(15, 2), nullable=False)
    date = Column(DateTime(timezone=True), nullable=False, server_default=func.now(), index=True)
    owner_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    vendor = relationship("Vendor", back_populates="purchases")
