from sqlalchemy import Column, DateTime, ForeignKey, JSON, Numeric, String
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from bookkeeper.core.database import Base
from bookkeeper.models.ids import generate_custom_id


class Sale(Base):
    __tablename__ = "sales"

    id = Column(String(20), primary_key=True, default=lambda: generate_custom_id("SAL"))
    customer_id = Column(String(20), ForeignKey("customers.id", ondelete="SET NULL"), nullable=True, index=True)
    sale_type = Column(String(50), nullable=True, index=True)
    # [{product_id, product_name, quantity, price}]
    products = Column(JSON, nullable=False, default=list)
    total_price = Column(Numeric(15, 2), nullable=False, default=0)
    payment_method = Column(String(50), nullable=True, index=True)
    amount_received = Column(Numeric(15, 2), nullable=False, default=0)
    date = Column(DateTime(timezone=True), nullable=False, server_default=func.now(), index=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())

    customer = relationship("Customer", back_populates="sale_records")

    @property
    def customer_name(self):
        return self.customer.name if self.customer else None
