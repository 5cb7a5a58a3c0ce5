from sqlalchemy import Column, DateTime, JSON, Numeric, String
from sqlalchemy.ext.mutable import MutableList
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from bookkeeper.core.database import Base
from bookkeeper.models.ids import generate_custom_id


class Customer(Base):
    __tablename__ = "customers"

    id = Column(String(20), primary_key=True, default=lambda: generate_custom_id("CUS"))
    name = Column(String(255), nullable=False, index=True)
    contact = Column(String(50), nullable=False)
    credit = Column(Numeric(15, 2), nullable=False, default=0)
    join_date = Column(DateTime(timezone=True), server_default=func.now())
    last_purchase = Column(DateTime(timezone=True), nullable=True, index=True)

    # Denormalised copies: sale summaries (source of truth is the sales table)
    # and the append-only list of payments received.
    sales = Column(MutableList.as_mutable(JSON), nullable=False, default=list)
    payments = Column(MutableList.as_mutable(JSON), nullable=False, default=list)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    sale_records = relationship("Sale", back_populates="customer", passive_deletes=True)

    def __repr__(self):
        return f"<Customer(id='{self.id}', name='{self.name}', credit={self.credit})>"

    @property
    def sales_count(self) -> int:
        return len(self.sales or [])
