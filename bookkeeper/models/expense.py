from sqlalchemy import Column, Date, DateTime, ForeignKey, Integer, Numeric, String, Text
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from bookkeeper.core.database import Base
from bookkeeper.models.ids import generate_custom_id


class Expense(Base):
    """Daily expense entry: amount, category/subcategory names, description and optional photo URL."""
    __tablename__ = "expenses"

    id = Column(String(20), primary_key=True, default=lambda: generate_custom_id("EXP"))
    date = Column(Date, nullable=False, server_default=func.current_date(), index=True)
    amount = Column(Numeric(15, 2), nullable=False)
    category = Column(String(100), nullable=False, index=True)
    subcategory = Column(String(100), nullable=False)
    description = Column(Text, nullable=True)
    photo = Column(String(500), nullable=True)
    owner_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())

    owner = relationship("User", back_populates="expenses")
