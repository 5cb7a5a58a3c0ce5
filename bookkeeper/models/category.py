from sqlalchemy import Column, DateTime, ForeignKey, Integer, String, UniqueConstraint
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from bookkeeper.core.database import Base
from bookkeeper.models.ids import generate_custom_id


class Category(Base):
    """Expense category, e.g. "Utilities" with subcategories "Electricity", "Water"."""
    __tablename__ = "categories"

    id = Column(String(15), primary_key=True,
                default=lambda: generate_custom_id("CAT"))
    name = Column(String(100), unique=True, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True),
                        server_default=func.now(), onupdate=func.now())

    subcategories = relationship(
        "Subcategory",
        back_populates="category",
        cascade="all, delete-orphan",
        order_by="Subcategory.position",
    )


class Subcategory(Base):
    __tablename__ = "subcategories"
    __table_args__ = (
        UniqueConstraint("category_id", "name", name="uq_subcategories_category_name"),
    )

    id = Column(String(15), primary_key=True,
                default=lambda: generate_custom_id("SUB"))
    category_id = Column(String(15), ForeignKey(
        "categories.id", ondelete="CASCADE"), nullable=False, index=True)
    name = Column(String(100), nullable=False)
    position = Column(Integer, nullable=False, default=0)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    category = relationship("Category", back_populates="subcategories")
