import enum
from sqlalchemy import (
    Boolean, Column, Date, DateTime, Enum, ForeignKey, Integer, Numeric, String, UniqueConstraint
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from bookkeeper.core.database import Base
from bookkeeper.models.ids import generate_custom_id


class LedgerKind(str, enum.Enum):
    savings = "savings"
    income = "income"
    payable = "payable"
    money_lent = "money_lent"


class LedgerType(Base):
    """Named bucket (e.g. "Emergency Fund") whose total_amount caches the sum of its entries."""
    __tablename__ = "ledger_types"
    __table_args__ = (
        UniqueConstraint("owner_id", "kind", "name", name="uq_ledger_types_owner_kind_name"),
    )

    id = Column(String(20), primary_key=True, default=lambda: generate_custom_id("LTY"))
    kind = Column(Enum(LedgerKind), nullable=False, index=True)
    name = Column(String(100), nullable=False)
    owner_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)

    # Recomputed from entries after every entry mutation, never written by clients
    total_amount = Column(Numeric(15, 2), nullable=False, default=0)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    owner = relationship("User", back_populates="ledger_types")
    entries = relationship(
        "LedgerEntry",
        back_populates="type",
        foreign_keys="LedgerEntry.type_id",
        cascade="all, delete-orphan",
        order_by="LedgerEntry.date.desc()",
    )


class LedgerEntry(Base):
    """Dated, signed amount belonging to a ledger type."""
    __tablename__ = "ledger_entries"

    id = Column(String(20), primary_key=True, default=lambda: generate_custom_id("LEN"))
    kind = Column(Enum(LedgerKind), nullable=False, index=True)
    type_id = Column(String(20), ForeignKey("ledger_types.id", ondelete="CASCADE"), nullable=False, index=True)
    date = Column(Date, nullable=False, server_default=func.current_date())
    amount = Column(Numeric(15, 2), nullable=False)
    owner_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)

    # Income funded from savings
    is_from_savings = Column(Boolean, nullable=False, default=False)
    savings_type_id = Column(String(20), ForeignKey("ledger_types.id", ondelete="SET NULL"), nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())

    type = relationship("LedgerType", back_populates="entries", foreign_keys=[type_id])
    savings_type = relationship("LedgerType", foreign_keys=[savings_type_id])

    @property
    def type_name(self):
        return self.type.name if self.type else None

    @property
    def savings_type_name(self):
        return self.savings_type.name if self.savings_type else None
