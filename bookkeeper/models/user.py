from sqlalchemy import Column, Integer, String, DateTime
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
import secrets
import string
from bookkeeper.core.database import Base


class User(Base):
    """Operator account. Every owned record points back here through `owner_id`."""
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(String(20), unique=True, nullable=False, index=True)
    mobile = Column(String(20), unique=True, nullable=False, index=True)
    password_hash = Column(String(255), nullable=False)
    name = Column(String(255), nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    # Relationships
    ledger_types = relationship("LedgerType", back_populates="owner", cascade="all, delete-orphan")
    expenses = relationship("Expense", back_populates="owner", cascade="all, delete-orphan")

    @staticmethod
    def generate_user_id() -> str:
        """Generate a short unique public user ID"""
        random_part = ''.join(secrets.choice(string.ascii_uppercase + string.digits)
                              for _ in range(8))

        return f"ADM-{random_part}"

    def __repr__(self):
        return f"<User(user_id='{self.user_id}', mobile='{self.mobile}')>"
