"""
Point Ledger Model
"""
from sqlalchemy import Column, String, Integer, DateTime, ForeignKey, Text
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from rewardstore.core import Base
from .base import IdMixin
import enum

class TransactionType(str, enum.Enum):
    EARNED = "earned"
    SPENT = "spent"
    ADJUSTED = "adjusted"

class PointTransaction(Base, IdMixin):
    """Append-only point ledger row"""
    __tablename__ = "point_transaction"

    user_id = Column(Integer, ForeignKey("app_user.id", ondelete="CASCADE"), nullable=False, index=True)
    points = Column(Integer, nullable=False)  # Positive = credit, negative = debit
    description = Column(Text, nullable=False)
    transaction_type = Column(String(20), nullable=False)  # earned, spent, adjusted
    reference_id = Column(Integer)  # Originating order id, if any
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    # Relationships
    user = relationship("AppUser", back_populates="point_transactions")
