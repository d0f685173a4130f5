"""
Order Models
"""
from sqlalchemy import Column, String, Integer, DateTime, ForeignKey, CheckConstraint
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from rewardstore.core import Base
from .base import IdMixin, TimestampMixin
import enum

class OrderStatus(str, enum.Enum):
    PENDING = "pending"
    COMPLETED = "completed"
    CANCELLED = "cancelled"

class RewardOrder(Base, IdMixin, TimestampMixin):
    """Order Header"""
    __tablename__ = "reward_order"

    user_id = Column(Integer, ForeignKey("app_user.id"), nullable=False, index=True)
    total_points = Column(Integer, nullable=False)  # Fixed at creation
    status = Column(String(20), default=OrderStatus.PENDING.value, nullable=False, index=True)

    # Relationships
    user = relationship("AppUser", back_populates="orders")
    items = relationship("OrderItem", back_populates="order", order_by="OrderItem.id")

class OrderItem(Base, IdMixin):
    """Order Line, price frozen at purchase time"""
    __tablename__ = "order_item"

    order_id = Column(Integer, ForeignKey("reward_order.id"), nullable=False, index=True)
    product_id = Column(Integer, ForeignKey("product.id"), nullable=False, index=True)
    quantity = Column(Integer, nullable=False)
    points_cost = Column(Integer, nullable=False)  # Snapshot of Product.points_cost
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    # Relationships
    order = relationship("RewardOrder", back_populates="items")
    product = relationship("Product", back_populates="order_items")

    __table_args__ = (
        CheckConstraint("quantity > 0", name="ck_order_item_quantity_positive"),
    )
