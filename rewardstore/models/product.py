"""
Product Catalog Model
"""
from sqlalchemy import Column, String, Integer, Boolean, Text, CheckConstraint
from sqlalchemy.orm import relationship
from rewardstore.core import Base
from .base import IdMixin, TimestampMixin

class Product(Base, IdMixin, TimestampMixin):
    """Redeemable Product"""
    __tablename__ = "product"

    name = Column(String(300), nullable=False)
    description = Column(Text)
    points_cost = Column(Integer, nullable=False)
    stock = Column(Integer, default=0, nullable=False)
    image_url = Column(String(500))
    is_active = Column(Boolean, default=True, nullable=False)

    # Relationships
    order_items = relationship("OrderItem", back_populates="product")

    __table_args__ = (
        CheckConstraint("points_cost > 0", name="ck_product_points_cost_positive"),
        CheckConstraint("stock >= 0", name="ck_product_stock_non_negative"),
    )
