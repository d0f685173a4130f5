"""
User Model
"""
from sqlalchemy import Column, String, Integer, CheckConstraint
from sqlalchemy.orm import relationship
from rewardstore.core import Base
from .base import IdMixin, TimestampMixin
import enum

class UserRole(str, enum.Enum):
    ADMIN = "admin"
    EMPLOYEE = "employee"

class AppUser(Base, IdMixin, TimestampMixin):
    """Application User with cached point balance"""
    __tablename__ = "app_user"

    username = Column(String(100), unique=True, nullable=False, index=True)
    hashed_password = Column(String(255), nullable=False)
    email = Column(String(200), nullable=False)
    display_name = Column(String(200))
    profile_image_url = Column(String(500))
    role = Column(String(20), default=UserRole.EMPLOYEE.value, nullable=False)

    # Cached running total of point_transaction rows, written only by LedgerService.post_entry
    points = Column(Integer, default=0, nullable=False)

    # Relationships
    orders = relationship("RewardOrder", back_populates="user")
    point_transactions = relationship(
        "PointTransaction", back_populates="user", cascade="all, delete-orphan"
    )

    __table_args__ = (
        CheckConstraint("points >= 0", name="ck_app_user_points_non_negative"),
    )
