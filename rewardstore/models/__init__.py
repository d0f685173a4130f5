from .base import IdMixin, TimestampMixin
from .user import AppUser, UserRole
from .product import Product
from .order import RewardOrder, OrderItem, OrderStatus
from .points import PointTransaction, TransactionType
from .audit import AuditLog

__all__ = [
    # Base
    "IdMixin", "TimestampMixin",
    # User
    "AppUser", "UserRole",
    # Product
    "Product",
    # Order
    "RewardOrder", "OrderItem", "OrderStatus",
    # Ledger
    "PointTransaction", "TransactionType",
    # Audit
    "AuditLog",
]
