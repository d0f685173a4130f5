# Pydantic Schemas Package
from .user import UserCreate, UserResponse, PointsAdjust
from .product import ProductCreate, ProductUpdate, ProductResponse
from .order import (
    OrderLineRequest, OrderCreate, OrderStatusUpdate, OrderItemResponse,
    OrderResponse, OrderWithUserResponse, OrderDetailResponse,
)
from .points import PointTransactionResponse, BalanceResponse, BalanceCheckResponse

__all__ = [
    "UserCreate", "UserResponse", "PointsAdjust",
    "ProductCreate", "ProductUpdate", "ProductResponse",
    "OrderLineRequest", "OrderCreate", "OrderStatusUpdate", "OrderItemResponse",
    "OrderResponse", "OrderWithUserResponse", "OrderDetailResponse",
    "PointTransactionResponse", "BalanceResponse", "BalanceCheckResponse",
]
