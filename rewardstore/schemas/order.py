"""
Order Schemas
"""
from pydantic import BaseModel, Field, AliasChoices
from typing import Optional, List
from datetime import datetime

from .product import ProductResponse

class OrderLineRequest(BaseModel):
    product_id: int = Field(gt=0, validation_alias=AliasChoices("product_id", "productId"))
    quantity: int = Field(gt=0)

class OrderCreate(BaseModel):
    items: List[OrderLineRequest] = Field(min_length=1)

class OrderStatusUpdate(BaseModel):
    status: str = Field(pattern="^(pending|completed|cancelled)$")

class OrderItemResponse(BaseModel):
    id: int
    order_id: int
    product_id: int
    quantity: int
    points_cost: int
    created_at: Optional[datetime]
    product: Optional[ProductResponse] = None

    class Config:
        from_attributes = True

class OrderResponse(BaseModel):
    id: int
    user_id: int
    total_points: int
    status: str
    created_at: Optional[datetime]
    updated_at: Optional[datetime]

    class Config:
        from_attributes = True

class OrderUserSummary(BaseModel):
    id: int
    username: str
    display_name: Optional[str]
    email: str

    class Config:
        from_attributes = True

class OrderWithUserResponse(OrderResponse):
    user: OrderUserSummary

class OrderDetailResponse(BaseModel):
    order: OrderResponse
    items: List[OrderItemResponse] = []
