"""
Orders API - checkout, own orders, admin order management
"""
from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session
from typing import List

from rewardstore.core import get_db
from rewardstore.core.security import ActingUser
from rewardstore.models import RewardOrder
from rewardstore.schemas.order import (
    OrderCreate, OrderStatusUpdate, OrderResponse, OrderItemResponse,
    OrderWithUserResponse, OrderDetailResponse
)
from rewardstore.services import OrderService
from .auth import get_actor, get_admin_actor

router = APIRouter(prefix="/protected/orders", tags=["orders"])
admin_router = APIRouter(prefix="/admin/orders", tags=["admin"])


def order_detail(order: RewardOrder) -> OrderDetailResponse:
    return OrderDetailResponse(
        order=OrderResponse.model_validate(order),
        items=[OrderItemResponse.model_validate(item) for item in order.items]
    )


# ===================== OWN ORDERS =====================

@router.get("", response_model=List[OrderResponse])
async def list_my_orders(
    actor: ActingUser = Depends(get_actor),
    db: Session = Depends(get_db)
):
    return OrderService.get_orders_for_user(db, actor.id)


@router.get("/{order_id}", response_model=OrderDetailResponse)
async def get_my_order(
    order_id: int,
    actor: ActingUser = Depends(get_actor),
    db: Session = Depends(get_db)
):
    """Order with items; visible to its owner and to admins"""
    return order_detail(OrderService.get_order_detail(db, actor, order_id))


@router.post("", response_model=OrderDetailResponse, status_code=status.HTTP_201_CREATED)
async def create_order(
    order_data: OrderCreate,
    actor: ActingUser = Depends(get_actor),
    db: Session = Depends(get_db)
):
    """Redeem points for the requested products"""
    order = OrderService.place_order(db, actor, order_data.items)
    return order_detail(order)


# ===================== ADMIN =====================

@admin_router.get("", response_model=List[OrderWithUserResponse])
async def list_all_orders(
    actor: ActingUser = Depends(get_admin_actor),
    db: Session = Depends(get_db)
):
    return OrderService.get_all_orders(db, actor)


@admin_router.get("/{order_id}", response_model=OrderDetailResponse)
async def get_order(
    order_id: int,
    actor: ActingUser = Depends(get_admin_actor),
    db: Session = Depends(get_db)
):
    return order_detail(OrderService.get_order_detail(db, actor, order_id))


@admin_router.patch("/{order_id}/status", response_model=OrderResponse)
async def update_order_status(
    order_id: int,
    data: OrderStatusUpdate,
    actor: ActingUser = Depends(get_admin_actor),
    db: Session = Depends(get_db)
):
    """Change order status; cancelling refunds points and restores stock"""
    return OrderService.update_status(db, actor, order_id, data.status)
