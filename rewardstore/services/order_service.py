"""
Order Service - Checkout and order lifecycle

Placement and cancellation each run as one unit of work: the user row and
the touched product rows are locked (user first, then products by id), the
business checks are made against the locked rows, and every write commits
together or not at all. Stock, balance and status are moved with guarded
UPDATE statements, so a competing writer that slipped in between the
checks and the writes surfaces as ConflictError rather than a lost update.
"""
from sqlalchemy import update
from sqlalchemy.orm import Session, joinedload
from typing import Dict, List, Optional, Sequence, Tuple
import logging

from rewardstore.core import settings
from rewardstore.core.exceptions import (
    OrderNotFoundError, ProductNotFoundError, ProductUnavailableError,
    InsufficientStockError, InsufficientPointsError, InvalidStatusTransitionError,
    ValidationFailedError, ForbiddenError, ConflictError
)
from rewardstore.core.security import ActingUser, require_admin, require_authenticated
from rewardstore.models import RewardOrder, OrderItem, OrderStatus, Product, TransactionType
from rewardstore.schemas.order import OrderLineRequest
from .audit_service import AuditService
from .ledger_service import LedgerService
from .unit_of_work import unit_of_work

logger = logging.getLogger(__name__)

class OrderService:
    """Order business logic"""

    # Valid status transitions
    STATUS_TRANSITIONS = {
        OrderStatus.PENDING.value: [OrderStatus.COMPLETED.value, OrderStatus.CANCELLED.value],
        OrderStatus.COMPLETED.value: [OrderStatus.CANCELLED.value],
        OrderStatus.CANCELLED.value: [],
    }

    @staticmethod
    def _merge_lines(items: Sequence[OrderLineRequest]) -> List[Tuple[int, int]]:
        """Collapse repeated product ids, keeping first-seen order"""
        if not items:
            raise ValidationFailedError(errors=[{"field": "items", "message": "must not be empty"}])

        merged: Dict[int, int] = {}
        errors = []
        for index, item in enumerate(items):
            if item.quantity <= 0:
                errors.append({"field": f"items.{index}.quantity", "message": "must be greater than 0"})
                continue
            merged[item.product_id] = merged.get(item.product_id, 0) + item.quantity
        if errors:
            raise ValidationFailedError(errors=errors)
        return list(merged.items())

    @staticmethod
    def _lock_products(db: Session, product_ids) -> Dict[int, Product]:
        products = db.query(Product)\
            .filter(Product.id.in_(sorted(product_ids)))\
            .order_by(Product.id)\
            .with_for_update()\
            .populate_existing()\
            .all()
        return {p.id: p for p in products}

    @staticmethod
    def _lock_order(db: Session, order_id: int) -> RewardOrder:
        order = db.query(RewardOrder)\
            .filter(RewardOrder.id == order_id)\
            .with_for_update()\
            .populate_existing()\
            .first()
        if not order:
            raise OrderNotFoundError(order_id)
        return order

    @staticmethod
    def _adjust_stock(db: Session, product_id: int, delta: int) -> bool:
        """Move stock by delta in SQL; False when the row is gone or would go negative"""
        result = db.execute(
            update(Product)
            .where(Product.id == product_id, Product.stock + delta >= 0)
            .values(stock=Product.stock + delta)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount == 1

    @staticmethod
    def place_order(db: Session, actor: ActingUser, items: Sequence[OrderLineRequest]) -> RewardOrder:
        """
        Convert points into products for the acting user.

        Lines naming the same product are merged first, so the order gets one
        OrderItem per distinct product and may hold fewer items than the
        request had lines.

        Raises ProductNotFoundError, ProductUnavailableError,
        InsufficientStockError or InsufficientPointsError (first failure wins)
        without writing anything.
        """
        actor = require_authenticated(actor)
        lines = OrderService._merge_lines(items)

        with unit_of_work(db):
            user = LedgerService.lock_user(db, actor.id)
            products = OrderService._lock_products(db, [product_id for product_id, _ in lines])

            total_points = 0
            for product_id, quantity in lines:
                product = products.get(product_id)
                if not product:
                    raise ProductNotFoundError(product_id)
                if not product.is_active:
                    raise ProductUnavailableError(product.id, product.name)
                if product.stock < quantity:
                    raise InsufficientStockError(product.id, product.name, product.stock, quantity)
                total_points += product.points_cost * quantity

            if user.points < total_points:
                raise InsufficientPointsError(user_points=user.points, required_points=total_points)

            order = RewardOrder(
                user_id=user.id,
                total_points=total_points,
                status=OrderStatus.PENDING.value
            )
            db.add(order)
            db.flush()

            for product_id, quantity in lines:
                product = products[product_id]
                db.add(OrderItem(
                    order_id=order.id,
                    product_id=product.id,
                    quantity=quantity,
                    points_cost=product.points_cost
                ))
                if not OrderService._adjust_stock(db, product.id, -quantity):
                    logger.warning(f"Stock of product {product.id} changed concurrently during order #{order.id}")
                    raise ConflictError()

            LedgerService.post_entry(
                db, user, -total_points, TransactionType.SPENT,
                f"Order #{order.id}", reference_id=order.id
            )

        db.refresh(order)
        logger.info(f"Order #{order.id} placed by user {user.id}: {total_points} points, {len(lines)} lines")
        return order

    @staticmethod
    def _reverse_order(db: Session, order: RewardOrder) -> None:
        """Refund points and restore stock for an order (no commit)"""
        user = LedgerService.lock_user(db, order.user_id)
        OrderService._lock_products(db, {item.product_id for item in order.items})

        LedgerService.post_entry(
            db, user, order.total_points, TransactionType.EARNED,
            f"Refund for order #{order.id}", reference_id=order.id
        )

        for item in order.items:
            if not OrderService._adjust_stock(db, item.product_id, item.quantity):
                logger.warning(f"Product {item.product_id} of order #{order.id} no longer exists, stock not restored")

    @staticmethod
    def update_status(
        db: Session,
        actor: ActingUser,
        order_id: int,
        new_status: str,
        allow_cancel_completed: Optional[bool] = None
    ) -> RewardOrder:
        """
        Move an order to a new status.

        Cancelling a non-cancelled order refunds its points and restores its
        stock in the same transaction as the status write. Cancelling an
        already cancelled order, or writing the current status again, changes
        nothing.
        """
        actor = require_admin(actor)
        if new_status not in OrderService.STATUS_TRANSITIONS:
            raise ValidationFailedError(
                "Invalid status provided",
                errors=[{"field": "status", "message": f"must be one of {list(OrderService.STATUS_TRANSITIONS)}"}]
            )
        if allow_cancel_completed is None:
            allow_cancel_completed = settings.ALLOW_CANCEL_COMPLETED

        with unit_of_work(db):
            order = OrderService._lock_order(db, order_id)

            old_status = order.status
            if new_status != old_status:
                allowed = OrderService.STATUS_TRANSITIONS.get(old_status, [])
                if (old_status == OrderStatus.COMPLETED.value
                        and new_status == OrderStatus.CANCELLED.value
                        and not allow_cancel_completed):
                    allowed = []
                if new_status not in allowed:
                    raise InvalidStatusTransitionError(order.id, old_status, new_status)

                result = db.execute(
                    update(RewardOrder)
                    .where(RewardOrder.id == order.id, RewardOrder.status == old_status)
                    .values(status=new_status)
                    .execution_options(synchronize_session=False)
                )
                if result.rowcount != 1:
                    logger.warning(f"Order #{order.id} changed status concurrently, {new_status} not applied")
                    raise ConflictError()

                if new_status == OrderStatus.CANCELLED.value:
                    OrderService._reverse_order(db, order)

                AuditService.record(
                    db,
                    table_name="reward_order",
                    record_id=order.id,
                    action="STATUS_CHANGE",
                    performed_by=actor.id,
                    before_data={"status": old_status},
                    after_data={"status": new_status}
                )

        db.refresh(order)
        if new_status != old_status:
            logger.info(f"Order #{order.id} status {old_status} -> {new_status} (by admin {actor.id})")
        return order

    @staticmethod
    def get_orders_for_user(db: Session, user_id: int) -> List[RewardOrder]:
        """Get a user's orders, newest first"""
        return db.query(RewardOrder)\
            .filter(RewardOrder.user_id == user_id)\
            .order_by(RewardOrder.created_at.desc(), RewardOrder.id.desc())\
            .all()

    @staticmethod
    def get_all_orders(db: Session, actor: ActingUser) -> List[RewardOrder]:
        """Get every order with its owner loaded (admin only)"""
        require_admin(actor)
        return db.query(RewardOrder)\
            .options(joinedload(RewardOrder.user))\
            .order_by(RewardOrder.created_at.desc(), RewardOrder.id.desc())\
            .all()

    @staticmethod
    def get_order_detail(db: Session, actor: ActingUser, order_id: int) -> RewardOrder:
        """Get an order with items and products; owners and admins only"""
        actor = require_authenticated(actor)
        order = db.query(RewardOrder)\
            .options(joinedload(RewardOrder.items).joinedload(OrderItem.product))\
            .filter(RewardOrder.id == order_id)\
            .first()
        if not order:
            raise OrderNotFoundError(order_id)
        if order.user_id != actor.id and not actor.is_admin:
            raise ForbiddenError("You are not allowed to view this order")
        return order
