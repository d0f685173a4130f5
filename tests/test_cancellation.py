"""Order status changes, refunds and stock restoration."""
import pytest

from rewardstore.core import settings
from rewardstore.core.exceptions import (
    ForbiddenError, InvalidStatusTransitionError, OrderNotFoundError, ValidationFailedError
)
from rewardstore.models import AuditLog, PointTransaction
from rewardstore.schemas.order import OrderLineRequest
from rewardstore.services import LedgerService, OrderService
from conftest import actor_for


@pytest.fixture
def placed(db, employee, make_product):
    product = make_product(points_cost=30, stock=5)
    order = OrderService.place_order(
        db, actor_for(employee), [OrderLineRequest(product_id=product.id, quantity=2)]
    )
    return order, product


def test_cancel_refunds_points_and_restores_stock(db, admin, employee, placed):
    order, product = placed

    cancelled = OrderService.update_status(db, actor_for(admin), order.id, "cancelled")

    db.refresh(employee)
    db.refresh(product)
    assert cancelled.status == "cancelled"
    assert employee.points == 100
    assert product.stock == 5

    refund = db.query(PointTransaction)\
        .filter(PointTransaction.reference_id == order.id, PointTransaction.points > 0)\
        .one()
    assert refund.points == 60
    assert refund.transaction_type == "earned"
    assert refund.description == f"Refund for order #{order.id}"


def test_cancel_twice_refunds_once(db, admin, employee, placed):
    order, product = placed

    OrderService.update_status(db, actor_for(admin), order.id, "cancelled")
    again = OrderService.update_status(db, actor_for(admin), order.id, "cancelled")

    db.refresh(employee)
    db.refresh(product)
    assert again.status == "cancelled"
    assert employee.points == 100
    assert product.stock == 5
    refunds = db.query(PointTransaction)\
        .filter(PointTransaction.reference_id == order.id, PointTransaction.points > 0)\
        .count()
    assert refunds == 1


def test_complete_then_cancel_refunds(db, admin, employee, placed):
    order, product = placed

    OrderService.update_status(db, actor_for(admin), order.id, "completed")
    db.refresh(employee)
    assert employee.points == 40

    OrderService.update_status(db, actor_for(admin), order.id, "cancelled")
    db.refresh(employee)
    db.refresh(product)
    assert employee.points == 100
    assert product.stock == 5


def test_cancel_completed_can_be_disabled(db, admin, employee, placed, monkeypatch):
    order, _ = placed
    OrderService.update_status(db, actor_for(admin), order.id, "completed")

    monkeypatch.setattr(settings, "ALLOW_CANCEL_COMPLETED", False)
    with pytest.raises(InvalidStatusTransitionError):
        OrderService.update_status(db, actor_for(admin), order.id, "cancelled")

    with pytest.raises(InvalidStatusTransitionError):
        OrderService.update_status(
            db, actor_for(admin), order.id, "cancelled", allow_cancel_completed=False
        )
    db.refresh(employee)
    assert employee.points == 40


def test_cancelled_order_cannot_be_reopened(db, admin, placed):
    order, _ = placed
    OrderService.update_status(db, actor_for(admin), order.id, "cancelled")

    with pytest.raises(InvalidStatusTransitionError) as exc_info:
        OrderService.update_status(db, actor_for(admin), order.id, "pending")
    assert exc_info.value.detail["current_status"] == "cancelled"
    assert exc_info.value.detail["new_status"] == "pending"


def test_completed_cannot_go_back_to_pending(db, admin, placed):
    order, _ = placed
    OrderService.update_status(db, actor_for(admin), order.id, "completed")

    with pytest.raises(InvalidStatusTransitionError):
        OrderService.update_status(db, actor_for(admin), order.id, "pending")


def test_unknown_status_rejected(db, admin, placed):
    order, _ = placed
    with pytest.raises(ValidationFailedError):
        OrderService.update_status(db, actor_for(admin), order.id, "shipped")


def test_missing_order(db, admin):
    with pytest.raises(OrderNotFoundError):
        OrderService.update_status(db, actor_for(admin), 404, "completed")


def test_employee_cannot_change_status(db, employee, placed):
    order, _ = placed
    with pytest.raises(ForbiddenError):
        OrderService.update_status(db, actor_for(employee), order.id, "cancelled")


def test_status_change_is_audited(db, admin, placed):
    order, _ = placed
    OrderService.update_status(db, actor_for(admin), order.id, "completed")

    entry = db.query(AuditLog).filter(AuditLog.table_name == "reward_order").one()
    assert entry.action == "STATUS_CHANGE"
    assert entry.performed_by == admin.id
    assert entry.before_data == {"status": "pending"}
    assert entry.after_data == {"status": "completed"}


def test_place_then_cancel_conserves_points_and_stock(db, admin, make_user, make_product):
    user = make_user("frank", points=500)
    mug = make_product(name="Mug", points_cost=30, stock=5)
    pen = make_product(name="Pen", points_cost=7, stock=9)

    order = OrderService.place_order(db, actor_for(user), [
        OrderLineRequest(product_id=mug.id, quantity=3),
        OrderLineRequest(product_id=pen.id, quantity=4),
    ])
    OrderService.update_status(db, actor_for(admin), order.id, "cancelled")

    for obj in (user, mug, pen):
        db.refresh(obj)
    assert user.points == 500
    assert mug.stock == 5
    assert pen.stock == 9
    assert LedgerService.verify_balance(db, user.id) == (500, 500)
