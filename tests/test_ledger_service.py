import pytest

from rewardstore.core.exceptions import (
    ForbiddenError, InsufficientPointsError, UserNotFoundError, ValidationFailedError
)
from rewardstore.models import AuditLog, PointTransaction
from rewardstore.schemas.order import OrderLineRequest
from rewardstore.services import LedgerService, OrderService
from conftest import actor_for


def test_positive_adjustment_is_earned(db, admin, employee):
    user = LedgerService.adjust_points(db, actor_for(admin), employee.id, 50, "Quarterly bonus")

    assert user.points == 150
    entry = LedgerService.get_history(db, employee.id)[0]
    assert entry.points == 50
    assert entry.transaction_type == "earned"
    assert entry.description == "Quarterly bonus"


def test_negative_adjustment_is_adjusted(db, admin, employee):
    user = LedgerService.adjust_points(db, actor_for(admin), employee.id, -30, "Correction")

    assert user.points == 70
    entry = LedgerService.get_history(db, employee.id)[0]
    assert entry.points == -30
    assert entry.transaction_type == "adjusted"


def test_adjustment_cannot_overdraw(db, admin, employee):
    with pytest.raises(InsufficientPointsError) as exc_info:
        LedgerService.adjust_points(db, actor_for(admin), employee.id, -101, "Too much")

    assert exc_info.value.detail["shortfall"] == 1
    db.refresh(employee)
    assert employee.points == 100
    assert len(LedgerService.get_history(db, employee.id)) == 1


def test_zero_or_blank_adjustment_rejected(db, admin, employee):
    with pytest.raises(ValidationFailedError) as exc_info:
        LedgerService.adjust_points(db, actor_for(admin), employee.id, 0, "  ")

    fields = {error["field"] for error in exc_info.value.detail["errors"]}
    assert fields == {"points", "description"}


def test_only_admin_adjusts(db, employee):
    with pytest.raises(ForbiddenError):
        LedgerService.adjust_points(db, actor_for(employee), employee.id, 10, "Self service")


def test_adjust_unknown_user(db, admin):
    with pytest.raises(UserNotFoundError):
        LedgerService.adjust_points(db, actor_for(admin), 999, 10, "Bonus")


def test_adjustment_is_audited(db, admin, employee):
    LedgerService.adjust_points(db, actor_for(admin), employee.id, 25, "Bonus")

    entry = db.query(AuditLog).filter(AuditLog.action == "POINTS_ADJUST").one()
    assert entry.record_id == str(employee.id)
    assert entry.before_data == {"points": 100}
    assert entry.after_data["points"] == 125
    assert entry.after_data["delta"] == 25


def test_history_is_newest_first(db, admin, employee, make_product):
    product = make_product(points_cost=10, stock=5)
    LedgerService.adjust_points(db, actor_for(admin), employee.id, 5, "Bonus")
    order = OrderService.place_order(
        db, actor_for(employee), [OrderLineRequest(product_id=product.id, quantity=1)]
    )

    history = LedgerService.get_history(db, employee.id)
    assert [entry.points for entry in history] == [-10, 5, 100]
    assert history[0].reference_id == order.id


def test_balance_matches_ledger_after_mixed_activity(db, admin, employee, make_product):
    product = make_product(points_cost=15, stock=10)
    actor = actor_for(employee)

    OrderService.place_order(db, actor, [OrderLineRequest(product_id=product.id, quantity=2)])
    LedgerService.adjust_points(db, actor_for(admin), employee.id, 40, "Bonus")
    second = OrderService.place_order(db, actor, [OrderLineRequest(product_id=product.id, quantity=3)])
    OrderService.update_status(db, actor_for(admin), second.id, "cancelled")
    LedgerService.adjust_points(db, actor_for(admin), employee.id, -20, "Correction")

    cached, ledger_sum = LedgerService.verify_balance(db, employee.id)
    assert cached == ledger_sum == 100 - 30 + 40 - 45 + 45 - 20
    assert db.query(PointTransaction).filter(PointTransaction.user_id == employee.id).count() == 6


def test_post_entry_refuses_negative_balance(db, employee):
    with pytest.raises(InsufficientPointsError):
        LedgerService.post_entry(db, employee, -500, "adjusted", "Overdraft")
    assert employee.points == 100
