"""
Ledger Service - Point balances and the append-only transaction history
"""
from sqlalchemy.orm import Session
from sqlalchemy import func, update
from typing import List, Optional, Tuple
import logging

from rewardstore.models import AppUser, PointTransaction, TransactionType
from rewardstore.core.exceptions import (
    UserNotFoundError, InsufficientPointsError, ValidationFailedError, ConflictError
)
from rewardstore.core.security import ActingUser, require_admin
from .audit_service import AuditService
from .unit_of_work import unit_of_work

logger = logging.getLogger(__name__)

class LedgerService:
    """Point ledger business logic"""

    @staticmethod
    def post_entry(
        db: Session,
        user: AppUser,
        points: int,
        transaction_type: TransactionType,
        description: str,
        reference_id: Optional[int] = None
    ) -> PointTransaction:
        """
        Append a ledger row and move the cached balance by the same amount.

        This is the only place that writes AppUser.points. It does not commit:
        the caller owns the transaction and should hold a row lock on the user.

        The balance moves in SQL and only while it stays non-negative, so a
        competing writer that committed after `user` was read raises
        ConflictError instead of being overwritten.
        """
        if user.points + points < 0:
            raise InsufficientPointsError(user_points=user.points, required_points=-points)

        result = db.execute(
            update(AppUser)
            .where(AppUser.id == user.id, AppUser.points + points >= 0)
            .values(points=AppUser.points + points)
            .execution_options(synchronize_session=False)
        )
        if result.rowcount != 1:
            logger.warning(f"Balance of user {user.id} changed concurrently, {points} not applied")
            raise ConflictError()

        entry = PointTransaction(
            user_id=user.id,
            points=points,
            description=description,
            transaction_type=TransactionType(transaction_type).value,
            reference_id=reference_id
        )
        db.add(entry)
        db.refresh(user, attribute_names=["points"])
        return entry

    @staticmethod
    def lock_user(db: Session, user_id: int) -> AppUser:
        """Load a user with a row lock for the rest of the transaction"""
        user = db.query(AppUser).filter(AppUser.id == user_id)\
            .with_for_update().populate_existing().first()
        if not user:
            raise UserNotFoundError(user_id)
        return user

    @staticmethod
    def get_balance(db: Session, user_id: int) -> int:
        """Get the cached balance"""
        user = db.query(AppUser).filter(AppUser.id == user_id).first()
        if not user:
            raise UserNotFoundError(user_id)
        return user.points

    @staticmethod
    def get_history(db: Session, user_id: int) -> List[PointTransaction]:
        """Get all ledger rows for a user, newest first"""
        return db.query(PointTransaction)\
            .filter(PointTransaction.user_id == user_id)\
            .order_by(PointTransaction.created_at.desc(), PointTransaction.id.desc())\
            .all()

    @staticmethod
    def get_ledger_sum(db: Session, user_id: int) -> int:
        total = db.query(func.coalesce(func.sum(PointTransaction.points), 0))\
            .filter(PointTransaction.user_id == user_id)\
            .scalar()
        return int(total or 0)

    @staticmethod
    def verify_balance(db: Session, user_id: int) -> Tuple[int, int]:
        """Return (cached balance, sum of ledger rows) for reconciliation"""
        cached = LedgerService.get_balance(db, user_id)
        return cached, LedgerService.get_ledger_sum(db, user_id)

    @staticmethod
    def adjust_points(
        db: Session,
        actor: ActingUser,
        user_id: int,
        points: int,
        description: str
    ) -> AppUser:
        """Administrative adjustment by a signed delta, always paired with a ledger row"""
        require_admin(actor)

        errors = []
        if points == 0:
            errors.append({"field": "points", "message": "must not be zero"})
        if not description or not description.strip():
            errors.append({"field": "description", "message": "must not be empty"})
        if errors:
            raise ValidationFailedError(errors=errors)

        transaction_type = TransactionType.EARNED if points > 0 else TransactionType.ADJUSTED

        with unit_of_work(db):
            user = LedgerService.lock_user(db, user_id)
            before = user.points
            LedgerService.post_entry(db, user, points, transaction_type, description.strip())
            AuditService.record(
                db,
                table_name="app_user",
                record_id=user.id,
                action="POINTS_ADJUST",
                performed_by=actor.id,
                before_data={"points": before},
                after_data={"points": user.points, "delta": points, "description": description.strip()}
            )

        db.refresh(user)
        logger.info(f"User {user.id} points adjusted by {points} (by admin {actor.id}), balance {user.points}")
        return user
