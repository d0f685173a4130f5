"""
Points API - own ledger and admin adjustments
"""
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from typing import List

from rewardstore.core import get_db
from rewardstore.core.security import ActingUser
from rewardstore.schemas.points import PointTransactionResponse, BalanceResponse, BalanceCheckResponse
from rewardstore.schemas.user import PointsAdjust, UserResponse
from rewardstore.services import LedgerService
from .auth import get_actor, get_admin_actor

router = APIRouter(prefix="/protected/points", tags=["points"])
admin_router = APIRouter(prefix="/admin/users", tags=["admin"])


@router.get("/history", response_model=List[PointTransactionResponse])
async def point_history(
    actor: ActingUser = Depends(get_actor),
    db: Session = Depends(get_db)
):
    return LedgerService.get_history(db, actor.id)


@router.get("/balance", response_model=BalanceResponse)
async def point_balance(
    actor: ActingUser = Depends(get_actor),
    db: Session = Depends(get_db)
):
    return {"user_id": actor.id, "points": LedgerService.get_balance(db, actor.id)}


@admin_router.patch("/{user_id}/points", response_model=UserResponse)
async def adjust_points(
    user_id: int,
    data: PointsAdjust,
    actor: ActingUser = Depends(get_admin_actor),
    db: Session = Depends(get_db)
):
    """Credit or debit a user's points; always written to the ledger"""
    return LedgerService.adjust_points(db, actor, user_id, data.points, data.description)


@admin_router.get("/{user_id}/points/verify", response_model=BalanceCheckResponse)
async def verify_points(
    user_id: int,
    actor: ActingUser = Depends(get_admin_actor),
    db: Session = Depends(get_db)
):
    """Compare the cached balance with the ledger sum"""
    cached, ledger_sum = LedgerService.verify_balance(db, user_id)
    return {
        "user_id": user_id,
        "cached": cached,
        "ledger_sum": ledger_sum,
        "consistent": cached == ledger_sum,
    }
