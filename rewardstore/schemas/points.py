"""
Point Ledger Schemas
"""
from pydantic import BaseModel
from typing import Optional
from datetime import datetime

class PointTransactionResponse(BaseModel):
    id: int
    user_id: int
    points: int
    description: str
    transaction_type: str
    reference_id: Optional[int]
    created_at: Optional[datetime]

    class Config:
        from_attributes = True

class BalanceResponse(BaseModel):
    user_id: int
    points: int

class BalanceCheckResponse(BaseModel):
    user_id: int
    cached: int
    ledger_sum: int
    consistent: bool
