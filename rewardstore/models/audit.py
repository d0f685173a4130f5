"""
Audit Log Model
"""
from sqlalchemy import Column, String, Integer, DateTime, JSON
from sqlalchemy.sql import func
from rewardstore.core import Base
from .base import IdMixin

class AuditLog(Base, IdMixin):
    """Audit Log for administrative overrides"""
    __tablename__ = "audit_log"

    table_name = Column(String(100), nullable=False, index=True)
    record_id = Column(String(50), nullable=False, index=True)

    action = Column(String(30), nullable=False)  # POINTS_ADJUST, STATUS_CHANGE, DELETE, DEACTIVATE

    performed_by = Column(Integer)  # Not a foreign key so audit rows survive user deletion
    performed_at = Column(DateTime(timezone=True), server_default=func.now(), index=True)

    # Before/After data
    before_data = Column(JSON)
    after_data = Column(JSON)
