"""
Audit Service - records administrative overrides
"""
from sqlalchemy.orm import Session
from typing import Optional, Any, Dict

from rewardstore.models import AuditLog

class AuditService:

    @staticmethod
    def record(
        db: Session,
        table_name: str,
        record_id: Any,
        action: str,
        performed_by: Optional[int] = None,
        before_data: Optional[Dict] = None,
        after_data: Optional[Dict] = None
    ) -> AuditLog:
        """Add an audit row to the current unit of work (no commit)"""
        audit = AuditLog(
            table_name=table_name,
            record_id=str(record_id),
            action=action,
            performed_by=performed_by,
            before_data=before_data,
            after_data=after_data
        )
        db.add(audit)
        return audit
