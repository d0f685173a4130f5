"""
Transaction boundary shared by the order and ledger workflows
"""
from contextlib import contextmanager
import logging

from sqlalchemy.exc import DBAPIError
from sqlalchemy.orm import Session

from rewardstore.core.exceptions import ConflictError

logger = logging.getLogger(__name__)

# serialization_failure, deadlock_detected, check_violation
CONFLICT_PGCODES = {"40001", "40P01", "23514"}
CONFLICT_SQLITE_MESSAGES = ("CHECK constraint failed", "database is locked")


def is_conflict(exc: DBAPIError) -> bool:
    """True when a storage error means a competing writer got there first"""
    orig = getattr(exc, "orig", None)
    if getattr(orig, "pgcode", None) in CONFLICT_PGCODES:
        return True
    message = str(orig) if orig is not None else str(exc)
    return any(marker in message for marker in CONFLICT_SQLITE_MESSAGES)


@contextmanager
def unit_of_work(db: Session):
    """
    Commit everything done inside the block, or nothing.

    Storage conflicts are re-raised as ConflictError so the caller can retry;
    every other error is re-raised unchanged after rollback.
    """
    try:
        yield db
        db.commit()
    except DBAPIError as e:
        db.rollback()
        if is_conflict(e):
            logger.warning(f"Transaction aborted by concurrent update: {e.orig}")
            raise ConflictError() from e
        raise
    except Exception:
        db.rollback()
        raise
