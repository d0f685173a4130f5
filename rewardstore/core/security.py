"""
Acting user context and role checks
"""
from dataclasses import dataclass
import bcrypt
from typing import Optional

from .config import settings
from .exceptions import ForbiddenError, NotAuthenticatedError

ROLE_ADMIN = "admin"
ROLE_EMPLOYEE = "employee"


@dataclass(frozen=True)
class ActingUser:
    """Identity of the caller, passed explicitly into every service call"""
    id: int
    role: str

    @property
    def is_admin(self) -> bool:
        return self.role == ROLE_ADMIN


def require_authenticated(actor: Optional[ActingUser]) -> ActingUser:
    if actor is None:
        raise NotAuthenticatedError()
    return actor


def require_admin(actor: Optional[ActingUser]) -> ActingUser:
    actor = require_authenticated(actor)
    if not actor.is_admin:
        raise ForbiddenError()
    return actor


def is_admin(actor: Optional[ActingUser]) -> bool:
    return actor is not None and actor.is_admin


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify a password against its hash using bcrypt"""
    try:
        return bcrypt.checkpw(
            plain_password.encode('utf-8'),
            hashed_password.encode('utf-8')
        )
    except ValueError:
        return False


def get_password_hash(password: str) -> str:
    """Hash a password using bcrypt"""
    return bcrypt.hashpw(password.encode('utf-8'), bcrypt.gensalt(rounds=settings.BCRYPT_ROUNDS)).decode('utf-8')
