"""
User Service - Registration, employee directory and profiles
"""
from sqlalchemy.orm import Session
from typing import List, Optional
import logging

from rewardstore.core import settings
from rewardstore.core.exceptions import (
    DuplicateUsernameError, ForbiddenError, UserNotFoundError,
    ValidationFailedError, BusinessRuleError
)
from rewardstore.core.security import (
    ActingUser, require_admin, require_authenticated, is_admin,
    verify_password, get_password_hash
)
from rewardstore.models import AppUser, UserRole, RewardOrder, TransactionType
from rewardstore.schemas.user import UserCreate
from .ledger_service import LedgerService
from .unit_of_work import unit_of_work
from .upload_service import UploadService

logger = logging.getLogger(__name__)

class UserService:
    """User business logic"""

    @staticmethod
    def get_user(db: Session, user_id: int) -> AppUser:
        user = db.query(AppUser).filter(AppUser.id == user_id).first()
        if not user:
            raise UserNotFoundError(user_id)
        return user

    @staticmethod
    def get_user_by_username(db: Session, username: str) -> Optional[AppUser]:
        return db.query(AppUser).filter(AppUser.username == username).first()

    @staticmethod
    def authenticate(db: Session, username: str, password: str) -> Optional[AppUser]:
        """Return the user when the credentials match"""
        user = UserService.get_user_by_username(db, username)
        if not user or not verify_password(password, user.hashed_password):
            return None
        return user

    @staticmethod
    def register(db: Session, user_data: UserCreate, actor: Optional[ActingUser] = None) -> AppUser:
        """
        Create a user.

        The very first user becomes an admin. Afterwards only an admin may
        create admins or grant an opening balance; the opening balance is
        booked as a ledger row like any other credit.
        """
        if UserService.get_user_by_username(db, user_data.username):
            raise DuplicateUsernameError(user_data.username)

        is_first_user = db.query(AppUser.id).first() is None
        if is_first_user and settings.FIRST_USER_IS_ADMIN:
            role = UserRole.ADMIN.value
        else:
            role = user_data.role or UserRole.EMPLOYEE.value
            if role == UserRole.ADMIN.value and not is_admin(actor):
                raise ForbiddenError("You are not allowed to create administrator users")

        if user_data.points and not is_admin(actor):
            raise ForbiddenError("Only administrators can grant an opening balance")

        with unit_of_work(db):
            user = AppUser(
                username=user_data.username,
                hashed_password=get_password_hash(user_data.password),
                email=user_data.email,
                display_name=user_data.display_name,
                role=role,
                points=0
            )
            db.add(user)
            db.flush()
            if user_data.points:
                LedgerService.post_entry(
                    db, user, user_data.points, TransactionType.EARNED, "Opening balance"
                )

        db.refresh(user)
        logger.info(f"User {user.id} '{user.username}' registered with role {user.role}")
        return user

    @staticmethod
    def list_employees(db: Session, actor: ActingUser) -> List[AppUser]:
        """List employee accounts (admin only)"""
        require_admin(actor)
        return db.query(AppUser)\
            .filter(AppUser.role == UserRole.EMPLOYEE.value)\
            .order_by(AppUser.id)\
            .all()

    @staticmethod
    def update_profile(
        db: Session,
        actor: ActingUser,
        display_name: Optional[str] = None,
        current_password: Optional[str] = None,
        new_password: Optional[str] = None,
        profile_image_url: Optional[str] = None
    ) -> AppUser:
        """Update the acting user's own display name, password or picture"""
        actor = require_authenticated(actor)
        user = UserService.get_user(db, actor.id)

        if display_name is None and not new_password and profile_image_url is None:
            raise ValidationFailedError("No data to update was provided")

        if new_password:
            if not current_password:
                raise ValidationFailedError(
                    "Current password is required to change the password",
                    errors=[{"field": "current_password", "message": "required"}]
                )
            if not verify_password(current_password, user.hashed_password):
                raise ValidationFailedError(
                    "Current password is incorrect",
                    errors=[{"field": "current_password", "message": "incorrect"}]
                )

        old_image = user.profile_image_url
        with unit_of_work(db):
            if display_name is not None:
                user.display_name = display_name
            if new_password:
                user.hashed_password = get_password_hash(new_password)
            if profile_image_url is not None:
                user.profile_image_url = profile_image_url

        if profile_image_url is not None and old_image and old_image != profile_image_url:
            UploadService.delete_image(old_image)

        db.refresh(user)
        return user

    @staticmethod
    def delete_user(db: Session, actor: ActingUser, user_id: int) -> None:
        """Hard delete a user; users with orders are kept for the order history"""
        require_admin(actor)
        if user_id == actor.id:
            raise BusinessRuleError("Administrators cannot delete their own account")

        with unit_of_work(db):
            user = db.query(AppUser).filter(AppUser.id == user_id).first()
            if not user:
                raise UserNotFoundError(user_id)
            if db.query(RewardOrder.id).filter(RewardOrder.user_id == user_id).first():
                raise BusinessRuleError(
                    f"User {user.username} has orders and cannot be deleted",
                    user_id=user_id
                )
            image = user.profile_image_url
            db.delete(user)

        UploadService.delete_image(image)
        logger.info(f"User {user_id} deleted by admin {actor.id}")
