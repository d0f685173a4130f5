"""
Authentication API - Login, JWT Token, Registration
"""
from fastapi import APIRouter, Depends, status
from fastapi.security import OAuth2PasswordBearer, OAuth2PasswordRequestForm
from sqlalchemy.orm import Session
from pydantic import BaseModel
from typing import Optional
from datetime import datetime, timedelta, timezone
from jose import JWTError, jwt
import logging

from rewardstore.core import get_db, settings
from rewardstore.core.exceptions import NotAuthenticatedError
from rewardstore.core.security import ActingUser, require_admin
from rewardstore.models import AppUser
from rewardstore.schemas.user import UserCreate, UserResponse
from rewardstore.services import UserService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["auth"])

# ============== Configuration ==============

SECRET_KEY = settings.SECRET_KEY
ALGORITHM = "HS256"

# OAuth2 scheme
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/auth/login", auto_error=False)


# ============== Schemas ==============

class Token(BaseModel):
    access_token: str
    token_type: str
    user: UserResponse


# ============== Helper Functions ==============

def create_access_token(data: dict, expires_delta: Optional[timedelta] = None) -> str:
    """Create JWT access token"""
    to_encode = data.copy()
    if expires_delta:
        expire = datetime.now(timezone.utc) + expires_delta
    else:
        expire = datetime.now(timezone.utc) + timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
    to_encode.update({"exp": expire})
    return jwt.encode(to_encode, SECRET_KEY, algorithm=ALGORITHM)


async def get_current_user(
    token: Optional[str] = Depends(oauth2_scheme),
    db: Session = Depends(get_db)
) -> Optional[AppUser]:
    """Get current user from JWT token, None when anonymous or invalid"""
    if not token:
        return None

    try:
        payload = jwt.decode(token, SECRET_KEY, algorithms=[ALGORITHM])
        user_id = int(payload.get("sub"))
    except (JWTError, TypeError, ValueError):
        return None

    return db.query(AppUser).filter(AppUser.id == user_id).first()


async def get_current_active_user(
    current_user: Optional[AppUser] = Depends(get_current_user)
) -> AppUser:
    """Require authenticated user"""
    if not current_user:
        raise NotAuthenticatedError()
    return current_user


async def get_optional_actor(
    current_user: Optional[AppUser] = Depends(get_current_user)
) -> Optional[ActingUser]:
    """Acting user for endpoints that also serve anonymous callers"""
    if not current_user:
        return None
    return ActingUser(id=current_user.id, role=current_user.role)


async def get_actor(
    current_user: AppUser = Depends(get_current_active_user)
) -> ActingUser:
    """Acting user for authenticated endpoints"""
    return ActingUser(id=current_user.id, role=current_user.role)


async def get_admin_actor(actor: ActingUser = Depends(get_actor)) -> ActingUser:
    """Acting user for admin endpoints"""
    return require_admin(actor)


# ============== API Endpoints ==============

@router.post("/register", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
async def register(
    user_data: UserCreate,
    actor: Optional[ActingUser] = Depends(get_optional_actor),
    db: Session = Depends(get_db)
):
    """
    Register a user. The first user becomes an administrator; afterwards
    only an administrator may create other administrators.
    """
    return UserService.register(db, user_data, actor)


@router.post("/login", response_model=Token)
async def login(
    form_data: OAuth2PasswordRequestForm = Depends(),
    db: Session = Depends(get_db)
):
    """
    Login with username and password, returns JWT token
    """
    user = UserService.authenticate(db, form_data.username, form_data.password)
    if not user:
        logger.warning(f"Failed login for username {form_data.username}")
        raise NotAuthenticatedError("Incorrect username or password")

    access_token = create_access_token(
        data={"sub": str(user.id), "username": user.username, "role": user.role}
    )
    return {"access_token": access_token, "token_type": "bearer", "user": user}


@router.get("/me", response_model=UserResponse)
async def get_me(current_user: AppUser = Depends(get_current_active_user)):
    """Get current authenticated user info"""
    return current_user


__all__ = [
    "router", "create_access_token", "get_current_user", "get_current_active_user",
    "get_optional_actor", "get_actor", "get_admin_actor",
]
