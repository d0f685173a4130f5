"""
Users API - employee directory and own profile
"""
from fastapi import APIRouter, Depends, File, Form, UploadFile
from sqlalchemy.orm import Session
from typing import List, Optional

from rewardstore.core import get_db
from rewardstore.core.security import ActingUser
from rewardstore.schemas.user import UserResponse
from rewardstore.services import UserService, UploadService
from .auth import get_actor, get_admin_actor

router = APIRouter(prefix="/protected", tags=["users"])
admin_router = APIRouter(prefix="/admin", tags=["admin"])

PROFILE_IMAGE_DIR = "profile_images"


@admin_router.get("/employees", response_model=List[UserResponse])
async def list_employees(
    actor: ActingUser = Depends(get_admin_actor),
    db: Session = Depends(get_db)
):
    """List employees (password hashes are never returned)"""
    return UserService.list_employees(db, actor)


@admin_router.delete("/users/{user_id}")
async def delete_user(
    user_id: int,
    actor: ActingUser = Depends(get_admin_actor),
    db: Session = Depends(get_db)
):
    UserService.delete_user(db, actor, user_id)
    return {"message": "User deleted"}


@router.patch("/profile", response_model=UserResponse)
async def update_profile(
    display_name: Optional[str] = Form(None),
    current_password: Optional[str] = Form(None),
    new_password: Optional[str] = Form(None),
    profile_image: Optional[UploadFile] = File(None),
    actor: ActingUser = Depends(get_actor),
    db: Session = Depends(get_db)
):
    """Update own display name, password or profile picture"""
    profile_image_url = None
    if profile_image is not None and profile_image.filename:
        profile_image_url = UploadService.save_image(profile_image, PROFILE_IMAGE_DIR, "profileImage")

    try:
        return UserService.update_profile(
            db,
            actor,
            display_name=display_name,
            current_password=current_password,
            new_password=new_password,
            profile_image_url=profile_image_url,
        )
    except Exception:
        UploadService.delete_image(profile_image_url)
        raise
