"""
User Schemas
"""
from pydantic import BaseModel, Field
from typing import Optional
from datetime import datetime

class UserCreate(BaseModel):
    username: str = Field(min_length=1, max_length=100)
    password: str = Field(min_length=1)
    email: str = Field(min_length=3, max_length=200)
    display_name: Optional[str] = None
    role: Optional[str] = Field(default=None, pattern="^(admin|employee)$")
    points: int = Field(default=0, ge=0)

class UserResponse(BaseModel):
    id: int
    username: str
    email: str
    display_name: Optional[str]
    profile_image_url: Optional[str]
    role: str
    points: int
    created_at: Optional[datetime]
    updated_at: Optional[datetime]

    class Config:
        from_attributes = True

class PointsAdjust(BaseModel):
    points: int
    description: str = Field(min_length=1)
