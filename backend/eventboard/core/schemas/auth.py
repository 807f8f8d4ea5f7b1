# eventboard/core/schemas/auth.py
from pydantic import BaseModel, EmailStr, Field, ConfigDict, field_validator
from typing import Optional, List
from datetime import datetime
import uuid

from eventboard.core.schemas.common import CamelModel, ProfilePicture
from eventboard.core.schemas.publication import PublicationResponse


class UserCreate(BaseModel):
    username: str = Field(..., description="Public user name", min_length=1, max_length=50)
    email: EmailStr = Field(..., description="User email address")
    password: str = Field(..., description="User password", min_length=8, max_length=64)

    model_config = ConfigDict(str_strip_whitespace=True)

    @field_validator('email')
    @classmethod
    def lowercase_email(cls, v):
        return v.lower()

class UserLogin(BaseModel):
    email: EmailStr = Field(..., description="User email address")
    password: str = Field(..., description="User password", min_length=1, max_length=64)

    @field_validator('email')
    @classmethod
    def lowercase_email(cls, v):
        return v.lower()

class ProfileUpdate(BaseModel):
    """Fields left as None are not touched"""
    username: Optional[str] = Field(None, min_length=1, max_length=50)
    email: Optional[EmailStr] = None

    model_config = ConfigDict(str_strip_whitespace=True)

    @field_validator('email')
    @classmethod
    def lowercase_email(cls, v):
        return v.lower() if v else v

class UserResponse(CamelModel):
    id: uuid.UUID
    username: str
    email: str
    profile_picture: ProfilePicture
    created_at: Optional[datetime] = None

class RegisterResponse(CamelModel):
    message: str
    user_id: uuid.UUID

class SessionResponse(CamelModel):
    message: str
    user: Optional[UserResponse] = None

class LogoutResponse(CamelModel):
    success: bool = True
    message: str

class ProfileUpdateResponse(CamelModel):
    message: str
    profile_picture: ProfilePicture
    username: str
    email: str

class ProfileResponse(CamelModel):
    username: str
    email: str
    profile_picture: ProfilePicture
    liked_publications: List[PublicationResponse] = []


def user_to_response(user) -> UserResponse:
    return UserResponse(
        id=user.id,
        username=user.username,
        email=user.email,
        profile_picture=ProfilePicture(id=user.profile_picture_id, url=user.profile_picture_url),
        created_at=user.created_at,
    )
