# eventboard/api/v1/routes/users.py
from typing import Optional
from fastapi import APIRouter, Depends, File, Form, UploadFile
from pydantic import ValidationError as PydanticValidationError
from sqlalchemy.ext.asyncio import AsyncSession
from eventboard.core.database import db_helper
from eventboard.core.exceptions import ValidationError
from eventboard.core.utils import get_current_user
from eventboard.core.schemas.auth import ProfileResponse, ProfileUpdate, ProfileUpdateResponse
from eventboard.core.schemas.common import ProfilePicture, validation_message
from eventboard.models.user import User
from eventboard.repositories.publication_repository import PublicationRepository
from eventboard.repositories.user_repository import UserRepository
from eventboard.services.media_storage import MediaStorage, get_media_storage
from eventboard.services.user_service import UserService
import logging

logger = logging.getLogger(__name__)

router = APIRouter(tags=["users"])


def get_user_service(
    session: AsyncSession = Depends(db_helper.session_getter),
    media_storage: MediaStorage = Depends(get_media_storage),
) -> UserService:
    return UserService(UserRepository(session), PublicationRepository(session), media_storage)


@router.put("/userUpdated", response_model=ProfileUpdateResponse)
async def update_profile(
    email: Optional[str] = Form(None),
    username: Optional[str] = Form(None),
    media: Optional[UploadFile] = File(None),
    current_user: User = Depends(get_current_user),
    user_service: UserService = Depends(get_user_service),
):
    """Change email, username or profile picture of the current user"""
    try:
        data = ProfileUpdate(email=email or None, username=username or None)
    except PydanticValidationError as e:
        raise ValidationError(validation_message(e))

    user = await user_service.update_profile(current_user, data, media)
    return ProfileUpdateResponse(
        message="Profile updated successfully",
        profile_picture=ProfilePicture(id=user.profile_picture_id, url=user.profile_picture_url),
        username=user.username,
        email=user.email,
    )


@router.get("/profile", response_model=ProfileResponse)
async def get_logged_user(
    current_user: User = Depends(get_current_user),
    user_service: UserService = Depends(get_user_service),
):
    """Current user together with the publications they liked"""
    return await user_service.get_profile(current_user)
