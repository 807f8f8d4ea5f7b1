# eventboard/api/v1/routes/publications.py
import json
import logging
from typing import List, Optional, Tuple

from fastapi import APIRouter, Depends, File, Form, Query, Request, UploadFile, status
from pydantic import ValidationError as PydanticValidationError
from sqlalchemy.ext.asyncio import AsyncSession
from starlette.datastructures import UploadFile as StarletteUploadFile

from eventboard.core.database import db_helper
from eventboard.core.exceptions import NotFoundError, ValidationError
from eventboard.core.utils import get_current_user, get_optional_user
from eventboard.core.schemas.common import MessageResponse, validation_message
from eventboard.core.schemas.publication import (
    LikeToggleResponse,
    PublicationCreatedResponse,
    PublicationDraft,
    PublicationResponse,
    PublicationUpdate,
    PublicationUpdatedResponse,
)
from eventboard.models.user import User
from eventboard.repositories.publication_repository import PublicationRepository
from eventboard.repositories.user_repository import UserRepository
from eventboard.services.media_storage import MediaStorage, get_media_storage
from eventboard.services.publication_service import PublicationService, parse_publication_id
from eventboard.services.user_service import UserService
from eventboard.api.v1.routes.users import get_user_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/publications", tags=["publications"])

UPDATE_FIELDS = ("title", "description", "category", "startDates", "endDates", "locations")


def get_publication_service(
    session: AsyncSession = Depends(db_helper.session_getter),
    media_storage: MediaStorage = Depends(get_media_storage),
) -> PublicationService:
    return PublicationService(PublicationRepository(session), UserRepository(session), media_storage)


async def parse_update_request(request: Request) -> Tuple[PublicationUpdate, List[StarletteUploadFile]]:
    """PUT accepts either multipart (with media files) or a JSON object"""
    content_type = request.headers.get("content-type", "")
    files: List[StarletteUploadFile] = []

    if content_type.startswith(("multipart/form-data", "application/x-www-form-urlencoded")):
        form = await request.form()
        fields = {name: form.get(name) for name in UPDATE_FIELDS if name in form}
        if isinstance(fields.get("locations"), str):
            try:
                fields["locations"] = json.loads(fields["locations"])
            except ValueError:
                raise ValidationError("locations must be a JSON object with lat and long")
        files = [f for f in form.getlist("media") if isinstance(f, StarletteUploadFile)]
    else:
        try:
            body = await request.json()
        except ValueError:
            raise ValidationError("Request body must be a JSON object")
        if not isinstance(body, dict):
            raise ValidationError("Request body must be a JSON object")
        fields = {name: body[name] for name in UPDATE_FIELDS if name in body}

    try:
        return PublicationUpdate.model_validate(fields), files
    except PydanticValidationError as e:
        raise ValidationError(validation_message(e))


@router.get("", response_model=List[PublicationResponse])
async def list_publications(
    category: Optional[str] = Query(None, description="Only this category"),
    viewer: Optional[User] = Depends(get_optional_user),
    publication_service: PublicationService = Depends(get_publication_service),
):
    """The whole feed, newest first"""
    publications = await publication_service.list_publications(category, viewer)
    if not publications:
        raise NotFoundError("No events to show")
    return publications


@router.get("/user", response_model=List[PublicationResponse])
async def list_user_publications(
    current_user: User = Depends(get_current_user),
    publication_service: PublicationService = Depends(get_publication_service),
):
    """Publications created by the current user"""
    return await publication_service.list_user_publications(current_user)


@router.get("/searched/for/category/{category}", response_model=List[PublicationResponse])
async def list_publications_by_category(
    category: str,
    viewer: Optional[User] = Depends(get_optional_user),
    publication_service: PublicationService = Depends(get_publication_service),
):
    return await publication_service.list_by_category(category, viewer)


@router.get("/{publication_id}", response_model=PublicationResponse)
async def get_publication(
    publication_id: str,
    viewer: Optional[User] = Depends(get_optional_user),
    publication_service: PublicationService = Depends(get_publication_service),
):
    return await publication_service.get_publication(publication_id, viewer)


@router.post("", response_model=PublicationCreatedResponse, status_code=status.HTTP_201_CREATED)
async def create_publication(
    title: Optional[str] = Form(None),
    description: Optional[str] = Form(None),
    category: Optional[str] = Form(None),
    start_dates: Optional[str] = Form(None, alias="startDates"),
    end_dates: Optional[str] = Form(None, alias="endDates"),
    locations: Optional[str] = Form(None, description='JSON string {"lat": .., "long": ..}'),
    media: Optional[List[UploadFile]] = File(None),
    current_user: User = Depends(get_current_user),
    publication_service: PublicationService = Depends(get_publication_service),
):
    """Create a publication; every attached file is uploaded before anything is stored"""
    draft = PublicationDraft(
        title=title,
        description=description,
        category=category,
        start_dates=start_dates,
        end_dates=end_dates,
        locations=locations,
    )
    publication = await publication_service.create_publication(current_user, draft, media or [])
    return PublicationCreatedResponse(
        message="Publication created successfully",
        publication_id=publication.id,
    )


@router.put("/{publication_id}", response_model=PublicationUpdatedResponse)
async def update_publication(
    publication_id: str,
    request: Request,
    current_user: User = Depends(get_current_user),
    publication_service: PublicationService = Depends(get_publication_service),
):
    """Partial update; new media are appended to the existing lists"""
    parse_publication_id(publication_id)
    update, files = await parse_update_request(request)
    publication = await publication_service.update_publication(
        publication_id, current_user, update, files
    )
    return PublicationUpdatedResponse(
        message="Publication updated successfully",
        publication=publication,
    )


@router.delete("/{publication_id}", response_model=MessageResponse)
async def delete_publication(
    publication_id: str,
    current_user: User = Depends(get_current_user),
    publication_service: PublicationService = Depends(get_publication_service),
):
    await publication_service.delete_publication(publication_id, current_user)
    return MessageResponse(message="Publication deleted successfully")


@router.delete("/{publication_id}/media/{media_id:path}", response_model=PublicationUpdatedResponse)
async def remove_publication_media(
    publication_id: str,
    media_id: str,
    current_user: User = Depends(get_current_user),
    publication_service: PublicationService = Depends(get_publication_service),
):
    publication = await publication_service.remove_media(publication_id, current_user, media_id)
    return PublicationUpdatedResponse(message="Media removed successfully", publication=publication)


@router.patch("/{publication_id}/like", response_model=LikeToggleResponse)
async def toggle_like(
    publication_id: str,
    current_user: User = Depends(get_current_user),
    user_service: UserService = Depends(get_user_service),
):
    """Like the publication, or take the like back if it was already there"""
    liked, likes_count = await user_service.toggle_like(current_user, publication_id)
    return LikeToggleResponse(
        message="Like added" if liked else "Like removed",
        likes_count=likes_count,
        liked=liked,
    )
