# eventboard/services/user_service.py
import logging
from typing import Optional, Tuple

from fastapi import UploadFile

from eventboard.core.exceptions import ConflictError, NotFoundError, ValidationError
from eventboard.core.schemas.auth import ProfileResponse, ProfileUpdate
from eventboard.core.schemas.common import ProfilePicture
from eventboard.models.media import MediaKind
from eventboard.models.user import User
from eventboard.repositories.interfaces import (
    PublicationRepositoryInterface,
    UserRepositoryInterface,
)
from eventboard.services.media_storage import MediaStorage, delete_assets
from eventboard.services.publication_service import (
    parse_publication_id,
    publication_to_response,
)

logger = logging.getLogger(__name__)

PROFILE_PICTURE_TYPES = ("image/jpeg", "image/png")


class UserService:
    def __init__(
        self,
        user_repository: UserRepositoryInterface,
        publication_repository: PublicationRepositoryInterface,
        media_storage: MediaStorage,
    ):
        self.user_repository = user_repository
        self.publication_repository = publication_repository
        self.media_storage = media_storage

    async def update_profile(
        self, user: User, data: ProfileUpdate, picture: Optional[UploadFile] = None
    ) -> User:
        """Change email, username and/or profile picture.

        The previously hosted picture is left in place on the media host.
        """
        changes = {}

        if data.email and data.email != user.email:
            existing_user = await self.user_repository.get_by_email(data.email)
            if existing_user and existing_user.id != user.id:
                raise ConflictError("A user with that email already exists")
            changes["email"] = data.email

        if data.username and data.username != user.username:
            existing_user = await self.user_repository.get_by_username(data.username)
            if existing_user and existing_user.id != user.id:
                raise ConflictError("A user with that username already exists")
            changes["username"] = data.username

        if picture is not None:
            if picture.content_type not in PROFILE_PICTURE_TYPES:
                raise ValidationError("Invalid image format, use JPEG or PNG")
            asset = await self.media_storage.upload(picture, MediaKind.PHOTO)
            changes["profile_picture_id"] = asset.public_id
            changes["profile_picture_url"] = asset.url

        if not changes:
            return user

        try:
            user = await self.user_repository.update(user, changes)
        except Exception:
            if picture is not None:
                await delete_assets(self.media_storage, [(asset.public_id, asset.kind)])
            raise
        logger.info(f"Profile of user {user.id} updated: {sorted(changes)}")
        return user

    async def toggle_like(self, user: User, publication_id: str) -> Tuple[bool, int]:
        """Like the publication if the user has not yet, otherwise unlike it.

        Only the user's liked set changes. Returns (liked, likes_count).
        """
        parsed_id = parse_publication_id(publication_id)
        publication = await self.publication_repository.get_by_id(parsed_id)
        if not publication:
            raise NotFoundError("Publication not found")

        if await self.user_repository.has_liked(user.id, parsed_id):
            await self.user_repository.remove_like(user.id, parsed_id)
            liked = False
        else:
            await self.user_repository.add_like(user.id, parsed_id)
            liked = True

        counts = await self.publication_repository.count_likes([parsed_id])
        likes_count = counts.get(parsed_id, 0)
        logger.info(f"User {user.id} {'liked' if liked else 'unliked'} publication {parsed_id}")
        return liked, likes_count

    async def get_profile(self, user: User) -> ProfileResponse:
        """Public profile plus every publication the user liked"""
        liked_ids = await self.user_repository.liked_publication_ids(user.id)
        publications = await self.publication_repository.list_by_ids(liked_ids)
        counts = await self.publication_repository.count_likes(liked_ids)

        return ProfileResponse(
            username=user.username,
            email=user.email,
            profile_picture=ProfilePicture(
                id=user.profile_picture_id,
                url=user.profile_picture_url,
            ),
            liked_publications=[
                publication_to_response(p, counts.get(p.id, 0), liked=True)
                for p in publications
            ],
        )
