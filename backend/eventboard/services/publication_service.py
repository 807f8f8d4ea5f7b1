# eventboard/services/publication_service.py
import json
import logging
import uuid
from typing import Iterable, List, Optional

from fastapi import UploadFile
from pydantic import ValidationError as PydanticValidationError

from eventboard.core.exceptions import (
    AuthorizationError,
    InvalidIdentifierError,
    NotFoundError,
    ValidationError,
)
from eventboard.core.schemas.common import ProfilePicture, validation_message
from eventboard.core.schemas.publication import (
    Location,
    MediaEntry,
    PublicationCreate,
    PublicationDraft,
    PublicationOwner,
    PublicationResponse,
    PublicationUpdate,
    as_utc,
)
from eventboard.models.media import MediaKind
from eventboard.models.publication import Publication, PublicationCategory
from eventboard.models.user import User
from eventboard.repositories.interfaces import (
    PublicationRepositoryInterface,
    UserRepositoryInterface,
)
from eventboard.services.media_storage import MediaStorage, delete_assets, upload_files

logger = logging.getLogger(__name__)

REQUIRED_FIELDS = ("title", "description", "category", "start_dates", "end_dates")


def parse_publication_id(value: str) -> uuid.UUID:
    """Reject malformed ids before the database is touched"""
    try:
        return uuid.UUID(str(value))
    except ValueError:
        raise InvalidIdentifierError("Invalid ID")


def publication_to_response(
    publication: Publication, likes_count: int = 0, liked: bool = False
) -> PublicationResponse:
    owner = None
    if publication.owner is not None:
        owner = PublicationOwner(
            id=publication.owner.id,
            username=publication.owner.username,
            profile_picture=ProfilePicture(
                id=publication.owner.profile_picture_id,
                url=publication.owner.profile_picture_url,
            ),
        )
    return PublicationResponse(
        id=publication.id,
        title=publication.title,
        description=publication.description,
        location=Location(lat=publication.latitude, long=publication.longitude),
        category=publication.category,
        start_date=publication.start_date,
        end_date=publication.end_date,
        owner_id=publication.owner_id,
        owner=owner,
        photos=[MediaEntry(id=m.public_id, url=m.url) for m in publication.photos],
        videos=[MediaEntry(id=m.public_id, url=m.url) for m in publication.videos],
        likes_count=likes_count,
        liked=liked,
        created_at=publication.created_at,
        updated_at=publication.updated_at,
    )


class PublicationService:
    def __init__(
        self,
        publication_repository: PublicationRepositoryInterface,
        user_repository: UserRepositoryInterface,
        media_storage: MediaStorage,
    ):
        self.publication_repository = publication_repository
        self.user_repository = user_repository
        self.media_storage = media_storage

    # --- Reads ---

    async def to_responses(
        self, publications: Iterable[Publication], viewer: Optional[User] = None
    ) -> List[PublicationResponse]:
        """Attach the like count and the viewer's liked flag to each publication"""
        publications = list(publications)
        counts = await self.publication_repository.count_likes(p.id for p in publications)
        liked_ids = set()
        if viewer is not None:
            liked_ids = await self.user_repository.liked_publication_ids(viewer.id)
        return [
            publication_to_response(p, counts.get(p.id, 0), p.id in liked_ids)
            for p in publications
        ]

    async def get_publication(
        self, publication_id: str, viewer: Optional[User] = None
    ) -> PublicationResponse:
        publication = await self._load(publication_id)
        return (await self.to_responses([publication], viewer))[0]

    async def list_publications(
        self, category: Optional[str] = None, viewer: Optional[User] = None
    ) -> List[PublicationResponse]:
        publications = await self.publication_repository.list_all(category)
        return await self.to_responses(publications, viewer)

    async def list_by_category(
        self, category: str, viewer: Optional[User] = None
    ) -> List[PublicationResponse]:
        publications = await self.publication_repository.list_all(category)
        if not publications:
            raise NotFoundError("No events in that category")
        return await self.to_responses(publications, viewer)

    async def list_user_publications(self, owner: User) -> List[PublicationResponse]:
        publications = await self.publication_repository.list_by_owner(owner.id)
        return await self.to_responses(publications, owner)

    # --- Writes ---

    async def create_publication(
        self, owner: User, draft: PublicationDraft, files: List[UploadFile]
    ) -> PublicationResponse:
        """Validate, upload every attached file, then persist in one go"""
        data = self._validate_draft(draft)

        assets = await upload_files(self.media_storage, files)
        try:
            publication = await self.publication_repository.create(owner.id, data, assets)
        except Exception:
            await delete_assets(self.media_storage, [(a.public_id, a.kind) for a in assets])
            raise

        logger.info(
            f"Publication {publication.id} created by {owner.id} "
            f"with {len(publication.photos)} photos and {len(publication.videos)} videos"
        )
        return publication_to_response(publication)

    async def update_publication(
        self,
        publication_id: str,
        owner: User,
        update: PublicationUpdate,
        files: List[UploadFile],
    ) -> PublicationResponse:
        """Apply the fields present in the request and append new media"""
        publication = await self._load(publication_id)
        self._check_owner(publication, owner)

        changes = update.changes()
        start = changes.get("start_date", as_utc(publication.start_date))
        end = changes.get("end_date", as_utc(publication.end_date))
        if end < start:
            raise ValidationError("endDates must not be before startDates")

        assets = await upload_files(self.media_storage, files)
        try:
            publication = await self.publication_repository.update(publication, changes, assets)
        except Exception:
            await delete_assets(self.media_storage, [(a.public_id, a.kind) for a in assets])
            raise

        logger.info(
            f"Publication {publication.id} updated by {owner.id}: "
            f"fields={sorted(changes)} new_media={len(assets)}"
        )
        return (await self.to_responses([publication], owner))[0]

    async def remove_media(
        self, publication_id: str, owner: User, media_id: str
    ) -> PublicationResponse:
        publication = await self._load(publication_id)
        self._check_owner(publication, owner)

        entry = next((m for m in publication.media if m.public_id == media_id), None)
        if entry is None:
            raise NotFoundError("Media not found in this publication")

        await delete_assets(self.media_storage, [(entry.public_id, MediaKind(entry.kind))])
        publication = await self.publication_repository.remove_media(publication, entry)
        logger.info(f"Media {media_id} removed from publication {publication.id}")
        return (await self.to_responses([publication], owner))[0]

    async def delete_publication(self, publication_id: str, owner: User) -> None:
        """Delete hosted media first (best effort), then the record"""
        publication = await self._load(publication_id)
        self._check_owner(publication, owner)

        assets = [(m.public_id, MediaKind.PHOTO) for m in publication.photos]
        assets += [(m.public_id, MediaKind.VIDEO) for m in publication.videos]
        failed = await delete_assets(self.media_storage, assets)
        if failed:
            logger.warning(
                f"Publication {publication.id}: {len(failed)} media assets could not be deleted"
            )

        await self.publication_repository.delete(publication)
        logger.info(f"Publication {publication_id} deleted by {owner.id}")

    # --- Helpers ---

    async def _load(self, publication_id: str) -> Publication:
        parsed_id = parse_publication_id(publication_id)
        publication = await self.publication_repository.get_by_id(parsed_id)
        if not publication:
            raise NotFoundError("Publication not found")
        return publication

    @staticmethod
    def _check_owner(publication: Publication, user: User) -> None:
        if publication.owner_id != user.id:
            raise AuthorizationError("Only the owner can modify this publication")

    @staticmethod
    def _validate_draft(draft: PublicationDraft) -> PublicationCreate:
        missing = [
            name for name in REQUIRED_FIELDS
            if not (getattr(draft, name) or "").strip()
        ]

        location = None
        if draft.locations:
            try:
                location = json.loads(draft.locations)
            except ValueError:
                raise ValidationError("locations must be a JSON object with lat and long")
            if not isinstance(location, dict):
                raise ValidationError("locations must be a JSON object with lat and long")
        if not location or location.get("lat") in (None, "") or location.get("long") in (None, ""):
            missing.append("locations")

        if missing:
            raise ValidationError(f"Missing required fields: {', '.join(missing)}")

        if draft.category not in {c.value for c in PublicationCategory}:
            raise ValidationError(f"Unknown category: {draft.category}")

        try:
            return PublicationCreate(
                title=draft.title,
                description=draft.description,
                category=draft.category,
                start_date=draft.start_dates,
                end_date=draft.end_dates,
                location=location,
            )
        except PydanticValidationError as e:
            raise ValidationError(validation_message(e))
