# eventboard/repositories/interfaces.py
"""Repository interfaces.

Services depend on these, so the SQLAlchemy implementations can be swapped
for another store without touching the service layer.
"""

import uuid
from abc import ABC, abstractmethod
from typing import Dict, Iterable, List, Optional, Set

from eventboard.core.schemas.auth import UserCreate
from eventboard.core.schemas.publication import PublicationCreate
from eventboard.models.media import MediaAsset, PublicationMedia
from eventboard.models.publication import Publication
from eventboard.models.user import User


class UserRepositoryInterface(ABC):
    """Users and the liked-publications relation."""

    @abstractmethod
    async def get_by_id(self, user_id: uuid.UUID) -> Optional[User]:
        ...

    @abstractmethod
    async def get_by_email(self, email: str) -> Optional[User]:
        ...

    @abstractmethod
    async def get_by_username(self, username: str) -> Optional[User]:
        ...

    @abstractmethod
    async def create(self, user_create: UserCreate, password_hash: str) -> User:
        """Persist a new user with the default profile picture."""
        ...

    @abstractmethod
    async def update(self, user: User, changes: Dict) -> User:
        ...

    @abstractmethod
    async def liked_publication_ids(self, user_id: uuid.UUID) -> Set[uuid.UUID]:
        ...

    @abstractmethod
    async def has_liked(self, user_id: uuid.UUID, publication_id: uuid.UUID) -> bool:
        ...

    @abstractmethod
    async def add_like(self, user_id: uuid.UUID, publication_id: uuid.UUID) -> None:
        ...

    @abstractmethod
    async def remove_like(self, user_id: uuid.UUID, publication_id: uuid.UUID) -> None:
        ...


class PublicationRepositoryInterface(ABC):
    """Publications and their embedded media lists."""

    @abstractmethod
    async def get_by_id(self, publication_id: uuid.UUID) -> Optional[Publication]:
        """Return a publication with owner and media loaded, or None."""
        ...

    @abstractmethod
    async def list_all(self, category: Optional[str] = None) -> List[Publication]:
        """Return publications newest first, optionally for one category."""
        ...

    @abstractmethod
    async def list_by_owner(self, owner_id: uuid.UUID) -> List[Publication]:
        ...

    @abstractmethod
    async def list_by_ids(self, publication_ids: Iterable[uuid.UUID]) -> List[Publication]:
        ...

    @abstractmethod
    async def create(
        self, owner_id: uuid.UUID, data: PublicationCreate, assets: List[MediaAsset]
    ) -> Publication:
        ...

    @abstractmethod
    async def update(
        self, publication: Publication, changes: Dict, new_assets: List[MediaAsset]
    ) -> Publication:
        """Apply scalar changes and append media in one commit."""
        ...

    @abstractmethod
    async def remove_media(self, publication: Publication, entry: PublicationMedia) -> Publication:
        ...

    @abstractmethod
    async def delete(self, publication: Publication) -> None:
        """Delete the record together with its media rows and likes."""
        ...

    @abstractmethod
    async def count_likes(self, publication_ids: Iterable[uuid.UUID]) -> Dict[uuid.UUID, int]:
        """Number of users liking each publication; absent ids mean zero."""
        ...
