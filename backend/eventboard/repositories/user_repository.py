# eventboard/repositories/user_repository.py
import uuid
from typing import Dict, Optional, Set
from sqlalchemy import select, delete, func, insert
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from eventboard.core.config import settings
from eventboard.core.exceptions import ConflictError
from eventboard.core.schemas.auth import UserCreate
from eventboard.models.user import User, liked_publications
from eventboard.repositories.interfaces import UserRepositoryInterface

class UserRepository(UserRepositoryInterface):
    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_by_id(self, user_id: uuid.UUID) -> Optional[User]:
        """Fetch a user by ID, always re-read from the database"""
        stmt = (
            select(User)
            .where(User.id == user_id)
            .execution_options(populate_existing=True)
        )
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def get_by_email(self, email: str) -> Optional[User]:
        """Fetch a user by email, case insensitive"""
        stmt = select(User).where(func.lower(User.email) == email.lower())
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def get_by_username(self, username: str) -> Optional[User]:
        stmt = select(User).where(User.username == username)
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def create(self, user_create: UserCreate, password_hash: str) -> User:
        """Create a user with the placeholder profile picture"""
        db_user = User(
            username=user_create.username,
            email=user_create.email.lower(),
            password_hash=password_hash,
            profile_picture_id=settings.media.DEFAULT_PROFILE_PICTURE_ID,
            profile_picture_url=settings.media.DEFAULT_PROFILE_PICTURE_URL,
        )

        self.session.add(db_user)
        try:
            await self.session.commit()
        except IntegrityError:
            # Lost a race against a concurrent registration
            await self.session.rollback()
            raise ConflictError("User with this email or username already exists")
        await self.session.refresh(db_user)
        return db_user

    async def update(self, user: User, changes: Dict) -> User:
        """Apply profile changes"""
        for field, value in changes.items():
            setattr(user, field, value)
        try:
            await self.session.commit()
        except IntegrityError:
            await self.session.rollback()
            raise ConflictError("User with this email or username already exists")
        return await self.get_by_id(user.id)

    async def liked_publication_ids(self, user_id: uuid.UUID) -> Set[uuid.UUID]:
        stmt = select(liked_publications.c.publication_id).where(
            liked_publications.c.user_id == user_id
        )
        result = await self.session.execute(stmt)
        return set(result.scalars().all())

    async def has_liked(self, user_id: uuid.UUID, publication_id: uuid.UUID) -> bool:
        stmt = select(func.count()).select_from(liked_publications).where(
            liked_publications.c.user_id == user_id,
            liked_publications.c.publication_id == publication_id,
        )
        result = await self.session.execute(stmt)
        return (result.scalar() or 0) > 0

    async def add_like(self, user_id: uuid.UUID, publication_id: uuid.UUID) -> None:
        stmt = insert(liked_publications).values(user_id=user_id, publication_id=publication_id)
        try:
            await self.session.execute(stmt)
            await self.session.commit()
        except IntegrityError:
            # A concurrent request already stored this like
            await self.session.rollback()

    async def remove_like(self, user_id: uuid.UUID, publication_id: uuid.UUID) -> None:
        stmt = delete(liked_publications).where(
            liked_publications.c.user_id == user_id,
            liked_publications.c.publication_id == publication_id,
        )
        await self.session.execute(stmt)
        await self.session.commit()
