# eventboard/services/auth_service.py
import logging
import uuid
from typing import Tuple
from eventboard.core.security import (
    get_password_hash,
    verify_password,
    create_access_token,
    decode_token,
    TokenExpiredError,
    InvalidTokenError,
)
from eventboard.repositories.interfaces import UserRepositoryInterface
from eventboard.core.schemas.auth import UserCreate
from eventboard.core.exceptions import (
    AuthenticationError,
    AuthorizationError,
    ConflictError,
    NotFoundError,
)
from eventboard.models.user import User

logger = logging.getLogger(__name__)


class AuthService:
    def __init__(self, user_repository: UserRepositoryInterface):
        self.user_repository = user_repository

    async def register_user(self, user_create: UserCreate) -> User:
        """Register a user; email and username must both be unused"""
        existing_user = await self.user_repository.get_by_email(user_create.email)
        if existing_user:
            raise ConflictError("A user with that email already exists")

        existing_user = await self.user_repository.get_by_username(user_create.username)
        if existing_user:
            raise ConflictError("A user with that username already exists")

        password_hash = get_password_hash(user_create.password)
        return await self.user_repository.create(user_create, password_hash)

    async def authenticate_user(self, email: str, password: str) -> Tuple[User, str]:
        """Check credentials and issue an access token"""
        user = await self.user_repository.get_by_email(email.lower())
        if not user:
            raise AuthenticationError("Invalid email or password")

        if not verify_password(password, user.password_hash):
            raise AuthenticationError("Invalid email or password")

        return user, self.generate_token(user.id)

    def generate_token(self, user_id: uuid.UUID) -> str:
        return create_access_token(data={"sub": str(user_id)})

    async def get_current_user(self, token: str) -> User:
        """Resolve the user behind a token, re-reading it from the database"""
        try:
            payload = decode_token(token)
        except TokenExpiredError as e:
            raise AuthenticationError(str(e))
        except InvalidTokenError as e:
            raise AuthorizationError(str(e))

        if payload.get("type") != "access":
            raise AuthorizationError("Invalid token type for this operation")

        try:
            user_id = uuid.UUID(str(payload.get("sub")))
        except ValueError:
            raise AuthorizationError("Invalid token payload")

        user = await self.user_repository.get_by_id(user_id)
        if not user:
            raise NotFoundError("User not found")

        return user
