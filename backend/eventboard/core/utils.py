# eventboard/core/utils.py
from typing import Optional
from fastapi import Depends, Request
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy.ext.asyncio import AsyncSession
from eventboard.core.config import settings
from eventboard.core.database import db_helper
from eventboard.core.exceptions import AppException, AuthenticationError
from eventboard.repositories.user_repository import UserRepository
from eventboard.services.auth_service import AuthService
from eventboard.models.user import User
import logging

logger = logging.getLogger(__name__)
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="login", auto_error=False)


def extract_token(request: Request, bearer: Optional[str]) -> Optional[str]:
    """Bearer header first, then the auth cookie, then the server session"""
    if bearer:
        return bearer
    cookie_token = request.cookies.get(settings.security.AUTH_COOKIE_NAME)
    if cookie_token:
        return cookie_token
    if "session" in request.scope:
        return request.session.get("token")
    return None


async def get_current_user(
    request: Request,
    bearer: Optional[str] = Depends(oauth2_scheme),
    session: AsyncSession = Depends(db_helper.session_getter)
) -> User:
    """Dependency for routes that require a logged in user"""
    token = extract_token(request, bearer)
    if not token:
        raise AuthenticationError("Not authenticated")

    auth_service = AuthService(UserRepository(session))
    try:
        return await auth_service.get_current_user(token)
    except AppException as e:
        logger.warning(f"Authentication failed: {e.detail}")
        raise


async def get_optional_user(
    request: Request,
    bearer: Optional[str] = Depends(oauth2_scheme),
    session: AsyncSession = Depends(db_helper.session_getter)
) -> Optional[User]:
    """Same as get_current_user, but anonymous callers get None"""
    token = extract_token(request, bearer)
    if not token:
        return None

    auth_service = AuthService(UserRepository(session))
    try:
        return await auth_service.get_current_user(token)
    except AppException as e:
        logger.info(f"Ignoring unusable credentials on a public route: {e.detail}")
        return None


async def get_session_user(
    request: Request,
    bearer: Optional[str] = Depends(oauth2_scheme),
    session: AsyncSession = Depends(db_helper.session_getter)
) -> Optional[User]:
    """None when no credentials were sent; bad credentials still fail"""
    token = extract_token(request, bearer)
    if not token:
        return None
    return await get_current_user(request, token, session)
