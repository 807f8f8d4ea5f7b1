# eventboard/api/v1/routes/auth.py
from typing import Optional
from fastapi import APIRouter, Depends, Request, Response, status
from sqlalchemy.ext.asyncio import AsyncSession
from eventboard.core.config import settings
from eventboard.core.database import db_helper
from eventboard.core.utils import get_session_user
from eventboard.repositories.user_repository import UserRepository
from eventboard.services.auth_service import AuthService
from eventboard.core.schemas.auth import (
    UserCreate,
    UserLogin,
    RegisterResponse,
    SessionResponse,
    LogoutResponse,
    user_to_response,
)
from eventboard.core.schemas.common import MessageResponse
from eventboard.models.user import User
import logging

logger = logging.getLogger(__name__)

router = APIRouter(tags=["authentication"])


@router.post("/register", response_model=RegisterResponse, status_code=status.HTTP_201_CREATED)
async def register_user(
    user_create: UserCreate,
    session: AsyncSession = Depends(db_helper.session_getter)
):
    """Register a new user"""
    user_repo = UserRepository(session)
    auth_service = AuthService(user_repo)
    user = await auth_service.register_user(user_create)

    logger.info(f"Successful registration for user ID: {user.id}")
    return RegisterResponse(message="User registered successfully", user_id=user.id)


@router.post("/login", response_model=MessageResponse)
async def login(
    request: Request,
    response: Response,
    credentials: UserLogin,
    session: AsyncSession = Depends(db_helper.session_getter)
):
    """Check credentials and hand out the auth cookie"""
    user_repo = UserRepository(session)
    auth_service = AuthService(user_repo)
    user, token = await auth_service.authenticate_user(credentials.email, credentials.password)

    request.session["token"] = token
    response.set_cookie(
        key=settings.security.AUTH_COOKIE_NAME,
        value=token,
        httponly=True,
        secure=settings.security.COOKIE_SECURE,
        samesite="none" if settings.security.COOKIE_SECURE else "lax",
        max_age=settings.security.JWT_ACCESS_TOKEN_EXPIRE_MINUTES * 60,
    )

    logger.info(f"Successful login for user ID: {user.id}")
    return MessageResponse(message="Login successful")


@router.get("/session", response_model=SessionResponse, response_model_exclude_none=True)
async def current_session(current_user: Optional[User] = Depends(get_session_user)):
    """Who is logged in, if anyone"""
    if current_user is None:
        return SessionResponse(message="User has not logged in")
    return SessionResponse(message="Access granted", user=user_to_response(current_user))


@router.post("/logout", response_model=LogoutResponse)
async def logout(request: Request, response: Response):
    request.session.clear()
    response.delete_cookie(settings.security.AUTH_COOKIE_NAME)
    return LogoutResponse(success=True, message="Logged out successfully")
