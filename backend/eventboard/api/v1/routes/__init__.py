from fastapi import APIRouter
from eventboard.api.v1.routes import auth
from .users import router as users_router
from .publications import router as publications_router


api_router = APIRouter()

api_router.include_router(auth.router)
api_router.include_router(users_router)
api_router.include_router(publications_router)
