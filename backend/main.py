# main.py
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.middleware.sessions import SessionMiddleware
from datetime import datetime, timezone
from contextlib import asynccontextmanager
from sqlalchemy.exc import SQLAlchemyError
import logging
from eventboard.api.v1.routes import api_router
from eventboard.core.config import settings
from eventboard.core.database import db_helper
from eventboard.core.exceptions import AppException, DatabaseError, ValidationError
from eventboard.core.schemas.common import validation_message
from eventboard.services.media_storage import get_media_storage

logging.basicConfig(
    level=logging.INFO if settings.debug else logging.WARNING,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)


def now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application startup and shutdown"""
    logger.info(f"Starting {settings.app_name} in {'DEBUG' if settings.debug else 'PRODUCTION'} mode")

    # Never log the database password
    masked_db_url = settings.db.DATABASE_URL
    db_password = settings.db.DB_PASSWORD.get_secret_value()
    if db_password:
        masked_db_url = masked_db_url.replace(db_password, "***")
    logger.info(f"Database: {masked_db_url}")
    logger.info(f"JWT Algorithm: {settings.security.JWT_ALGORITHM}")

    try:
        await db_helper.ping()
    except Exception as e:
        logger.error(f"Database is not reachable: {e}")
        raise
    logger.info("Database is reachable")

    yield

    await get_media_storage().close()
    await db_helper.dispose()
    logger.info("Application shutdown complete")


app = FastAPI(
    title=settings.app_name,
    debug=settings.debug,
    lifespan=lifespan,
    docs_url="/docs" if settings.debug else None,
    redoc_url="/redoc" if settings.debug else None,
)

app.add_middleware(
    SessionMiddleware,
    secret_key=settings.security.SESSION_SECRET_KEY.get_secret_value(),
    https_only=settings.security.COOKIE_SECURE,
    max_age=settings.security.JWT_ACCESS_TOKEN_EXPIRE_MINUTES * 60,
)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(api_router)


@app.get("/", summary="Root endpoint", tags=["root"])
async def root():
    return {
        "message": f"Welcome to {settings.app_name} API",
        "docs": {
            "swagger": "/docs",
            "redoc": "/redoc"
        } if settings.debug else None,
        "environment": "development" if settings.debug else "production",
        "timestamp": now_iso()
    }


@app.get("/health", summary="Health check", tags=["health"])
async def health_check():
    try:
        db_value = await db_helper.ping()
        return {
            "status": "healthy",
            "timestamp": now_iso(),
            "database": "connected",
            "database_ping": db_value,
            "app_name": settings.app_name,
        }
    except Exception as e:
        logger.error(f"Health check failed: {e}")
        return {
            "status": "unhealthy",
            "timestamp": now_iso(),
            "database": "connection failed",
            "error": str(e) if settings.debug else "Database connection error"
        }


@app.exception_handler(AppException)
async def app_exception_handler(request: Request, exc: AppException):
    """Domain errors carry their own status code and a user safe message"""
    log = logger.error if exc.status_code >= 500 else logger.warning
    log(f"{request.method} {request.url.path}: {exc.detail} (type: {type(exc).__name__})")

    return JSONResponse(
        status_code=exc.status_code,
        content={
            "message": exc.detail,
            "error": type(exc).__name__,
            "timestamp": now_iso()
        }
    )


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    error = ValidationError(validation_message(exc))
    return await app_exception_handler(request, error)


@app.exception_handler(SQLAlchemyError)
async def database_exception_handler(request: Request, exc: SQLAlchemyError):
    logger.exception(f"Database error: {exc}")
    return await app_exception_handler(request, DatabaseError())


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """Anything unexpected: log it, tell the caller nothing internal"""
    logger.exception(f"Unhandled exception: {exc}")

    return JSONResponse(
        status_code=500,
        content={
            "message": "Unexpected server error, please try again later",
            "error": "InternalServerError",
            "timestamp": now_iso(),
            "debug_info": str(exc) if settings.debug else None
        }
    )


@app.exception_handler(404)
async def not_found_handler(request: Request, exc):
    return JSONResponse(
        status_code=404,
        content={
            "message": "Not Found",
            "error": "NotFoundError",
            "timestamp": now_iso()
        }
    )


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.debug,
        log_level="info" if settings.debug else "warning",
        access_log=False
    )
