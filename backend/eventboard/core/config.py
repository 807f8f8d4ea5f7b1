# eventboard/core/config.py
from pydantic_settings import BaseSettings
from pydantic import BaseModel, Field, SecretStr
from typing import List, Optional
from functools import lru_cache


class DataBaseConfig(BaseModel):
    DB_HOST: str = Field("localhost", description="Database host")
    DB_PORT: int = Field(5432, description="Database port")
    DB_NAME: str = Field("eventboard", description="Database name")
    DB_USER: str = Field("eventboard", description="Database user")
    DB_PASSWORD: SecretStr = Field(SecretStr(""), description="Database password")  # SecretStr hides the value in logs
    DB_URL: Optional[str] = Field(None, description="Full database URL, overrides the fields above")
    DB_ECHO: bool = Field(False, description="Enable SQL echo")
    DB_POOL_SIZE: int = Field(5, description="Database pool size")
    DB_MAX_OVERFLOW: int = Field(10, description="Database max overflow")

    @property
    def DATABASE_URL(self) -> str:
        if self.DB_URL:
            return self.DB_URL
        return f"postgresql+asyncpg://{self.DB_USER}:{self.DB_PASSWORD.get_secret_value()}@{self.DB_HOST}:{self.DB_PORT}/{self.DB_NAME}"

    naming_convention: dict[str, str] = {
        "ix": "ix_%(column_0_label)s",
        "uq": "uq_%(table_name)s_%(column_0_N_name)s",
        "ck": "ck_%(table_name)s_%(constraint_name)s",
        "fk": "fk_%(table_name)s_%(column_0_name)s_%(referred_table_name)s",
        "pk": "pk_%(table_name)s",
    }


class MediaConfig(BaseModel):
    CLOUDINARY_CLOUD_NAME: str = Field("eventboard", description="Cloudinary cloud name")
    CLOUDINARY_API_KEY: str = Field("", description="Cloudinary API key")
    CLOUDINARY_API_SECRET: SecretStr = Field(SecretStr(""), description="Cloudinary API secret")
    CLOUDINARY_API_BASE: str = Field("https://api.cloudinary.com/v1_1", description="Cloudinary API base URL")
    MEDIA_FOLDER: str = Field("eventboard", description="Folder for uploaded assets")
    MEDIA_TIMEOUT: int = Field(60, description="Media request timeout in seconds")
    DEFAULT_PROFILE_PICTURE_ID: str = Field(
        "eventboard/default-profile", description="Placeholder profile picture id"
    )
    DEFAULT_PROFILE_PICTURE_URL: str = Field(
        "https://res.cloudinary.com/eventboard/image/upload/eventboard/default-profile.jpg",
        description="Placeholder profile picture URL",
    )

    @property
    def upload_base_url(self) -> str:
        return f"{self.CLOUDINARY_API_BASE}/{self.CLOUDINARY_CLOUD_NAME}"


class SecurityConfig(BaseModel):
    JWT_SECRET_KEY: SecretStr = Field(..., description="JWT secret key")  # Required
    JWT_ALGORITHM: str = Field("HS256", description="JWT algorithm")
    JWT_ACCESS_TOKEN_EXPIRE_MINUTES: int = Field(60, description="Access token expiration")
    SESSION_SECRET_KEY: SecretStr = Field(..., description="Secret for the signed session cookie")
    AUTH_COOKIE_NAME: str = Field("authToken", description="Name of the auth cookie")
    COOKIE_SECURE: bool = Field(False, description="Send cookies over HTTPS only")


class Settings(BaseSettings):
    app_name: str = Field("Eventboard", description="Application name")
    debug: bool = Field(False, description="Debug mode")
    cors_origins: List[str] = Field(
        default_factory=lambda: [
            "http://localhost:5173",
            "http://localhost:3000",
        ],
        description="CORS origins"
    )

    db: DataBaseConfig = Field(default_factory=DataBaseConfig)
    media: MediaConfig = Field(default_factory=MediaConfig)
    security: SecurityConfig

    class Config:
        env_file = ".env"
        env_file_encoding = 'utf-8'
        case_sensitive = False
        env_nested_delimiter = '__'  # SECURITY__JWT_SECRET_KEY etc.


@lru_cache()
def get_settings() -> Settings:
    """Cached settings instance"""
    return Settings()

settings = get_settings()
