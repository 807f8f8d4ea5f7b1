from .base import Base
from .user import User, liked_publications
from .media import PublicationMedia, MediaKind, MediaAsset
from .publication import Publication, PublicationCategory

# Everything Alembic and the repositories need to see
__all__ = [
    "Base",
    "User", "liked_publications",
    "PublicationMedia", "MediaKind", "MediaAsset",
    "Publication", "PublicationCategory",
]
