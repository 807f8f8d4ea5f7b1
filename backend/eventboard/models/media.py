# eventboard/models/media.py
import enum
from dataclasses import dataclass
from sqlalchemy import Column, Integer, String, ForeignKey, Uuid
from sqlalchemy.orm import relationship
from .base import Base

class MediaKind(str, enum.Enum):
    PHOTO = "photo"
    VIDEO = "video"

class PublicationMedia(Base):
    __tablename__ = "publication_media"

    id = Column(Integer, primary_key=True, index=True)
    publication_id = Column(Uuid, ForeignKey("publications.id", ondelete="CASCADE"), nullable=False, index=True)
    public_id = Column(String, nullable=False)  # identifier on the media host
    url = Column(String, nullable=False)        # secure public URL
    kind = Column(String, nullable=False)       # photo / video
    position = Column(Integer, nullable=False, default=0)  # append order

    publication = relationship("Publication", back_populates="media")

    def __repr__(self):
        return f"<PublicationMedia(public_id={self.public_id}, kind={self.kind})>"


@dataclass(frozen=True)
class MediaAsset:
    """What the media host hands back for one uploaded file"""
    public_id: str
    url: str
    kind: MediaKind
