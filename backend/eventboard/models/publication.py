# eventboard/models/publication.py
import enum
import uuid
from sqlalchemy import Column, String, Text, Float, DateTime, ForeignKey, Uuid, func
from sqlalchemy.orm import relationship
from .base import Base
from .media import MediaKind

class PublicationCategory(str, enum.Enum):
    MUSICAL = "musical"
    CHARITY = "charity"
    CULTURAL = "cultural"
    SOCIAL = "social"

class Publication(Base):
    __tablename__ = "publications"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    owner_id = Column(Uuid, ForeignKey("users.id"), nullable=False, index=True)
    title = Column(String(200), nullable=False)
    description = Column(Text, nullable=False)
    latitude = Column(Float, nullable=False)
    longitude = Column(Float, nullable=False)
    category = Column(String(20), nullable=False, index=True)  # musical / charity / cultural / social
    start_date = Column(DateTime(timezone=True), nullable=False)
    end_date = Column(DateTime(timezone=True), nullable=False)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), index=True)
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    owner = relationship("User")
    media = relationship(
        "PublicationMedia",
        back_populates="publication",
        order_by="PublicationMedia.position",
        cascade="all, delete-orphan",
    )

    @property
    def photos(self):
        return [m for m in self.media if m.kind == MediaKind.PHOTO.value]

    @property
    def videos(self):
        return [m for m in self.media if m.kind == MediaKind.VIDEO.value]

    def __str__(self):
        return self.title
