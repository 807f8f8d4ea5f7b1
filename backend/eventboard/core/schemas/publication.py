# eventboard/core/schemas/publication.py
from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from typing import List, Optional
from datetime import datetime, timezone
import uuid

from eventboard.core.schemas.common import CamelModel, ProfilePicture
from eventboard.models.publication import PublicationCategory


def as_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Naive timestamps are taken as UTC"""
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


class Location(BaseModel):
    lat: float = Field(..., ge=-90, le=90)
    long: float = Field(..., ge=-180, le=180)


# --- Input ---

class PublicationDraft(BaseModel):
    """Raw multipart fields of a create request, nothing parsed yet"""
    title: Optional[str] = None
    description: Optional[str] = None
    category: Optional[str] = None
    start_dates: Optional[str] = None
    end_dates: Optional[str] = None
    locations: Optional[str] = None  # JSON string {"lat": ..., "long": ...}


class PublicationCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=200)
    description: str = Field(..., min_length=1)
    category: PublicationCategory
    start_date: datetime
    end_date: datetime
    location: Location

    model_config = ConfigDict(str_strip_whitespace=True)

    @field_validator("start_date", "end_date")
    @classmethod
    def dates_in_utc(cls, v):
        return as_utc(v)

    @model_validator(mode="after")
    def check_dates(self):
        if self.end_date < self.start_date:
            raise ValueError("endDates must not be before startDates")
        return self


class PublicationUpdate(BaseModel):
    """Partial update: only the fields present in the request are applied"""
    title: Optional[str] = Field(None, min_length=1, max_length=200)
    description: Optional[str] = Field(None, min_length=1)
    category: Optional[PublicationCategory] = None
    start_date: Optional[datetime] = Field(None, alias="startDates")
    end_date: Optional[datetime] = Field(None, alias="endDates")
    location: Optional[Location] = Field(None, alias="locations")

    model_config = ConfigDict(populate_by_name=True, str_strip_whitespace=True)

    @field_validator("start_date", "end_date")
    @classmethod
    def dates_in_utc(cls, v):
        return as_utc(v)

    @model_validator(mode="after")
    def reject_explicit_nulls(self):
        empty = [name for name in self.model_fields_set if getattr(self, name) is None]
        if empty:
            raise ValueError(f"Fields cannot be empty: {', '.join(sorted(empty))}")
        return self

    def changes(self) -> dict:
        return self.model_dump(exclude_unset=True)


# --- Output ---

class MediaEntry(CamelModel):
    id: str
    url: str

class PublicationOwner(CamelModel):
    id: uuid.UUID
    username: str
    profile_picture: ProfilePicture

class PublicationResponse(CamelModel):
    id: uuid.UUID
    title: str
    description: str
    location: Location
    category: str
    start_date: datetime
    end_date: datetime
    owner_id: uuid.UUID
    owner: Optional[PublicationOwner] = None
    photos: List[MediaEntry] = []
    videos: List[MediaEntry] = []
    likes_count: int = 0
    liked: bool = False
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

class PublicationCreatedResponse(CamelModel):
    message: str
    publication_id: uuid.UUID

class PublicationUpdatedResponse(CamelModel):
    message: str
    publication: PublicationResponse

class LikeToggleResponse(CamelModel):
    message: str
    likes_count: int
    liked: bool
