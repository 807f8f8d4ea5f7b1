# eventboard/models/user.py
import uuid
from sqlalchemy import Column, String, DateTime, ForeignKey, Table, Uuid, func
from .base import Base

# One row per (user, publication) like; the composite key makes it a set
liked_publications = Table(
    "liked_publications",
    Base.metadata,
    Column("user_id", Uuid, ForeignKey("users.id", ondelete="CASCADE"), primary_key=True),
    Column("publication_id", Uuid, ForeignKey("publications.id", ondelete="CASCADE"), primary_key=True),
    Column("created_at", DateTime(timezone=True), server_default=func.now()),
)

class User(Base):
    __tablename__ = "users"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    username = Column(String(50), unique=True, index=True, nullable=False)
    email = Column(String(255), unique=True, index=True, nullable=False)
    password_hash = Column(String, nullable=False)
    profile_picture_id = Column(String, nullable=False)
    profile_picture_url = Column(String, nullable=False)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    def __repr__(self):
        return f"<User(id={self.id}, username={self.username})>"
