"""
Media Model

Uploaded files are owned by the external media service; these rows only mirror
what it reports back (status, size, dimensions, thumbnails).
"""
from datetime import datetime
import enum

from sqlalchemy import BigInteger, Column, DateTime, Enum as SQLEnum, ForeignKey, Integer, JSON, String, UniqueConstraint
from sqlalchemy.orm import relationship

from mockupdesk.database import Base


class MediaType(str, enum.Enum):
    IMAGE = "image"
    VIDEO = "video"


class MediaStatus(str, enum.Enum):
    PROCESSING = "processing"
    READY = "ready"
    FAILED = "failed"


class Media(Base):
    __tablename__ = "media"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    brand_id = Column(Integer, ForeignKey("brands.id", ondelete="CASCADE"), nullable=False)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    type = Column(SQLEnum(MediaType), nullable=False)
    original_filename = Column(String(255), nullable=False)
    path = Column(String(512), nullable=False)
    mime_type = Column(String(100), nullable=False)
    size = Column(BigInteger, default=0, nullable=False)
    width = Column(Integer, nullable=True)
    height = Column(Integer, nullable=True)
    duration = Column(Integer, nullable=True)
    thumbnails = Column(JSON, nullable=True)
    status = Column(SQLEnum(MediaStatus), default=MediaStatus.PROCESSING, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    # Relationships
    brand = relationship("Brand", back_populates="media")


class PostMedia(Base):
    __tablename__ = "post_media"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    post_id = Column(Integer, ForeignKey("posts.id", ondelete="CASCADE"), nullable=False)
    media_id = Column(Integer, ForeignKey("media.id", ondelete="CASCADE"), nullable=False)
    position = Column(Integer, default=0, nullable=False)

    # Relationships
    post = relationship("Post", back_populates="media_links")
    media = relationship("Media")

    __table_args__ = (
        UniqueConstraint("post_id", "media_id", name="unique_post_media"),
    )
