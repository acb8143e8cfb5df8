"""
Post Model
"""
from datetime import datetime
import enum

from sqlalchemy import Column, DateTime, Enum as SQLEnum, ForeignKey, Index, Integer, JSON, String, Text
from sqlalchemy.orm import relationship

from mockupdesk.database import Base


class PostStatus(str, enum.Enum):
    DRAFT = "draft"
    PENDING_APPROVAL = "pending_approval"
    CHANGES_REQUESTED = "changes_requested"
    APPROVED = "approved"
    ARCHIVED = "archived"


EDITABLE_STATUSES = (PostStatus.DRAFT, PostStatus.CHANGES_REQUESTED)


class Post(Base):
    __tablename__ = "posts"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    brand_id = Column(Integer, ForeignKey("brands.id", ondelete="CASCADE"), nullable=False)
    collection_id = Column(Integer, ForeignKey("collections.id", ondelete="SET NULL"), nullable=True, index=True)
    created_by_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    title = Column(String(255), nullable=False)
    caption = Column(Text, nullable=True)
    platforms = Column(JSON, nullable=False, default=list)
    status = Column(SQLEnum(PostStatus), default=PostStatus.DRAFT, nullable=False)
    scheduled_for = Column(DateTime, nullable=True)
    # "metadata" is reserved on declarative classes
    meta = Column("metadata", JSON, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)
    deleted_at = Column(DateTime, nullable=True)

    # Relationships
    brand = relationship("Brand", back_populates="posts")
    collection = relationship("Collection", back_populates="posts")
    creator = relationship("User", back_populates="posts", foreign_keys=[created_by_id])
    media_links = relationship(
        "PostMedia",
        back_populates="post",
        cascade="all, delete-orphan",
        order_by="PostMedia.position",
    )
    approval_requests = relationship(
        "ApprovalRequest",
        back_populates="post",
        cascade="all, delete-orphan",
        order_by="desc(ApprovalRequest.id)",
    )
    comments = relationship("Comment", back_populates="post", cascade="all, delete-orphan")

    __table_args__ = (
        Index("ix_posts_brand_status", "brand_id", "status"),
        Index("ix_posts_creator_status", "created_by_id", "status"),
    )

    @property
    def latest_approval_request(self):
        """The most recent request defines the active review cycle."""
        return self.approval_requests[0] if self.approval_requests else None

    @property
    def is_deleted(self) -> bool:
        return self.deleted_at is not None

    def can_be_edited(self) -> bool:
        return self.status in EDITABLE_STATUSES

    def can_be_submitted_for_approval(self) -> bool:
        return self.status in EDITABLE_STATUSES
