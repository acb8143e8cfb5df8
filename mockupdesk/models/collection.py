"""
Collection Model
"""
from datetime import datetime
from typing import Dict, Optional

from sqlalchemy import Column, DateTime, ForeignKey, Index, Integer, JSON, String, Text
from sqlalchemy.orm import relationship

from mockupdesk.config import settings
from mockupdesk.database import Base
from mockupdesk.models.post import PostStatus


class Collection(Base):
    __tablename__ = "collections"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    brand_id = Column(Integer, ForeignKey("brands.id", ondelete="CASCADE"), nullable=False)
    created_by_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    name = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    approval_token = Column(String(64), unique=True, nullable=True, index=True)
    approval_token_expires_at = Column(DateTime, nullable=True)
    meta = Column("metadata", JSON, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    # Relationships
    brand = relationship("Brand", back_populates="collections")
    creator = relationship("User", foreign_keys=[created_by_id])
    # No delete cascade: removing a collection detaches its posts.
    posts = relationship("Post", back_populates="collection", order_by="Post.id")

    __table_args__ = (
        Index("ix_collections_brand_created", "brand_id", "created_at"),
    )

    @property
    def active_posts(self):
        return [post for post in self.posts if post.deleted_at is None]

    @property
    def approval_url(self) -> Optional[str]:
        if not self.approval_token:
            return None
        return f"{settings.APP_URL.rstrip('/')}/review/{self.approval_token}"

    def has_valid_approval_token(self, now: Optional[datetime] = None) -> bool:
        if not self.approval_token:
            return False
        if self.approval_token_expires_at is None:
            return True
        return self.approval_token_expires_at > (now or datetime.utcnow())

    def status_summary(self) -> Dict[str, int]:
        posts = self.active_posts
        summary = {"total": len(posts)}
        for status in (
            PostStatus.DRAFT,
            PostStatus.PENDING_APPROVAL,
            PostStatus.CHANGES_REQUESTED,
            PostStatus.APPROVED,
        ):
            summary[status.value] = sum(1 for post in posts if post.status == status)
        return summary

    def is_fully_approved(self) -> bool:
        posts = self.active_posts
        return bool(posts) and all(post.status == PostStatus.APPROVED for post in posts)

    def has_posts_needing_changes(self) -> bool:
        return any(post.status == PostStatus.CHANGES_REQUESTED for post in self.active_posts)
