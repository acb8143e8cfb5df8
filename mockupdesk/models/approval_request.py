"""
Approval Request Model
"""
from datetime import datetime
import enum

from sqlalchemy import Column, DateTime, Enum as SQLEnum, ForeignKey, Index, Integer
from sqlalchemy.orm import relationship

from mockupdesk.database import Base


class ApprovalStatus(str, enum.Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class ApprovalRequest(Base):
    __tablename__ = "approval_requests"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    post_id = Column(Integer, ForeignKey("posts.id", ondelete="CASCADE"), nullable=False)
    requested_by_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    status = Column(SQLEnum(ApprovalStatus), default=ApprovalStatus.PENDING, nullable=False)
    due_date = Column(DateTime, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    # Relationships
    post = relationship("Post", back_populates="approval_requests")
    requester = relationship("User", foreign_keys=[requested_by_id])
    responses = relationship(
        "ApprovalResponse",
        back_populates="approval_request",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="ApprovalResponse.created_at",
    )
    invites = relationship(
        "ApprovalInvite",
        back_populates="approval_request",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    __table_args__ = (
        Index("ix_approval_requests_post_status", "post_id", "status"),
    )

    def is_pending(self) -> bool:
        return self.status == ApprovalStatus.PENDING
