"""
Approval Invite Model

A time-boxed capability letting one external email address review the post
behind one approval request without an account.
"""
from datetime import datetime
from typing import Optional

from sqlalchemy import Column, DateTime, ForeignKey, Index, Integer, String
from sqlalchemy.orm import relationship

from mockupdesk.config import settings
from mockupdesk.database import Base


class ApprovalInvite(Base):
    __tablename__ = "approval_invites"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    approval_request_id = Column(Integer, ForeignKey("approval_requests.id", ondelete="CASCADE"), nullable=False)
    email = Column(String(255), nullable=False)
    token = Column(String(64), unique=True, nullable=False, index=True)
    expires_at = Column(DateTime, nullable=False)
    responded_at = Column(DateTime, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    # Relationships
    approval_request = relationship("ApprovalRequest", back_populates="invites")

    __table_args__ = (
        Index("ix_approval_invites_request_email", "approval_request_id", "email"),
    )

    @property
    def post(self):
        return self.approval_request.post if self.approval_request else None

    @property
    def review_url(self) -> str:
        return f"{settings.APP_URL.rstrip('/')}/post-review/{self.token}"

    def is_expired(self, now: Optional[datetime] = None) -> bool:
        return self.expires_at <= (now or datetime.utcnow())

    def has_responded(self) -> bool:
        return self.responded_at is not None

    def is_valid(self, now: Optional[datetime] = None) -> bool:
        return (
            not self.is_expired(now)
            and not self.has_responded()
            and self.approval_request is not None
            and self.approval_request.is_pending()
        )
