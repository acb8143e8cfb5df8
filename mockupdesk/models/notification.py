"""Outbox of queued email notifications"""
from datetime import datetime
import enum

from sqlalchemy import Column, DateTime, Enum as SQLEnum, Integer, JSON, String

from mockupdesk.database import Base


class NotificationKind(str, enum.Enum):
    POST_APPROVED = "post_approved"
    POST_CHANGES_REQUESTED = "post_changes_requested"
    POST_SUBMITTED_FOR_APPROVAL = "post_submitted_for_approval"
    REVIEW_INVITE = "review_invite"


class Notification(Base):
    __tablename__ = "notifications"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    kind = Column(SQLEnum(NotificationKind), nullable=False, index=True)
    recipient_email = Column(String(255), nullable=False, index=True)
    subject = Column(String(255), nullable=False)
    payload = Column(JSON, nullable=False, default=dict)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
