"""
Approval Response Model
"""
from datetime import datetime
import enum

from sqlalchemy import Column, DateTime, Enum as SQLEnum, ForeignKey, Integer, Text
from sqlalchemy.orm import relationship

from mockupdesk.database import Base


class ApprovalDecision(str, enum.Enum):
    APPROVED = "approved"
    CHANGES_REQUESTED = "changes_requested"


class ApprovalResponse(Base):
    __tablename__ = "approval_responses"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    approval_request_id = Column(Integer, ForeignKey("approval_requests.id", ondelete="CASCADE"), nullable=False, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    decision = Column(SQLEnum(ApprovalDecision), nullable=False)
    comment = Column(Text, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    # Relationships
    approval_request = relationship("ApprovalRequest", back_populates="responses")
    user = relationship("User")
