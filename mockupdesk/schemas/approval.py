"""Schemas for internal approval decisions"""
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field

from mockupdesk.models import ApprovalDecision, ApprovalStatus
from mockupdesk.schemas.post import PostResponse
from mockupdesk.schemas.user import UserSummary


class ApprovalDecisionCreate(BaseModel):
    comment: Optional[str] = None


class ApprovalResponseOut(BaseModel):
    id: int
    decision: ApprovalDecision
    comment: Optional[str]
    created_at: datetime
    user: UserSummary

    class Config:
        from_attributes = True


class ApprovalRequestOut(BaseModel):
    id: int
    post_id: int
    status: ApprovalStatus
    due_date: Optional[datetime]
    created_at: datetime
    updated_at: datetime
    requester: UserSummary
    responses: List[ApprovalResponseOut] = Field(default_factory=list)

    class Config:
        from_attributes = True


class ApprovalQueueItem(ApprovalRequestOut):
    post: PostResponse


class ApprovalActionResponse(BaseModel):
    approval_request: ApprovalRequestOut
    post: PostResponse
    message: str
