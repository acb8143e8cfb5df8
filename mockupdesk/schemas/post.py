"""Schemas for posts"""
from datetime import datetime
from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, EmailStr, Field, field_validator

from mockupdesk.models import ApprovalStatus, PostStatus
from mockupdesk.schemas.media import MediaResponse
from mockupdesk.schemas.user import UserSummary

Platform = Literal[
    "facebook_feed",
    "facebook_story",
    "instagram_feed",
    "instagram_story",
    "instagram_reel",
]


class PostCreate(BaseModel):
    brand_id: int
    title: str = Field(..., min_length=1, max_length=255)
    caption: Optional[str] = None
    platforms: List[Platform] = Field(..., min_length=1)
    scheduled_for: Optional[datetime] = None
    media_ids: List[int] = Field(default_factory=list)


class PostUpdate(BaseModel):
    title: Optional[str] = Field(None, min_length=1, max_length=255)
    caption: Optional[str] = None
    platforms: Optional[List[Platform]] = Field(None, min_length=1)
    scheduled_for: Optional[datetime] = None

    @field_validator("title", "platforms")
    @classmethod
    def not_null(cls, value):
        # omit the field to leave it unchanged
        if value is None:
            raise ValueError("may not be null")
        return value


class SubmitForApproval(BaseModel):
    due_date: Optional[datetime] = None


class InviteReviewersCreate(BaseModel):
    emails: List[EmailStr] = Field(default_factory=list)
    expires_in_days: Optional[int] = Field(None, ge=1, le=90)


class ApprovalRequestSummary(BaseModel):
    id: int
    status: ApprovalStatus
    requested_by_id: int
    due_date: Optional[datetime]
    created_at: datetime

    class Config:
        from_attributes = True


class PostResponse(BaseModel):
    id: int
    brand_id: int
    collection_id: Optional[int]
    title: str
    caption: Optional[str]
    platforms: List[str]
    status: PostStatus
    scheduled_for: Optional[datetime]
    metadata: Dict[str, Any] = Field(default_factory=dict)
    created_at: datetime
    updated_at: datetime
    creator: UserSummary
    media: List[MediaResponse] = Field(default_factory=list)
    latest_approval_request: Optional[ApprovalRequestSummary] = None


class PostActionResponse(BaseModel):
    post: PostResponse
    message: str


class InviteResponse(BaseModel):
    id: int
    email: str
    expires_at: datetime
    responded_at: Optional[datetime]
    review_url: str

    class Config:
        from_attributes = True


class InviteReviewersResponse(BaseModel):
    invites: List[InviteResponse]
    message: str
