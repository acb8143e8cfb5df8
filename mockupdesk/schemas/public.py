"""Schemas for the unauthenticated review pages"""
from datetime import datetime
from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, Field

from mockupdesk.config import settings
from mockupdesk.models import PostStatus
from mockupdesk.schemas.media import MediaResponse

MAX_PUBLIC_TEXT = settings.PUBLIC_COMMENT_MAX_LENGTH


class MessageResponse(BaseModel):
    message: str


class PublicDecision(BaseModel):
    comment: Optional[str] = Field(None, max_length=MAX_PUBLIC_TEXT)


class PublicDecisionResponse(BaseModel):
    message: str
    post_status: PostStatus


class CollectionReviewItem(BaseModel):
    post_id: int
    status: Literal["approved", "changes_requested"]
    feedback: Optional[str] = Field(None, max_length=MAX_PUBLIC_TEXT)
    caption_suggestion: Optional[str] = Field(None, max_length=MAX_PUBLIC_TEXT)


class CollectionReviewSubmit(BaseModel):
    reviews: List[CollectionReviewItem] = Field(..., min_length=1)


class PublicBrand(BaseModel):
    id: int
    name: str
    logo_url: Optional[str] = None
    profile_name: Optional[str] = None


class PublicPost(BaseModel):
    id: int
    title: str
    caption: Optional[str]
    platforms: List[str]
    status: PostStatus
    media: List[MediaResponse] = Field(default_factory=list)


class PublicCollectionPost(PublicPost):
    metadata: Dict[str, Any] = Field(default_factory=dict)


class PublicInvite(BaseModel):
    email: str
    expires_at: datetime
    has_responded: bool


class PublicReviewResponse(BaseModel):
    invite: PublicInvite
    post: PublicPost
    brand: PublicBrand
    requester: Dict[str, str]


class PublicCollectionResponse(BaseModel):
    id: int
    name: str
    description: Optional[str]
    approval_token_expires_at: Optional[datetime]
    metadata: Dict[str, Any] = Field(default_factory=dict)
    brand: PublicBrand
    posts: List[PublicCollectionPost] = Field(default_factory=list)
