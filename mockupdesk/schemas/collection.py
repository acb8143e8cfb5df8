"""Schemas for collections"""
from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field

from mockupdesk.schemas.post import PostResponse
from mockupdesk.schemas.user import UserSummary


class CollectionCreate(BaseModel):
    brand_id: int
    name: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = None
    post_ids: List[int] = Field(default_factory=list)


class CollectionUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = None


class CollectionPostIds(BaseModel):
    post_ids: List[int] = Field(..., min_length=1)


class GenerateLinkCreate(BaseModel):
    expires_in_days: Optional[int] = None


class CollectionResponse(BaseModel):
    id: int
    brand_id: int
    name: str
    description: Optional[str]
    approval_url: Optional[str]
    approval_token_expires_at: Optional[datetime]
    metadata: Dict[str, Any] = Field(default_factory=dict)
    status_summary: Dict[str, int]
    is_fully_approved: bool
    has_posts_needing_changes: bool
    created_at: datetime
    creator: UserSummary
    posts: List[PostResponse] = Field(default_factory=list)


class GenerateLinkResponse(BaseModel):
    approval_url: str
    expires_at: Optional[datetime]


class CollectionSubmitResponse(BaseModel):
    message: str
    approval_url: Optional[str]
    posts_submitted: int


class CollectionPostsChanged(BaseModel):
    message: str
    count: int
