"""Schemas for post comments"""
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field

from mockupdesk.schemas.user import UserSummary


class CommentCreate(BaseModel):
    body: str = Field(..., min_length=1)
    parent_id: Optional[int] = None
    attachment: Optional[str] = None


class CommentUpdate(BaseModel):
    body: str = Field(..., min_length=1)


class CommentResponse(BaseModel):
    id: int
    post_id: int
    parent_id: Optional[int]
    body: str
    attachment: Optional[str]
    is_resolved: bool
    created_at: datetime
    updated_at: datetime
    author: UserSummary
    replies: List["CommentResponse"] = Field(default_factory=list)
CommentResponse.model_rebuild()
