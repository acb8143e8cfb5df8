"""Schemas for media attached to posts"""
from typing import Optional

from pydantic import BaseModel

from mockupdesk.models import MediaType


class MediaResponse(BaseModel):
    id: int
    type: MediaType
    original_filename: str
    mime_type: str
    size: int
    width: Optional[int] = None
    height: Optional[int] = None
    duration: Optional[int] = None
    ready: bool
    url: Optional[str] = None
    thumbnail_url: Optional[str] = None
    position: int = 0
