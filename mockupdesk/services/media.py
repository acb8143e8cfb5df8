"""Read-only view over the external media service."""
from typing import Any, Dict, Optional

from mockupdesk.config import settings
from mockupdesk.models import Media, MediaStatus


class MediaService:
    def __init__(self, storage_url: Optional[str] = None):
        self.storage_url = (storage_url or settings.STORAGE_URL).rstrip("/")

    def url_for(self, path: Optional[str]) -> Optional[str]:
        if not path:
            return None
        return f"{self.storage_url}/{path.lstrip('/')}"

    def thumbnail_url(self, media: Media) -> Optional[str]:
        thumbnails = media.thumbnails or {}
        return self.url_for(thumbnails.get("medium") or thumbnails.get("small"))

    def describe(self, media: Media) -> Dict[str, Any]:
        return {
            "ready": media.status == MediaStatus.READY,
            "metadata": {
                "type": media.type.value if media.type else None,
                "mime_type": media.mime_type,
                "size": media.size,
                "width": media.width,
                "height": media.height,
                "duration": media.duration,
            },
        }
