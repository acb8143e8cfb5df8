"""Mockupdesk Database Models"""
from mockupdesk.models.agency import Agency, AgencyMembership
from mockupdesk.models.brand import Brand, brand_users
from mockupdesk.models.user import User, UserRole
from mockupdesk.models.media import Media, MediaStatus, MediaType, PostMedia
from mockupdesk.models.post import Post, PostStatus, EDITABLE_STATUSES
from mockupdesk.models.approval_request import ApprovalRequest, ApprovalStatus
from mockupdesk.models.approval_response import ApprovalResponse, ApprovalDecision
from mockupdesk.models.approval_invite import ApprovalInvite
from mockupdesk.models.collection import Collection
from mockupdesk.models.comment import Comment
from mockupdesk.models.notification import Notification, NotificationKind

__all__ = [
    "Agency",
    "AgencyMembership",
    "Brand",
    "brand_users",
    "User",
    "UserRole",
    "Media",
    "MediaStatus",
    "MediaType",
    "PostMedia",
    "Post",
    "PostStatus",
    "EDITABLE_STATUSES",
    "ApprovalRequest",
    "ApprovalStatus",
    "ApprovalResponse",
    "ApprovalDecision",
    "ApprovalInvite",
    "Collection",
    "Comment",
    "Notification",
    "NotificationKind",
]
