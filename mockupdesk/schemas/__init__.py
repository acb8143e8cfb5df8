"""
Pydantic schemas for request/response validation
"""
from mockupdesk.schemas.user import UserSummary
from mockupdesk.schemas.media import MediaResponse
from mockupdesk.schemas.post import (
    ApprovalRequestSummary,
    InviteResponse,
    InviteReviewersCreate,
    InviteReviewersResponse,
    PostActionResponse,
    PostCreate,
    PostResponse,
    PostUpdate,
    SubmitForApproval,
)
from mockupdesk.schemas.approval import (
    ApprovalActionResponse,
    ApprovalDecisionCreate,
    ApprovalQueueItem,
    ApprovalRequestOut,
    ApprovalResponseOut,
)
from mockupdesk.schemas.collection import (
    CollectionCreate,
    CollectionPostIds,
    CollectionPostsChanged,
    CollectionResponse,
    CollectionSubmitResponse,
    CollectionUpdate,
    GenerateLinkCreate,
    GenerateLinkResponse,
)
from mockupdesk.schemas.public import (
    CollectionReviewItem,
    CollectionReviewSubmit,
    MessageResponse,
    PublicBrand,
    PublicCollectionPost,
    PublicCollectionResponse,
    PublicDecision,
    PublicDecisionResponse,
    PublicInvite,
    PublicPost,
    PublicReviewResponse,
)
from mockupdesk.schemas.comment import CommentCreate, CommentResponse, CommentUpdate

__all__ = [
    "UserSummary",
    "MediaResponse",
    "ApprovalRequestSummary",
    "InviteResponse",
    "InviteReviewersCreate",
    "InviteReviewersResponse",
    "PostActionResponse",
    "PostCreate",
    "PostResponse",
    "PostUpdate",
    "SubmitForApproval",
    "ApprovalActionResponse",
    "ApprovalDecisionCreate",
    "ApprovalQueueItem",
    "ApprovalRequestOut",
    "ApprovalResponseOut",
    "CollectionCreate",
    "CollectionPostIds",
    "CollectionPostsChanged",
    "CollectionResponse",
    "CollectionSubmitResponse",
    "CollectionUpdate",
    "GenerateLinkCreate",
    "GenerateLinkResponse",
    "CollectionReviewItem",
    "CollectionReviewSubmit",
    "MessageResponse",
    "PublicBrand",
    "PublicCollectionPost",
    "PublicCollectionResponse",
    "PublicDecision",
    "PublicDecisionResponse",
    "PublicInvite",
    "PublicPost",
    "PublicReviewResponse",
    "CommentCreate",
    "CommentResponse",
    "CommentUpdate",
]
