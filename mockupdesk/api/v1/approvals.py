"""Internal approval endpoints"""
from typing import List, Optional

from fastapi import APIRouter, BackgroundTasks, Depends, Query
from sqlalchemy.orm import Session, selectinload

from mockupdesk.api.v1.posts import load_post
from mockupdesk.api.v1.serializers import serialize_approval_request, serialize_post
from mockupdesk.database import get_db
from mockupdesk.dependencies import get_actor, get_media_service, get_notifier
from mockupdesk.errors import NotFound
from mockupdesk.models import (
    ApprovalDecision,
    ApprovalRequest,
    ApprovalResponse,
    ApprovalStatus,
    Post,
    PostMedia,
)
from mockupdesk.schemas import (
    ApprovalActionResponse,
    ApprovalDecisionCreate,
    ApprovalQueueItem,
)
from mockupdesk.services.access import Actor, accessible_brand_ids, ensure_can_review
from mockupdesk.services.media import MediaService
from mockupdesk.services.notifications import NotificationSink
from mockupdesk.services.workflow import decide_approval_request

router = APIRouter()


def _request_query(db: Session):
    return db.query(ApprovalRequest).options(
        selectinload(ApprovalRequest.requester),
        selectinload(ApprovalRequest.responses).selectinload(ApprovalResponse.user),
        selectinload(ApprovalRequest.post).selectinload(Post.brand),
        selectinload(ApprovalRequest.post).selectinload(Post.creator),
        selectinload(ApprovalRequest.post).selectinload(Post.media_links).selectinload(PostMedia.media),
    )


def _load_request(db: Session, approval_request_id: int) -> ApprovalRequest:
    approval_request = _request_query(db).filter(ApprovalRequest.id == approval_request_id).first()
    if not approval_request or approval_request.post.is_deleted:
        raise NotFound("Approval request not found")
    return approval_request


def _decide(
    approval_request_id: int,
    decision: ApprovalDecision,
    comment: Optional[str],
    background_tasks: BackgroundTasks,
    actor: Actor,
    db: Session,
    notifier: NotificationSink,
    media_service: MediaService,
    message: str,
) -> ApprovalActionResponse:
    approval_request = _load_request(db, approval_request_id)
    decide_approval_request(db, actor, approval_request, decision, notifier, comment=comment)
    notifier.dispatch(background_tasks)

    approval_request = _load_request(db, approval_request_id)
    return ApprovalActionResponse(
        approval_request=serialize_approval_request(approval_request),
        post=serialize_post(load_post(db, approval_request.post_id), media_service),
        message=message,
    )


@router.get("", response_model=List[ApprovalQueueItem])
def approval_queue(
    status_filter: ApprovalStatus = Query(ApprovalStatus.PENDING, alias="status"),
    actor: Actor = Depends(get_actor),
    db: Session = Depends(get_db),
    media_service: MediaService = Depends(get_media_service),
):
    """Approval requests across the caller's brands, newest first."""
    ensure_can_review(actor)
    brand_ids = accessible_brand_ids(db, actor)

    requests = (
        _request_query(db)
        .join(Post, Post.id == ApprovalRequest.post_id)
        .filter(
            Post.brand_id.in_(brand_ids),
            Post.deleted_at.is_(None),
            ApprovalRequest.status == status_filter,
        )
        .order_by(ApprovalRequest.created_at.desc(), ApprovalRequest.id.desc())
        .all()
    )

    items = []
    for approval_request in requests:
        summary = serialize_approval_request(approval_request)
        items.append(
            ApprovalQueueItem(
                **summary.model_dump(),
                post=serialize_post(approval_request.post, media_service),
            )
        )
    return items


@router.post("/{approval_request_id}/approve", response_model=ApprovalActionResponse)
def approve(
    approval_request_id: int,
    background_tasks: BackgroundTasks,
    decision_in: Optional[ApprovalDecisionCreate] = None,
    actor: Actor = Depends(get_actor),
    db: Session = Depends(get_db),
    notifier: NotificationSink = Depends(get_notifier),
    media_service: MediaService = Depends(get_media_service),
):
    return _decide(
        approval_request_id,
        ApprovalDecision.APPROVED,
        decision_in.comment if decision_in else None,
        background_tasks,
        actor,
        db,
        notifier,
        media_service,
        message="Post approved successfully.",
    )


@router.post("/{approval_request_id}/request-changes", response_model=ApprovalActionResponse)
def request_changes(
    approval_request_id: int,
    decision_in: ApprovalDecisionCreate,
    background_tasks: BackgroundTasks,
    actor: Actor = Depends(get_actor),
    db: Session = Depends(get_db),
    notifier: NotificationSink = Depends(get_notifier),
    media_service: MediaService = Depends(get_media_service),
):
    """Send the post back to its creator; a comment is required."""
    return _decide(
        approval_request_id,
        ApprovalDecision.CHANGES_REQUESTED,
        decision_in.comment,
        background_tasks,
        actor,
        db,
        notifier,
        media_service,
        message="Changes requested.",
    )
