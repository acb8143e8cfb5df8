"""Post approval state machine.

draft / changes_requested --submit--> pending_approval --decide--> approved
                                                        \--------> changes_requested

Every decisive write is a conditional update, on ``status = 'pending'`` for the
request and ``status = 'pending_approval'`` for the post. The affected row
counts decide who won, so two reviewers racing on the same request cannot both
flip it, and a post already settled by a collection review stays settled.
"""
from datetime import datetime
from typing import Any, Dict, List, Optional

import structlog
from sqlalchemy.orm import Session

from mockupdesk.database import transaction
from mockupdesk.errors import InvalidState, ValidationFailed
from mockupdesk.models import (
    AgencyMembership,
    ApprovalDecision,
    ApprovalRequest,
    ApprovalResponse,
    ApprovalStatus,
    EDITABLE_STATUSES,
    NotificationKind,
    Post,
    PostStatus,
    User,
)
from mockupdesk.services.access import (
    Actor,
    REVIEWER_ROLES,
    ensure_brand_access,
    ensure_can_review,
)
from mockupdesk.services.notifications import NotificationSink

logger = structlog.get_logger(__name__)

DECISION_TO_REQUEST_STATUS = {
    ApprovalDecision.APPROVED: ApprovalStatus.APPROVED,
    ApprovalDecision.CHANGES_REQUESTED: ApprovalStatus.REJECTED,
}

POST_NOT_AWAITING_APPROVAL = "This post is not awaiting approval."

DECISION_TO_POST_STATUS = {
    ApprovalDecision.APPROVED: PostStatus.APPROVED,
    ApprovalDecision.CHANGES_REQUESTED: PostStatus.CHANGES_REQUESTED,
}


def transition_post_status(post: Post, new_status: PostStatus, attribution: Optional[Dict[str, Any]] = None) -> Post:
    """Set the post status and merge ``attribution`` into its metadata.

    Shared by the single-post request flow and the collection bulk review.
    Guards belong to the callers.
    """
    post.status = new_status
    if attribution:
        meta = dict(post.meta or {})
        meta.update(attribution)
        post.meta = meta
    return post


def claim_pending_request(db: Session, approval_request: ApprovalRequest, new_status: ApprovalStatus) -> bool:
    """Move a request out of pending. Returns False when another decision got there first."""
    updated = (
        db.query(ApprovalRequest)
        .filter(
            ApprovalRequest.id == approval_request.id,
            ApprovalRequest.status == ApprovalStatus.PENDING,
        )
        .update(
            {ApprovalRequest.status: new_status, ApprovalRequest.updated_at: datetime.utcnow()},
            synchronize_session="fetch",
        )
    )
    return updated == 1


def settle_pending_post(
    db: Session,
    post: Post,
    new_status: PostStatus,
    attribution: Optional[Dict[str, Any]] = None,
) -> bool:
    """Move a post out of pending_approval. Returns False when it is no longer there."""
    moved = (
        db.query(Post)
        .filter(
            Post.id == post.id,
            Post.deleted_at.is_(None),
            Post.status == PostStatus.PENDING_APPROVAL,
        )
        .update({Post.status: new_status}, synchronize_session="fetch")
    )
    if moved != 1:
        return False
    transition_post_status(post, new_status, attribution)
    return True


def require_comment(comment: Optional[str], message: str = "A comment is required when requesting changes.") -> str:
    if comment is None or not comment.strip():
        raise ValidationFailed(message)
    return comment.strip()


def _reviewer_emails(db: Session, post: Post, exclude_user_id: int) -> List[str]:
    rows = (
        db.query(User.email)
        .join(AgencyMembership, AgencyMembership.user_id == User.id)
        .filter(
            AgencyMembership.agency_id == post.brand.agency_id,
            AgencyMembership.role.in_(sorted(REVIEWER_ROLES)),
            User.id != exclude_user_id,
            User.is_active.is_(True),
        )
        .order_by(User.id)
        .all()
    )
    return [row[0] for row in rows]


def open_approval_request(
    db: Session,
    actor: Actor,
    post: Post,
    due_date: Optional[datetime] = None,
) -> ApprovalRequest:
    """Move an editable post to pending_approval and start a new review cycle.

    Does not commit; used both for single posts and inside a collection submit.
    """
    moved = (
        db.query(Post)
        .filter(
            Post.id == post.id,
            Post.deleted_at.is_(None),
            Post.status.in_(EDITABLE_STATUSES),
        )
        .update({Post.status: PostStatus.PENDING_APPROVAL}, synchronize_session="fetch")
    )
    if moved != 1:
        raise InvalidState("This post cannot be submitted for approval.")

    approval_request = ApprovalRequest(
        post_id=post.id,
        requested_by_id=actor.id,
        status=ApprovalStatus.PENDING,
        due_date=due_date,
    )
    db.add(approval_request)
    db.flush()
    return approval_request


def submit_post_for_approval(
    db: Session,
    actor: Actor,
    post: Post,
    notifier: NotificationSink,
    due_date: Optional[datetime] = None,
) -> ApprovalRequest:
    ensure_brand_access(actor, post.brand, "You do not have access to this post.")
    if not post.can_be_submitted_for_approval():
        raise InvalidState("This post cannot be submitted for approval.")

    with transaction(db):
        approval_request = open_approval_request(db, actor, post, due_date)
        payload = {
            "post_id": post.id,
            "post_title": post.title,
            "brand_name": post.brand.name,
            "requester": actor.name,
        }
        for email in _reviewer_emails(db, post, exclude_user_id=actor.id):
            notifier.notify(NotificationKind.POST_SUBMITTED_FOR_APPROVAL, email, payload)

    db.refresh(post)
    logger.info("post_submitted", post_id=post.id, approval_request_id=approval_request.id, user_id=actor.id)
    return approval_request


def decide_approval_request(
    db: Session,
    actor: Actor,
    approval_request: ApprovalRequest,
    decision: ApprovalDecision,
    notifier: NotificationSink,
    comment: Optional[str] = None,
) -> ApprovalResponse:
    """Record an internal reviewer's decision and flip request and post."""
    ensure_can_review(actor)
    post = approval_request.post
    ensure_brand_access(actor, post.brand)

    if not approval_request.is_pending():
        raise InvalidState()
    if post.status != PostStatus.PENDING_APPROVAL:
        raise InvalidState(POST_NOT_AWAITING_APPROVAL)

    if decision == ApprovalDecision.CHANGES_REQUESTED:
        comment = require_comment(comment)
    elif comment is not None:
        comment = comment.strip() or None

    with transaction(db):
        if not claim_pending_request(db, approval_request, DECISION_TO_REQUEST_STATUS[decision]):
            raise InvalidState()

        response = ApprovalResponse(
            approval_request_id=approval_request.id,
            user_id=actor.id,
            decision=decision,
            comment=comment,
        )
        if not settle_pending_post(db, post, DECISION_TO_POST_STATUS[decision]):
            raise InvalidState(POST_NOT_AWAITING_APPROVAL)
        db.add(response)
        notify_creator(notifier, post, decision, reviewer=actor.name, comment=comment)

    db.refresh(approval_request)
    db.refresh(post)
    logger.info(
        "approval_decided",
        approval_request_id=approval_request.id,
        post_id=post.id,
        decision=decision.value,
        user_id=actor.id,
    )
    return response


def notify_creator(
    notifier: NotificationSink,
    post: Post,
    decision: ApprovalDecision,
    reviewer: str,
    comment: Optional[str] = None,
) -> None:
    payload = {
        "post_id": post.id,
        "post_title": post.title,
        "brand_name": post.brand.name,
        "reviewer": reviewer,
    }
    if decision == ApprovalDecision.APPROVED:
        notifier.notify(NotificationKind.POST_APPROVED, post.creator.email, payload)
    else:
        payload["comment"] = comment
        notifier.notify(NotificationKind.POST_CHANGES_REQUESTED, post.creator.email, payload)
