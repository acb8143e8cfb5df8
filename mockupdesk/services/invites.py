"""Tokenized review links for external reviewers.

An invite lets one email address approve or request changes on the post behind
one approval request, without an account. Every public entry point goes through
``resolve_invite`` so a missing, expired, consumed or superseded token all fail
the same way.
"""
from datetime import datetime, timedelta
from typing import Iterable, List, Optional

import structlog
from sqlalchemy.orm import Session, joinedload

from mockupdesk.config import settings
from mockupdesk.database import transaction
from mockupdesk.errors import (
    INVALID_REVIEW_LINK,
    InvalidState,
    NotFoundOrExpired,
    ValidationFailed,
)
from mockupdesk.models import (
    ApprovalDecision,
    ApprovalInvite,
    ApprovalRequest,
    NotificationKind,
    Post,
    PostStatus,
)
from mockupdesk.services.access import Actor, ensure_brand_access
from mockupdesk.services.notifications import NotificationSink
from mockupdesk.services.workflow import (
    DECISION_TO_POST_STATUS,
    DECISION_TO_REQUEST_STATUS,
    claim_pending_request,
    notify_creator,
    require_comment,
    settle_pending_post,
)
from mockupdesk.utils.tokens import generate_token

logger = structlog.get_logger(__name__)


def _unused_token(db: Session) -> str:
    while True:
        token = generate_token()
        exists = db.query(ApprovalInvite.id).filter(ApprovalInvite.token == token).first()
        if exists is None:
            return token


def issue_invite(
    db: Session,
    approval_request: ApprovalRequest,
    email: str,
    ttl_days: Optional[int] = None,
    now: Optional[datetime] = None,
) -> ApprovalInvite:
    """Create an invite for ``email``. Does not commit and does not send mail."""
    if not approval_request.is_pending():
        raise InvalidState("This post is not awaiting approval.")

    ttl_days = settings.INVITE_TTL_DAYS if ttl_days is None else ttl_days
    if ttl_days < 1:
        raise ValidationFailed("Invite lifetime must be at least one day.")

    now = now or datetime.utcnow()
    invite = ApprovalInvite(
        approval_request_id=approval_request.id,
        email=email.strip().lower(),
        token=_unused_token(db),
        expires_at=now + timedelta(days=ttl_days),
        created_at=now,
    )
    db.add(invite)
    db.flush()
    return invite


def _normalise_emails(emails: Iterable[str]) -> List[str]:
    seen = []
    for email in emails:
        clean = (email or "").strip().lower()
        if clean and clean not in seen:
            seen.append(clean)
    return seen


def invite_reviewers(
    db: Session,
    actor: Actor,
    post: Post,
    notifier: NotificationSink,
    emails: Optional[Iterable[str]] = None,
    ttl_days: Optional[int] = None,
) -> List[ApprovalInvite]:
    """Issue review links for the post's current cycle and mail each reviewer.

    Falls back to the brand's default reviewers when no emails are given.
    """
    ensure_brand_access(actor, post.brand, "You do not have access to this post.")

    approval_request = post.latest_approval_request
    if approval_request is None or not approval_request.is_pending():
        raise InvalidState("This post is not awaiting approval.")

    recipients = _normalise_emails(emails if emails else (post.brand.default_reviewers or []))
    if not recipients:
        raise ValidationFailed("At least one reviewer email is required.")

    invites = []
    with transaction(db):
        for email in recipients:
            invite = issue_invite(db, approval_request, email, ttl_days=ttl_days)
            notifier.notify(
                NotificationKind.REVIEW_INVITE,
                invite.email,
                {
                    "post_id": post.id,
                    "post_title": post.title,
                    "brand_name": post.brand.name,
                    "requester": approval_request.requester.name,
                    "review_url": invite.review_url,
                    "expires_at": invite.expires_at.strftime("%B %d, %Y"),
                },
            )
            invites.append(invite)

    for invite in invites:
        db.refresh(invite)
    logger.info("invite_issued", post_id=post.id, approval_request_id=approval_request.id, count=len(invites))
    return invites


def resolve_invite(db: Session, token: str, now: Optional[datetime] = None) -> ApprovalInvite:
    """Return the invite behind ``token`` if it can still be acted on.

    Raises ``NotFoundOrExpired`` with the same message for every failure reason.
    """
    invite = None
    if token:
        invite = (
            db.query(ApprovalInvite)
            .options(
                joinedload(ApprovalInvite.approval_request)
                .joinedload(ApprovalRequest.post)
                .joinedload(Post.brand),
            )
            .filter(ApprovalInvite.token == token)
            .first()
        )

    if (
        invite is None
        or not invite.is_valid(now)
        or invite.post is None
        or invite.post.is_deleted
        or invite.post.status != PostStatus.PENDING_APPROVAL
    ):
        raise NotFoundOrExpired(INVALID_REVIEW_LINK)
    return invite


def mark_responded(db: Session, invite: ApprovalInvite, now: Optional[datetime] = None) -> bool:
    updated = (
        db.query(ApprovalInvite)
        .filter(ApprovalInvite.id == invite.id, ApprovalInvite.responded_at.is_(None))
        .update({ApprovalInvite.responded_at: now or datetime.utcnow()}, synchronize_session="fetch")
    )
    return updated == 1


def respond_to_invite(
    db: Session,
    token: str,
    decision: ApprovalDecision,
    notifier: NotificationSink,
    comment: Optional[str] = None,
    now: Optional[datetime] = None,
) -> ApprovalInvite:
    """Apply an external reviewer's decision through their invite token.

    Once this succeeds the request is no longer pending, which invalidates
    every other invite issued for it.
    """
    invite = resolve_invite(db, token, now)

    max_length = settings.PUBLIC_COMMENT_MAX_LENGTH
    if decision == ApprovalDecision.CHANGES_REQUESTED:
        comment = require_comment(comment, "Please describe the changes you would like.")
    elif comment is not None:
        comment = comment.strip() or None
    if comment and len(comment) > max_length:
        raise ValidationFailed(f"Comments may not be longer than {max_length} characters.")

    now = now or datetime.utcnow()
    approval_request = invite.approval_request
    post = approval_request.post
    stamp = now.isoformat()

    if decision == ApprovalDecision.APPROVED:
        attribution = {"approved_by_email": invite.email, "approved_at": stamp}
        if comment:
            attribution["approval_comment"] = comment
    else:
        attribution = {
            "changes_requested_by_email": invite.email,
            "changes_requested_at": stamp,
            "client_feedback": comment,
        }

    with transaction(db):
        if not claim_pending_request(db, approval_request, DECISION_TO_REQUEST_STATUS[decision]):
            raise NotFoundOrExpired(INVALID_REVIEW_LINK)
        if not mark_responded(db, invite, now):
            raise NotFoundOrExpired(INVALID_REVIEW_LINK)
        if not settle_pending_post(db, post, DECISION_TO_POST_STATUS[decision], attribution):
            raise NotFoundOrExpired(INVALID_REVIEW_LINK)
        notify_creator(notifier, post, decision, reviewer=invite.email, comment=comment)

    db.refresh(invite)
    logger.info(
        "invite_responded",
        invite_id=invite.id,
        approval_request_id=approval_request.id,
        post_id=post.id,
        decision=decision.value,
    )
    return invite
