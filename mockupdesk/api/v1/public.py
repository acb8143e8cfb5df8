"""Unauthenticated review endpoints reached through emailed or shared links.

Every handler resolves its token through the service layer first, so an unknown,
expired or already used token always produces the same 404 body.
"""
from typing import Optional

from fastapi import APIRouter, BackgroundTasks, Depends
from sqlalchemy.orm import Session

from mockupdesk.api.v1.serializers import public_brand, public_collection_post, public_post
from mockupdesk.database import get_db
from mockupdesk.dependencies import get_media_service, get_notifier
from mockupdesk.models import ApprovalDecision
from mockupdesk.schemas import (
    CollectionReviewSubmit,
    MessageResponse,
    PublicCollectionResponse,
    PublicDecision,
    PublicDecisionResponse,
    PublicInvite,
    PublicReviewResponse,
)
from mockupdesk.services.collections import resolve_collection, submit_collection_review
from mockupdesk.services.invites import resolve_invite, respond_to_invite
from mockupdesk.services.media import MediaService
from mockupdesk.services.notifications import NotificationSink

router = APIRouter()


@router.get("/review/{token}", response_model=PublicReviewResponse)
def show_review(
    token: str,
    db: Session = Depends(get_db),
    media_service: MediaService = Depends(get_media_service),
):
    invite = resolve_invite(db, token)
    post = invite.post
    return PublicReviewResponse(
        invite=PublicInvite(
            email=invite.email,
            expires_at=invite.expires_at,
            has_responded=invite.has_responded(),
        ),
        post=public_post(post, media_service),
        brand=public_brand(post.brand, media_service),
        requester={"name": invite.approval_request.requester.name},
    )


def _respond(
    token: str,
    decision: ApprovalDecision,
    comment: Optional[str],
    background_tasks: BackgroundTasks,
    db: Session,
    notifier: NotificationSink,
    message: str,
) -> PublicDecisionResponse:
    invite = respond_to_invite(db, token, decision, notifier, comment=comment)
    notifier.dispatch(background_tasks)
    return PublicDecisionResponse(message=message, post_status=invite.post.status)


@router.post("/review/{token}/approve", response_model=PublicDecisionResponse)
def approve_review(
    token: str,
    background_tasks: BackgroundTasks,
    decision_in: Optional[PublicDecision] = None,
    db: Session = Depends(get_db),
    notifier: NotificationSink = Depends(get_notifier),
):
    return _respond(
        token,
        ApprovalDecision.APPROVED,
        decision_in.comment if decision_in else None,
        background_tasks,
        db,
        notifier,
        message="Thank you! The post has been approved.",
    )


@router.post("/review/{token}/request-changes", response_model=PublicDecisionResponse)
def request_changes_review(
    token: str,
    decision_in: PublicDecision,
    background_tasks: BackgroundTasks,
    db: Session = Depends(get_db),
    notifier: NotificationSink = Depends(get_notifier),
):
    return _respond(
        token,
        ApprovalDecision.CHANGES_REQUESTED,
        decision_in.comment,
        background_tasks,
        db,
        notifier,
        message="Thank you! Your feedback has been sent to the team.",
    )


@router.get("/approval/{token}", response_model=PublicCollectionResponse)
def show_collection(
    token: str,
    db: Session = Depends(get_db),
    media_service: MediaService = Depends(get_media_service),
):
    collection = resolve_collection(db, token)
    return PublicCollectionResponse(
        id=collection.id,
        name=collection.name,
        description=collection.description,
        approval_token_expires_at=collection.approval_token_expires_at,
        metadata=collection.meta or {},
        brand=public_brand(collection.brand, media_service),
        posts=[public_collection_post(post, media_service) for post in collection.active_posts],
    )


@router.post("/approval/{token}/submit", response_model=MessageResponse)
def submit_collection(
    token: str,
    review_in: CollectionReviewSubmit,
    db: Session = Depends(get_db),
):
    """Apply a client's review of every post in the collection at once."""
    submit_collection_review(db, token, review_in.reviews)
    return MessageResponse(message="Thank you! Your review has been submitted.")
