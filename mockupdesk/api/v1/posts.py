"""Post endpoints"""
from datetime import datetime
from typing import List, Optional

import structlog
from fastapi import APIRouter, BackgroundTasks, Depends, Query, status
from sqlalchemy.orm import Session, selectinload

from mockupdesk.api.v1.serializers import serialize_post
from mockupdesk.config import settings
from mockupdesk.database import get_db, transaction
from mockupdesk.dependencies import get_actor, get_media_service, get_notifier
from mockupdesk.errors import InvalidState, NotFound, PermissionDenied, ValidationFailed
from mockupdesk.models import Brand, Media, Post, PostMedia, PostStatus
from mockupdesk.schemas import (
    InviteResponse,
    InviteReviewersCreate,
    InviteReviewersResponse,
    MessageResponse,
    PostActionResponse,
    PostCreate,
    PostResponse,
    PostUpdate,
    SubmitForApproval,
)
from mockupdesk.services.access import Actor, accessible_brand_ids, ensure_brand_access, is_manager
from mockupdesk.services.invites import invite_reviewers
from mockupdesk.services.media import MediaService
from mockupdesk.services.notifications import NotificationSink
from mockupdesk.services.workflow import submit_post_for_approval

logger = structlog.get_logger(__name__)

router = APIRouter()

POST_ACCESS_DENIED = "You do not have access to this post."


def _post_query(db: Session):
    return db.query(Post).options(
        selectinload(Post.brand),
        selectinload(Post.creator),
        selectinload(Post.media_links).selectinload(PostMedia.media),
        selectinload(Post.approval_requests),
    ).filter(Post.deleted_at.is_(None))


def load_post(db: Session, post_id: int) -> Post:
    post = _post_query(db).filter(Post.id == post_id).first()
    if not post:
        raise NotFound("Post not found")
    return post


def _load_brand(db: Session, brand_id: int) -> Brand:
    brand = db.query(Brand).filter(Brand.id == brand_id).first()
    if not brand:
        raise NotFound("Brand not found")
    return brand


def _ensure_owner_or_manager(post: Post, actor: Actor, message: str) -> None:
    if post.created_by_id != actor.id and not is_manager(actor):
        raise PermissionDenied(message)


def _attach_media(db: Session, post: Post, media_ids: List[int]) -> None:
    if not media_ids:
        return
    media_rows = db.query(Media).filter(Media.id.in_(media_ids)).all()
    by_id = {media.id: media for media in media_rows}
    for position, media_id in enumerate(dict.fromkeys(media_ids)):
        media = by_id.get(media_id)
        if media is None:
            raise ValidationFailed(f"Media {media_id} not found.")
        if media.brand_id != post.brand_id:
            raise ValidationFailed("Media must belong to the same brand.")
        db.add(PostMedia(post_id=post.id, media_id=media.id, position=position))


@router.get("", response_model=List[PostResponse])
def list_posts(
    brand_id: Optional[int] = Query(None),
    status_filter: Optional[PostStatus] = Query(None, alias="status"),
    platform: Optional[str] = Query(None),
    mine: bool = Query(False),
    limit: int = Query(settings.DEFAULT_PAGE_SIZE, ge=1, le=100),
    offset: int = Query(0, ge=0),
    actor: Actor = Depends(get_actor),
    db: Session = Depends(get_db),
    media_service: MediaService = Depends(get_media_service),
):
    """List posts across the brands the caller can see."""
    brand_ids = accessible_brand_ids(db, actor)
    query = _post_query(db).filter(Post.brand_id.in_(brand_ids))
    if brand_id is not None:
        query = query.filter(Post.brand_id == brand_id)
    if status_filter is not None:
        query = query.filter(Post.status == status_filter)
    if mine:
        query = query.filter(Post.created_by_id == actor.id)

    posts = query.order_by(Post.updated_at.desc(), Post.id.desc()).all()
    # platforms is a JSON list; filtered after loading
    if platform:
        posts = [post for post in posts if platform in (post.platforms or [])]
    return [serialize_post(post, media_service) for post in posts[offset:offset + limit]]


@router.post("", response_model=PostResponse, status_code=status.HTTP_201_CREATED)
def create_post(
    post_in: PostCreate,
    actor: Actor = Depends(get_actor),
    db: Session = Depends(get_db),
    media_service: MediaService = Depends(get_media_service),
):
    """Create a draft post for a brand."""
    brand = _load_brand(db, post_in.brand_id)
    ensure_brand_access(actor, brand)

    with transaction(db):
        post = Post(
            brand_id=brand.id,
            created_by_id=actor.id,
            title=post_in.title,
            caption=post_in.caption,
            platforms=list(post_in.platforms),
            scheduled_for=post_in.scheduled_for,
            status=PostStatus.DRAFT,
        )
        db.add(post)
        db.flush()
        _attach_media(db, post, post_in.media_ids)

    logger.info("post_created", post_id=post.id, brand_id=brand.id, user_id=actor.id)
    return serialize_post(load_post(db, post.id), media_service)


@router.get("/{post_id}", response_model=PostResponse)
def get_post(
    post_id: int,
    actor: Actor = Depends(get_actor),
    db: Session = Depends(get_db),
    media_service: MediaService = Depends(get_media_service),
):
    post = load_post(db, post_id)
    ensure_brand_access(actor, post.brand, POST_ACCESS_DENIED)
    return serialize_post(post, media_service)


@router.patch("/{post_id}", response_model=PostResponse)
def update_post(
    post_id: int,
    post_update: PostUpdate,
    actor: Actor = Depends(get_actor),
    db: Session = Depends(get_db),
    media_service: MediaService = Depends(get_media_service),
):
    """Edit a post that is still a draft or has changes requested."""
    post = load_post(db, post_id)
    ensure_brand_access(actor, post.brand, POST_ACCESS_DENIED)

    if not post.can_be_edited():
        raise InvalidState("This post cannot be edited in its current status.")
    _ensure_owner_or_manager(post, actor, "You can only edit your own posts.")

    update_data = post_update.model_dump(exclude_unset=True)
    with transaction(db):
        for field, value in update_data.items():
            setattr(post, field, list(value) if field == "platforms" else value)

    return serialize_post(load_post(db, post.id), media_service)


@router.delete("/{post_id}", response_model=MessageResponse)
def delete_post(
    post_id: int,
    actor: Actor = Depends(get_actor),
    db: Session = Depends(get_db),
):
    """Soft-delete a post; its approval history is kept."""
    post = load_post(db, post_id)
    ensure_brand_access(actor, post.brand, POST_ACCESS_DENIED)
    _ensure_owner_or_manager(post, actor, "You can only delete your own posts.")

    with transaction(db):
        post.deleted_at = datetime.utcnow()

    return MessageResponse(message="Post deleted successfully.")


@router.post("/{post_id}/submit", response_model=PostActionResponse)
def submit_for_approval(
    post_id: int,
    background_tasks: BackgroundTasks,
    submit_in: Optional[SubmitForApproval] = None,
    actor: Actor = Depends(get_actor),
    db: Session = Depends(get_db),
    notifier: NotificationSink = Depends(get_notifier),
    media_service: MediaService = Depends(get_media_service),
):
    post = load_post(db, post_id)
    due_date = submit_in.due_date if submit_in else None
    submit_post_for_approval(db, actor, post, notifier, due_date=due_date)
    notifier.dispatch(background_tasks)
    return PostActionResponse(
        post=serialize_post(load_post(db, post.id), media_service),
        message="Post submitted for approval.",
    )


@router.post("/{post_id}/invite-reviewers", response_model=InviteReviewersResponse)
def invite_post_reviewers(
    post_id: int,
    invite_in: InviteReviewersCreate,
    background_tasks: BackgroundTasks,
    actor: Actor = Depends(get_actor),
    db: Session = Depends(get_db),
    notifier: NotificationSink = Depends(get_notifier),
):
    """Send tokenized review links to external reviewers."""
    post = load_post(db, post_id)
    invites = invite_reviewers(
        db,
        actor,
        post,
        notifier,
        emails=[str(email) for email in invite_in.emails],
        ttl_days=invite_in.expires_in_days,
    )
    notifier.dispatch(background_tasks)
    return InviteReviewersResponse(
        invites=[InviteResponse.model_validate(invite) for invite in invites],
        message=f"Review invitations sent to {len(invites)} reviewer(s).",
    )


@router.post("/{post_id}/duplicate", response_model=PostResponse, status_code=status.HTTP_201_CREATED)
def duplicate_post(
    post_id: int,
    actor: Actor = Depends(get_actor),
    db: Session = Depends(get_db),
    media_service: MediaService = Depends(get_media_service),
):
    """Copy a post, media included, into a fresh draft."""
    post = load_post(db, post_id)
    ensure_brand_access(actor, post.brand, POST_ACCESS_DENIED)

    with transaction(db):
        copy = Post(
            brand_id=post.brand_id,
            collection_id=post.collection_id,
            created_by_id=actor.id,
            title=f"{post.title} (Copy)",
            caption=post.caption,
            platforms=list(post.platforms or []),
            status=PostStatus.DRAFT,
        )
        db.add(copy)
        db.flush()
        for link in post.media_links:
            db.add(PostMedia(post_id=copy.id, media_id=link.media_id, position=link.position))

    return serialize_post(load_post(db, copy.id), media_service)
