"""Collections: batches of posts reviewed together on one public page.

The public bulk review changes ``Post.status`` directly and does not create
approval responses; it is a separate, simpler approval surface from the
single-post request flow in ``workflow``.
"""
from datetime import datetime, timedelta
from typing import Iterable, List, Optional

import structlog
from sqlalchemy.orm import Session, selectinload

from mockupdesk.config import settings
from mockupdesk.database import transaction
from mockupdesk.errors import (
    INVALID_APPROVAL_LINK,
    InvalidState,
    NotFoundOrExpired,
    ResourceMismatch,
    ValidationFailed,
)
from mockupdesk.models import Brand, Collection, EDITABLE_STATUSES, Post, PostMedia, PostStatus
from mockupdesk.schemas.public import CollectionReviewItem
from mockupdesk.services.access import Actor, ensure_brand_access
from mockupdesk.services.workflow import open_approval_request, transition_post_status
from mockupdesk.utils.tokens import generate_token

logger = structlog.get_logger(__name__)

COLLECTION_ACCESS_DENIED = "You do not have access to this collection."


def _brand_posts(db: Session, brand_id: int, post_ids: Iterable[int]) -> List[Post]:
    ids = list(dict.fromkeys(post_ids or []))
    if not ids:
        return []
    return (
        db.query(Post)
        .filter(Post.id.in_(ids), Post.brand_id == brand_id, Post.deleted_at.is_(None))
        .order_by(Post.id)
        .all()
    )


def create_collection(
    db: Session,
    actor: Actor,
    brand: Brand,
    name: str,
    description: Optional[str] = None,
    post_ids: Optional[Iterable[int]] = None,
) -> Collection:
    ensure_brand_access(actor, brand)

    with transaction(db):
        collection = Collection(
            brand_id=brand.id,
            created_by_id=actor.id,
            name=name,
            description=description,
        )
        db.add(collection)
        db.flush()
        for post in _brand_posts(db, brand.id, post_ids):
            post.collection_id = collection.id

    db.refresh(collection)
    return collection


def update_collection(
    db: Session,
    actor: Actor,
    collection: Collection,
    name: Optional[str] = None,
    description: Optional[str] = None,
) -> Collection:
    ensure_brand_access(actor, collection.brand, COLLECTION_ACCESS_DENIED)
    with transaction(db):
        if name is not None:
            collection.name = name
        if description is not None:
            collection.description = description
    db.refresh(collection)
    return collection


def delete_collection(db: Session, actor: Actor, collection: Collection) -> None:
    """Delete the collection; its posts stay and lose their collection link."""
    ensure_brand_access(actor, collection.brand, COLLECTION_ACCESS_DENIED)
    with transaction(db):
        db.query(Post).filter(Post.collection_id == collection.id).update(
            {Post.collection_id: None}, synchronize_session="fetch"
        )
        db.delete(collection)


def add_posts(db: Session, actor: Actor, collection: Collection, post_ids: Iterable[int]) -> int:
    ensure_brand_access(actor, collection.brand, COLLECTION_ACCESS_DENIED)
    with transaction(db):
        posts = _brand_posts(db, collection.brand_id, post_ids)
        for post in posts:
            post.collection_id = collection.id
    return len(posts)


def remove_posts(db: Session, actor: Actor, collection: Collection, post_ids: Iterable[int]) -> int:
    ensure_brand_access(actor, collection.brand, COLLECTION_ACCESS_DENIED)
    ids = list(post_ids or [])
    with transaction(db):
        removed = (
            db.query(Post)
            .filter(Post.id.in_(ids), Post.collection_id == collection.id)
            .update({Post.collection_id: None}, synchronize_session="fetch")
        )
    return removed


def _issue_approval_token(db: Session, collection: Collection, expires_in_days: int, now: datetime) -> str:
    while True:
        token = generate_token()
        if db.query(Collection.id).filter(Collection.approval_token == token).first() is None:
            break
    collection.approval_token = token
    collection.approval_token_expires_at = now + timedelta(days=expires_in_days)
    return token


def generate_approval_link(
    db: Session,
    actor: Actor,
    collection: Collection,
    expires_in_days: Optional[int] = None,
    now: Optional[datetime] = None,
) -> Collection:
    """Create or replace the collection's public approval token."""
    ensure_brand_access(actor, collection.brand, COLLECTION_ACCESS_DENIED)

    if expires_in_days is None:
        expires_in_days = settings.COLLECTION_LINK_TTL_DAYS
    if not 1 <= expires_in_days <= settings.COLLECTION_LINK_MAX_TTL_DAYS:
        raise ValidationFailed(
            f"The link must expire within 1 to {settings.COLLECTION_LINK_MAX_TTL_DAYS} days."
        )

    with transaction(db):
        _issue_approval_token(db, collection, expires_in_days, now or datetime.utcnow())

    db.refresh(collection)
    logger.info("collection_link_generated", collection_id=collection.id, expires_in_days=expires_in_days)
    return collection


def submit_collection_for_approval(
    db: Session,
    actor: Actor,
    collection: Collection,
    now: Optional[datetime] = None,
) -> List[Post]:
    """Open a review cycle for every editable post and make sure a public link exists.

    Raises ``InvalidState`` when no post was eligible.
    """
    ensure_brand_access(actor, collection.brand, COLLECTION_ACCESS_DENIED)
    now = now or datetime.utcnow()

    eligible = (
        db.query(Post)
        .filter(
            Post.collection_id == collection.id,
            Post.deleted_at.is_(None),
            Post.status.in_(EDITABLE_STATUSES),
        )
        .order_by(Post.id)
        .all()
    )
    if not eligible:
        raise InvalidState("No posts available to submit for approval.")

    with transaction(db):
        for post in eligible:
            open_approval_request(db, actor, post)
        if not collection.has_valid_approval_token(now):
            _issue_approval_token(db, collection, settings.COLLECTION_LINK_TTL_DAYS, now)

    db.refresh(collection)
    logger.info("collection_submitted", collection_id=collection.id, posts_submitted=len(eligible))
    return eligible


def resolve_collection(db: Session, token: str, now: Optional[datetime] = None) -> Collection:
    """Return the collection behind a public approval token, or fail uniformly."""
    collection = None
    if token:
        collection = (
            db.query(Collection)
            .options(
                selectinload(Collection.brand),
                selectinload(Collection.posts).selectinload(Post.media_links).selectinload(PostMedia.media),
            )
            .filter(Collection.approval_token == token)
            .first()
        )

    if collection is None or not collection.has_valid_approval_token(now):
        raise NotFoundOrExpired(INVALID_APPROVAL_LINK)
    return collection


def submit_collection_review(
    db: Session,
    token: str,
    reviews: List[CollectionReviewItem],
    now: Optional[datetime] = None,
) -> Collection:
    """Apply a client's review of many posts at once; all or nothing."""
    collection = resolve_collection(db, token, now)

    if not reviews:
        raise ValidationFailed("At least one review is required.")

    posts_by_id = {post.id: post for post in collection.active_posts}
    if any(review.post_id not in posts_by_id for review in reviews):
        raise ResourceMismatch()

    now = now or datetime.utcnow()
    stamp = now.isoformat()

    with transaction(db):
        for review in reviews:
            attribution = {}
            if review.feedback:
                attribution["client_feedback"] = review.feedback
                attribution["feedback_at"] = stamp
            if review.caption_suggestion:
                attribution["caption_suggestion"] = review.caption_suggestion
            transition_post_status(posts_by_id[review.post_id], PostStatus(review.status), attribution)

        meta = dict(collection.meta or {})
        meta["last_reviewed_at"] = stamp
        collection.meta = meta

    db.refresh(collection)
    logger.info("collection_reviewed", collection_id=collection.id, reviews=len(reviews))
    return collection
