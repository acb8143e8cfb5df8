"""Turn ORM rows into response schemas.

Media URLs and readiness come from the media service, so posts are built
explicitly rather than validated straight from attributes.
"""
from typing import List

from mockupdesk.models import ApprovalRequest, Brand, Collection, Comment, Post, PostMedia
from mockupdesk.schemas import (
    ApprovalRequestOut,
    ApprovalRequestSummary,
    CollectionResponse,
    CommentResponse,
    MediaResponse,
    PostResponse,
    PublicBrand,
    PublicCollectionPost,
    PublicPost,
    UserSummary,
)
from mockupdesk.services.media import MediaService


def serialize_media(link: PostMedia, media_service: MediaService) -> MediaResponse:
    media = link.media
    described = media_service.describe(media)
    return MediaResponse(
        id=media.id,
        type=media.type,
        original_filename=media.original_filename,
        mime_type=media.mime_type,
        size=media.size,
        width=media.width,
        height=media.height,
        duration=media.duration,
        ready=described["ready"],
        url=media_service.url_for(media.path),
        thumbnail_url=media_service.thumbnail_url(media),
        position=link.position,
    )


def serialize_post(post: Post, media_service: MediaService) -> PostResponse:
    latest = post.latest_approval_request
    return PostResponse(
        id=post.id,
        brand_id=post.brand_id,
        collection_id=post.collection_id,
        title=post.title,
        caption=post.caption,
        platforms=list(post.platforms or []),
        status=post.status,
        scheduled_for=post.scheduled_for,
        metadata=post.meta or {},
        created_at=post.created_at,
        updated_at=post.updated_at,
        creator=UserSummary.model_validate(post.creator),
        media=[serialize_media(link, media_service) for link in post.media_links],
        latest_approval_request=ApprovalRequestSummary.model_validate(latest) if latest else None,
    )


def serialize_approval_request(approval_request: ApprovalRequest) -> ApprovalRequestOut:
    return ApprovalRequestOut.model_validate(approval_request)


def serialize_collection(
    collection: Collection,
    media_service: MediaService,
    include_posts: bool = False,
) -> CollectionResponse:
    posts = collection.active_posts
    return CollectionResponse(
        id=collection.id,
        brand_id=collection.brand_id,
        name=collection.name,
        description=collection.description,
        approval_url=collection.approval_url,
        approval_token_expires_at=collection.approval_token_expires_at,
        metadata=collection.meta or {},
        status_summary=collection.status_summary(),
        is_fully_approved=collection.is_fully_approved(),
        has_posts_needing_changes=collection.has_posts_needing_changes(),
        created_at=collection.created_at,
        creator=UserSummary.model_validate(collection.creator),
        posts=[serialize_post(post, media_service) for post in posts] if include_posts else [],
    )


def serialize_comment(comment: Comment, replies: List[CommentResponse] = None) -> CommentResponse:
    return CommentResponse(
        id=comment.id,
        post_id=comment.post_id,
        parent_id=comment.parent_id,
        body=comment.body,
        attachment=comment.attachment,
        is_resolved=comment.is_resolved,
        created_at=comment.created_at,
        updated_at=comment.updated_at,
        author=UserSummary.model_validate(comment.author),
        replies=replies or [],
    )


def public_brand(brand: Brand, media_service: MediaService) -> PublicBrand:
    return PublicBrand(
        id=brand.id,
        name=brand.name,
        logo_url=media_service.url_for(brand.logo_path),
        profile_name=brand.profile_name,
    )


def public_post(post: Post, media_service: MediaService) -> PublicPost:
    """Post as shown to an anonymous reviewer: only media that is ready."""
    media = [
        serialize_media(link, media_service)
        for link in post.media_links
        if media_service.describe(link.media)["ready"]
    ]
    return PublicPost(
        id=post.id,
        title=post.title,
        caption=post.caption,
        platforms=list(post.platforms or []),
        status=post.status,
        media=media,
    )


def public_collection_post(post: Post, media_service: MediaService) -> PublicCollectionPost:
    """Collection pages also carry the post metadata, earlier client feedback included."""
    return PublicCollectionPost(**public_post(post, media_service).model_dump(), metadata=post.meta or {})
