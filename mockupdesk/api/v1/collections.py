"""Collection endpoints"""
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session, selectinload

from mockupdesk.api.v1.serializers import serialize_collection
from mockupdesk.database import get_db
from mockupdesk.dependencies import get_actor, get_media_service
from mockupdesk.errors import NotFound
from mockupdesk.models import Brand, Collection, Post, PostMedia
from mockupdesk.schemas import (
    CollectionCreate,
    CollectionPostIds,
    CollectionPostsChanged,
    CollectionResponse,
    CollectionSubmitResponse,
    CollectionUpdate,
    GenerateLinkCreate,
    GenerateLinkResponse,
    MessageResponse,
)
from mockupdesk.services import collections as collection_service
from mockupdesk.services.access import Actor, accessible_brand_ids, ensure_brand_access
from mockupdesk.services.collections import COLLECTION_ACCESS_DENIED
from mockupdesk.services.media import MediaService

router = APIRouter()


def _collection_query(db: Session):
    return db.query(Collection).options(
        selectinload(Collection.brand),
        selectinload(Collection.creator),
        selectinload(Collection.posts).selectinload(Post.creator),
        selectinload(Collection.posts).selectinload(Post.approval_requests),
        selectinload(Collection.posts).selectinload(Post.media_links).selectinload(PostMedia.media),
    )


def _load_collection(db: Session, collection_id: int, actor: Actor) -> Collection:
    collection = _collection_query(db).filter(Collection.id == collection_id).first()
    if not collection:
        raise NotFound("Collection not found")
    ensure_brand_access(actor, collection.brand, COLLECTION_ACCESS_DENIED)
    return collection


@router.get("", response_model=List[CollectionResponse])
def list_collections(
    brand_id: Optional[int] = Query(None),
    actor: Actor = Depends(get_actor),
    db: Session = Depends(get_db),
    media_service: MediaService = Depends(get_media_service),
):
    query = _collection_query(db).filter(Collection.brand_id.in_(accessible_brand_ids(db, actor)))
    if brand_id is not None:
        query = query.filter(Collection.brand_id == brand_id)
    collections = query.order_by(Collection.created_at.desc(), Collection.id.desc()).all()
    return [serialize_collection(collection, media_service) for collection in collections]


@router.post("", response_model=CollectionResponse, status_code=status.HTTP_201_CREATED)
def create_collection(
    collection_in: CollectionCreate,
    actor: Actor = Depends(get_actor),
    db: Session = Depends(get_db),
    media_service: MediaService = Depends(get_media_service),
):
    brand = db.query(Brand).filter(Brand.id == collection_in.brand_id).first()
    if not brand:
        raise NotFound("Brand not found")

    collection = collection_service.create_collection(
        db,
        actor,
        brand,
        name=collection_in.name,
        description=collection_in.description,
        post_ids=collection_in.post_ids,
    )
    return serialize_collection(_load_collection(db, collection.id, actor), media_service, include_posts=True)


@router.get("/{collection_id}", response_model=CollectionResponse)
def get_collection(
    collection_id: int,
    actor: Actor = Depends(get_actor),
    db: Session = Depends(get_db),
    media_service: MediaService = Depends(get_media_service),
):
    collection = _load_collection(db, collection_id, actor)
    return serialize_collection(collection, media_service, include_posts=True)


@router.patch("/{collection_id}", response_model=CollectionResponse)
def update_collection(
    collection_id: int,
    collection_in: CollectionUpdate,
    actor: Actor = Depends(get_actor),
    db: Session = Depends(get_db),
    media_service: MediaService = Depends(get_media_service),
):
    collection = _load_collection(db, collection_id, actor)
    collection_service.update_collection(
        db,
        actor,
        collection,
        name=collection_in.name,
        description=collection_in.description,
    )
    return serialize_collection(_load_collection(db, collection_id, actor), media_service, include_posts=True)


@router.delete("/{collection_id}", response_model=MessageResponse)
def delete_collection(
    collection_id: int,
    actor: Actor = Depends(get_actor),
    db: Session = Depends(get_db),
):
    """Delete a collection; its posts are kept."""
    collection = _load_collection(db, collection_id, actor)
    collection_service.delete_collection(db, actor, collection)
    return MessageResponse(message="Collection deleted successfully.")


@router.post("/{collection_id}/posts", response_model=CollectionPostsChanged)
def add_posts(
    collection_id: int,
    post_ids_in: CollectionPostIds,
    actor: Actor = Depends(get_actor),
    db: Session = Depends(get_db),
):
    collection = _load_collection(db, collection_id, actor)
    count = collection_service.add_posts(db, actor, collection, post_ids_in.post_ids)
    return CollectionPostsChanged(message=f"{count} post(s) added to the collection.", count=count)


@router.delete("/{collection_id}/posts", response_model=CollectionPostsChanged)
def remove_posts(
    collection_id: int,
    post_ids_in: CollectionPostIds,
    actor: Actor = Depends(get_actor),
    db: Session = Depends(get_db),
):
    collection = _load_collection(db, collection_id, actor)
    count = collection_service.remove_posts(db, actor, collection, post_ids_in.post_ids)
    return CollectionPostsChanged(message=f"{count} post(s) removed from the collection.", count=count)


@router.post("/{collection_id}/generate-link", response_model=GenerateLinkResponse)
def generate_link(
    collection_id: int,
    link_in: Optional[GenerateLinkCreate] = None,
    actor: Actor = Depends(get_actor),
    db: Session = Depends(get_db),
):
    """Create or replace the public approval link."""
    collection = _load_collection(db, collection_id, actor)
    collection = collection_service.generate_approval_link(
        db,
        actor,
        collection,
        expires_in_days=link_in.expires_in_days if link_in else None,
    )
    return GenerateLinkResponse(
        approval_url=collection.approval_url,
        expires_at=collection.approval_token_expires_at,
    )


@router.post("/{collection_id}/submit", response_model=CollectionSubmitResponse)
def submit_collection(
    collection_id: int,
    actor: Actor = Depends(get_actor),
    db: Session = Depends(get_db),
):
    collection = _load_collection(db, collection_id, actor)
    submitted = collection_service.submit_collection_for_approval(db, actor, collection)
    return CollectionSubmitResponse(
        message=f"{len(submitted)} post(s) submitted for approval.",
        approval_url=collection.approval_url,
        posts_submitted=len(submitted),
    )
