"""Post comment endpoints"""
from typing import Dict, List, Optional

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session, selectinload

from mockupdesk.api.v1.posts import POST_ACCESS_DENIED, load_post
from mockupdesk.api.v1.serializers import serialize_comment
from mockupdesk.database import get_db, transaction
from mockupdesk.dependencies import get_actor
from mockupdesk.errors import NotFound, PermissionDenied, ValidationFailed
from mockupdesk.models import Comment, Post
from mockupdesk.schemas import CommentCreate, CommentResponse, CommentUpdate, MessageResponse
from mockupdesk.services.access import Actor, ensure_brand_access, is_manager

router = APIRouter()


def _comment_query(db: Session):
    return db.query(Comment).options(
        selectinload(Comment.author),
        selectinload(Comment.post).selectinload(Post.brand),
    )


def _build_comment_tree(comments: List[Comment]) -> List[CommentResponse]:
    comments_by_parent: Dict[Optional[int], List[Comment]] = {}
    for comment in comments:
        comments_by_parent.setdefault(comment.parent_id, []).append(comment)

    def build_nodes(parent_id: Optional[int]) -> List[CommentResponse]:
        # Top level newest first, replies in conversation order
        newest_first = parent_id is None
        children = sorted(
            comments_by_parent.get(parent_id, []),
            key=lambda c: (c.created_at, c.id),
            reverse=newest_first,
        )
        return [serialize_comment(item, build_nodes(item.id)) for item in children]

    return build_nodes(None)


def _load_comment(db: Session, comment_id: int) -> Comment:
    comment = _comment_query(db).filter(Comment.id == comment_id).first()
    if not comment or comment.post.is_deleted:
        raise NotFound("Comment not found")
    return comment


@router.get("/posts/{post_id}/comments", response_model=List[CommentResponse])
def list_post_comments(
    post_id: int,
    actor: Actor = Depends(get_actor),
    db: Session = Depends(get_db),
):
    """Return all comments for a post as a threaded conversation."""
    post = load_post(db, post_id)
    ensure_brand_access(actor, post.brand, POST_ACCESS_DENIED)

    comments = _comment_query(db).filter(Comment.post_id == post.id).all()
    return _build_comment_tree(comments)


@router.post("/posts/{post_id}/comments", response_model=CommentResponse, status_code=status.HTTP_201_CREATED)
def create_comment(
    post_id: int,
    comment_in: CommentCreate,
    actor: Actor = Depends(get_actor),
    db: Session = Depends(get_db),
):
    post = load_post(db, post_id)
    ensure_brand_access(actor, post.brand, POST_ACCESS_DENIED)

    body = comment_in.body.strip()
    if not body:
        raise ValidationFailed("Comment content cannot be empty.")

    if comment_in.parent_id is not None:
        parent = db.query(Comment).filter(Comment.id == comment_in.parent_id).first()
        if parent is None or parent.post_id != post.id:
            raise ValidationFailed("Parent comment not found for this post.")

    with transaction(db):
        comment = Comment(
            post_id=post.id,
            user_id=actor.id,
            parent_id=comment_in.parent_id,
            body=body,
            attachment=comment_in.attachment,
        )
        db.add(comment)

    return serialize_comment(_load_comment(db, comment.id))


@router.patch("/comments/{comment_id}", response_model=CommentResponse)
def update_comment(
    comment_id: int,
    comment_in: CommentUpdate,
    actor: Actor = Depends(get_actor),
    db: Session = Depends(get_db),
):
    comment = _load_comment(db, comment_id)
    if comment.user_id != actor.id:
        raise PermissionDenied("You can only edit your own comments.")

    body = comment_in.body.strip()
    if not body:
        raise ValidationFailed("Comment content cannot be empty.")

    with transaction(db):
        comment.body = body

    return serialize_comment(_load_comment(db, comment.id))


@router.delete("/comments/{comment_id}", response_model=MessageResponse)
def delete_comment(
    comment_id: int,
    actor: Actor = Depends(get_actor),
    db: Session = Depends(get_db),
):
    """Delete a comment and its replies."""
    comment = _load_comment(db, comment_id)
    ensure_brand_access(actor, comment.post.brand, POST_ACCESS_DENIED)
    if comment.user_id != actor.id and not is_manager(actor):
        raise PermissionDenied("You are not allowed to delete this comment.")

    with transaction(db):
        db.delete(comment)

    return MessageResponse(message="Comment deleted successfully.")


@router.post("/comments/{comment_id}/resolve", response_model=CommentResponse)
def resolve_comment(
    comment_id: int,
    actor: Actor = Depends(get_actor),
    db: Session = Depends(get_db),
):
    """Mark a comment as resolved or reopen it."""
    comment = _load_comment(db, comment_id)
    ensure_brand_access(actor, comment.post.brand, POST_ACCESS_DENIED)

    with transaction(db):
        comment.is_resolved = not comment.is_resolved

    return serialize_comment(_load_comment(db, comment.id))
