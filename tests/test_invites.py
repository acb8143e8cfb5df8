from datetime import datetime, timedelta

import pytest
from sqlalchemy.orm import Session
from sqlalchemy.orm.attributes import set_committed_value

from conftest import actor_for, make_post
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
    ApprovalResponse,
    ApprovalStatus,
    Notification,
    NotificationKind,
    Post,
    PostStatus,
)
from mockupdesk.schemas import CollectionReviewItem
from mockupdesk.services.collections import create_collection, generate_approval_link, submit_collection_review
from mockupdesk.services.invites import (
    invite_reviewers,
    issue_invite,
    resolve_invite,
    respond_to_invite,
)
from mockupdesk.services.workflow import submit_post_for_approval

T0 = datetime(2031, 3, 1, 12, 0, 0)


@pytest.fixture
def pending(db_session: Session, workspace, notifier):
    post = make_post(db_session, workspace["brand"], workspace["creator"])
    approval_request = submit_post_for_approval(
        db_session, actor_for(db_session, workspace["creator"]), post, notifier
    )
    notifier.discard()
    return post, approval_request


def _invite(db_session: Session, approval_request, email="client@coffee.example", now=T0):
    invite = issue_invite(db_session, approval_request, email, now=now)
    db_session.commit()
    return invite


def test_invite_reviewers_issues_one_invite_per_email(db_session: Session, workspace, notifier, pending):
    post, approval_request = pending
    manager = actor_for(db_session, workspace["manager"])

    invites = invite_reviewers(
        db_session, manager, post, notifier, emails=["A@Client.example", "a@client.example", "b@client.example"]
    )

    assert [invite.email for invite in invites] == ["a@client.example", "b@client.example"]
    assert all(invite.approval_request_id == approval_request.id for invite in invites)
    assert len({invite.token for invite in invites}) == 2
    assert all(len(invite.token) == 64 for invite in invites)
    assert invites[0].review_url.endswith(f"/post-review/{invites[0].token}")

    mails = db_session.query(Notification).filter(Notification.kind == NotificationKind.REVIEW_INVITE).all()
    assert sorted(n.recipient_email for n in mails) == ["a@client.example", "b@client.example"]
    assert mails[0].payload["review_url"].startswith("http")


def test_invite_reviewers_falls_back_to_brand_defaults(db_session: Session, workspace, notifier, pending):
    post, _ = pending

    invites = invite_reviewers(db_session, actor_for(db_session, workspace["manager"]), post, notifier)

    assert [invite.email for invite in invites] == ["client@coffee.example"]


def test_invites_default_to_seven_days(db_session: Session, pending):
    _, approval_request = pending

    invite = _invite(db_session, approval_request)

    assert invite.expires_at == T0 + timedelta(days=7)


def test_cannot_invite_for_a_post_that_is_not_pending(db_session: Session, workspace, notifier):
    post = make_post(db_session, workspace["brand"], workspace["creator"])

    with pytest.raises(InvalidState):
        invite_reviewers(
            db_session, actor_for(db_session, workspace["manager"]), post, notifier, emails=["x@client.example"]
        )


def test_resolve_rejects_unknown_and_expired_tokens_alike(db_session: Session, pending):
    _, approval_request = pending
    invite = _invite(db_session, approval_request)

    assert resolve_invite(db_session, invite.token, now=T0 + timedelta(days=6)).id == invite.id

    with pytest.raises(NotFoundOrExpired) as expired:
        resolve_invite(db_session, invite.token, now=T0 + timedelta(days=8))
    with pytest.raises(NotFoundOrExpired) as unknown:
        resolve_invite(db_session, "not-a-real-token", now=T0)

    assert expired.value.message == unknown.value.message == INVALID_REVIEW_LINK


def test_approve_through_invite_records_attribution(db_session: Session, notifier, pending):
    post, approval_request = pending
    invite = _invite(db_session, approval_request)
    decided_at = T0 + timedelta(hours=3)

    respond_to_invite(
        db_session, invite.token, ApprovalDecision.APPROVED, notifier, comment="Looks great", now=decided_at
    )

    db_session.refresh(post)
    db_session.refresh(approval_request)
    db_session.refresh(invite)
    assert post.status == PostStatus.APPROVED
    assert approval_request.status == ApprovalStatus.APPROVED
    assert invite.responded_at == decided_at
    assert post.meta["approved_by_email"] == "client@coffee.example"
    assert post.meta["approved_at"] == decided_at.isoformat()
    assert post.meta["approval_comment"] == "Looks great"
    # External reviewers have no account, so no ApprovalResponse row is written
    assert db_session.query(ApprovalResponse).count() == 0
    assert [mail.to_email for mail in notifier.pending] == ["creator@acme.example"]


def test_request_changes_through_invite_stores_feedback(db_session: Session, notifier, pending):
    post, approval_request = pending
    invite = _invite(db_session, approval_request)

    respond_to_invite(
        db_session,
        invite.token,
        ApprovalDecision.CHANGES_REQUESTED,
        notifier,
        comment="Swap the second image.",
        now=T0 + timedelta(days=1),
    )

    db_session.refresh(post)
    assert post.status == PostStatus.CHANGES_REQUESTED
    assert post.meta["client_feedback"] == "Swap the second image."
    assert post.meta["changes_requested_by_email"] == "client@coffee.example"
    assert notifier.pending[0].subject.startswith("Changes requested")


def test_request_changes_through_invite_needs_a_comment(db_session: Session, notifier, pending):
    post, approval_request = pending
    invite = _invite(db_session, approval_request)

    with pytest.raises(ValidationFailed):
        respond_to_invite(db_session, invite.token, ApprovalDecision.CHANGES_REQUESTED, notifier, now=T0)
    with pytest.raises(ValidationFailed):
        respond_to_invite(
            db_session, invite.token, ApprovalDecision.CHANGES_REQUESTED, notifier, comment="x" * 2001, now=T0
        )

    db_session.refresh(post)
    assert post.status == PostStatus.PENDING_APPROVAL


def test_invite_cannot_be_used_twice(db_session: Session, notifier, pending):
    post, approval_request = pending
    invite = _invite(db_session, approval_request)
    respond_to_invite(
        db_session, invite.token, ApprovalDecision.APPROVED, notifier, comment="First look", now=T0
    )
    db_session.refresh(post)
    db_session.refresh(invite)
    responded_at = invite.responded_at
    meta = dict(post.meta)
    notification_count = db_session.query(Notification).count()
    notifier.discard()

    with pytest.raises(NotFoundOrExpired) as exc:
        respond_to_invite(
            db_session,
            invite.token,
            ApprovalDecision.CHANGES_REQUESTED,
            notifier,
            comment="Second thoughts",
            now=T0 + timedelta(hours=1),
        )

    assert exc.value.message == INVALID_REVIEW_LINK
    db_session.refresh(post)
    db_session.refresh(invite)
    assert invite.responded_at == responded_at
    assert post.meta == meta
    assert post.status == PostStatus.APPROVED
    assert db_session.query(Notification).count() == notification_count
    assert notifier.pending == []


def test_first_response_invalidates_sibling_invites(db_session: Session, notifier, pending):
    post, approval_request = pending
    first = _invite(db_session, approval_request, "first@client.example")
    second = _invite(db_session, approval_request, "second@client.example")

    respond_to_invite(db_session, first.token, ApprovalDecision.APPROVED, notifier, now=T0)

    with pytest.raises(NotFoundOrExpired):
        respond_to_invite(
            db_session, second.token, ApprovalDecision.CHANGES_REQUESTED, notifier, comment="Too late", now=T0
        )
    db_session.refresh(post)
    assert post.status == PostStatus.APPROVED
    assert db_session.query(ApprovalInvite).filter(ApprovalInvite.responded_at.isnot(None)).count() == 1


def test_invite_for_deleted_post_is_unusable(db_session: Session, pending):
    post, approval_request = pending
    invite = _invite(db_session, approval_request)
    post.deleted_at = T0
    db_session.commit()

    with pytest.raises(NotFoundOrExpired):
        resolve_invite(db_session, invite.token, now=T0)


def test_invite_is_dead_once_a_collection_review_settles_the_post(
    db_session: Session, workspace, notifier, pending
):
    post, approval_request = pending
    invite = _invite(db_session, approval_request)
    manager = actor_for(db_session, workspace["manager"])
    collection = create_collection(db_session, manager, workspace["brand"], "March", post_ids=[post.id])
    token = generate_approval_link(db_session, manager, collection, now=T0).approval_token
    submit_collection_review(
        db_session,
        token,
        [CollectionReviewItem(post_id=post.id, status="changes_requested", feedback="Darker roast please.")],
        now=T0,
    )

    with pytest.raises(NotFoundOrExpired):
        resolve_invite(db_session, invite.token, now=T0)
    with pytest.raises(NotFoundOrExpired) as exc:
        respond_to_invite(db_session, invite.token, ApprovalDecision.APPROVED, notifier, now=T0)

    assert exc.value.message == INVALID_REVIEW_LINK
    db_session.expire_all()
    assert db_session.get(Post, post.id).status == PostStatus.CHANGES_REQUESTED
    assert db_session.get(ApprovalInvite, invite.id).responded_at is None
    assert notifier.pending == []


def test_invite_response_loses_to_a_concurrent_post_change(db_session: Session, notifier, pending):
    post, approval_request = pending
    invite = _invite(db_session, approval_request)
    # The post is settled elsewhere after this session loaded it as pending
    db_session.query(Post).filter(Post.id == post.id).update(
        {Post.status: PostStatus.APPROVED}, synchronize_session=False
    )
    db_session.commit()
    db_session.refresh(post)
    set_committed_value(post, "status", PostStatus.PENDING_APPROVAL)

    with pytest.raises(NotFoundOrExpired) as exc:
        respond_to_invite(
            db_session, invite.token, ApprovalDecision.CHANGES_REQUESTED, notifier, comment="Too late", now=T0
        )

    assert exc.value.message == INVALID_REVIEW_LINK
    db_session.expire_all()
    assert db_session.get(Post, post.id).status == PostStatus.APPROVED
    assert db_session.get(ApprovalRequest, approval_request.id).status == ApprovalStatus.PENDING
    assert db_session.get(ApprovalInvite, invite.id).responded_at is None
    assert notifier.pending == []
