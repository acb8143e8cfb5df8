from datetime import datetime, timedelta

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import Session

from conftest import make_media, make_post
from mockupdesk.config import Settings
from mockupdesk.database import get_db
from mockupdesk.main import app
from mockupdesk.models import ApprovalRequest, MediaStatus, Post, PostStatus
from mockupdesk.security import create_access_token
from mockupdesk.services.invites import issue_invite


@pytest.fixture
def client(db_session: Session):
    def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db
    yield TestClient(app)
    app.dependency_overrides.clear()


def _auth(user) -> dict:
    return {"Authorization": f"Bearer {create_access_token(user.id)}"}


def test_requests_without_a_token_are_rejected(client: TestClient):
    response = client.get("/api/v1/posts")
    assert response.status_code == 401


def test_request_id_is_echoed(client: TestClient):
    response = client.get("/health", headers={"X-Request-ID": "req-123"})
    assert response.status_code == 200
    assert response.headers["x-request-id"] == "req-123"


def test_create_and_list_posts(client: TestClient, workspace):
    creator = workspace["creator"]
    response = client.post(
        "/api/v1/posts",
        json={
            "brand_id": workspace["brand"].id,
            "title": "Weekend brunch",
            "caption": "Pancakes all day.",
            "platforms": ["instagram_feed", "facebook_feed"],
        },
        headers=_auth(creator),
    )
    assert response.status_code == 201
    body = response.json()
    assert body["status"] == "draft"
    assert body["creator"]["email"] == "creator@acme.example"

    listed = client.get("/api/v1/posts", params={"platform": "facebook_feed"}, headers=_auth(creator)).json()
    assert [post["title"] for post in listed] == ["Weekend brunch"]


def test_unknown_platform_is_rejected(client: TestClient, workspace):
    response = client.post(
        "/api/v1/posts",
        json={"brand_id": workspace["brand"].id, "title": "Bad", "platforms": ["myspace"]},
        headers=_auth(workspace["creator"]),
    )
    assert response.status_code == 422


def test_submit_and_approve_over_http(client: TestClient, db_session: Session, workspace):
    post = make_post(db_session, workspace["brand"], workspace["creator"])

    submitted = client.post(f"/api/v1/posts/{post.id}/submit", headers=_auth(workspace["creator"]))
    assert submitted.status_code == 200
    assert submitted.json()["post"]["status"] == "pending_approval"
    approval_request_id = submitted.json()["post"]["latest_approval_request"]["id"]

    queue = client.get("/api/v1/approvals", headers=_auth(workspace["reviewer"])).json()
    assert [item["id"] for item in queue] == [approval_request_id]

    approved = client.post(
        f"/api/v1/approvals/{approval_request_id}/approve",
        json={"comment": "Ship it"},
        headers=_auth(workspace["reviewer"]),
    )
    assert approved.status_code == 200
    assert approved.json()["post"]["status"] == "approved"
    assert approved.json()["approval_request"]["responses"][0]["decision"] == "approved"

    again = client.post(
        f"/api/v1/approvals/{approval_request_id}/approve",
        headers=_auth(workspace["reviewer"]),
    )
    assert again.status_code == 422
    assert again.json() == {"detail": "This approval request has already been processed."}


def test_edit_is_blocked_while_pending(client: TestClient, db_session: Session, workspace):
    post = make_post(db_session, workspace["brand"], workspace["creator"], status=PostStatus.PENDING_APPROVAL)

    response = client.patch(
        f"/api/v1/posts/{post.id}",
        json={"title": "Sneaky edit"},
        headers=_auth(workspace["creator"]),
    )
    assert response.status_code == 422


def test_patch_rejects_explicit_nulls(client: TestClient, db_session: Session, workspace):
    post = make_post(db_session, workspace["brand"], workspace["creator"])

    null_title = client.patch(f"/api/v1/posts/{post.id}", json={"title": None}, headers=_auth(workspace["creator"]))
    null_platforms = client.patch(
        f"/api/v1/posts/{post.id}", json={"platforms": None}, headers=_auth(workspace["creator"])
    )
    null_caption = client.patch(f"/api/v1/posts/{post.id}", json={"caption": None}, headers=_auth(workspace["creator"]))

    assert null_title.status_code == 422
    assert null_platforms.status_code == 422
    assert null_caption.status_code == 200
    db_session.expire_all()
    stored = db_session.get(Post, post.id)
    assert stored.title == "Spring launch"
    assert stored.platforms == ["instagram_feed"]
    assert stored.caption is None


def test_debug_is_off_unless_configured(monkeypatch):
    monkeypatch.delenv("DEBUG", raising=False)

    assert Settings(_env_file=None).DEBUG is False
    assert Settings(_env_file=None, DEBUG=True).DEBUG is True


def test_creator_cannot_approve(client: TestClient, db_session: Session, workspace):
    post = make_post(db_session, workspace["brand"], workspace["creator"])
    client.post(f"/api/v1/posts/{post.id}/submit", headers=_auth(workspace["creator"]))
    approval_request = db_session.query(ApprovalRequest).one()

    response = client.post(
        f"/api/v1/approvals/{approval_request.id}/approve",
        headers=_auth(workspace["creator"]),
    )
    assert response.status_code == 403


def test_public_review_round_trip(client: TestClient, db_session: Session, workspace):
    ready = make_media(db_session, workspace["brand"], workspace["creator"])
    processing = make_media(db_session, workspace["brand"], workspace["creator"], status=MediaStatus.PROCESSING)
    post = make_post(db_session, workspace["brand"], workspace["creator"], media=[ready, processing])
    post.meta = {"changes_requested_by_email": "earlier@coffee.example", "client_feedback": "Too dark."}
    db_session.commit()
    client.post(f"/api/v1/posts/{post.id}/submit", headers=_auth(workspace["creator"]))

    invited = client.post(
        f"/api/v1/posts/{post.id}/invite-reviewers",
        json={"emails": ["client@coffee.example"]},
        headers=_auth(workspace["manager"]),
    )
    assert invited.status_code == 200
    token = invited.json()["invites"][0]["review_url"].rsplit("/", 1)[-1]

    page = client.get(f"/api/v1/public/review/{token}")
    assert page.status_code == 200
    assert page.json()["invite"]["email"] == "client@coffee.example"
    assert page.json()["brand"]["name"] == "Coffee Co"
    assert [media["id"] for media in page.json()["post"]["media"]] == [ready.id]
    assert "metadata" not in page.json()["post"]
    assert "earlier@coffee.example" not in page.text

    decided = client.post(
        f"/api/v1/public/review/{token}/request-changes",
        json={"comment": "Please use the summer palette."},
    )
    assert decided.status_code == 200
    assert decided.json()["post_status"] == "changes_requested"

    replay = client.post(f"/api/v1/public/review/{token}/approve")
    assert replay.status_code == 404


def test_public_review_needs_feedback_for_changes(client: TestClient, db_session: Session, workspace):
    post = make_post(db_session, workspace["brand"], workspace["creator"])
    client.post(f"/api/v1/posts/{post.id}/submit", headers=_auth(workspace["creator"]))
    invite = issue_invite(db_session, db_session.query(ApprovalRequest).one(), "client@coffee.example")
    db_session.commit()

    missing = client.post(f"/api/v1/public/review/{invite.token}/request-changes", json={})
    too_long = client.post(
        f"/api/v1/public/review/{invite.token}/request-changes",
        json={"comment": "x" * 2001},
    )
    assert missing.status_code == 422
    assert too_long.status_code == 422


def test_public_errors_look_the_same(client: TestClient, db_session: Session, workspace):
    post = make_post(db_session, workspace["brand"], workspace["creator"])
    client.post(f"/api/v1/posts/{post.id}/submit", headers=_auth(workspace["creator"]))
    expired = issue_invite(
        db_session,
        db_session.query(ApprovalRequest).one(),
        "late@coffee.example",
        now=datetime.utcnow() - timedelta(days=8),
    )
    db_session.commit()

    unknown_response = client.get("/api/v1/public/review/does-not-exist")
    expired_response = client.get(f"/api/v1/public/review/{expired.token}")

    assert unknown_response.status_code == expired_response.status_code == 404
    assert unknown_response.json() == expired_response.json() == {"detail": "Invalid or expired review link."}


def test_public_collection_review(client: TestClient, db_session: Session, workspace):
    brand_id = workspace["brand"].id
    manager = workspace["manager"]
    first = make_post(db_session, workspace["brand"], workspace["creator"], title="One")
    second = make_post(db_session, workspace["brand"], workspace["creator"], title="Two")
    outsider = make_post(db_session, workspace["brand"], workspace["creator"], title="Loose")
    first.meta = {"client_feedback": "Brighter please."}
    db_session.commit()

    created = client.post(
        "/api/v1/collections",
        json={"brand_id": brand_id, "name": "June", "post_ids": [first.id, second.id]},
        headers=_auth(manager),
    )
    assert created.status_code == 201
    collection_id = created.json()["id"]

    link = client.post(
        f"/api/v1/collections/{collection_id}/generate-link",
        json={"expires_in_days": 14},
        headers=_auth(manager),
    )
    assert link.status_code == 200
    token = link.json()["approval_url"].rsplit("/", 1)[-1]

    page = client.get(f"/api/v1/public/approval/{token}")
    assert [post["title"] for post in page.json()["posts"]] == ["One", "Two"]
    assert page.json()["posts"][0]["metadata"] == {"client_feedback": "Brighter please."}

    mismatch = client.post(
        f"/api/v1/public/approval/{token}/submit",
        json={"reviews": [
            {"post_id": first.id, "status": "approved"},
            {"post_id": outsider.id, "status": "approved"},
        ]},
    )
    assert mismatch.status_code == 422
    db_session.expire_all()
    assert db_session.get(Post, first.id).status == PostStatus.DRAFT

    accepted = client.post(
        f"/api/v1/public/approval/{token}/submit",
        json={"reviews": [
            {"post_id": first.id, "status": "approved"},
            {"post_id": second.id, "status": "changes_requested", "feedback": "Shorter caption"},
        ]},
    )
    assert accepted.status_code == 200

    summary = client.get(f"/api/v1/collections/{collection_id}", headers=_auth(manager)).json()
    assert summary["status_summary"]["approved"] == 1
    assert summary["has_posts_needing_changes"] is True


def test_generate_link_rejects_out_of_range_lifetime(client: TestClient, workspace):
    manager = workspace["manager"]
    created = client.post(
        "/api/v1/collections",
        json={"brand_id": workspace["brand"].id, "name": "July"},
        headers=_auth(manager),
    )

    response = client.post(
        f"/api/v1/collections/{created.json()['id']}/generate-link",
        json={"expires_in_days": 400},
        headers=_auth(manager),
    )
    assert response.status_code == 422
