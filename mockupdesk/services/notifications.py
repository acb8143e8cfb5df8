"""Notification sink for workflow emails.

``notify`` records an outbox row in the caller's transaction; the rendered
mail is only handed to the mailer by ``dispatch`` once that transaction has
committed.
"""
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

import structlog
from fastapi import BackgroundTasks
from sqlalchemy.orm import Session

from mockupdesk.models import Notification, NotificationKind
from mockupdesk.services.mailer import send_email

logger = structlog.get_logger(__name__)


@dataclass
class OutgoingMail:
    to_email: str
    subject: str
    plain_text: str


def _render(kind: NotificationKind, payload: Dict[str, Any]):
    title = payload.get("post_title", "")
    if kind == NotificationKind.POST_APPROVED:
        subject = f"Your post has been approved: {title}"
        body = f"{payload.get('reviewer')} approved \"{title}\" for {payload.get('brand_name')}."
    elif kind == NotificationKind.POST_CHANGES_REQUESTED:
        subject = f"Changes requested for: {title}"
        body = (
            f"{payload.get('reviewer')} requested changes to \"{title}\" for {payload.get('brand_name')}.\n\n"
            f"Feedback:\n{payload.get('comment', '')}"
        )
    elif kind == NotificationKind.POST_SUBMITTED_FOR_APPROVAL:
        subject = f"New post needs your approval: {title}"
        body = f"{payload.get('requester')} submitted \"{title}\" for {payload.get('brand_name')} for approval."
    elif kind == NotificationKind.REVIEW_INVITE:
        subject = f"Review requested: {title}"
        body = (
            f"{payload.get('requester')} asked you to review \"{title}\" for {payload.get('brand_name')}.\n\n"
            f"Open the post: {payload.get('review_url')}\n"
            f"This link expires on {payload.get('expires_at')}."
        )
    else:
        raise ValueError(f"Unknown notification kind: {kind}")
    return subject, body


class NotificationSink:
    def __init__(self, db: Session):
        self.db = db
        self._pending: List[OutgoingMail] = []

    def notify(self, kind: NotificationKind, recipient_email: str, payload: Dict[str, Any]) -> Notification:
        subject, body = _render(kind, payload)
        notification = Notification(
            kind=kind,
            recipient_email=recipient_email,
            subject=subject,
            payload=payload,
        )
        self.db.add(notification)
        self._pending.append(OutgoingMail(recipient_email, subject, body))
        return notification

    @property
    def pending(self) -> List[OutgoingMail]:
        return list(self._pending)

    def discard(self) -> None:
        self._pending.clear()

    def dispatch(self, background_tasks: Optional[BackgroundTasks]) -> int:
        """Queue every pending mail for delivery. Returns how many were queued."""
        pending, self._pending = self._pending, []
        if background_tasks is None:
            return 0
        for mail in pending:
            background_tasks.add_task(send_email, mail.to_email, mail.subject, mail.plain_text)
        logger.info("notifications_queued", count=len(pending))
        return len(pending)
