"""Request-scoped dependencies: database session, caller identity, collaborators."""
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError
from sqlalchemy.orm import Session, selectinload

from mockupdesk.database import get_db
from mockupdesk.models import User
from mockupdesk.security import decode_token
from mockupdesk.services.access import Actor
from mockupdesk.services.media import MediaService
from mockupdesk.services.notifications import NotificationSink

bearer_scheme = HTTPBearer(auto_error=False)


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


def get_current_user(
    credentials: HTTPAuthorizationCredentials = Depends(bearer_scheme),
    db: Session = Depends(get_db),
) -> User:
    if credentials is None:
        raise _unauthorized("Not authenticated")

    try:
        payload = decode_token(credentials.credentials)
        user_id = int(payload.get("sub"))
    except (JWTError, TypeError, ValueError):
        raise _unauthorized("Invalid token")

    user = (
        db.query(User)
        .options(selectinload(User.agency_memberships), selectinload(User.brands))
        .filter(User.id == user_id, User.is_active.is_(True))
        .first()
    )
    if not user:
        raise _unauthorized("User not found")
    return user


def get_actor(current_user: User = Depends(get_current_user)) -> Actor:
    return Actor.from_user(current_user)


def get_notifier(db: Session = Depends(get_db)) -> NotificationSink:
    return NotificationSink(db)


def get_media_service() -> MediaService:
    return MediaService()
