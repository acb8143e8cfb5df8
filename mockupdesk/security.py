"""Bearer token helpers.

Tokens are issued by the identity service; this module only needs to read
them, plus mint them for local tooling and tests.
"""
from datetime import datetime, timedelta
from typing import Any, Dict, Optional

from jose import jwt

from mockupdesk.config import settings


def create_access_token(subject: Any, expires_delta: Optional[timedelta] = None) -> str:
    expire = datetime.utcnow() + (expires_delta or timedelta(minutes=settings.JWT_ACCESS_TOKEN_EXPIRE_MINUTES))
    to_encode = {"sub": str(subject), "exp": expire}
    return jwt.encode(to_encode, settings.JWT_SECRET_KEY, algorithm=settings.JWT_ALGORITHM)


def decode_token(token: str) -> Dict[str, Any]:
    """Decode and verify a bearer token. Raises ``jose.JWTError`` when invalid."""
    return jwt.decode(token, settings.JWT_SECRET_KEY, algorithms=[settings.JWT_ALGORITHM])
