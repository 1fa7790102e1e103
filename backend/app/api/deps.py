"""FastAPI dependencies: one DB session per request and the logged-in staff user.

Nothing about the login is held at module level; every route that needs the
user declares Depends(get_current_user).

The JWT is read from the Authorization header (API clients) or the httpOnly
cookie set by /auth/login (dashboard). The header wins when both are sent.
"""
from typing import Generator, Optional

from fastapi import Depends, Request
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.exceptions import BusinessError
from app.core.security import decode_access_token
from app.db.session import SessionLocal
from app.models.user import User

bearer = HTTPBearer(auto_error=False)


def get_db() -> Generator[Session, None, None]:
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def _request_token(request: Request, credentials: Optional[HTTPAuthorizationCredentials]) -> Optional[str]:
    if credentials:
        return credentials.credentials
    return request.cookies.get(settings.AUTH_COOKIE_NAME)


def get_current_user_id(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer),
) -> int:
    token = _request_token(request, credentials)
    if not token:
        raise BusinessError.unauthorized("no token")

    subject = decode_access_token(token)
    if not subject or not subject.isdigit():
        raise BusinessError.unauthorized("invalid or expired token")
    return int(subject)


def get_current_user(
    db: Session = Depends(get_db),
    user_id: int = Depends(get_current_user_id),
) -> User:
    """Active staff user for this request; 401 otherwise."""
    user = db.query(User).filter(User.id == user_id).first()
    if user is None or not user.is_active:
        raise BusinessError.unauthorized(f"user {user_id} missing or inactive")
    return user
