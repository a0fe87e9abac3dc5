"""Request dependencies: resolve the session cookie to the acting user."""

from typing import Annotated

from fastapi import Depends, Request
from sqlalchemy.orm import Session

from app.core.config import Settings, get_settings
from app.core.database import get_db
from app.schemas.auth import CurrentUser
from app.services.authorization import Operation, enforce, require_authenticated
from app.services.sessions import resolve_session


def get_session_token(
    request: Request,
    settings: Annotated[Settings, Depends(get_settings)],
) -> str | None:
    """Opaque session token from the session cookie, if any."""
    return request.cookies.get(settings.SESSION_COOKIE_NAME) or None


def get_current_user_optional(
    token: Annotated[str | None, Depends(get_session_token)],
    db: Annotated[Session, Depends(get_db)],
) -> CurrentUser | None:
    """Dependency: the logged-in user, or None for anonymous or expired sessions."""
    user = resolve_session(db, token)
    if user is None:
        return None
    return CurrentUser.model_validate(user)


def get_current_user(
    current_user: Annotated[CurrentUser | None, Depends(get_current_user_optional)],
) -> CurrentUser:
    """Dependency: require a valid session. Raises Unauthenticated (401) otherwise."""
    return require_authenticated(current_user)


def require_admin(
    current_user: Annotated[CurrentUser | None, Depends(get_current_user_optional)],
) -> CurrentUser:
    """Dependency: require a logged-in admin (401 anonymous, 403 non-admin)."""
    enforce(current_user, Operation.VIEW_ADMIN)
    return current_user


OptionalUser = Annotated[CurrentUser | None, Depends(get_current_user_optional)]
AuthenticatedUser = Annotated[CurrentUser, Depends(get_current_user)]
AdminUser = Annotated[CurrentUser, Depends(require_admin)]
DbSession = Annotated[Session, Depends(get_db)]
