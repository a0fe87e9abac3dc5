"""Register, login/logout with a session cookie, auth status and password change."""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, Response, status

from app.api.deps import AuthenticatedUser, DbSession, OptionalUser, get_session_token
from app.core.config import Settings, get_settings
from app.schemas.auth import (
    AuthStatusResponse,
    ChangePasswordRequest,
    CredentialsRequest,
    CurrentUser,
    MessageResponse,
    UserResponse,
)
from app.services import identity
from app.services.sessions import create_session, destroy_session

router = APIRouter()
logger = logging.getLogger(__name__)


@router.post("/register", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
def register(body: CredentialsRequest, db: DbSession) -> UserResponse:
    """Create an account with role 'user'. 400 on invalid input or taken username."""
    user = identity.register(db, body.username, body.password)
    return UserResponse(message="User registered", user=CurrentUser.model_validate(user))


@router.post("/login", response_model=UserResponse)
def login(
    body: CredentialsRequest,
    response: Response,
    db: DbSession,
    settings: Annotated[Settings, Depends(get_settings)],
    previous_token: Annotated[str | None, Depends(get_session_token)],
) -> UserResponse:
    """
    Check credentials and start a session.

    The session token is returned only as an httponly cookie; any session the
    request already carried is ended.
    """
    user = identity.authenticate(db, body.username, body.password)
    destroy_session(db, previous_token)
    session = create_session(db, user.id, settings)
    response.set_cookie(
        key=settings.SESSION_COOKIE_NAME,
        value=session.token,
        max_age=settings.SESSION_TTL_HOURS * 3600,
        httponly=True,
        secure=settings.APP_ENV == "prod",
        samesite="lax",
    )
    logger.info("User id=%s logged in", user.id)
    return UserResponse(message="Logged in", user=CurrentUser.model_validate(user))


@router.post("/logout", response_model=MessageResponse)
def logout(
    response: Response,
    db: DbSession,
    settings: Annotated[Settings, Depends(get_settings)],
    token: Annotated[str | None, Depends(get_session_token)],
) -> MessageResponse:
    """End the current session (if any) and clear the cookie."""
    destroy_session(db, token)
    response.delete_cookie(settings.SESSION_COOKIE_NAME, httponly=True, samesite="lax")
    return MessageResponse(message="Logged out")


@router.get("/check-auth", response_model=AuthStatusResponse)
def check_auth(current_user: OptionalUser) -> AuthStatusResponse:
    """Whether the request carries a live session; used by the frontend."""
    return AuthStatusResponse(authenticated=current_user is not None, user=current_user)


@router.post("/change-password", response_model=MessageResponse)
def change_password(
    body: ChangePasswordRequest,
    current_user: AuthenticatedUser,
    db: DbSession,
) -> MessageResponse:
    """Change the logged-in user's password after re-checking the current one."""
    identity.change_password(db, current_user, body.current_password, body.new_password)
    return MessageResponse(message="Password changed")
