"""Server-side session store: opaque cookie tokens mapped to users with a fixed expiry."""

import logging
from datetime import datetime, timedelta, timezone
from typing import TYPE_CHECKING

from sqlalchemy.orm import Session

from app.core.security import generate_session_token
from app.models import User, UserSession

if TYPE_CHECKING:
    from app.core.config import Settings

logger = logging.getLogger(__name__)


def create_session(db: Session, user_id: int, settings: "Settings") -> UserSession:
    """Start a session for user_id that expires SESSION_TTL_HOURS after login."""
    now = datetime.now(timezone.utc)
    record = UserSession(
        token=generate_session_token(),
        user_id=user_id,
        created_at=now,
        expires_at=now + timedelta(hours=settings.SESSION_TTL_HOURS),
    )
    db.add(record)
    db.commit()
    return record


def resolve_session(db: Session, token: str | None) -> User | None:
    """Return the user bound to a live session token, or None for missing, unknown or expired tokens."""
    if not token:
        return None
    now = datetime.now(timezone.utc)
    return (
        db.query(User)
        .join(UserSession, UserSession.user_id == User.id)
        .filter(UserSession.token == token, UserSession.expires_at > now)
        .first()
    )


def destroy_session(db: Session, token: str | None) -> bool:
    """Delete the session; returns False when there was nothing to delete."""
    if not token:
        return False
    deleted = (
        db.query(UserSession)
        .filter(UserSession.token == token)
        .delete(synchronize_session=False)
    )
    db.commit()
    return deleted > 0


def purge_expired_sessions(db: Session, settings: "Settings") -> int:
    """
    Delete sessions whose expiry has passed. Idempotent: safe to run repeatedly.

    Returns the number of rows removed.
    """
    now = datetime.now(timezone.utc)
    deleted_count = (
        db.query(UserSession)
        .filter(UserSession.expires_at <= now)
        .delete(synchronize_session=False)
    )
    db.commit()

    if deleted_count > 0:
        logger.info(
            "Session purge: now=%s, sessions_deleted=%s, ttl_hours=%s",
            now.isoformat(),
            deleted_count,
            settings.SESSION_TTL_HOURS,
        )
    return deleted_count
