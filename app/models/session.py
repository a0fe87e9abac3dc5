"""ORM model for server-side login sessions."""

from sqlalchemy import Column, DateTime, ForeignKey, Integer, String

from app.models.base import Base


class UserSession(Base):
    """Opaque session token (sent as a cookie) bound to a user until expires_at."""

    __tablename__ = "user_sessions"

    token = Column(String(128), primary_key=True)
    user_id = Column(
        Integer,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    created_at = Column(DateTime(timezone=True), nullable=False)
    expires_at = Column(DateTime(timezone=True), nullable=False, index=True)
