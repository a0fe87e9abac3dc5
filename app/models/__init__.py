"""SQLAlchemy ORM models."""

from app.models.base import Base
from app.models.destination import Destination
from app.models.session import UserSession
from app.models.user import ROLE_ADMIN, ROLE_USER, User

__all__ = ["Base", "Destination", "ROLE_ADMIN", "ROLE_USER", "User", "UserSession"]
