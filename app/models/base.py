"""SQLAlchemy declarative Base shared by the user, session and destination models."""

from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    """Declarative base for all ORM models."""
