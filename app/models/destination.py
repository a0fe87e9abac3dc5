"""ORM model for catalog destinations."""

from sqlalchemy import JSON, Column, DateTime, Float, ForeignKey, Integer, String, Text

from app.models.base import Base


class Destination(Base):
    """
    A travel destination owned by the user who created it.

    owner_id and created_at are assigned by the server on insert and never change.
    """

    __tablename__ = "destinations"

    id = Column(Integer, primary_key=True, autoincrement=True)
    owner_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    name = Column(String(255), nullable=False)
    category = Column(String(255), nullable=False, index=True)
    description = Column(Text, nullable=True)
    image_url = Column(String(2048), nullable=True)
    location = Column(String(1024), nullable=True)
    price = Column(Float, nullable=True)
    rating = Column(Float, nullable=True)
    activities = Column(JSON, nullable=False, default=list)
    created_at = Column(DateTime(timezone=True), nullable=False)
