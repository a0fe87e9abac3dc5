"""Pydantic schemas for destinations: create/update payloads and the stored record."""

import math
from datetime import datetime, timezone
from typing import Any

from pydantic import BaseModel, Field, ValidationInfo, field_validator

# Fields the client may never set; dropped from create and update payloads.
SERVER_OWNED_FIELDS = frozenset({"id", "owner_id", "ownerId", "created_at", "createdAt", "_id"})


def _required_text(value: str | None, field: str) -> str:
    """Trim and require a non-empty string."""
    if value is None or not value.strip():
        raise ValueError(f"{field} required")
    return value.strip()


def _optional_text(value: str | None) -> str | None:
    if value is None:
        return None
    return value.strip()


def _finite(value: float | None, field: str) -> float | None:
    if value is not None and not math.isfinite(value):
        raise ValueError(f"{field} must be a finite number")
    return value


class DestinationCreate(BaseModel):
    """Payload for POST /api/items. Unknown keys (including ownership fields) are ignored."""

    model_config = {"extra": "ignore"}

    name: str = Field(..., max_length=255)
    category: str = Field(..., max_length=255)
    description: str | None = None
    image_url: str | None = Field(default=None, max_length=2048)
    location: str | None = Field(default=None, max_length=1024)
    price: float | None = None
    rating: float | None = None
    activities: list[str] | None = None

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str | None) -> str:
        return _required_text(v, "name")

    @field_validator("category")
    @classmethod
    def validate_category(cls, v: str | None) -> str:
        return _required_text(v, "category")

    @field_validator("description", "image_url", "location")
    @classmethod
    def strip_optional_text(cls, v: str | None) -> str | None:
        return _optional_text(v)

    @field_validator("price", "rating", mode="before")
    @classmethod
    def reject_booleans(cls, v: Any, info: ValidationInfo) -> Any:
        # JSON true/false would otherwise coerce to 1.0/0.0.
        if isinstance(v, bool):
            raise ValueError(f"{info.field_name} must be a number")
        return v

    @field_validator("price")
    @classmethod
    def validate_price(cls, v: float | None) -> float | None:
        return _finite(v, "price")

    @field_validator("rating")
    @classmethod
    def validate_rating(cls, v: float | None) -> float | None:
        return _finite(v, "rating")


class DestinationUpdate(DestinationCreate):
    """
    Partial payload for PUT /api/items/{id}.

    Every field is optional, but a field that is present is validated like on create
    (so an explicit null or blank name/category is rejected).
    """

    name: str | None = Field(default=None, max_length=255)
    category: str | None = Field(default=None, max_length=255)


class DestinationOut(BaseModel):
    """Stored destination as returned by the API."""

    model_config = {"from_attributes": True}

    id: int
    owner_id: int
    name: str
    category: str
    description: str | None = None
    image_url: str | None = None
    location: str | None = None
    price: float | None = None
    rating: float | None = None
    activities: list[str] = Field(default_factory=list)
    created_at: datetime

    @field_validator("created_at")
    @classmethod
    def assume_utc(cls, v: datetime) -> datetime:
        """SQLite drops the offset on read; stored values are always UTC."""
        if v.tzinfo is None:
            return v.replace(tzinfo=timezone.utc)
        return v


DESTINATION_FIELDS = frozenset(DestinationOut.model_fields)
