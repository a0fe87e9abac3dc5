"""Destination CRUD: filtered listing, lookups, and owner-or-admin gated mutations."""

import logging
from datetime import datetime, timezone
from typing import Any

from pydantic import ValidationError
from sqlalchemy.orm import Session

from app.models import Destination
from app.schemas.destination import (
    DESTINATION_FIELDS,
    SERVER_OWNED_FIELDS,
    DestinationCreate,
    DestinationOut,
    DestinationUpdate,
)
from app.services.authorization import Actor, Operation, enforce, require_authenticated
from app.services.errors import (
    InvalidId,
    NotFound,
    ValidationFailed,
    errors_from_pydantic,
    field_error,
)

logger = logging.getLogger(__name__)

# Scalar columns that ?sort= accepts; activities (a JSON list) is not sortable.
SORTABLE_COLUMNS = {
    "id": Destination.id,
    "owner_id": Destination.owner_id,
    "name": Destination.name,
    "category": Destination.category,
    "description": Destination.description,
    "image_url": Destination.image_url,
    "location": Destination.location,
    "price": Destination.price,
    "rating": Destination.rating,
    "created_at": Destination.created_at,
}

# Largest id accepted before hitting the database (32-bit signed INTEGER).
MAX_ID = 2_147_483_647


def parse_destination_id(raw_id: str | int) -> int:
    """Turn a path id into an integer key, or raise InvalidId when it is malformed."""
    text = str(raw_id).strip()
    if not text.isdigit() or not text.isascii():
        raise InvalidId()
    value = int(text)
    if value < 1 or value > MAX_ID:
        raise InvalidId()
    return value


def parse_fields(raw: str | None) -> set[str] | None:
    """Split a comma-separated ?fields= value; None or blank means no projection."""
    if raw is None or not raw.strip():
        return None
    return {part.strip() for part in raw.split(",") if part.strip()}


def serialize(destination: Destination, fields: set[str] | None = None) -> dict[str, Any]:
    """
    JSON-ready dict of a destination, restricted to fields when given.

    Unknown names are ignored; when none of the requested names is known the full
    record is returned.
    """
    include = (fields or set()) & DESTINATION_FIELDS or None
    return DestinationOut.model_validate(destination).model_dump(mode="json", include=include)


def _client_fields(payload: Any) -> dict[str, Any]:
    if not isinstance(payload, dict):
        raise ValidationFailed(errors=[field_error("body", "Body must be a JSON object")])
    return {k: v for k, v in payload.items() if k not in SERVER_OWNED_FIELDS}


def list_destinations(
    db: Session,
    category: str | None = None,
    sort: str | None = None,
    fields: set[str] | None = None,
) -> list[dict[str, Any]]:
    """
    Return destinations, optionally filtered by exact category.

    sort names a single field for ascending order; unknown names fall back to id order.
    fields projects every record onto the named known fields (all fields when none is known).
    """
    query = db.query(Destination)
    if category:
        query = query.filter(Destination.category == category)
    column = SORTABLE_COLUMNS.get((sort or "").strip())
    if column is not None:
        query = query.order_by(column.asc(), Destination.id.asc())
    else:
        query = query.order_by(Destination.id.asc())
    return [serialize(d, fields) for d in query.all()]


def get_destination(db: Session, raw_id: str | int) -> Destination:
    destination = db.get(Destination, parse_destination_id(raw_id))
    if destination is None:
        raise NotFound()
    return destination


def create_destination(db: Session, actor: Actor | None, payload: Any) -> Destination:
    """
    Validate payload and insert it owned by actor.

    owner_id and created_at are always assigned here; client-supplied values are dropped.
    """
    enforce(actor, Operation.CREATE_DESTINATION)
    data = _client_fields(payload)
    try:
        body = DestinationCreate.model_validate(data)
    except ValidationError as e:
        raise ValidationFailed(errors=errors_from_pydantic(e)) from e

    values = body.model_dump()
    values["activities"] = values.get("activities") or []
    destination = Destination(
        **values,
        owner_id=actor.id,
        created_at=datetime.now(timezone.utc),
    )
    db.add(destination)
    db.commit()
    db.refresh(destination)
    logger.info("Destination id=%s created by user id=%s", destination.id, actor.id)
    return destination


def _load_for_mutation(
    db: Session,
    actor: Actor | None,
    operation: Operation,
    raw_id: str | int,
) -> Destination:
    require_authenticated(actor)
    destination = db.get(Destination, parse_destination_id(raw_id))
    enforce(actor, operation, destination)
    return destination


def update_destination(db: Session, actor: Actor | None, raw_id: str | int, payload: Any) -> Destination:
    """Apply the fields present in payload (owner or admin only); server-owned fields are ignored."""
    destination = _load_for_mutation(db, actor, Operation.UPDATE_DESTINATION, raw_id)
    data = _client_fields(payload)
    try:
        body = DestinationUpdate.model_validate(data)
    except ValidationError as e:
        raise ValidationFailed(errors=errors_from_pydantic(e)) from e

    changes = body.model_dump(exclude_unset=True)
    if "activities" in changes and changes["activities"] is None:
        changes["activities"] = []
    for key, value in changes.items():
        setattr(destination, key, value)
    db.commit()
    db.refresh(destination)
    logger.info(
        "Destination id=%s updated by user id=%s fields=%s",
        destination.id,
        actor.id,
        sorted(changes),
    )
    return destination


def delete_destination(db: Session, actor: Actor | None, raw_id: str | int) -> None:
    """Remove a destination (owner or admin only)."""
    destination = _load_for_mutation(db, actor, Operation.DELETE_DESTINATION, raw_id)
    destination_id = destination.id
    db.delete(destination)
    db.commit()
    logger.info("Destination id=%s deleted by user id=%s", destination_id, actor.id)
