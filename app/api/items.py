"""Destination endpoints: public listing and reads, owner-or-admin mutations."""

from typing import Annotated, Any

from fastapi import APIRouter, Body, Query, status

from app.api.deps import AuthenticatedUser, DbSession
from app.schemas.auth import MessageResponse
from app.services import destinations

router = APIRouter()


@router.get("")
def list_items(
    db: DbSession,
    category: Annotated[str | None, Query(description="Exact category match")] = None,
    sort: Annotated[str | None, Query(description="Field to sort ascending by")] = None,
    fields: Annotated[str | None, Query(description="Comma-separated fields to return")] = None,
) -> list[dict[str, Any]]:
    """List destinations with optional category filter, single-field sort and projection."""
    return destinations.list_destinations(
        db,
        category=category,
        sort=sort,
        fields=destinations.parse_fields(fields),
    )


@router.get("/{item_id}")
def get_item(item_id: str, db: DbSession) -> dict[str, Any]:
    """One destination; 400 for a malformed id, 404 when absent."""
    return destinations.serialize(destinations.get_destination(db, item_id))


@router.post("", status_code=status.HTTP_201_CREATED)
def create_item(
    current_user: AuthenticatedUser,
    db: DbSession,
    payload: Annotated[Any, Body()] = None,
) -> dict[str, Any]:
    """Create a destination owned by the logged-in user."""
    destination = destinations.create_destination(db, current_user, payload)
    return destinations.serialize(destination)


@router.put("/{item_id}")
def update_item(
    item_id: str,
    current_user: AuthenticatedUser,
    db: DbSession,
    payload: Annotated[Any, Body()] = None,
) -> dict[str, Any]:
    """Partially update a destination (owner or admin).

    The body is passed through untyped; the service validates it only after the
    existence and ownership checks.
    """
    destination = destinations.update_destination(db, current_user, item_id, payload)
    return destinations.serialize(destination)


@router.delete("/{item_id}", response_model=MessageResponse)
def delete_item(item_id: str, current_user: AuthenticatedUser, db: DbSession) -> MessageResponse:
    """Delete a destination (owner or admin)."""
    destinations.delete_destination(db, current_user, item_id)
    return MessageResponse(message="Deleted")
