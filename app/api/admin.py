"""Admin endpoints: role changes and the user list."""

from fastapi import APIRouter

from app.api.deps import AdminUser, DbSession
from app.schemas.auth import CurrentUser, RoleChangeRequest, UserResponse, UsersListResponse
from app.services import identity

router = APIRouter()


@router.post("/promote", response_model=UserResponse)
def promote(body: RoleChangeRequest, current_user: AdminUser, db: DbSession) -> UserResponse:
    """Give a user the admin role (admin only)."""
    user = identity.promote(db, current_user, body.username)
    return UserResponse(message="Promoted", user=CurrentUser.model_validate(user))


@router.post("/demote", response_model=UserResponse)
def demote(body: RoleChangeRequest, current_user: AdminUser, db: DbSession) -> UserResponse:
    """
    Return an admin to the 'user' role (admin only).

    400 when demoting yourself or the last remaining admin.
    """
    user = identity.demote(db, current_user, body.username)
    return UserResponse(message="Demoted", user=CurrentUser.model_validate(user))


@router.get("/users", response_model=UsersListResponse)
def list_users(current_user: AdminUser, db: DbSession) -> UsersListResponse:
    """List all users (admin only)."""
    users = identity.list_users(db, current_user)
    return UsersListResponse(users=[CurrentUser.model_validate(u) for u in users])
