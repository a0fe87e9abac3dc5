"""Request/response schemas for auth and admin endpoints."""

from pydantic import BaseModel, Field


class CredentialsRequest(BaseModel):
    """Username and password for register and login. Length rules are checked by the identity service."""

    username: str = Field(..., max_length=1024, description="Username")
    password: str = Field(..., max_length=1024, description="Password")


class ChangePasswordRequest(BaseModel):
    """Current and new password for the logged-in user."""

    current_password: str = Field(..., max_length=1024)
    new_password: str = Field(..., max_length=1024)


class RoleChangeRequest(BaseModel):
    """Target of a promote or demote call."""

    username: str = Field(..., max_length=1024, description="Username to promote or demote")


class CurrentUser(BaseModel):
    """Authenticated user (id, username, role) for dependency injection."""

    model_config = {"from_attributes": True}

    id: int
    username: str
    role: str


class MessageResponse(BaseModel):
    """Plain acknowledgement."""

    message: str


class UserResponse(BaseModel):
    """Acknowledgement carrying the affected user (never the password hash)."""

    message: str
    user: CurrentUser


class AuthStatusResponse(BaseModel):
    """Response for GET /check-auth."""

    authenticated: bool
    user: CurrentUser | None = None


class UsersListResponse(BaseModel):
    """Response for GET /admin/users (admin only)."""

    users: list[CurrentUser]
