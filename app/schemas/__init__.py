"""Pydantic request/response schemas."""

from app.schemas.auth import (
    AuthStatusResponse,
    ChangePasswordRequest,
    CredentialsRequest,
    CurrentUser,
    MessageResponse,
    RoleChangeRequest,
    UserResponse,
    UsersListResponse,
)
from app.schemas.destination import DestinationCreate, DestinationOut, DestinationUpdate
from app.schemas.health import HealthResponse, InfoResponse

__all__ = [
    "AuthStatusResponse",
    "ChangePasswordRequest",
    "CredentialsRequest",
    "CurrentUser",
    "DestinationCreate",
    "DestinationOut",
    "DestinationUpdate",
    "HealthResponse",
    "InfoResponse",
    "MessageResponse",
    "RoleChangeRequest",
    "UserResponse",
    "UsersListResponse",
]
