"""Domain errors raised by the identity, session, authorization and destination services.

Each error carries the HTTP status and a stable machine code; the application's
exception handler renders them, so services never import FastAPI.
"""

from typing import Any


class ServiceError(Exception):
    """Base class for failures that are reported to the client."""

    status_code: int = 500
    code: str = "store_error"
    default_message: str = "Server error"

    def __init__(self, message: str | None = None, errors: list[dict[str, Any]] | None = None) -> None:
        self.message = message or self.default_message
        self.errors = errors or []
        super().__init__(self.message)

    def to_dict(self) -> dict[str, Any]:
        body: dict[str, Any] = {"error": self.code, "detail": self.message}
        if self.errors:
            body["errors"] = self.errors
        return body


class Unauthenticated(ServiceError):
    status_code = 401
    code = "unauthenticated"
    default_message = "Unauthorized: please log in"


class InvalidCredentials(ServiceError):
    """Same error for unknown usernames and wrong passwords."""

    status_code = 401
    code = "invalid_credentials"
    default_message = "Invalid credentials"


class Forbidden(ServiceError):
    status_code = 403
    code = "forbidden"
    default_message = "Forbidden"


class NotFound(ServiceError):
    status_code = 404
    code = "not_found"
    default_message = "Not found"


class InvalidId(ServiceError):
    status_code = 400
    code = "invalid_id"
    default_message = "Invalid ID"


class ValidationFailed(ServiceError):
    """Input rejected; errors lists every violated field constraint."""

    status_code = 400
    code = "validation_error"
    default_message = "Validation failed"


class DuplicateUsername(ServiceError):
    status_code = 400
    code = "duplicate_username"
    default_message = "User exists"


class SelfDemotion(ServiceError):
    status_code = 400
    code = "self_demotion"
    default_message = "You cannot demote yourself"


class LastAdmin(ServiceError):
    status_code = 400
    code = "last_admin"
    default_message = "Cannot demote the last admin"


class StoreError(ServiceError):
    """Database failure; the message shown to clients is always generic."""


def field_error(field: str, message: str) -> dict[str, Any]:
    """Build one entry of ValidationFailed.errors."""
    return {"field": field, "message": message}


def errors_from_pydantic(exc: Any) -> list[dict[str, Any]]:
    """Flatten a pydantic ValidationError (or RequestValidationError) into field errors."""
    out: list[dict[str, Any]] = []
    for err in exc.errors():
        loc = [str(part) for part in err.get("loc", ()) if part != "body"]
        out.append(field_error(".".join(loc) or "body", str(err.get("msg", "Invalid value"))))
    return out
