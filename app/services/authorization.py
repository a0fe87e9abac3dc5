"""Authorization core: role and ownership decisions for every protected operation.

authorize() is a pure function of (actor, operation, resource). It runs an ordered
pipeline of rules; the first rule that denies decides the outcome:

  1. authentication required and no actor      -> UNAUTHENTICATED
  2. admin-only operation and actor not admin  -> FORBIDDEN
  3. owner-or-admin mutation:
       resource not found                      -> NOT_FOUND
       actor neither admin nor owner           -> FORBIDDEN
  4. otherwise                                 -> allowed

Owner-gated operations take the already-loaded resource (None when the lookup
found nothing), so a missing destination is NOT_FOUND for any authenticated
caller and existence is checked before ownership.
"""

from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum
from typing import Any, Protocol

from app.models.user import ROLE_ADMIN
from app.services.errors import Forbidden, NotFound, ServiceError, Unauthenticated


class Actor(Protocol):
    id: int
    username: str
    role: str


class Operation(str, Enum):
    LIST_DESTINATIONS = "list_destinations"
    READ_DESTINATION = "read_destination"
    CREATE_DESTINATION = "create_destination"
    UPDATE_DESTINATION = "update_destination"
    DELETE_DESTINATION = "delete_destination"
    CHANGE_PASSWORD = "change_password"
    PROMOTE_USER = "promote_user"
    DEMOTE_USER = "demote_user"
    VIEW_ADMIN = "view_admin"


class DenyReason(str, Enum):
    UNAUTHENTICATED = "unauthenticated"
    FORBIDDEN = "forbidden"
    NOT_FOUND = "not_found"


PUBLIC_OPERATIONS = frozenset({Operation.LIST_DESTINATIONS, Operation.READ_DESTINATION})
ADMIN_OPERATIONS = frozenset({Operation.PROMOTE_USER, Operation.DEMOTE_USER, Operation.VIEW_ADMIN})
OWNER_OPERATIONS = frozenset({Operation.UPDATE_DESTINATION, Operation.DELETE_DESTINATION})


@dataclass(frozen=True)
class Decision:
    allowed: bool
    reason: DenyReason | None = None
    message: str = ""

    def __post_init__(self) -> None:
        if not self.allowed and self.reason is None:
            raise ValueError("a denied Decision needs a reason")

    @classmethod
    def allow(cls) -> "Decision":
        return cls(allowed=True)

    @classmethod
    def deny(cls, reason: DenyReason, message: str) -> "Decision":
        return cls(allowed=False, reason=reason, message=message)


Rule = Callable[[Actor | None, Operation, Any], Decision | None]


def _require_authentication(actor: Actor | None, operation: Operation, resource: Any) -> Decision | None:
    if operation in PUBLIC_OPERATIONS or actor is not None:
        return None
    return Decision.deny(DenyReason.UNAUTHENTICATED, "Unauthorized: please log in")


def _require_admin_role(actor: Actor | None, operation: Operation, resource: Any) -> Decision | None:
    if operation not in ADMIN_OPERATIONS:
        return None
    if actor is not None and actor.role == ROLE_ADMIN:
        return None
    return Decision.deny(DenyReason.FORBIDDEN, "Forbidden: admin only")


def _require_owner_or_admin(actor: Actor | None, operation: Operation, resource: Any) -> Decision | None:
    if operation not in OWNER_OPERATIONS:
        return None
    if resource is None:
        return Decision.deny(DenyReason.NOT_FOUND, "Not found")
    if actor is not None and actor.role == ROLE_ADMIN:
        return None
    if actor is not None and resource.owner_id == actor.id:
        return None
    return Decision.deny(DenyReason.FORBIDDEN, "Forbidden: you can modify only your own records")


RULES: tuple[Rule, ...] = (
    _require_authentication,
    _require_admin_role,
    _require_owner_or_admin,
)

_ERRORS: dict[DenyReason, type[ServiceError]] = {
    DenyReason.UNAUTHENTICATED: Unauthenticated,
    DenyReason.FORBIDDEN: Forbidden,
    DenyReason.NOT_FOUND: NotFound,
}


def authorize(actor: Actor | None, operation: Operation, resource: Any = None) -> Decision:
    """Decide whether actor may perform operation on resource."""
    for rule in RULES:
        decision = rule(actor, operation, resource)
        if decision is not None:
            return decision
    return Decision.allow()


def enforce(actor: Actor | None, operation: Operation, resource: Any = None) -> None:
    """Raise the matching ServiceError when authorize() denies."""
    decision = authorize(actor, operation, resource)
    if decision.allowed:
        return
    raise _ERRORS[decision.reason](decision.message)


def require_authenticated(actor: Actor | None) -> Actor:
    """Return actor, or raise Unauthenticated when the request carries no identity."""
    if actor is None:
        raise Unauthenticated()
    return actor
