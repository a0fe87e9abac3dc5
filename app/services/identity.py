"""Identity service: registration, credential checks, role changes and the bootstrap admin."""

import logging

from sqlalchemy import func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.core.security import (
    PASSWORD_MAX_LEN,
    PASSWORD_MIN_LEN,
    USERNAME_MAX_LEN,
    USERNAME_MIN_LEN,
    hash_password,
    verify_password,
)
from app.models.user import ROLE_ADMIN, ROLE_USER, ROLES, User
from app.services.authorization import Actor, Operation, enforce
from app.services.errors import (
    DuplicateUsername,
    InvalidCredentials,
    LastAdmin,
    NotFound,
    SelfDemotion,
    ValidationFailed,
    field_error,
)

logger = logging.getLogger(__name__)


def _username_errors(username: str) -> list[dict]:
    if not (USERNAME_MIN_LEN <= len(username) <= USERNAME_MAX_LEN):
        return [field_error("username", "Username required (at most 255 characters)")]
    return []


def _password_errors(password: str, field: str = "password") -> list[dict]:
    if not (PASSWORD_MIN_LEN <= len(password) <= PASSWORD_MAX_LEN):
        return [
            field_error(
                field,
                f"Password must be {PASSWORD_MIN_LEN}-{PASSWORD_MAX_LEN} characters",
            )
        ]
    return []


def _target_username(username: str | None) -> str:
    target = (username or "").strip()
    if not target:
        raise ValidationFailed(errors=[field_error("username", "Username required")])
    return target


def get_user_by_username(db: Session, username: str) -> User | None:
    return db.query(User).filter(User.username == username).first()


def get_user_by_id(db: Session, user_id: int) -> User | None:
    return db.get(User, user_id)


def count_admins(db: Session) -> int:
    return db.query(func.count(User.id)).filter(User.role == ROLE_ADMIN).scalar() or 0


def list_users(db: Session, actor: Actor | None) -> list[User]:
    """All users ordered by id (admin view)."""
    enforce(actor, Operation.VIEW_ADMIN)
    return db.query(User).order_by(User.id).all()


def create_user(db: Session, username: str, password: str, role: str = ROLE_USER) -> User:
    """
    Insert a user with a freshly hashed password and commit.

    Raises DuplicateUsername if the username is taken, including when a concurrent
    insert wins the unique index.
    """
    if role not in ROLES:
        raise ValueError(f"role must be one of {ROLES}, got {role!r}")
    if get_user_by_username(db, username) is not None:
        raise DuplicateUsername()
    user = User(username=username, password_hash=hash_password(password), role=role)
    db.add(user)
    try:
        db.commit()
    except IntegrityError as e:
        db.rollback()
        raise DuplicateUsername() from e
    db.refresh(user)
    return user


def register(db: Session, username: str, password: str) -> User:
    """Create a regular user. Username and password are trimmed; every violated rule is reported."""
    username = (username or "").strip()
    password = (password or "").strip()
    errors = _username_errors(username) + _password_errors(password)
    if errors:
        raise ValidationFailed(errors=errors)
    user = create_user(db, username, password, role=ROLE_USER)
    logger.info("Registered user id=%s username=%s", user.id, user.username)
    return user


def authenticate(db: Session, username: str, password: str) -> User:
    """
    Return the user whose credentials match.

    Unknown username and wrong password both raise InvalidCredentials so callers
    cannot tell which usernames exist.
    """
    username = (username or "").strip()
    password = (password or "").strip()
    errors = []
    if not username:
        errors.append(field_error("username", "Username required"))
    if not password:
        errors.append(field_error("password", "Password required"))
    if errors:
        raise ValidationFailed(errors=errors)

    user = get_user_by_username(db, username)
    if user is None or not verify_password(password, user.password_hash):
        logger.warning("Failed login for username=%s", username)
        raise InvalidCredentials()
    return user


def change_password(
    db: Session,
    actor: Actor | None,
    current_password: str,
    new_password: str,
) -> User:
    """Replace the actor's password after re-checking the current one."""
    enforce(actor, Operation.CHANGE_PASSWORD)
    new_password = (new_password or "").strip()
    errors = _password_errors(new_password, field="new_password")
    if errors:
        raise ValidationFailed(errors=errors)

    user = get_user_by_id(db, actor.id)
    if user is None or not verify_password((current_password or "").strip(), user.password_hash):
        raise InvalidCredentials("Current password is incorrect")
    user.password_hash = hash_password(new_password)
    db.commit()
    db.refresh(user)
    logger.info("Password changed for user id=%s", user.id)
    return user


def promote(db: Session, actor: Actor | None, username: str) -> User:
    """Give username the admin role (admin only). Promoting an admin is a no-op."""
    enforce(actor, Operation.PROMOTE_USER)
    target_name = _target_username(username)
    user = get_user_by_username(db, target_name)
    if user is None:
        raise NotFound("User not found")
    if user.role != ROLE_ADMIN:
        user.role = ROLE_ADMIN
        db.commit()
        db.refresh(user)
        logger.info("User %s promoted to admin by %s", user.username, actor.username)
    return user


def demote(db: Session, actor: Actor | None, username: str) -> User:
    """
    Set username's role back to user (admin only).

    Refuses to demote the caller and refuses to demote the last remaining admin.
    The admin rows are locked before counting so two concurrent demotions cannot
    both pass the count check.
    """
    enforce(actor, Operation.DEMOTE_USER)
    target_name = _target_username(username)
    if target_name == actor.username:
        raise SelfDemotion()

    user = get_user_by_username(db, target_name)
    if user is None:
        raise NotFound("User not found")

    if user.role == ROLE_ADMIN:
        admins = (
            db.query(User)
            .filter(User.role == ROLE_ADMIN)
            .order_by(User.id)
            .with_for_update()
            .all()
        )
        if user not in admins:
            # Demoted by a concurrent request while we waited for the lock.
            db.commit()
            return user
        if len(admins) <= 1:
            db.rollback()
            raise LastAdmin()
        user.role = ROLE_USER
        db.commit()
        db.refresh(user)
        logger.info("User %s demoted to user by %s", user.username, actor.username)
    return user


def ensure_bootstrap_admin(db: Session, username: str | None, password: str | None) -> User | None:
    """
    Make sure the configured bootstrap account exists and is an admin.

    Creates it when missing, promotes it when it is a regular user, and does nothing
    when credentials are not configured. Safe to run on every startup.
    """
    username = (username or "").strip()
    if not username or not password:
        logger.info("ADMIN_USERNAME/ADMIN_PASSWORD not set; skipping bootstrap admin.")
        return None

    user = get_user_by_username(db, username)
    if user is None:
        user = create_user(db, username, password.strip(), role=ROLE_ADMIN)
        logger.info("Bootstrap admin created: %s", username)
        return user
    if user.role != ROLE_ADMIN:
        user.role = ROLE_ADMIN
        db.commit()
        db.refresh(user)
        logger.info("Bootstrap admin role restored for: %s", username)
    return user
