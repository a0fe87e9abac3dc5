"""Shared helpers: isolated in-memory databases, seeded users and API clients."""

from collections.abc import Generator
from types import SimpleNamespace

from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from app.core.config import Settings, settings as app_settings
from app.core.database import get_db
from app.core.security import hash_password
from app.main import create_app
from app.models import Base, User
from app.models.user import ROLE_ADMIN, ROLE_USER

PASSWORD = "secret1"


def make_session_factory() -> sessionmaker:
    """Fresh in-memory database with all tables; one shared connection so every session sees the same data."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


def add_user(
    session_factory: sessionmaker,
    username: str,
    role: str = ROLE_USER,
    password: str = PASSWORD,
) -> SimpleNamespace:
    """Insert a user directly and return a detached snapshot usable as an actor."""
    db: Session = session_factory()
    try:
        user = User(username=username, password_hash=hash_password(password), role=role)
        db.add(user)
        db.commit()
        return SimpleNamespace(id=user.id, username=user.username, role=user.role)
    finally:
        db.close()


def add_admin(session_factory: sessionmaker, username: str) -> SimpleNamespace:
    return add_user(session_factory, username, role=ROLE_ADMIN)


def make_client(session_factory: sessionmaker, settings: Settings | None = None) -> TestClient:
    """API client whose requests use session_factory instead of the configured database."""
    app = create_app(settings=settings or app_settings, session_factory=session_factory)

    def override_get_db() -> Generator[Session, None, None]:
        db = session_factory()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db
    return TestClient(app)


def login(client: TestClient, username: str, password: str = PASSWORD) -> TestClient:
    """Log client in; the session cookie is kept on the client for later requests."""
    response = client.post("/login", json={"username": username, "password": password})
    assert response.status_code == 200, response.text
    return client
