# Pytest configuration for API tests.
# Each test gets its own SQLite file, Redis disabled, Stripe offline, and a predictable identity secret.
import os
import sys
import time
from typing import Callable, Iterator, Optional

import jwt
import pytest
from fastapi.testclient import TestClient

os.environ.setdefault("REDIS_ENABLED", "false")
os.environ.setdefault("STRIPE_SECRET_KEY", "")

# Ensure the repo root is on sys.path so 'skytower' resolves when running pytest from the repo root
ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)

from skytower import models  # noqa: E402
from skytower.config import Settings  # noqa: E402
from skytower.main import create_app  # noqa: E402

TEST_SECRET = "test-identity-secret"


@pytest.fixture()
def settings(tmp_path) -> Settings:
    return Settings(
        database_url=f"sqlite:///{tmp_path / 'test.db'}",
        identity_secret=TEST_SECRET,
        cors_origins=["http://localhost:5173"],
    )


@pytest.fixture()
def app(settings):
    return create_app(settings)


@pytest.fixture()
def client(app) -> Iterator[TestClient]:
    """
    FastAPI TestClient bound to a fresh application; startup creates the schema
    and teardown drops it before shutdown disposes the engine.
    """
    with TestClient(app) as c:
        yield c
        app.state.database.drop_all()


@pytest.fixture()
def db(client, app):
    """Direct session on the same database the client talks to (for seeding and assertions)."""
    session = app.state.database.session()
    try:
        yield session
    finally:
        session.close()


def make_token(
    email: str,
    subject: Optional[str] = None,
    ttl_seconds: int = 3600,
    secret: str = TEST_SECRET,
) -> str:
    now = int(time.time())
    payload = {
        "sub": subject or f"uid-{email}",
        "email": email,
        "iat": now,
        "exp": now + ttl_seconds,
    }
    return jwt.encode(payload, secret, algorithm="HS256")


# Convenience header for authenticated requests
def auth_headers(token: str) -> dict:
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture()
def headers_for() -> Callable[..., dict]:
    """headers_for(email) -> Authorization header carrying a valid token for that email."""

    def _headers(email: str, **kwargs) -> dict:
        return auth_headers(make_token(email, **kwargs))

    return _headers


@pytest.fixture()
def make_user(db) -> Callable[[str, str], models.User]:
    """Insert a user row directly with the given role."""

    def _make(email: str, role: str = "guest") -> models.User:
        user = models.User(email=email, role=role)
        db.add(user)
        db.commit()
        db.refresh(user)
        return user

    return _make
