"""
tests/conftest.py — Shared Test Fixtures
=========================================
"""

from __future__ import annotations

import os
import uuid

# ---------------------------------------------------------------------------
# Ensure a valid JWT_SECRET is always set for test runs.
# This must happen before any import of ideashare.api.deps which validates
# the secret at module-load time.
# ---------------------------------------------------------------------------
_TEST_JWT_SECRET = "test-secret-for-pytest-only-" + "x" * 40  # > 32 chars
os.environ.setdefault("JWT_SECRET", _TEST_JWT_SECRET)

import pytest  # noqa: E402
from sqlalchemy import Engine, create_engine  # noqa: E402

# ---------------------------------------------------------------------------
# SQLite has no JSONB; render it as TEXT so the outbox table can be created.
# ---------------------------------------------------------------------------
from sqlalchemy.dialects.postgresql import JSONB as PG_JSONB  # noqa: E402
from sqlalchemy.ext.compiler import compiles  # noqa: E402
from sqlalchemy.orm import Session  # noqa: E402

from ideashare.config import IdeaShareConfig  # noqa: E402
from ideashare.database.models import Base, Idea, Level, Profile  # noqa: E402
from ideashare.database.seed import seed_defaults  # noqa: E402


@compiles(PG_JSONB, "sqlite")
def _compile_jsonb_as_text(type_, compiler, **kw):
    return "TEXT"


@pytest.fixture
def db_engine() -> Engine:
    """Create an in-memory SQLite engine with all IdeaShare tables.

    Uses StaticPool so every session (and the API threadpool) shares the
    same in-memory database.
    """
    from sqlalchemy.pool import StaticPool

    engine = create_engine(
        "sqlite://",
        echo=False,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    seed_defaults(engine)
    return engine


@pytest.fixture
def test_config() -> IdeaShareConfig:
    return IdeaShareConfig(
        community_name="Test Community",
        api_port=8000,
        unread_poll_seconds=15,
        outbox_max_attempts=3,
        outbox_replay_seconds=1,
        outbox_batch_size=50,
    )


# ---------------------------------------------------------------------------
# Factories (also importable: ``from conftest import make_profile``)
# ---------------------------------------------------------------------------
def make_profile(
    engine: Engine,
    username: str | None = None,
    points: int = 0,
    level: Level = Level.BEGINNER,
) -> uuid.UUID:
    """Insert a profile and return its id."""
    with Session(engine) as session:
        profile = Profile(
            username=username or f"user-{uuid.uuid4().hex[:8]}",
            points=points,
            level=level.value,
        )
        session.add(profile)
        session.commit()
        return profile.id


def make_idea(
    engine: Engine,
    owner_id: uuid.UUID,
    title: str = "Solar bus shelters",
    description: str = "Bus shelters with solar panels that charge phones",
) -> uuid.UUID:
    """Insert an idea owned by *owner_id* and return its id."""
    with Session(engine) as session:
        idea = Idea(title=title, description=description, user_id=owner_id, share_count=0)
        session.add(idea)
        session.commit()
        return idea.id


def get_profile_row(engine: Engine, user_id: uuid.UUID) -> Profile:
    with Session(engine) as session:
        return session.get(Profile, user_id)


def make_token(sub: uuid.UUID | str, *, is_admin: bool = False) -> str:
    """Create a signed bearer token for *sub*."""
    import jwt

    from ideashare.api.deps import JWT_ALGORITHM, JWT_SECRET

    return jwt.encode(
        {"sub": str(sub), "is_admin": is_admin},
        JWT_SECRET,
        algorithm=JWT_ALGORITHM,
    )


def auth(sub: uuid.UUID | str, *, is_admin: bool = False) -> dict:
    return {"Authorization": f"Bearer {make_token(sub, is_admin=is_admin)}"}


@pytest.fixture
def client(db_engine, test_config):
    """TestClient wired to the in-memory engine and the test config."""
    from fastapi.testclient import TestClient

    from ideashare.api.deps import get_config, get_engine
    from ideashare.api.main import app

    app.dependency_overrides[get_engine] = lambda: db_engine
    app.dependency_overrides[get_config] = lambda: test_config
    yield TestClient(app, raise_server_exceptions=False)
    app.dependency_overrides.clear()
