"""Shared pytest fixtures."""

from __future__ import annotations

import os
import tempfile
from collections.abc import AsyncIterator, Callable
from pathlib import Path
from types import SimpleNamespace

_DB_DIR = Path(tempfile.mkdtemp(prefix="taskguard-tests-"))
os.environ["DATABASE_URL"] = f"sqlite+aiosqlite:///{_DB_DIR / 'taskguard.sqlite'}"
os.environ.setdefault("JWT_SECRET", "taskguard-test-secret-0123456789abcdef")

import jwt  # noqa: E402
import pytest  # noqa: E402
import pytest_asyncio  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402

from taskguard.core import config  # noqa: E402
from taskguard.core.database.base import Base  # noqa: E402
from taskguard.core.database.engine import AsyncSessionLocal, engine  # noqa: E402
from taskguard.features.organizations.models import Organization  # noqa: E402
from taskguard.features.permissions.defaults import seed_roles  # noqa: E402
from taskguard.features.users.models import User  # noqa: E402
from taskguard.main import app  # noqa: E402


def make_token(user_id: str) -> str:
    return jwt.encode({"sub": user_id}, config.JWT_SECRET, algorithm=config.JWT_ALGORITHM)


def bearer_headers(user_id: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {make_token(user_id)}"}


@pytest.fixture()
def auth_headers() -> Callable[[str], dict[str, str]]:
    """Build an Authorization header for a user id."""
    return bearer_headers


@pytest_asyncio.fixture()
async def database() -> AsyncIterator[None]:
    """Recreate every table for a test."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
        await conn.run_sync(Base.metadata.create_all)
    yield
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)


@pytest_asyncio.fixture()
async def seeded(database: None) -> SimpleNamespace:
    """
    Default roles plus this organization tree:

        acme
        ├── labs
        │   └── labs-east   (grandchild, never reachable from acme)
        └── support
        other               (unrelated)

    Users: owner, admin, viewer and viewer2 in acme; labs_viewer in labs.
    """
    async with AsyncSessionLocal() as db:
        roles = await seed_roles(db)

        acme = Organization(name="Acme")
        other = Organization(name="Other Corp")
        db.add_all([acme, other])
        await db.flush()
        labs = Organization(name="Acme Labs", parent_id=acme.id)
        support = Organization(name="Acme Support", parent_id=acme.id)
        db.add_all([labs, support])
        await db.flush()
        labs_east = Organization(name="Acme Labs East", parent_id=labs.id)
        db.add(labs_east)

        users = {
            "owner": User(email="owner@acme.test", name="Owner", role_id=roles["owner"].id, organization_id=acme.id),
            "admin": User(email="admin@acme.test", name="Admin", role_id=roles["admin"].id, organization_id=acme.id),
            "viewer": User(email="viewer@acme.test", name="Viewer", role_id=roles["viewer"].id, organization_id=acme.id),
            "viewer2": User(email="viewer2@acme.test", name="Viewer Two", role_id=roles["viewer"].id, organization_id=acme.id),
            "labs_viewer": User(email="viewer@labs.test", name="Labs Viewer", role_id=roles["viewer"].id, organization_id=labs.id),
        }
        db.add_all(users.values())
        await db.commit()

        return SimpleNamespace(
            acme=acme.id,
            labs=labs.id,
            support=support.id,
            labs_east=labs_east.id,
            other=other.id,
            **{name: user.id for name, user in users.items()},
        )


@pytest_asyncio.fixture()
async def async_client(database: None) -> AsyncIterator[AsyncClient]:
    """HTTPX async client bound to the FastAPI app."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://testserver") as client:
        yield client


@pytest_asyncio.fixture()
async def db_session(database: None):
    async with AsyncSessionLocal() as session:
        yield session
