"""Service test fixtures — async DB, fake external clients and a FastAPI test client.

Invariants:
    - Every test gets a fresh in-memory SQLite database
    - get_db dependency overridden to open sessions through DatabaseSessionManager,
      so routes see the same rollback and error mapping as in production
    - db_manager patched for code that opens sessions directly (the expiry monitor)
    - app.state.clients replaced by fakes (no network, mail kept in an outbox)

Design Decisions:
    - SQLite in-memory: fast, no external dependency, sufficient for route tests
      (PostgreSQL-specific features not exercised here)
    - Users created straight in the DB and authenticated with a Bearer token:
      the cookie jar stays empty, so each request acts as exactly one user
"""

import pytest
from sqlalchemy.ext.asyncio import (
    AsyncSession, create_async_engine, async_sessionmaker,
)
from httpx import ASGITransport, AsyncClient

from app.config import get_settings
from app.core.domain_types import UserRole
from app.core.security import hash_password
from app.db.base import Base
from app.infrastructure.database import get_db, DatabaseSessionManager
import app.infrastructure.database as db_module
import app.models  # noqa: F401
from app.main import app
from app.models.listing import Listing
from app.models.user import User
from app.services.auth import issue_session_token
from tests.services.fakes import PASSWORD, build_fake_clients


@pytest.fixture
async def test_engine():
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:", echo=False,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest.fixture
async def test_session_factory(test_engine):
    return async_sessionmaker(
        test_engine, class_=AsyncSession, expire_on_commit=False,
    )


@pytest.fixture
async def test_db(test_session_factory):
    async with test_session_factory() as session:
        yield session


@pytest.fixture
def fake_clients():
    return build_fake_clients()


@pytest.fixture
async def client(test_engine, test_session_factory, fake_clients):
    """FastAPI test client with DB dependency and external clients overridden."""
    original_manager = db_module.db_manager
    fake_manager = DatabaseSessionManager.__new__(DatabaseSessionManager)
    fake_manager.engine = test_engine
    fake_manager._session_factory = test_session_factory
    db_module.db_manager = fake_manager

    async def override_get_db():
        async with fake_manager.session() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    app.state.clients = fake_clients

    async with AsyncClient(
        transport=ASGITransport(app=app), base_url="http://test",
    ) as c:
        yield c

    app.dependency_overrides.clear()
    db_module.db_manager = original_manager


@pytest.fixture
def make_user(test_db):
    """Factory: insert a user and return (user, auth headers)."""
    counter = {"n": 0}

    async def _make(role: UserRole = UserRole.USER, **fields):
        counter["n"] += 1
        user = User(
            email=fields.pop("email", f"{role.value.lower()}{counter['n']}@example.com"),
            firstname=fields.pop("firstname", f"{role.value}{counter['n']}"),
            lastname=fields.pop("lastname", "Tester"),
            role=role.value,
            password_hash=hash_password(fields.pop("password", PASSWORD)),
            **fields,
        )
        test_db.add(user)
        await test_db.commit()
        await test_db.refresh(user)
        token = issue_session_token(user, get_settings())
        return user, {"Authorization": f"Bearer {token}"}

    return _make


@pytest.fixture
async def admin(make_user):
    return await make_user(UserRole.ADMIN)


@pytest.fixture
async def agent(make_user):
    return await make_user(UserRole.AGENT)


@pytest.fixture
def make_listing(test_db):
    """Factory: insert a listing owned by `owner`."""
    async def _make(owner: User | None, **fields):
        listing = Listing(
            title=fields.pop("title", "3 Bedroom Flat"),
            purpose=fields.pop("purpose", "Rent"),
            location=fields.pop(
                "location", {"state": "Lagos", "area": "Lekki", "locality": "Phase 1"},
            ),
            price=fields.pop("price", 2_500_000.0),
            created_by=owner.id if owner else None,
            **fields,
        )
        test_db.add(listing)
        await test_db.commit()
        await test_db.refresh(listing)
        return listing

    return _make
