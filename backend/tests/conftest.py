"""
Shared pytest fixtures.

Every test gets its own SQLite file under tmp_path. Route tests talk to the
app through httpx.ASGITransport with get_session overridden, so the app
lifespan (seeding, catalog load from the default engine) never runs.
"""

import os

# Must be set before llm_admin.config is imported
os.environ.setdefault("ADMIN_PASSWORD", "test-admin-password")
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite://")
os.environ.setdefault("BCRYPT_ROUNDS", "4")

import httpx
import pytest
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from llm_admin.database import Base, Group, GroupModel, LlmModel, LlmSetting, User, get_session
from llm_admin.services.catalog import model_catalog
from llm_admin.utils.auth import create_session, hash_password


@pytest.fixture
def anyio_backend():
    return "asyncio"


@pytest.fixture
async def session_factory(tmp_path):
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'test.db'}")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    await engine.dispose()


@pytest.fixture
async def session(session_factory):
    async with session_factory() as session:
        yield session


@pytest.fixture
async def client(session_factory):
    from llm_admin.main import app

    async def override_get_session():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_session] = override_get_session
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
    app.dependency_overrides.clear()
    model_catalog.clear()


# ============================================================================
# Data factories
# ============================================================================


@pytest.fixture
def make_provider(session):
    async def _make_provider(provider, **fields):
        fields.setdefault("provider_name", provider.title())
        fields.setdefault("api_style", "openai")
        fields.setdefault("is_active", True)
        row = LlmSetting(provider=provider, **fields)
        session.add(row)
        await session.commit()
        return row

    return _make_provider


@pytest.fixture
def make_model(session):
    async def _make_model(provider_id, name, **fields):
        fields.setdefault("display_name", name)
        fields.setdefault("provider_name", provider_id.title())
        fields.setdefault("selected", True)
        row = LlmModel(provider_id=provider_id, name=name, **fields)
        session.add(row)
        await session.commit()
        await session.refresh(row)
        return row

    return _make_model


@pytest.fixture
def make_group(session):
    async def _make_group(name, model_type="specific", model_ids=()):
        group = Group(name=name, model_type=model_type)
        session.add(group)
        await session.flush()
        for model_id in model_ids:
            session.add(GroupModel(group_id=group.id, model_id=model_id))
        await session.commit()
        return group

    return _make_group


@pytest.fixture
def make_user(session):
    async def _make_user(username, is_admin=False, group_id=None, password="password123"):
        user = User(
            username=username,
            password_hash=hash_password(password),
            is_admin=is_admin,
            group_id=group_id,
        )
        session.add(user)
        await session.commit()
        await session.refresh(user)
        return user

    return _make_user


@pytest.fixture
def headers_for(session):
    async def _headers_for(user):
        token = await create_session(session, user)
        return {"Authorization": f"Bearer {token}"}

    return _headers_for


@pytest.fixture
async def admin_headers(make_user, headers_for):
    admin = await make_user("root", is_admin=True)
    return await headers_for(admin)


@pytest.fixture
async def user_headers(make_user, headers_for):
    user = await make_user("alice")
    return await headers_for(user)
