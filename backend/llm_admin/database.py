import json
import os
from typing import AsyncGenerator

from llm_admin.config import settings
from llm_admin.utils.time import utcnow

from sqlalchemy import (
    Boolean,
    Column,
    DateTime,
    ForeignKey,
    Integer,
    String,
    Text,
    UniqueConstraint,
    delete,
    select,
)
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import DeclarativeBase, relationship

if settings.database_url:
    DATABASE_URL = settings.database_url
else:
    # Database path - use data directory for persistence
    DATA_DIR = os.path.join(os.path.dirname(os.path.dirname(__file__)), "data")
    os.makedirs(DATA_DIR, exist_ok=True)
    DATABASE_PATH = os.path.join(DATA_DIR, "llm_admin.db")
    DATABASE_URL = f"sqlite+aiosqlite:///{DATABASE_PATH}"

# Create async engine
engine = create_async_engine(DATABASE_URL, echo=False)
async_session = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


class Base(DeclarativeBase):
    """Base class for all database models."""

    pass


class LlmSetting(Base):
    """An upstream LLM provider: endpoint, credentials and display metadata."""

    __tablename__ = "llm_settings"

    provider = Column(String(100), primary_key=True)  # e.g., "openai", "my-proxy"
    provider_name = Column(String(100), nullable=False)  # Human-readable name
    api_style = Column(
        String(50), default="openai", nullable=False
    )  # "openai", "openai_response", "claude", "gemini"
    endpoint = Column(String(500), nullable=True)
    apikey = Column(Text, nullable=True)  # Never returned by non-admin reads
    is_active = Column(Boolean, default=False, nullable=False)
    logo = Column(String(500), nullable=True)
    order = Column(Integer, default=1, nullable=False)
    type = Column(String(20), default="default", nullable=False)  # "default" | "custom"
    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(
        DateTime, default=utcnow, onupdate=utcnow, nullable=False
    )

    def __repr__(self):
        return f"<LlmSetting(provider='{self.provider}', style='{self.api_style}', active={self.is_active})>"


class LlmModel(Base):
    """One model offered by a provider."""

    __tablename__ = "llm_models"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(200), nullable=False)  # e.g., "gpt-4o", "claude-sonnet-4-5"
    display_name = Column(String(200), nullable=False)
    max_tokens = Column(Integer, nullable=True)
    support_vision = Column(Boolean, default=False, nullable=False)
    support_tool = Column(Boolean, default=False, nullable=False)
    selected = Column(Boolean, default=True, nullable=False)  # Visible to end users
    provider_id = Column(
        String(100), ForeignKey("llm_settings.provider"), nullable=False, index=True
    )
    provider_name = Column(String(100), nullable=False)  # Denormalized, may go stale
    type = Column(String(20), default="custom", nullable=False)  # "default" | "custom"
    order = Column(Integer, default=1, nullable=False)
    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(
        DateTime, default=utcnow, onupdate=utcnow, nullable=False
    )

    # A model name can only appear once per provider
    __table_args__ = (
        UniqueConstraint("provider_id", "name", name="uq_llm_models_provider_name"),
    )

    def __repr__(self):
        return f"<LlmModel(name='{self.name}', provider='{self.provider_id}', selected={self.selected})>"


class Group(Base):
    """Access-control group deciding which models its users may see."""

    __tablename__ = "groups"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(100), unique=True, nullable=False)
    model_type = Column(String(20), default="all", nullable=False)  # "all" | "specific"
    created_at = Column(DateTime, default=utcnow, nullable=False)

    model_links = relationship(
        "GroupModel", back_populates="group", cascade="all, delete-orphan"
    )

    def __repr__(self):
        return f"<Group(name='{self.name}', model_type='{self.model_type}')>"


class GroupModel(Base):
    """Explicit model grant for a group with model_type 'specific'."""

    __tablename__ = "group_models"

    group_id = Column(
        Integer, ForeignKey("groups.id", ondelete="CASCADE"), primary_key=True
    )
    # No FK: deleting a model leaves its links behind
    model_id = Column(Integer, primary_key=True)

    group = relationship("Group", back_populates="model_links")

    def __repr__(self):
        return f"<GroupModel(group_id={self.group_id}, model_id={self.model_id})>"


class User(Base):
    """User accounts. Administrators carry is_admin."""

    __tablename__ = "users"

    id = Column(Integer, primary_key=True, autoincrement=True)
    username = Column(String(50), unique=True, nullable=False, index=True)
    password_hash = Column(String(100), nullable=False)  # bcrypt hash
    display_name = Column(String(100), nullable=True)
    is_admin = Column(Boolean, default=False, nullable=False)
    is_active = Column(Boolean, default=True, nullable=False)
    group_id = Column(
        Integer, ForeignKey("groups.id", ondelete="SET NULL"), nullable=True
    )
    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(
        DateTime, default=utcnow, onupdate=utcnow, nullable=False
    )

    # Relationship to sessions
    sessions = relationship(
        "UserSession", back_populates="user", cascade="all, delete-orphan"
    )

    def __repr__(self):
        return f"<User(username='{self.username}', admin={self.is_admin}, active={self.is_active})>"


class UserSession(Base):
    """Bearer session tokens."""

    __tablename__ = "user_sessions"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(
        Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    token = Column(String(64), unique=True, nullable=False, index=True)
    created_at = Column(DateTime, default=utcnow, nullable=False)
    expires_at = Column(DateTime, nullable=False)

    # Relationship to user
    user = relationship("User", back_populates="sessions")

    def __repr__(self):
        return f"<UserSession(user_id={self.user_id}, expires={self.expires_at})>"


class AppSettings(Base):
    """Application-wide key/value bookkeeping (seeding state)."""

    __tablename__ = "app_settings"

    key = Column(String(50), primary_key=True)
    value = Column(Text, nullable=False)  # JSON string for complex values
    updated_at = Column(
        DateTime, default=utcnow, onupdate=utcnow, nullable=False
    )

    def __repr__(self):
        return f"<AppSettings(key='{self.key}')>"


async def init_db():
    """Initialize the database, creating all tables if they don't exist."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def get_session() -> AsyncGenerator[AsyncSession, None]:
    """Get an async database session."""
    async with async_session() as session:
        try:
            yield session
        finally:
            await session.close()


async def cleanup_expired_sessions():
    """Remove expired user sessions."""
    async with async_session() as session:
        stmt = delete(UserSession).where(UserSession.expires_at < utcnow())
        await session.execute(stmt)
        await session.commit()


# ============================================================================
# AppSettings Helpers
# ============================================================================


async def get_app_setting(session: AsyncSession, key: str, default=None):
    """Get a setting value from AppSettings.

    Args:
        session: Database session
        key: Setting key to retrieve
        default: Default value if key doesn't exist

    Returns:
        Parsed JSON value or default
    """
    result = await session.execute(
        select(AppSettings).where(AppSettings.key == key)
    )
    setting = result.scalar_one_or_none()
    if setting is None:
        return default
    try:
        return json.loads(setting.value)
    except json.JSONDecodeError:
        return setting.value


async def set_app_setting(session: AsyncSession, key: str, value) -> None:
    """Set a setting value in AppSettings (upsert).

    Args:
        session: Database session
        key: Setting key
        value: Value to store (will be JSON-encoded)
    """
    json_value = json.dumps(value)

    stmt = sqlite_insert(AppSettings).values(
        key=key,
        value=json_value
    ).on_conflict_do_update(
        index_elements=['key'],
        set_={'value': json_value}
    )
    await session.execute(stmt)
