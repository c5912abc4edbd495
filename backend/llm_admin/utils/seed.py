"""
Database seeding for the LLM admin panel.
Creates the default providers on first run and makes sure the bootstrap
administrator exists. Tracks initialization state to prevent re-seeding
after admin customization.
"""

import logging
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from llm_admin.config import settings
from llm_admin.database import (
    LlmSetting,
    User,
    get_app_setting,
    set_app_setting,
)
from llm_admin.utils.auth import hash_password

logger = logging.getLogger(__name__)

# Seed version - increment when adding new default providers
SEED_VERSION = "1.0"

# Default providers created on first run (type "default")
PROVIDER_DEFAULTS = [
    {
        "provider": "openai",
        "provider_name": "OpenAI",
        "api_style": "openai",
        "endpoint": "https://api.openai.com/v1",
        "api_key_setting": "openai_api_key",
        "order": 1,
    },
    {
        "provider": "claude",
        "provider_name": "Claude",
        "api_style": "claude",
        "endpoint": "https://api.anthropic.com/v1",
        "api_key_setting": "anthropic_api_key",
        "order": 2,
    },
    {
        "provider": "gemini",
        "provider_name": "Gemini",
        "api_style": "gemini",
        "endpoint": "https://generativelanguage.googleapis.com/v1beta",
        "api_key_setting": "google_api_key",
        "order": 3,
    },
]


async def seed_default_providers(session: AsyncSession) -> dict:
    """
    Create the default providers once.

    A provider is active only if its API key is configured in the
    environment. Existing rows are never touched.

    Returns:
        dict: Summary of seeding operation
    """
    is_initialized = await get_app_setting(session, 'db_initialized', False)
    if is_initialized:
        return {"status": "skipped", "message": "Database already initialized"}

    providers_created = 0

    for provider_def in PROVIDER_DEFAULTS:
        if await session.get(LlmSetting, provider_def["provider"]) is not None:
            continue

        api_key = getattr(settings, provider_def["api_key_setting"], None)

        session.add(LlmSetting(
            provider=provider_def["provider"],
            provider_name=provider_def["provider_name"],
            api_style=provider_def["api_style"],
            endpoint=provider_def["endpoint"],
            apikey=api_key,
            is_active=bool(api_key),
            order=provider_def["order"],
            type="default",
        ))
        providers_created += 1

    # Mark database as initialized
    await set_app_setting(session, 'db_initialized', True)
    await set_app_setting(session, 'seed_version', SEED_VERSION)

    await session.commit()

    return {
        "status": "success",
        "providers_created": providers_created,
        "seed_version": SEED_VERSION,
    }


async def ensure_admin_user(session: AsyncSession) -> dict:
    """Create the bootstrap administrator from ADMIN_USERNAME / ADMIN_PASSWORD."""
    stmt = select(User).where(User.username == settings.admin_username)
    result = await session.execute(stmt)
    user = result.scalar_one_or_none()

    if user is not None:
        if not user.is_admin:
            logger.warning(f"Bootstrap account '{user.username}' exists but is not an administrator")
        return {"status": "skipped", "message": "Admin user already exists"}

    session.add(User(
        username=settings.admin_username,
        password_hash=hash_password(settings.admin_password),
        display_name="Administrator",
        is_admin=True,
    ))
    await session.commit()

    return {"status": "success", "message": f"Created admin user '{settings.admin_username}'"}