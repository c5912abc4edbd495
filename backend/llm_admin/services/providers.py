"""
Provider access: reads and writes over the llm_settings table.

Authorization is enforced by the routers (require_admin_auth); functions here
assume the caller has already been checked.
"""

import logging
from typing import List

from sqlalchemy import delete, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from llm_admin.database import LlmSetting
from llm_admin.models.request import (
    CustomProviderCreate,
    ProviderOrderItem,
    ProviderSettingsUpdate,
)
from llm_admin.models.response import ActionResult, OrderResult, ProviderDetail
from llm_admin.utils.db_helpers import get_or_404

logger = logging.getLogger(__name__)

DEFAULT_PROVIDER_NAME = "Untitled"

# Columns that cannot be cleared with an explicit null
_NOT_NULL_FIELDS = ("provider_name", "api_style", "is_active", "order")


async def save_provider(
    session: AsyncSession, provider_id: str, values: ProviderSettingsUpdate
) -> LlmSetting:
    """Update the provider if it exists, otherwise create it.

    Only fields present in ``values`` are written on update. A new row gets
    ``provider_name`` "Untitled" when none was supplied.
    """
    provider = await session.get(LlmSetting, provider_id)
    data = {
        key: value
        for key, value in values.model_dump(exclude_unset=True).items()
        if value is not None or key not in _NOT_NULL_FIELDS
    }

    if provider is not None:
        for key, value in data.items():
            setattr(provider, key, value)
        logger.info(f"Updated provider settings: {provider_id} ({', '.join(data) or 'no fields'})")
    else:
        data["provider_name"] = data.get("provider_name") or DEFAULT_PROVIDER_NAME
        provider = LlmSetting(provider=provider_id, **data)
        session.add(provider)
        logger.info(f"Created provider settings: {provider_id}")

    await session.commit()
    await session.refresh(provider)
    return provider


async def list_providers(session: AsyncSession) -> List[LlmSetting]:
    """All providers. Callers must project away the API key."""
    stmt = select(LlmSetting).order_by(LlmSetting.order)
    result = await session.execute(stmt)
    return list(result.scalars().all())


async def list_all_provider_settings(session: AsyncSession) -> List[LlmSetting]:
    """Full provider rows including credentials, ordered for display."""
    stmt = select(LlmSetting).order_by(LlmSetting.order, LlmSetting.provider)
    result = await session.execute(stmt)
    return list(result.scalars().all())


async def get_provider_by_id(session: AsyncSession, provider_id: str) -> ProviderDetail:
    provider = await get_or_404(session, LlmSetting, provider_id, "Provider")
    return ProviderDetail.from_db(provider)


async def list_active_providers(session: AsyncSession) -> List[LlmSetting]:
    stmt = (
        select(LlmSetting)
        .where(LlmSetting.is_active == True)
        .order_by(LlmSetting.order)
    )
    result = await session.execute(stmt)
    return list(result.scalars().all())


async def add_custom_provider(
    session: AsyncSession, payload: CustomProviderCreate
) -> ActionResult:
    """Create a custom provider; soft-fails when the identifier is taken."""
    if await session.get(LlmSetting, payload.provider) is not None:
        logger.warning(f"Custom provider rejected, id already exists: {payload.provider}")
        return ActionResult.fail("A provider with the same ID already exists")

    session.add(LlmSetting(**payload.model_dump(), type="custom", is_active=True))
    await session.commit()

    logger.info(f"Created custom provider: {payload.provider} (style={payload.api_style})")
    return ActionResult.success()


async def delete_custom_provider(session: AsyncSession, provider_id: str) -> ActionResult:
    """Delete a provider by id. Deleting an unknown id succeeds."""
    result = await session.execute(
        delete(LlmSetting).where(LlmSetting.provider == provider_id)
    )
    await session.commit()

    logger.info(f"Deleted provider: {provider_id} (rows={result.rowcount})")
    return ActionResult.success()


async def save_provider_order(
    session: AsyncSession, items: List[ProviderOrderItem]
) -> OrderResult:
    """Apply all provider order updates as one transaction."""
    updated = 0
    try:
        for item in items:
            result = await session.execute(
                update(LlmSetting)
                .where(LlmSetting.provider == item.provider_id)
                .values(order=item.order)
            )
            updated += result.rowcount
        await session.commit()
    except Exception:
        await session.rollback()
        logger.error(f"Provider reorder rolled back ({len(items)} entries)")
        raise

    logger.info(f"Saved provider order: {updated}/{len(items)} rows updated")
    return OrderResult(status="success", updated=updated)
