"""
Model access: the llm_models catalog and per-user visibility.

Most writes key a model by (provider_id, name). set_model_selected and
delete_custom_model also accept a bare name and then touch every provider's
model of that name.
"""

import logging
from typing import List, Optional, Set

from sqlalchemy import delete, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from llm_admin.database import Group, GroupModel, LlmModel, LlmSetting, User
from llm_admin.models.request import (
    CustomModelPayload,
    ModelOrderItem,
    ProviderModelRef,
)
from llm_admin.models.response import ActionResult, LlmModelResponse, OrderResult

logger = logging.getLogger(__name__)

# Order given to models first stored by toggling their selection
DEFAULT_MODEL_ORDER = 100


async def get_model(
    session: AsyncSession, provider_id: str, name: str
) -> Optional[LlmModel]:
    """Fetch the model called ``name`` under ``provider_id``."""
    stmt = select(LlmModel).where(
        LlmModel.provider_id == provider_id,
        LlmModel.name == name,
    )
    result = await session.execute(stmt)
    return result.scalar_one_or_none()


# ============================================================================
# Reads
# ============================================================================


async def list_models(
    session: AsyncSession, provider_id: Optional[str] = None
) -> List[LlmModelResponse]:
    """List models with their provider's logo and API style."""
    stmt = select(LlmModel, LlmSetting).join(
        LlmSetting, LlmModel.provider_id == LlmSetting.provider
    )
    if provider_id:
        stmt = stmt.where(LlmModel.provider_id == provider_id)
    stmt = stmt.order_by(LlmModel.order, LlmModel.created_at)

    result = await session.execute(stmt)
    return [LlmModelResponse.from_db(model, provider) for model, provider in result.all()]


async def get_user_model_ids(
    session: AsyncSession, user: Optional[User]
) -> Optional[Set[int]]:
    """
    Resolve which model ids a user may see.

    Returns:
        None when the user may see every model (no group, or a group with
        model_type "all"); otherwise the set of ids linked to the user's
        group. Anonymous callers get an empty set.
    """
    if user is None:
        return set()

    if user.group_id is None:
        return None

    group = await session.get(Group, user.group_id)
    if group is not None and group.model_type == "all":
        return None

    result = await session.execute(
        select(GroupModel.model_id).where(GroupModel.group_id == user.group_id)
    )
    return set(result.scalars().all())


async def list_visible_models(
    session: AsyncSession,
    user: Optional[User],
    require_auth: bool = True,
) -> List[LlmModelResponse]:
    """
    List selected models of active providers, in provider then model order.

    Args:
        session: Database session
        user: The caller, or None for anonymous requests
        require_auth: Apply the caller's group visibility. Pass False only
            for system-level calls that must see the whole catalog.
    """
    allowed_ids = None
    if require_auth:
        allowed_ids = await get_user_model_ids(session, user)
        if allowed_ids is not None and not allowed_ids:
            return []

    stmt = (
        select(LlmSetting, LlmModel)
        .join(LlmModel, LlmSetting.provider == LlmModel.provider_id)
        .where(
            LlmSetting.is_active == True,
            LlmModel.selected == True,
        )
        .order_by(LlmSetting.order, LlmModel.order)
    )
    if allowed_ids is not None:
        stmt = stmt.where(LlmModel.id.in_(allowed_ids))

    result = await session.execute(stmt)
    return [
        LlmModelResponse.from_db(model, provider, use_provider_name=True)
        for provider, model in result.all()
    ]


# ============================================================================
# Writes
# ============================================================================


async def set_model_selected(
    session: AsyncSession,
    name: str,
    selected: bool,
    provider_id: Optional[str] = None,
) -> int:
    """Set the selected flag of every model called ``name``.

    Returns the number of rows updated.
    """
    stmt = update(LlmModel).where(LlmModel.name == name)
    if provider_id:
        stmt = stmt.where(LlmModel.provider_id == provider_id)
    result = await session.execute(stmt.values(selected=selected))
    await session.commit()

    if result.rowcount > 1:
        logger.warning(f"Model name '{name}' matched {result.rowcount} models across providers")
    logger.info(f"Set selected={selected} for model '{name}' (rows={result.rowcount})")
    return result.rowcount


async def set_model_selected_for_provider(
    session: AsyncSession, model: ProviderModelRef, selected: bool
) -> LlmModel:
    """Toggle a provider's model, storing it first if it was never saved."""
    db_model = await get_model(session, model.provider_id, model.name)

    if db_model is not None:
        db_model.selected = selected
    else:
        db_model = LlmModel(
            name=model.name,
            display_name=model.display_name or model.name,
            selected=selected,
            type="default",
            provider_id=model.provider_id,
            provider_name=model.provider_name,
            order=DEFAULT_MODEL_ORDER,
        )
        session.add(db_model)

    await session.commit()
    await session.refresh(db_model)

    logger.info(f"Set selected={selected} for {model.provider_id}/{model.name}")
    return db_model


async def delete_custom_model(
    session: AsyncSession, name: str, provider_id: Optional[str] = None
) -> ActionResult:
    """Delete models called ``name``. Deleting an unknown name succeeds."""
    stmt = delete(LlmModel).where(LlmModel.name == name)
    if provider_id:
        stmt = stmt.where(LlmModel.provider_id == provider_id)
    result = await session.execute(stmt)
    await session.commit()

    logger.info(f"Deleted model '{name}' (provider={provider_id or '*'}, rows={result.rowcount})")
    return ActionResult.success()


async def add_custom_model(
    session: AsyncSession, payload: CustomModelPayload
) -> ActionResult:
    if await get_model(session, payload.provider_id, payload.name) is not None:
        logger.warning(f"Custom model rejected, already exists: {payload.provider_id}/{payload.name}")
        return ActionResult.fail("A model with the same name already exists")

    session.add(LlmModel(**_payload_fields(payload), type="custom"))
    await session.commit()

    logger.info(f"Created custom model: {payload.provider_id}/{payload.name}")
    return ActionResult.success()


async def update_custom_model(
    session: AsyncSession, old_name: str, payload: CustomModelPayload
) -> ActionResult:
    """Overwrite a model, including renaming it to ``payload.name``."""
    db_model = await get_model(session, payload.provider_id, old_name)
    if db_model is None:
        logger.warning(f"Custom model update rejected, not found: {payload.provider_id}/{old_name}")
        return ActionResult.fail("The model has been deleted")

    if payload.name != old_name and await get_model(session, payload.provider_id, payload.name):
        logger.warning(f"Custom model rename rejected, name taken: {payload.provider_id}/{payload.name}")
        return ActionResult.fail("A model with the same name already exists")

    for key, value in _payload_fields(payload).items():
        setattr(db_model, key, value)
    db_model.type = "custom"
    await session.commit()

    logger.info(f"Updated custom model: {payload.provider_id}/{old_name} -> {payload.name}")
    return ActionResult.success()


async def save_models_order(
    session: AsyncSession, provider_id: str, items: List[ModelOrderItem]
) -> OrderResult:
    """Apply all model order updates for one provider as one transaction."""
    updated = 0
    try:
        for item in items:
            result = await session.execute(
                update(LlmModel)
                .where(
                    LlmModel.provider_id == provider_id,
                    LlmModel.name == item.model_id,
                )
                .values(order=item.order)
            )
            updated += result.rowcount
        await session.commit()
    except Exception:
        await session.rollback()
        logger.error(f"Model reorder for '{provider_id}' rolled back ({len(items)} entries)")
        raise

    logger.info(f"Saved model order for '{provider_id}': {updated}/{len(items)} rows updated")
    return OrderResult(status="success", updated=updated)


def _payload_fields(payload: CustomModelPayload) -> dict:
    return payload.model_dump(include=set(CustomModelPayload.model_fields))
