"""
Admin API routes for managing LLM providers and models.
All routes require an administrator session via Bearer token.
"""

import logging
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from llm_admin.database import LlmSetting, User, get_session
from llm_admin.models.forms import EditModelForm, EditModelFormResponse
from llm_admin.models.request import (
    CustomModelPayload,
    CustomModelUpdateRequest,
    CustomProviderCreate,
    ModelOrderItem,
    ModelSelectRequest,
    ProviderModelRef,
    ProviderModelSelectRequest,
    ProviderOrderItem,
    ProviderSettingsUpdate,
)
from llm_admin.models.response import (
    ActionResult,
    LlmModelResponse,
    OrderResult,
    ProviderDetail,
    ProviderSettingResponse,
)
from llm_admin.services import llm_models, providers
from llm_admin.services.catalog import model_catalog
from llm_admin.services.model_discovery import fetch_remote_models
from llm_admin.services.model_form import load_edit_model_form, submit_edit_model_form
from llm_admin.utils.auth import require_admin_auth
from llm_admin.utils.db_helpers import get_or_404

logger = logging.getLogger(__name__)

router = APIRouter()


async def _refresh_catalog(session: AsyncSession, result: Optional[ActionResult] = None) -> None:
    """Reload the model catalog unless the write soft-failed."""
    if result is None or result.status == "success":
        await model_catalog.reload(session)


# ============================================================================
# Provider Endpoints
# ============================================================================


@router.get("/providers", response_model=List[ProviderSettingResponse])
async def list_provider_settings(
    _: User = Depends(require_admin_auth),
    session: AsyncSession = Depends(get_session),
):
    """List every provider including API keys."""
    return await providers.list_all_provider_settings(session)


@router.post("/providers", response_model=ActionResult)
async def add_custom_provider(
    payload: CustomProviderCreate,
    _: User = Depends(require_admin_auth),
    session: AsyncSession = Depends(get_session),
):
    """Create a custom provider."""
    result = await providers.add_custom_provider(session, payload)
    await _refresh_catalog(session, result)
    return result


@router.put("/providers/order", response_model=OrderResult)
async def save_provider_order(
    items: List[ProviderOrderItem],
    _: User = Depends(require_admin_auth),
    session: AsyncSession = Depends(get_session),
):
    """Reorder providers. All entries are applied or none are."""
    result = await providers.save_provider_order(session, items)
    await _refresh_catalog(session)
    return result


@router.get("/providers/{provider_id}", response_model=ProviderDetail)
async def get_provider(
    provider_id: str,
    _: User = Depends(require_admin_auth),
    session: AsyncSession = Depends(get_session),
):
    return await providers.get_provider_by_id(session, provider_id)


@router.put("/providers/{provider_id}", response_model=ProviderSettingResponse)
async def save_provider(
    provider_id: str,
    values: ProviderSettingsUpdate,
    _: User = Depends(require_admin_auth),
    session: AsyncSession = Depends(get_session),
):
    """Create or update a provider's settings."""
    provider = await providers.save_provider(session, provider_id, values)
    await _refresh_catalog(session)
    return provider


@router.delete("/providers/{provider_id}", response_model=ActionResult)
async def delete_custom_provider(
    provider_id: str,
    _: User = Depends(require_admin_auth),
    session: AsyncSession = Depends(get_session),
):
    result = await providers.delete_custom_provider(session, provider_id)
    await _refresh_catalog(session, result)
    return result


@router.get("/providers/{provider_id}/remote-models", response_model=List[Dict[str, Any]])
async def get_remote_models(
    provider_id: str,
    _: User = Depends(require_admin_auth),
    session: AsyncSession = Depends(get_session),
):
    """Poll the provider's own model list. Empty when the upstream call fails."""
    return await fetch_remote_models(session, provider_id)


# ============================================================================
# Per-provider Model Endpoints
# ============================================================================


@router.put("/providers/{provider_id}/models/select", response_model=LlmModelResponse)
async def set_provider_model_selected(
    provider_id: str,
    request: ProviderModelSelectRequest,
    _: User = Depends(require_admin_auth),
    session: AsyncSession = Depends(get_session),
):
    """Toggle a provider model, storing it on first use."""
    provider = await get_or_404(session, LlmSetting, provider_id, "Provider")
    model_ref = ProviderModelRef(
        name=request.name,
        display_name=request.display_name,
        provider_id=provider.provider,
        provider_name=provider.provider_name,
    )
    db_model = await llm_models.set_model_selected_for_provider(session, model_ref, request.selected)
    await _refresh_catalog(session)
    return LlmModelResponse.from_db(db_model, provider)


@router.put("/providers/{provider_id}/models/order", response_model=OrderResult)
async def save_models_order(
    provider_id: str,
    items: List[ModelOrderItem],
    _: User = Depends(require_admin_auth),
    session: AsyncSession = Depends(get_session),
):
    """Reorder one provider's models. All entries are applied or none are."""
    result = await llm_models.save_models_order(session, provider_id, items)
    await _refresh_catalog(session)
    return result


@router.get("/providers/{provider_id}/models/edit-form", response_model=EditModelFormResponse)
async def get_edit_model_form(
    provider_id: str,
    name: str = Query(..., min_length=1),
    _: User = Depends(require_admin_auth),
    session: AsyncSession = Depends(get_session),
):
    """Initial values for the edit-model dialog."""
    return await load_edit_model_form(session, provider_id, name)


@router.post("/providers/{provider_id}/models/edit-form", response_model=ActionResult)
async def post_edit_model_form(
    provider_id: str,
    form: EditModelForm,
    _: User = Depends(require_admin_auth),
    session: AsyncSession = Depends(get_session),
):
    """Submit the edit-model dialog."""
    return await submit_edit_model_form(session, provider_id, form)


# ============================================================================
# Model Endpoints
# ============================================================================


@router.post("/models", response_model=ActionResult)
async def add_custom_model(
    payload: CustomModelPayload,
    _: User = Depends(require_admin_auth),
    session: AsyncSession = Depends(get_session),
):
    result = await llm_models.add_custom_model(session, payload)
    await _refresh_catalog(session, result)
    return result


@router.put("/models", response_model=ActionResult)
async def update_custom_model(
    request: CustomModelUpdateRequest,
    _: User = Depends(require_admin_auth),
    session: AsyncSession = Depends(get_session),
):
    """Update a custom model, renaming it from old_name to name."""
    payload = CustomModelPayload(**request.model_dump(exclude={"old_name"}))
    result = await llm_models.update_custom_model(session, request.old_name, payload)
    await _refresh_catalog(session, result)
    return result


@router.delete("/models", response_model=ActionResult)
async def delete_custom_model(
    name: str = Query(..., min_length=1),
    provider_id: Optional[str] = Query(None),
    _: User = Depends(require_admin_auth),
    session: AsyncSession = Depends(get_session),
):
    """Delete a model by name, optionally restricted to one provider."""
    result = await llm_models.delete_custom_model(session, name, provider_id)
    await _refresh_catalog(session, result)
    return result


@router.put("/models/select")
async def set_model_selected(
    request: ModelSelectRequest,
    _: User = Depends(require_admin_auth),
    session: AsyncSession = Depends(get_session),
):
    """Set the selected flag of a model by name."""
    updated = await llm_models.set_model_selected(
        session, request.name, request.selected, request.provider_id
    )
    await _refresh_catalog(session)
    return {"status": "success", "updated": updated}


# ============================================================================
# Catalog Endpoints
# ============================================================================


@router.get("/catalog", response_model=List[LlmModelResponse])
async def get_catalog(
    _: User = Depends(require_admin_auth),
):
    """The cached list of selectable models, without group filtering."""
    return model_catalog.get_models()


@router.post("/reload")
async def reload_catalog(
    _: User = Depends(require_admin_auth),
    session: AsyncSession = Depends(get_session),
):
    """Reload the model catalog from the database."""
    count = await model_catalog.reload(session)
    logger.info(f"Model catalog reloaded by admin: {count} models")
    return {"message": "Model catalog reloaded successfully", "models": count}
