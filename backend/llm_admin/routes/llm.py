"""
Read-only provider and model routes for the chat application.
No route here exposes API keys.
"""

from typing import List, Optional

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from llm_admin.database import User, get_session
from llm_admin.models.response import LlmModelResponse, ProviderSummary
from llm_admin.services import llm_models, providers
from llm_admin.utils.auth import optional_user_auth

router = APIRouter()


@router.get("/providers", response_model=List[ProviderSummary])
async def list_providers(session: AsyncSession = Depends(get_session)):
    """List providers without credentials."""
    return await providers.list_providers(session)


@router.get("/providers/active", response_model=List[ProviderSummary])
async def list_active_providers(session: AsyncSession = Depends(get_session)):
    return await providers.list_active_providers(session)


@router.get("/models", response_model=List[LlmModelResponse])
async def list_models(
    provider_id: Optional[str] = None,
    session: AsyncSession = Depends(get_session),
):
    """List stored models, optionally for one provider."""
    return await llm_models.list_models(session, provider_id)


@router.get("/models/visible", response_model=List[LlmModelResponse])
async def list_visible_models(
    user: Optional[User] = Depends(optional_user_auth),
    session: AsyncSession = Depends(get_session),
):
    """Models the caller may pick in the chat UI, filtered by their group."""
    return await llm_models.list_visible_models(session, user, require_auth=True)
