"""
Load and submit the edit-model form.

Submission writes to the database first and refreshes the model catalog
only when the write succeeded.
"""

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from llm_admin.database import LlmSetting
from llm_admin.models.forms import EditModelForm, EditModelFormResponse
from llm_admin.models.response import ActionResult
from llm_admin.services.catalog import ModelCatalog, model_catalog
from llm_admin.services.llm_models import get_model, update_custom_model
from llm_admin.utils.db_helpers import get_or_404
from llm_admin.utils.exceptions import raise_not_found

logger = logging.getLogger(__name__)


async def load_edit_model_form(
    session: AsyncSession, provider_id: str, name: str
) -> EditModelFormResponse:
    provider = await get_or_404(session, LlmSetting, provider_id, "Provider")
    db_model = await get_model(session, provider_id, name)
    if db_model is None:
        raise_not_found("Model", name)

    return EditModelFormResponse(
        form=EditModelForm.from_model(db_model),
        provider_id=provider.provider,
        provider_name=provider.provider_name,
        api_style=provider.api_style,
        provider_logo=provider.logo,
    )


async def submit_edit_model_form(
    session: AsyncSession,
    provider_id: str,
    form: EditModelForm,
    catalog: ModelCatalog = model_catalog,
) -> ActionResult:
    provider = await get_or_404(session, LlmSetting, provider_id, "Provider")
    payload = form.to_payload(provider.provider, provider.provider_name)

    result = await update_custom_model(session, form.old_model_id, payload)
    if result.status != "success":
        logger.info(f"Edit form for {provider_id}/{form.old_model_id} not applied: {result.message}")
        return result

    await catalog.reload(session)
    return result
