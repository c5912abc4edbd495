"""
Model discovery service for polling a provider's remote model list.
"""

import logging
from typing import Any, Dict, List, Optional

import httpx
import orjson
from sqlalchemy.ext.asyncio import AsyncSession

from llm_admin.config import settings
from llm_admin.database import LlmSetting

logger = logging.getLogger(__name__)


# ============================================================================
# Helper Functions
# ============================================================================


def _models_url(endpoint: str) -> str:
    return endpoint.rstrip("/") + "/models"


async def _fetch_json(
    url: str,
    headers: Optional[Dict[str, str]] = None,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> Any:
    """Fetch and decode JSON from an API endpoint."""
    async with httpx.AsyncClient(
        timeout=settings.remote_fetch_timeout, transport=transport
    ) as client:
        response = await client.get(url, headers=headers or {})
        response.raise_for_status()
        return orjson.loads(response.content)


async def get_llm_config_by_provider(
    session: AsyncSession, provider_id: str
) -> Optional[Dict[str, Optional[str]]]:
    """Resolve the endpoint and API key of a provider, or None if unknown."""
    provider = await session.get(LlmSetting, provider_id)
    if provider is None:
        return None
    return {"endpoint": provider.endpoint, "apikey": provider.apikey}


async def fetch_remote_models(
    session: AsyncSession,
    provider_id: str,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> List[Dict[str, Any]]:
    """
    List the models a provider advertises at ``GET {endpoint}/models``.

    Args:
        session: Database session used to look up the provider
        provider_id: Provider identifier
        transport: Optional httpx transport (tests use httpx.MockTransport)

    Returns:
        The ``data`` array of the response ({id, object, created, owned_by}
        entries), or an empty list if the provider is unknown, has no
        endpoint, or the request fails in any way.
    """
    config = await get_llm_config_by_provider(session, provider_id)
    if config is None or not config["endpoint"]:
        logger.warning(f"Cannot poll models for '{provider_id}': provider or endpoint missing")
        return []

    url = _models_url(config["endpoint"])
    headers = {
        "Content-Type": "application/json",
        "Authorization": f"Bearer {config['apikey'] or ''}",
    }

    try:
        body = await _fetch_json(url, headers=headers, transport=transport)
    except httpx.HTTPStatusError as e:
        logger.warning(f"Model list request for '{provider_id}' returned {e.response.status_code}")
        return []
    except (httpx.HTTPError, httpx.InvalidURL, orjson.JSONDecodeError) as e:
        logger.warning(f"Model list request for '{provider_id}' failed: {e}")
        return []

    data = body.get("data") if isinstance(body, dict) else None
    if not isinstance(data, list):
        logger.warning(f"Model list for '{provider_id}' has no 'data' array")
        return []

    models = [entry for entry in data if isinstance(entry, dict)]
    if len(models) != len(data):
        logger.warning(f"Model list for '{provider_id}' had {len(data) - len(models)} malformed entries")
    return models
