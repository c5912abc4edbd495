import asyncio
import logging
from typing import Dict, List

from sqlalchemy.ext.asyncio import AsyncSession

from llm_admin.models.response import LlmModelResponse

logger = logging.getLogger(__name__)


class ModelCatalog:
    """In-process snapshot of every selectable model, without group filtering.

    Only reloaded after a database write has committed, so it never shows
    state the store does not have.
    """

    def __init__(self):
        self._models: List[LlmModelResponse] = []
        self._lock = asyncio.Lock()
        self._loaded = False

    async def initialize(self):
        """Load the catalog from the database at startup"""
        from llm_admin.database import async_session

        async with async_session() as session:
            await self.reload(session)

    async def reload(self, session: AsyncSession) -> int:
        """Replace the snapshot with the current visible model list."""
        from llm_admin.services.llm_models import list_visible_models

        models = await list_visible_models(session, None, require_auth=False)
        async with self._lock:
            self._models = models
            self._loaded = True

        logger.debug(f"Model catalog reloaded: {len(models)} models")
        return len(models)

    @property
    def is_loaded(self) -> bool:
        return self._loaded

    def get_models(self) -> List[LlmModelResponse]:
        return list(self._models)

    def count_by_provider(self) -> Dict[str, int]:
        counts: Dict[str, int] = {}
        for model in self._models:
            counts[model.provider_id] = counts.get(model.provider_id, 0) + 1
        return counts

    def clear(self):
        self._models = []
        self._loaded = False


# Singleton instance
model_catalog = ModelCatalog()
