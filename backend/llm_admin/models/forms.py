"""
Form contract behind the admin "edit custom model" dialog.

The dialog shows max tokens in units of 1K (1024 tokens); the database
stores raw token counts.
"""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from llm_admin.models.request import CustomModelPayload

TOKENS_PER_K = 1024
DEFAULT_MAX_TOKENS_K = 32


class EditModelForm(BaseModel):
    old_model_id: str = Field(..., min_length=1)
    model_id: str = Field(..., min_length=1, max_length=200, description="Model ID")
    model_display_name: str = Field(..., min_length=1, max_length=200, description="Display name")
    model_max_tokens: float = Field(..., ge=0, description="Max tokens, in K")
    model_vision_support: bool = False
    model_tool_support: bool = False

    model_config = ConfigDict(protected_namespaces=())

    @classmethod
    def from_model(cls, db_model) -> "EditModelForm":
        """Initial field values for an existing model."""
        if isinstance(db_model.max_tokens, int):
            max_tokens_k = db_model.max_tokens / TOKENS_PER_K
        else:
            max_tokens_k = DEFAULT_MAX_TOKENS_K
        return cls(
            old_model_id=db_model.name,
            model_id=db_model.name,
            model_display_name=db_model.display_name,
            model_max_tokens=max_tokens_k,
            model_vision_support=bool(db_model.support_vision),
            model_tool_support=bool(db_model.support_tool),
        )

    def max_tokens(self) -> int:
        return int(round(self.model_max_tokens * TOKENS_PER_K))

    def to_payload(self, provider_id: str, provider_name: str) -> CustomModelPayload:
        """Submission payload for update_custom_model."""
        return CustomModelPayload(
            name=self.model_id,
            display_name=self.model_display_name,
            max_tokens=self.max_tokens(),
            support_vision=self.model_vision_support,
            support_tool=self.model_tool_support,
            selected=True,
            provider_id=provider_id,
            provider_name=provider_name,
        )


class EditModelFormResponse(BaseModel):
    form: EditModelForm
    provider_id: str
    provider_name: str
    api_style: str
    provider_logo: Optional[str] = None
