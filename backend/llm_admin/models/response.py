from datetime import datetime
from pydantic import BaseModel
from typing import Literal, Optional


class ActionResult(BaseModel):
    """Soft result for writes that can conflict with existing rows."""

    status: Literal["success", "fail"]
    message: Optional[str] = None

    @classmethod
    def success(cls, message: Optional[str] = None) -> "ActionResult":
        return cls(status="success", message=message)

    @classmethod
    def fail(cls, message: str) -> "ActionResult":
        return cls(status="fail", message=message)


class OrderResult(ActionResult):
    updated: int = 0


class ProviderSummary(BaseModel):
    """Provider fields that are safe to show to any caller (no API key)."""

    provider: str
    provider_name: str
    is_active: bool
    api_style: str
    logo: Optional[str] = None

    class Config:
        from_attributes = True


class ProviderSettingResponse(ProviderSummary):
    """Full provider row, including credentials (admin only)."""

    endpoint: Optional[str] = None
    apikey: Optional[str] = None
    order: int
    type: str


class ProviderDetail(BaseModel):
    id: str
    provider_name: str
    api_style: str
    provider_logo: Optional[str] = None
    status: bool
    type: str

    @classmethod
    def from_db(cls, db_provider) -> "ProviderDetail":
        """Create response from database model."""
        return cls(
            id=db_provider.provider,
            provider_name=db_provider.provider_name,
            api_style=db_provider.api_style,
            provider_logo=db_provider.logo or None,
            status=db_provider.is_active or False,
            type=db_provider.type or "default",
        )


class LlmModelResponse(BaseModel):
    id: int
    name: str
    display_name: str
    max_tokens: Optional[int] = None
    support_vision: bool
    support_tool: bool
    selected: bool
    provider_id: str
    provider_name: str
    type: str
    order: int
    created_at: datetime
    updated_at: datetime
    provider_logo: Optional[str] = None
    api_style: str

    @classmethod
    def from_db(cls, db_model, db_provider, use_provider_name: bool = False) -> "LlmModelResponse":
        """Merge a model row with its provider's display fields.

        use_provider_name takes the current name from the provider row instead
        of the copy stored on the model.
        """
        return cls(
            id=db_model.id,
            name=db_model.name,
            display_name=db_model.display_name,
            max_tokens=db_model.max_tokens,
            support_vision=db_model.support_vision,
            support_tool=db_model.support_tool,
            selected=db_model.selected,
            provider_id=db_model.provider_id,
            provider_name=db_provider.provider_name if use_provider_name else db_model.provider_name,
            type=db_model.type,
            order=db_model.order,
            created_at=db_model.created_at,
            updated_at=db_model.updated_at,
            provider_logo=db_provider.logo or "",
            api_style=db_provider.api_style,
        )
