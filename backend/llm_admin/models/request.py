from pydantic import BaseModel, Field, ConfigDict
from typing import Optional, Literal

ApiStyle = Literal["openai", "openai_response", "claude", "gemini"]


class ProviderSettingsUpdate(BaseModel):
    """Partial provider settings; only the fields that were sent are written."""
    provider_name: Optional[str] = Field(None, max_length=100)
    api_style: Optional[ApiStyle] = None
    endpoint: Optional[str] = Field(None, max_length=500)
    apikey: Optional[str] = None
    is_active: Optional[bool] = None
    logo: Optional[str] = Field(None, max_length=500)
    order: Optional[int] = None


class CustomProviderCreate(BaseModel):
    provider: str = Field(..., min_length=1, max_length=100)
    provider_name: str = Field(..., min_length=1, max_length=100)
    endpoint: str = Field(..., min_length=1, max_length=500)
    api_style: ApiStyle = "openai"
    apikey: Optional[str] = None
    logo: Optional[str] = Field(None, max_length=500)

    model_config = ConfigDict(
        json_schema_extra={
            "examples": [
                {
                    "provider": "my-proxy",
                    "provider_name": "My Proxy",
                    "endpoint": "https://llm.example.com/v1",
                    "api_style": "openai",
                    "apikey": "sk-...",
                }
            ]
        }
    )


class ProviderOrderItem(BaseModel):
    provider_id: str
    order: int


class ModelOrderItem(BaseModel):
    model_id: str  # Model name within the provider
    order: int

    model_config = ConfigDict(protected_namespaces=())


class ModelSelectRequest(BaseModel):
    name: str
    selected: bool
    provider_id: Optional[str] = None  # Narrows the update to one provider


class ProviderModelRef(BaseModel):
    """A provider's model as listed in the admin UI, possibly not stored yet."""
    name: str = Field(..., min_length=1, max_length=200)
    display_name: Optional[str] = Field(None, max_length=200)
    provider_id: str
    provider_name: str


class ProviderModelSelectRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=200)
    display_name: Optional[str] = Field(None, max_length=200)
    selected: bool


class CustomModelPayload(BaseModel):
    name: str = Field(..., min_length=1, max_length=200)
    display_name: str = Field(..., min_length=1, max_length=200)
    max_tokens: Optional[int] = Field(None, ge=0)
    support_vision: bool = False
    support_tool: bool = False
    selected: bool = True
    provider_id: str = Field(..., min_length=1)
    provider_name: str = Field(..., min_length=1)


class CustomModelUpdateRequest(CustomModelPayload):
    old_name: str = Field(..., min_length=1, max_length=200)
