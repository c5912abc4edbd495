"""Tests for provider reads and writes."""

import pytest
from fastapi import HTTPException

from llm_admin.database import LlmSetting
from llm_admin.models.request import (
    CustomProviderCreate,
    ProviderOrderItem,
    ProviderSettingsUpdate,
)
from llm_admin.services.providers import (
    add_custom_provider,
    delete_custom_provider,
    get_provider_by_id,
    list_active_providers,
    list_all_provider_settings,
    list_providers,
    save_provider,
    save_provider_order,
)

pytestmark = pytest.mark.anyio


async def test_save_provider_creates_then_updates_same_row(session):
    await save_provider(session, "p1", ProviderSettingsUpdate(endpoint="https://a.example/v1"))
    await save_provider(session, "p1", ProviderSettingsUpdate(apikey="sk-1", is_active=True))

    rows = await list_all_provider_settings(session)
    assert len(rows) == 1
    assert rows[0].provider == "p1"
    assert rows[0].endpoint == "https://a.example/v1"
    assert rows[0].apikey == "sk-1"
    assert rows[0].is_active is True


async def test_save_provider_defaults_name_to_untitled(session):
    provider = await save_provider(session, "new", ProviderSettingsUpdate())
    assert provider.provider_name == "Untitled"
    assert provider.type == "default"


async def test_save_provider_ignores_null_for_required_columns(session, make_provider):
    await make_provider("p1", provider_name="Keep Me")
    provider = await save_provider(session, "p1", ProviderSettingsUpdate(provider_name=None, logo=None))
    assert provider.provider_name == "Keep Me"


async def test_list_providers_ordered(session, make_provider):
    await make_provider("b", order=2)
    await make_provider("a", order=1)
    await make_provider("c", order=3, is_active=False)

    assert [p.provider for p in await list_providers(session)] == ["a", "b", "c"]
    assert [p.provider for p in await list_active_providers(session)] == ["a", "b"]


async def test_get_provider_by_id(session, make_provider):
    await make_provider("p1", provider_name="Provider One", logo="", type="custom")
    detail = await get_provider_by_id(session, "p1")
    assert detail.id == "p1"
    assert detail.provider_name == "Provider One"
    assert detail.provider_logo is None
    assert detail.status is True
    assert detail.type == "custom"


async def test_get_provider_by_id_missing(session):
    with pytest.raises(HTTPException) as exc:
        await get_provider_by_id(session, "nope")
    assert exc.value.status_code == 404


async def test_add_custom_provider(session):
    payload = CustomProviderCreate(
        provider="proxy", provider_name="Proxy", endpoint="https://proxy.example/v1"
    )
    result = await add_custom_provider(session, payload)
    assert result.status == "success"

    row = await session.get(LlmSetting, "proxy")
    assert row.type == "custom"
    assert row.is_active is True
    assert row.api_style == "openai"


async def test_add_custom_provider_duplicate_is_soft_failure(session, make_provider):
    await make_provider("proxy", provider_name="Original")
    payload = CustomProviderCreate(
        provider="proxy", provider_name="Other", endpoint="https://other.example/v1"
    )
    result = await add_custom_provider(session, payload)

    assert result.status == "fail"
    assert result.message == "A provider with the same ID already exists"
    assert (await session.get(LlmSetting, "proxy")).provider_name == "Original"


async def test_delete_custom_provider(session, make_provider):
    await make_provider("proxy")
    assert (await delete_custom_provider(session, "proxy")).status == "success"
    assert await list_providers(session) == []


async def test_delete_unknown_provider_succeeds(session):
    assert (await delete_custom_provider(session, "ghost")).status == "success"


async def test_save_provider_order(session, make_provider):
    await make_provider("a", order=1)
    await make_provider("b", order=2)

    result = await save_provider_order(session, [
        ProviderOrderItem(provider_id="a", order=2),
        ProviderOrderItem(provider_id="b", order=1),
        ProviderOrderItem(provider_id="ghost", order=9),
    ])

    assert result.status == "success"
    assert result.updated == 2
    assert [p.provider for p in await list_providers(session)] == ["b", "a"]


async def test_save_provider_order_is_all_or_nothing(session_factory, make_provider):
    await make_provider("a", order=1)
    await make_provider("b", order=2)

    async with session_factory() as session:
        with pytest.raises(Exception):
            await save_provider_order(session, [
                ProviderOrderItem(provider_id="a", order=5),
                # Out of SQLite INTEGER range, fails inside the transaction
                ProviderOrderItem(provider_id="b", order=2**63),
            ])

    async with session_factory() as session:
        orders = {p.provider: p.order for p in await list_providers(session)}
    assert orders == {"a": 1, "b": 2}
