"""Tests for model catalog writes."""

import pytest
from sqlalchemy import select

from llm_admin.database import LlmModel
from llm_admin.models.request import CustomModelPayload, ModelOrderItem, ProviderModelRef
from llm_admin.services.llm_models import (
    DEFAULT_MODEL_ORDER,
    add_custom_model,
    delete_custom_model,
    get_model,
    list_models,
    save_models_order,
    set_model_selected,
    set_model_selected_for_provider,
    update_custom_model,
)

pytestmark = pytest.mark.anyio


def payload(name, provider_id="p1", **fields):
    fields.setdefault("display_name", name.upper())
    return CustomModelPayload(name=name, provider_id=provider_id, provider_name=provider_id.title(), **fields)


async def count_models(session, provider_id, name):
    result = await session.execute(
        select(LlmModel).where(LlmModel.provider_id == provider_id, LlmModel.name == name)
    )
    return len(result.scalars().all())


async def test_add_custom_model(session, make_provider):
    await make_provider("p1")
    result = await add_custom_model(session, payload("m1", max_tokens=4096, support_vision=True))
    assert result.status == "success"

    model = await get_model(session, "p1", "m1")
    assert model.type == "custom"
    assert model.max_tokens == 4096
    assert model.support_vision is True
    assert model.selected is True


async def test_add_custom_model_twice_keeps_one_row(session, make_provider):
    await make_provider("p1")
    await add_custom_model(session, payload("m1"))
    result = await add_custom_model(session, payload("m1", display_name="Other"))

    assert result.status == "fail"
    assert result.message == "A model with the same name already exists"
    assert await count_models(session, "p1", "m1") == 1


async def test_same_name_allowed_under_different_providers(session, make_provider):
    await make_provider("p1")
    await make_provider("p2")
    assert (await add_custom_model(session, payload("shared", "p1"))).status == "success"
    assert (await add_custom_model(session, payload("shared", "p2"))).status == "success"


async def test_update_custom_model_renames(session, make_provider, make_model):
    await make_provider("p1")
    await make_model("p1", "old", type="default")

    result = await update_custom_model(session, "old", payload("new", max_tokens=2048))

    assert result.status == "success"
    assert await get_model(session, "p1", "old") is None
    renamed = await get_model(session, "p1", "new")
    assert renamed.max_tokens == 2048
    assert renamed.type == "custom"


async def test_update_missing_model_fails_without_writing(session, make_provider):
    await make_provider("p1")
    result = await update_custom_model(session, "gone", payload("gone"))

    assert result.status == "fail"
    assert result.message == "The model has been deleted"
    assert await list_models(session) == []


async def test_update_rename_onto_existing_name_fails(session, make_provider, make_model):
    await make_provider("p1")
    await make_model("p1", "a", display_name="A")
    await make_model("p1", "b", display_name="B")

    result = await update_custom_model(session, "a", payload("b"))

    assert result.status == "fail"
    assert (await get_model(session, "p1", "a")).display_name == "A"
    assert (await get_model(session, "p1", "b")).display_name == "B"


async def test_set_model_selected_for_provider_inserts_then_updates(session, make_provider):
    await make_provider("p1")
    ref = ProviderModelRef(name="gpt-x", provider_id="p1", provider_name="P1")

    created = await set_model_selected_for_provider(session, ref, True)
    assert created.type == "default"
    assert created.order == DEFAULT_MODEL_ORDER
    assert created.display_name == "gpt-x"
    assert created.selected is True

    updated = await set_model_selected_for_provider(session, ref, False)
    assert updated.id == created.id
    assert updated.selected is False
    assert await count_models(session, "p1", "gpt-x") == 1


async def test_set_model_selected_for_provider_leaves_other_providers(session, make_provider, make_model):
    await make_provider("p1")
    await make_provider("p2")
    await make_model("p1", "shared")
    await make_model("p2", "shared")

    ref = ProviderModelRef(name="shared", provider_id="p1", provider_name="P1")
    await set_model_selected_for_provider(session, ref, False)

    session.expire_all()
    assert (await get_model(session, "p1", "shared")).selected is False
    assert (await get_model(session, "p2", "shared")).selected is True


async def test_set_model_selected_by_name_hits_every_provider(session, make_provider, make_model):
    await make_provider("p1")
    await make_provider("p2")
    await make_model("p1", "shared")
    await make_model("p2", "shared")

    assert await set_model_selected(session, "shared", False) == 2
    assert await set_model_selected(session, "shared", True, provider_id="p2") == 1

    session.expire_all()
    assert (await get_model(session, "p1", "shared")).selected is False
    assert (await get_model(session, "p2", "shared")).selected is True


async def test_delete_custom_model_scoped_to_provider(session, make_provider, make_model):
    await make_provider("p1")
    await make_provider("p2")
    await make_model("p1", "shared")
    await make_model("p2", "shared")

    await delete_custom_model(session, "shared", provider_id="p1")
    assert [m.provider_id for m in await list_models(session)] == ["p2"]

    await delete_custom_model(session, "shared")
    assert await list_models(session) == []


async def test_delete_unknown_model_succeeds(session):
    assert (await delete_custom_model(session, "ghost")).status == "success"


async def test_list_models_filtered_and_ordered(session, make_provider, make_model):
    await make_provider("p1", logo="/logo.png")
    await make_provider("p2")
    await make_model("p1", "late", order=5)
    await make_model("p1", "early", order=1)
    await make_model("p2", "other", order=0)

    models = await list_models(session, "p1")
    assert [m.name for m in models] == ["early", "late"]
    assert models[0].provider_logo == "/logo.png"
    assert models[0].api_style == "openai"


async def test_save_models_order(session, make_provider, make_model):
    await make_provider("p1")
    await make_model("p1", "a", order=1)
    await make_model("p1", "b", order=2)

    result = await save_models_order(session, "p1", [
        ModelOrderItem(model_id="a", order=2),
        ModelOrderItem(model_id="b", order=1),
    ])

    assert result.updated == 2
    assert [m.name for m in await list_models(session, "p1")] == ["b", "a"]


async def test_save_models_order_is_all_or_nothing(session_factory, make_provider, make_model):
    await make_provider("p1")
    await make_model("p1", "a", order=1)
    await make_model("p1", "b", order=2)

    async with session_factory() as session:
        with pytest.raises(Exception):
            await save_models_order(session, "p1", [
                ModelOrderItem(model_id="a", order=7),
                ModelOrderItem(model_id="b", order=2**63),
            ])

    async with session_factory() as session:
        assert [(m.name, m.order) for m in await list_models(session, "p1")] == [("a", 1), ("b", 2)]
