import json
from decimal import Decimal
import httpx
import pytest
from crumbs.core.exceptions import UpstreamError
from crumbs.integrations.suggestions import SuggestionClient
from crumbs.models.inventory import InventoryCategory
from crumbs.schemas.ai import MarginSuggestionRequest
from crumbs.services.ai_service import build_recipe_prompt, generate_recipe, suggest_margin
from crumbs.services.inventory_service import list_items
from factories import make_item


def _gemini_client(answer, status_code=200, api_key="test-key", seen=None):
    """SuggestionClient whose provider replies with `answer` as the model's JSON text."""
    def handler(request: httpx.Request) -> httpx.Response:
        if seen is not None:
            seen.append(request)
        body = {"candidates": [{"content": {"parts": [{"text": json.dumps(answer)}]}}]}
        return httpx.Response(status_code, json=body)

    return SuggestionClient(api_key=api_key, model="test-model", base_url="http://ai.test",
                            transport=httpx.MockTransport(handler))


@pytest.mark.asyncio
async def test_generate_recipe_keeps_only_known_lines(db, tenant, other_tenant):
    flour = await make_item(tenant, name="Flour")
    box = await make_item(tenant, name="Box", unit="pcs", category=InventoryCategory.OTHER)
    foreign = await make_item(other_tenant, name="Sugar")
    answer = {
        "name": "Flour Cookies",
        "steps": ["Mix", "Bake"],
        "ingredients": [
            {"inventoryId": str(flour.id), "quantity": "250"},
            {"inventoryId": str(foreign.id), "quantity": "10"},  # other tenant
            {"inventoryId": str(box.id), "quantity": "1"},       # wrong category
            {"inventoryId": str(flour.id), "quantity": "lots"},
        ],
        "others": [
            {"inventoryId": str(box.id), "quantity": "1"},
            {"inventoryId": str(box.id), "quantity": "-2"},
        ],
    }
    seen = []

    draft = await generate_recipe(tenant, _gemini_client(answer, seen=seen))

    assert draft.name == "Flour Cookies"
    assert draft.instructions == "1. Mix\n2. Bake"
    assert [(line.inventory_id, line.quantity) for line in draft.ingredients] == [(flour.id, Decimal("250"))]
    assert [(line.inventory_id, line.quantity) for line in draft.others] == [(box.id, Decimal("1"))]
    assert seen[0].url.path == "/models/test-model:generateContent"
    assert seen[0].url.params["key"] == "test-key"


@pytest.mark.asyncio
async def test_recipe_prompt_lists_inventory_by_category(db, tenant):
    flour = await make_item(tenant, name="Flour")
    await make_item(tenant, name="Box", unit="pcs", category=InventoryCategory.OTHER)

    prompt = build_recipe_prompt(await list_items(tenant))

    ingredients_part, others_part = prompt.split("OTHERS")
    assert f'ID: "{flour.id}", Name: "Flour", Unit: "g"' in ingredients_part
    assert 'Name: "Box"' in others_part


@pytest.mark.asyncio
async def test_suggest_margin():
    client = _gemini_client({"suggestedMargin": 35, "reasoning": "Typical for baked goods."})

    suggestion = await suggest_margin(
        MarginSuggestionRequest(name="Cookies", total_cost=Decimal("0.75"), ingredients=["Flour"]), client
    )

    assert suggestion.suggested_margin == Decimal("35")
    assert suggestion.reasoning == "Typical for baked goods."


@pytest.mark.asyncio
async def test_out_of_range_margin_is_unusable():
    client = _gemini_client({"suggestedMargin": 120, "reasoning": "Greedy."})

    with pytest.raises(UpstreamError):
        await suggest_margin(MarginSuggestionRequest(name="Cookies", total_cost=Decimal("1")), client)


@pytest.mark.asyncio
async def test_provider_failure_is_upstream_error():
    client = _gemini_client({}, status_code=503)

    with pytest.raises(UpstreamError) as exc:
        await suggest_margin(MarginSuggestionRequest(name="Cookies", total_cost=Decimal("1")), client)
    assert exc.value.upstream_status == 503


@pytest.mark.asyncio
async def test_missing_api_key_is_upstream_error():
    seen = []
    client = _gemini_client({"suggestedMargin": 30, "reasoning": "ok"}, api_key="", seen=seen)

    with pytest.raises(UpstreamError, match="not configured"):
        await suggest_margin(MarginSuggestionRequest(name="Cookies", total_cost=Decimal("1")), client)
    assert seen == []
