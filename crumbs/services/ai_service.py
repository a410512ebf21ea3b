import logging
from decimal import Decimal, InvalidOperation
from typing import Dict, List
from crumbs.integrations.suggestions import SuggestionClient
from crumbs.models.inventory import InventoryCategory, InventoryItem
from crumbs.schemas.ai import (
    GeneratedRecipe,
    GeneratedRecipeLine,
    MarginOutput,
    MarginSuggestion,
    MarginSuggestionRequest,
    RecipeDraftOutput,
    SuggestedLine,
)
from crumbs.services import inventory_service

log = logging.getLogger("crumbs.ai")


def _inventory_listing(items: List[InventoryItem]) -> str:
    lines = [f'- ID: "{i.id}", Name: "{i.name}", Unit: "{i.unit}"' for i in items]
    return "\n".join(lines) or "None available"


def build_recipe_prompt(inventory: List[InventoryItem]) -> str:
    ingredients = [i for i in inventory if i.category == InventoryCategory.INGREDIENT]
    others = [i for i in inventory if i.category == InventoryCategory.OTHER]
    return f"""Generate a creative food recipe using ONLY items from these lists.

INGREDIENTS (food items):
{_inventory_listing(ingredients)}

OTHERS (packaging, labels, etc.):
{_inventory_listing(others)}

Rules:
1. Use ONLY the exact IDs provided above
2. Quantities can be decimals (e.g. "0.5", "1.5", "100", "2")
3. Be creative with the recipe name
4. Write clear cooking instructions as separate steps

Answer with a JSON object with keys "name" (string), "steps" (array of strings),
"ingredients" and "others" (arrays of {{"inventoryId": string, "quantity": string}})."""


def _keep_known_lines(lines: List[SuggestedLine], allowed: Dict[str, InventoryItem]) -> List[GeneratedRecipeLine]:
    """Drops lines that reference unknown inventory or carry a non-positive quantity."""
    kept = []
    for line in lines:
        if line.inventoryId not in allowed:
            log.warning(f"Dropping suggested line for unknown inventory id {line.inventoryId!r}")
            continue
        try:
            quantity = Decimal(line.quantity.strip())
        except InvalidOperation:
            log.warning(f"Dropping suggested line with quantity {line.quantity!r}")
            continue
        if not quantity.is_finite() or quantity <= 0:
            continue
        kept.append(GeneratedRecipeLine(inventory_id=allowed[line.inventoryId].id, quantity=quantity))
    return kept


async def generate_recipe(tenant_id: str, client: SuggestionClient) -> GeneratedRecipe:
    """Asks the model for a recipe draft built from the tenant's inventory."""
    inventory = await inventory_service.list_items(tenant_id)
    draft = await client.generate(build_recipe_prompt(inventory), RecipeDraftOutput)

    by_category = {
        category: {str(i.id): i for i in inventory if i.category == category}
        for category in InventoryCategory
    }
    instructions = "\n".join(f"{n}. {step}" for n, step in enumerate(draft.steps, start=1))
    return GeneratedRecipe(
        name=draft.name,
        instructions=instructions,
        ingredients=_keep_known_lines(draft.ingredients, by_category[InventoryCategory.INGREDIENT]),
        others=_keep_known_lines(draft.others, by_category[InventoryCategory.OTHER]),
    )


def build_margin_prompt(request: MarginSuggestionRequest) -> str:
    ingredients = ", ".join(request.ingredients) or "not listed"
    return f"""You are pricing a product for a small food-production business.

Product: {request.name}
Production cost per unit: {request.total_cost}
Ingredients: {ingredients}

Suggest a target profit margin as a percentage of the selling price
(0 or more and below 100) and explain the reasoning in one or two sentences.
Answer with a JSON object with keys "suggestedMargin" (number) and "reasoning" (string)."""


async def suggest_margin(request: MarginSuggestionRequest, client: SuggestionClient) -> MarginSuggestion:
    """Returns a margin suggestion; out-of-range answers fail validation upstream."""
    answer = await client.generate(build_margin_prompt(request), MarginOutput, temperature=0.3)
    return MarginSuggestion(suggested_margin=answer.suggestedMargin, reasoning=answer.reasoning)
