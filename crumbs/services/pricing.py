"""
Read-time recipe costing.

Nothing computed here is persisted: costs follow the current purchase prices
of the inventory items, the recipe's target margin and the tenant's VAT rate.
All arithmetic stays in Decimal; results are rounded half-up to cents.
"""
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Optional
from uuid import UUID
from crumbs.models.inventory import InventoryCategory
from crumbs.schemas.recipe import RecipeCosting
from crumbs.services import recipe_service, settings_service

CENT = Decimal("0.01")
HUNDRED = Decimal("100")


def to_decimal(value: Optional[object]) -> Decimal:
    """Parses a stored percentage/amount; empty or unparsable values count as zero."""
    if value is None or value == "":
        return Decimal("0")
    try:
        parsed = Decimal(str(value))
    except InvalidOperation:
        return Decimal("0")
    return parsed if parsed.is_finite() else Decimal("0")


def unit_cost(purchase_cost: Decimal, purchase_quantity: Decimal) -> Decimal:
    if not purchase_quantity:
        return Decimal("0")
    return Decimal(purchase_cost) / Decimal(purchase_quantity)


def price_before_vat(total_cost: Decimal, margin: Decimal) -> Decimal:
    """Cost marked up so that `margin` percent of the price is profit."""
    if margin >= HUNDRED:
        raise ValueError("Margin must be below 100")
    if margin > 0:
        return total_cost / (1 - margin / HUNDRED)
    return total_cost


def compute_costing(recipe, vat_rate: object = "", currency: str = "") -> RecipeCosting:
    """Prices a Recipe whose items have their inventory rows loaded."""
    ingredients = Decimal("0")
    others = Decimal("0")
    for item in recipe.items:
        inv = item.inventory
        line = Decimal(item.quantity) * unit_cost(inv.purchase_cost, inv.purchase_quantity)
        if inv.category == InventoryCategory.INGREDIENT:
            ingredients += line
        else:
            others += line

    total = ingredients + others
    margin = to_decimal(recipe.target_margin)
    rate = to_decimal(vat_rate)
    before_vat = price_before_vat(total, margin)
    final = before_vat * (1 + rate / HUNDRED) if recipe.has_vat else before_vat

    return RecipeCosting(
        recipe_id=recipe.id,
        currency=currency,
        vat_rate=rate,
        ingredients_subtotal=ingredients.quantize(CENT, ROUND_HALF_UP),
        others_subtotal=others.quantize(CENT, ROUND_HALF_UP),
        total_cost=total.quantize(CENT, ROUND_HALF_UP),
        target_margin=margin,
        has_vat=recipe.has_vat,
        price_before_vat=before_vat.quantize(CENT, ROUND_HALF_UP),
        final_price=final.quantize(CENT, ROUND_HALF_UP),
        profit=(before_vat - total).quantize(CENT, ROUND_HALF_UP),
    )


async def get_recipe_costing(tenant_id: str, recipe_id: UUID) -> RecipeCosting:
    recipe = await recipe_service.get_recipe(tenant_id, recipe_id)
    settings = await settings_service.get_settings(tenant_id)
    return compute_costing(recipe, settings.vat_rate, settings.currency)
