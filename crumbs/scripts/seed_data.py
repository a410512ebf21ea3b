# scripts/seed_data.py
import asyncio
from decimal import Decimal
from crumbs.core.db import init_db, close_db
from crumbs.core.exceptions import DuplicateItemError
from crumbs.core.tenancy import scoped
from crumbs.models.inventory import InventoryCategory, InventoryItem
from crumbs.models.recipe import Recipe
from crumbs.schemas.inventory import InventoryItemCreate
from crumbs.schemas.recipe import RecipeCreate, RecipeItemInput
from crumbs.schemas.settings import UserSettingsPayload
from crumbs.services import inventory_service, recipe_service, settings_service

DEMO_TENANT = "demo-bakery"

INVENTORY = [
    ("Flour", InventoryCategory.INGREDIENT, "Mill & Co", "2.50", "1000", "g"),
    ("Sugar", InventoryCategory.INGREDIENT, "Mill & Co", "1.80", "1000", "g"),
    ("Butter", InventoryCategory.INGREDIENT, None, "3.20", "250", "g"),
    ("Box", InventoryCategory.OTHER, "PackRight", "5.00", "20", "pcs"),
]

RECIPES = [
    ("Butter Cookies", {"Flour": "200", "Sugar": "80", "Butter": "100", "Box": "1"}),
    ("Shortbread", {"Flour": "300", "Sugar": "100", "Butter": "200", "Box": "1"}),
]


async def seed():
    await settings_service.update_settings(DEMO_TENANT, UserSettingsPayload(vat_rate="20", currency="EUR"))

    # Inventory (skip items that already exist, so the script can be rerun)
    for name, category, supplier, cost, quantity, unit in INVENTORY:
        try:
            item = await inventory_service.create_item(DEMO_TENANT, InventoryItemCreate(
                name=name, category=category, supplier=supplier,
                purchase_cost=Decimal(cost), purchase_quantity=Decimal(quantity), unit=unit,
            ))
            print("Inventory:", item.name, str(item.id))
        except DuplicateItemError:
            print("Inventory exists:", name)

    by_name = {i.name: i for i in await scoped(InventoryItem, DEMO_TENANT)}

    for name, lines in RECIPES:
        if await scoped(Recipe, DEMO_TENANT).filter(name=name).exists():
            print("Recipe exists:", name)
            continue
        recipe = await recipe_service.create_recipe(DEMO_TENANT, RecipeCreate(
            name=name,
            items=[RecipeItemInput(inventory_id=by_name[n].id, quantity=Decimal(q)) for n, q in lines.items()],
        ))
        print("Recipe:", recipe.name, str(recipe.id))

    print("Demo data seeded for tenant", DEMO_TENANT)


async def main():
    await init_db()
    await seed()
    await close_db()

if __name__ == "__main__":
    asyncio.run(main())
