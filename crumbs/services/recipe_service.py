import logging
from typing import Iterable, List
from uuid import UUID
from tortoise.transactions import in_transaction
from crumbs.core.exceptions import NotFoundError
from crumbs.core.tenancy import scoped
from crumbs.models.inventory import InventoryItem
from crumbs.models.production import ProductionLog
from crumbs.models.recipe import Recipe, RecipeItem
from crumbs.schemas.recipe import RecipeCreate, RecipeItemInput, RecipeReplace, RecipeUpdate

log = logging.getLogger("crumbs.recipes")


async def _check_inventory_refs(tenant_id: str, items: Iterable[RecipeItemInput], conn=None) -> None:
    """Every recipe line must point at an inventory item owned by the same tenant."""
    wanted = {str(item.inventory_id) for item in items}
    found = await scoped(InventoryItem, tenant_id).filter(id__in=list(wanted)).using_db(conn).values_list("id", flat=True)
    missing = wanted - {str(pk) for pk in found}
    if missing:
        raise NotFoundError(f"Inventory item not found: {', '.join(sorted(missing))}")


async def _insert_items(recipe: Recipe, items: Iterable[RecipeItemInput], conn) -> None:
    await RecipeItem.bulk_create(
        [RecipeItem(recipe_id=recipe.id, inventory_id=it.inventory_id, quantity=it.quantity) for it in items],
        using_db=conn,
    )


async def create_recipe(tenant_id: str, data: RecipeCreate) -> Recipe:
    """Creates a recipe with its initial item list (at least one line)."""
    async with in_transaction() as conn:
        await _check_inventory_refs(tenant_id, data.items, conn)
        recipe = await Recipe.create(
            user_id=tenant_id,
            name=data.name,
            instructions=data.instructions,
            image=data.image,
            using_db=conn,
        )
        await _insert_items(recipe, data.items, conn)
    log.info(f"Recipe {recipe.id} ({recipe.name}) created with {len(data.items)} items.")
    return await get_recipe(tenant_id, recipe.id)


async def list_recipes(tenant_id: str) -> List[Recipe]:
    """All recipes of the tenant, oldest first, each with items joined to inventory."""
    return await scoped(Recipe, tenant_id).order_by("created_at").prefetch_related("items__inventory")


async def list_recipes_for_production(tenant_id: str) -> List[Recipe]:
    """Same as list_recipes but ordered by name for the production picker."""
    return await scoped(Recipe, tenant_id).order_by("name").prefetch_related("items__inventory")


async def get_recipe(tenant_id: str, recipe_id: UUID) -> Recipe:
    recipe = await scoped(Recipe, tenant_id).get_or_none(id=recipe_id).prefetch_related("items__inventory")
    if not recipe:
        raise NotFoundError(f"Recipe not found: {recipe_id}")
    return recipe


async def update_recipe(tenant_id: str, recipe_id: UUID, patch: RecipeUpdate) -> Recipe:
    """Updates metadata only (name, instructions, image, margin, VAT flag)."""
    changes = {k: v for k, v in patch.model_dump(exclude_unset=True).items()
               if v is not None or k in ("instructions", "image")}

    async with in_transaction() as conn:
        recipe = await scoped(Recipe, tenant_id).using_db(conn).get_or_none(id=recipe_id)
        if not recipe:
            raise NotFoundError(f"Recipe not found: {recipe_id}")
        if changes:
            recipe.update_from_dict(changes)
            await recipe.save(update_fields=[*changes.keys(), "updated_at"], using_db=conn)

    log.info(f"Recipe {recipe_id} updated ({', '.join(changes) or 'no changes'}).")
    return await get_recipe(tenant_id, recipe_id)


async def update_recipe_with_items(tenant_id: str, recipe_id: UUID, data: RecipeReplace) -> Recipe:
    """
    Replaces the recipe's metadata and its whole item list.
    Existing lines are deleted and the supplied ones inserted; no diffing.
    Omitted instructions/image are cleared.
    """
    async with in_transaction() as conn:
        recipe = await scoped(Recipe, tenant_id).using_db(conn).select_for_update().get_or_none(id=recipe_id)
        if not recipe:
            raise NotFoundError(f"Recipe not found: {recipe_id}")
        await _check_inventory_refs(tenant_id, data.items, conn)

        recipe.name = data.name
        recipe.instructions = data.instructions
        recipe.image = data.image
        await recipe.save(update_fields=["name", "instructions", "image", "updated_at"], using_db=conn)

        await RecipeItem.filter(recipe_id=recipe.id).using_db(conn).delete()
        await _insert_items(recipe, data.items, conn)

    log.info(f"Recipe {recipe_id} replaced with {len(data.items)} items.")
    return await get_recipe(tenant_id, recipe_id)


async def delete_recipe(tenant_id: str, recipe_id: UUID) -> None:
    """Deletes a recipe and its lines. Production logs keep the recipe name snapshot."""
    async with in_transaction() as conn:
        recipe = await scoped(Recipe, tenant_id).using_db(conn).get_or_none(id=recipe_id)
        if not recipe:
            raise NotFoundError(f"Recipe not found: {recipe_id}")
        await RecipeItem.filter(recipe_id=recipe.id).using_db(conn).delete()
        await ProductionLog.filter(recipe_id=recipe.id).using_db(conn).update(recipe_id=None)
        await recipe.delete(using_db=conn)
    log.info(f"Recipe {recipe_id} deleted for tenant {tenant_id}.")
