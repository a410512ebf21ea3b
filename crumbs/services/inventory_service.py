import logging
from typing import List, Optional
from uuid import UUID
from tortoise.transactions import in_transaction
from crumbs.core.exceptions import DuplicateItemError, NotFoundError
from crumbs.core.tenancy import scoped
from crumbs.models.inventory import InventoryItem
from crumbs.models.production import ProductionLogItem
from crumbs.models.recipe import RecipeItem
from crumbs.schemas.inventory import AddStockRequest, InventoryItemCreate, InventoryItemUpdate

log = logging.getLogger("crumbs.inventory")


async def _ensure_unique(tenant_id: str, name: str, unit: str, exclude_id: Optional[UUID] = None, conn=None):
    """Rejects a second item with the same name (case-insensitive) and unit in one tenant."""
    query = scoped(InventoryItem, tenant_id).filter(name__iexact=name, unit=unit)
    if exclude_id is not None:
        query = query.exclude(id=exclude_id)
    if await query.using_db(conn).exists():
        raise DuplicateItemError(f'Item "{name}" with unit "{unit}" already exists.')


async def create_item(tenant_id: str, data: InventoryItemCreate) -> InventoryItem:
    """Creates an inventory item. Initial stock equals the purchase quantity."""
    async with in_transaction() as conn:
        await _ensure_unique(tenant_id, data.name, data.unit, conn=conn)
        item = await InventoryItem.create(
            user_id=tenant_id,
            name=data.name,
            category=data.category,
            supplier=data.supplier or None,
            purchase_cost=data.purchase_cost,
            purchase_quantity=data.purchase_quantity,
            unit=data.unit,
            stock=data.purchase_quantity,
            using_db=conn,
        )
    log.info(f"Inventory item {item.id} ({item.name}) created for tenant {tenant_id}.")
    return item


async def list_items(tenant_id: str) -> List[InventoryItem]:
    return await scoped(InventoryItem, tenant_id).order_by("created_at")


async def get_item(tenant_id: str, item_id: UUID) -> InventoryItem:
    item = await scoped(InventoryItem, tenant_id).get_or_none(id=item_id)
    if not item:
        raise NotFoundError(f"Inventory item not found: {item_id}")
    return item


async def update_item(tenant_id: str, item_id: UUID, patch: InventoryItemUpdate) -> InventoryItem:
    """Applies a partial patch. Fields left unset in the request are not touched."""
    changes = patch.model_dump(exclude_unset=True)
    # Explicit nulls only make sense for the supplier
    changes = {k: v for k, v in changes.items() if v is not None or k == "supplier"}

    async with in_transaction() as conn:
        item = await scoped(InventoryItem, tenant_id).using_db(conn).select_for_update().get_or_none(id=item_id)
        if not item:
            raise NotFoundError(f"Inventory item not found: {item_id}")

        new_name = changes.get("name", item.name)
        new_unit = changes.get("unit", item.unit)
        if new_name.lower() != item.name.lower() or new_unit != item.unit:
            await _ensure_unique(tenant_id, new_name, new_unit, exclude_id=item.id, conn=conn)

        if not changes:
            return item
        item.update_from_dict(changes)
        await item.save(update_fields=[*changes.keys(), "updated_at"], using_db=conn)

    log.info(f"Inventory item {item.id} updated ({', '.join(changes)}).")
    return item


async def delete_item(tenant_id: str, item_id: UUID) -> None:
    """
    Deletes the item together with the recipe lines that use it.
    Production history keeps its name/unit snapshot with the reference cleared.
    """
    async with in_transaction() as conn:
        item = await scoped(InventoryItem, tenant_id).using_db(conn).get_or_none(id=item_id)
        if not item:
            raise NotFoundError(f"Inventory item not found: {item_id}")
        await RecipeItem.filter(inventory_id=item.id).using_db(conn).delete()
        await ProductionLogItem.filter(inventory_id=item.id).using_db(conn).update(inventory_id=None)
        await item.delete(using_db=conn)
    log.info(f"Inventory item {item_id} deleted for tenant {tenant_id}.")


async def add_stock(tenant_id: str, item_id: UUID, data: AddStockRequest) -> InventoryItem:
    """Adds a positive delta to the current stock of one item."""
    async with in_transaction() as conn:
        # Lock the row so concurrent adds/deductions do not lose updates
        item = await scoped(InventoryItem, tenant_id).using_db(conn).select_for_update().get_or_none(id=item_id)
        if not item:
            raise NotFoundError(f"Inventory item not found: {item_id}")
        item.stock += data.quantity_to_add
        await item.save(update_fields=["stock", "updated_at"], using_db=conn)
    log.info(f"Added {data.quantity_to_add} {item.unit} to {item.name}; stock now {item.stock}.")
    return item
