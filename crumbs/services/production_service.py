"""
Production batch engine.

A batch asks for whole units of one or more recipes. The stock needed by the
whole batch is summed per inventory item before anything is checked, so two
recipes sharing an ingredient cannot each pass against the same stock. The
batch is then validated and committed inside one transaction with the touched
inventory rows locked: either every recipe is produced or nothing changes.

Each produced recipe gets its own ProductionLog with a snapshot line per
deduction. Undo puts back exactly what those lines recorded.
"""
import logging
from decimal import Decimal
from typing import Dict, Iterable, List, Sequence, Tuple
from uuid import UUID
from tortoise.transactions import in_transaction
from crumbs.core.config import PRODUCTION_HISTORY_LIMIT
from crumbs.core.exceptions import InsufficientStockError, InvalidInputError, NotFoundError
from crumbs.core.tenancy import scoped
from crumbs.models.inventory import InventoryItem
from crumbs.models.production import ProductionLog, ProductionLogItem
from crumbs.models.recipe import Recipe, RecipeItem
from crumbs.schemas.production import ProductionBatchItem, ProductionResult

log = logging.getLogger("crumbs.production")

# (units requested, [(inventory id, quantity per unit), ...])
PlanLine = Tuple[int, Sequence[Tuple[str, Decimal]]]


def plan_deductions(lines: Iterable[PlanLine]) -> Dict[str, Decimal]:
    """Aggregates the stock a batch needs, keyed by inventory id."""
    plan: Dict[str, Decimal] = {}
    for units, recipe_lines in lines:
        for inventory_id, per_unit in recipe_lines:
            plan[inventory_id] = plan.get(inventory_id, Decimal("0")) + Decimal(per_unit) * units
    return plan


def _validate_request(items: List[ProductionBatchItem]) -> None:
    if not items:
        raise InvalidInputError("No items to produce")
    for item in items:
        if item.quantity <= 0:
            raise InvalidInputError(f"Quantity must be a positive whole number (recipe {item.recipe_id})")


async def execute_production_batch(tenant_id: str, items: List[ProductionBatchItem]) -> ProductionResult:
    """
    Produces every requested recipe or none of them.
    Raises NotFoundError for an unknown recipe or inventory row,
    InvalidInputError for a recipe without lines and
    InsufficientStockError when the aggregated need exceeds stock.
    """
    _validate_request(items)

    async with in_transaction() as conn:
        # 1. Load the recipes and their lines as they are right now
        recipes: List[Tuple[ProductionBatchItem, Recipe, List[RecipeItem]]] = []
        for item in items:
            recipe = await scoped(Recipe, tenant_id).using_db(conn).get_or_none(id=item.recipe_id)
            if not recipe:
                raise NotFoundError(f"Recipe not found: {item.recipe_id}")
            recipe_lines = await RecipeItem.filter(recipe_id=recipe.id).using_db(conn)
            # Lines disappear when their inventory item is deleted
            if not recipe_lines:
                raise InvalidInputError(f'Recipe "{recipe.name}" has no items to produce')
            recipes.append((item, recipe, recipe_lines))

        # 2. Sum the deductions of the whole batch per inventory item
        plan = plan_deductions(
            (item.quantity, [(str(line.inventory_id), line.quantity) for line in lines])
            for item, _, lines in recipes
        )

        # 3. Lock the touched rows, then check every aggregated deduction
        locked = await (
            scoped(InventoryItem, tenant_id)
            .filter(id__in=list(plan.keys()))
            .using_db(conn)
            .select_for_update()
        )
        inv_map = {str(inv.id): inv for inv in locked}

        for inventory_id, needed in plan.items():
            inv = inv_map.get(inventory_id)
            if not inv:
                raise NotFoundError(f"Inventory item not found: {inventory_id}")
            if inv.stock < needed:
                log.warning(f"Batch rejected for tenant {tenant_id}: {inv.name} needs {needed}, has {inv.stock}.")
                raise InsufficientStockError(inv.name, needed, inv.stock, inv.unit)

        # 4. Commit: one log per recipe, each line deducts that recipe's own share
        log_ids: List[UUID] = []
        for item, recipe, recipe_lines in recipes:
            production_log = await ProductionLog.create(
                user_id=tenant_id,
                recipe_id=recipe.id,
                recipe_name=recipe.name,
                quantity=Decimal(item.quantity),
                using_db=conn,
            )
            for line in recipe_lines:
                inv = inv_map[str(line.inventory_id)]
                deduct = line.quantity * item.quantity
                await ProductionLogItem.create(
                    production_log_id=production_log.id,
                    inventory_id=inv.id,
                    inventory_name=inv.name,
                    unit=inv.unit,
                    quantity_deducted=deduct,
                    using_db=conn,
                )
                inv.stock -= deduct
                await inv.save(update_fields=["stock", "updated_at"], using_db=conn)
            log_ids.append(production_log.id)

    log.info(f"Production batch of {len(items)} recipe(s) committed for tenant {tenant_id}: {log_ids}")
    return ProductionResult(success=True, log_ids=log_ids)


async def list_production_logs(tenant_id: str, limit: int = PRODUCTION_HISTORY_LIMIT) -> List[ProductionLog]:
    """Newest-first production history with the deduction lines of each log."""
    return await (
        scoped(ProductionLog, tenant_id)
        .order_by("-created_at")
        .limit(limit)
        .prefetch_related("items")
    )


async def undo_production(tenant_id: str, log_id: UUID) -> None:
    """
    Reverses one production log: re-adds each recorded deduction to the
    inventory rows that still exist, then deletes the log and its lines.
    Uses the recorded amounts, not the current recipe definition.
    """
    async with in_transaction() as conn:
        production_log = await scoped(ProductionLog, tenant_id).using_db(conn).get_or_none(id=log_id)
        if not production_log:
            raise NotFoundError(f"Production log not found: {log_id}")

        lines = await ProductionLogItem.filter(production_log_id=production_log.id).using_db(conn)
        inventory_ids = [str(line.inventory_id) for line in lines if line.inventory_id]
        locked = await (
            scoped(InventoryItem, tenant_id)
            .filter(id__in=inventory_ids)
            .using_db(conn)
            .select_for_update()
        ) if inventory_ids else []
        inv_map = {str(inv.id): inv for inv in locked}

        for line in lines:
            inv = inv_map.get(str(line.inventory_id))
            if inv:
                inv.stock += line.quantity_deducted
                await inv.save(update_fields=["stock", "updated_at"], using_db=conn)

        await ProductionLogItem.filter(production_log_id=production_log.id).using_db(conn).delete()
        await production_log.delete(using_db=conn)

    log.info(f"Production log {log_id} ({production_log.recipe_name}) undone for tenant {tenant_id}.")
