# crumbs/models/__init__.py
from .inventory import InventoryItem, InventoryCategory
from .recipe import Recipe, RecipeItem
from .production import ProductionLog, ProductionLogItem
from .settings import UserSettings

# Export all models
__all__ = [
    "InventoryItem",
    "InventoryCategory",
    "Recipe",
    "RecipeItem",
    "ProductionLog",
    "ProductionLogItem",
    "UserSettings",
]
