from tortoise import fields, models
import uuid


class Recipe(models.Model):
    id = fields.UUIDField(primary_key=True, default=uuid.uuid4)
    user_id = fields.CharField(max_length=64)
    name = fields.CharField(max_length=255)
    instructions = fields.TextField(null=True)
    image = fields.TextField(null=True)  # data: URI
    # Percentage, 0 <= margin < 100 (price = cost / (1 - margin/100))
    target_margin = fields.DecimalField(max_digits=5, decimal_places=2, default=0)
    has_vat = fields.BooleanField(default=False)
    created_at = fields.DatetimeField(auto_now_add=True)
    updated_at = fields.DatetimeField(auto_now=True)

    class Meta:
        table = "recipes"
        indexes = [
            ("user_id",),
        ]


class RecipeItem(models.Model):
    """Quantity of one inventory item needed to produce a single unit of the recipe."""
    id = fields.UUIDField(primary_key=True, default=uuid.uuid4)
    recipe = fields.ForeignKeyField("models.Recipe", related_name="items", on_delete=fields.CASCADE)
    inventory = fields.ForeignKeyField(
        "models.InventoryItem", related_name="recipe_items", on_delete=fields.CASCADE
    )
    quantity = fields.DecimalField(max_digits=12, decimal_places=2)

    class Meta:
        table = "recipe_items"
        indexes = [
            ("recipe_id",),
            ("inventory_id",),
        ]
