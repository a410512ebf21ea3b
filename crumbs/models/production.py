from tortoise import fields, models
import uuid


class ProductionLog(models.Model):
    """
    One produced recipe inside a production batch.
    Created once and never edited; undo deletes it after restoring stock.
    The recipe name is a snapshot taken at production time.
    """
    id = fields.UUIDField(primary_key=True, default=uuid.uuid4)
    user_id = fields.CharField(max_length=64)
    recipe = fields.ForeignKeyField(
        "models.Recipe", related_name="production_logs", null=True, on_delete=fields.SET_NULL
    )
    recipe_name = fields.CharField(max_length=255)
    quantity = fields.DecimalField(max_digits=12, decimal_places=2)  # Batches produced
    created_at = fields.DatetimeField(auto_now_add=True)

    class Meta:
        table = "production_logs"
        indexes = [
            ("user_id",),
            ("user_id", "created_at"),  # History, newest first
        ]


class ProductionLogItem(models.Model):
    """Immutable snapshot of one stock deduction made for a ProductionLog."""
    id = fields.UUIDField(primary_key=True, default=uuid.uuid4)
    production_log = fields.ForeignKeyField(
        "models.ProductionLog", related_name="items", on_delete=fields.CASCADE
    )
    inventory = fields.ForeignKeyField(
        "models.InventoryItem", related_name="production_log_items", null=True, on_delete=fields.SET_NULL
    )
    inventory_name = fields.CharField(max_length=255)
    unit = fields.CharField(max_length=32)
    quantity_deducted = fields.DecimalField(max_digits=12, decimal_places=2)

    class Meta:
        table = "production_log_items"
        indexes = [
            ("production_log_id",),
        ]
