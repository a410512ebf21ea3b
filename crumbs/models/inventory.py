from enum import Enum
from decimal import Decimal
from tortoise import fields, models
import uuid


class InventoryCategory(str, Enum):
    INGREDIENT = "ingredient"  # Food items that go into a recipe
    OTHER = "other"            # Packaging, labels, etc.


class InventoryItem(models.Model):
    id = fields.UUIDField(primary_key=True, default=uuid.uuid4)
    user_id = fields.CharField(max_length=64)  # Owning tenant
    name = fields.CharField(max_length=255)
    category = fields.CharEnumField(InventoryCategory, max_length=16)
    supplier = fields.CharField(max_length=255, null=True)
    purchase_cost = fields.DecimalField(max_digits=12, decimal_places=2)
    purchase_quantity = fields.DecimalField(max_digits=12, decimal_places=2)
    unit = fields.CharField(max_length=32)
    # Mutated only by creation, add-stock, manual edit, production and undo
    stock = fields.DecimalField(max_digits=12, decimal_places=2)
    created_at = fields.DatetimeField(auto_now_add=True)
    updated_at = fields.DatetimeField(auto_now=True)

    class Meta:
        table = "inventory"
        indexes = [
            ("user_id",),          # Tenant scoping
            ("user_id", "unit"),   # Duplicate name+unit lookup
        ]

    @property
    def unit_cost(self) -> Decimal:
        if not self.purchase_quantity:
            return Decimal("0")
        return self.purchase_cost / self.purchase_quantity

    def __str__(self):
        return f"{self.name} ({self.unit})"
