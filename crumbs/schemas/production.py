import uuid
from datetime import datetime
from typing import List, Optional
from pydantic import BaseModel, Field
from crumbs.schemas.types import DecimalStr


class ProductionBatchItem(BaseModel):
    """Schema for a single recipe in the production request."""
    recipe_id: uuid.UUID
    quantity: int = Field(..., gt=0, description="Whole units of the recipe to produce.")


class ProductionBatchRequest(BaseModel):
    """Schema for the full production batch request body."""
    items: List[ProductionBatchItem] = Field(..., min_length=1)


class ProductionResult(BaseModel):
    success: bool = True
    log_ids: List[uuid.UUID]


class ProductionLogItemResponse(BaseModel):
    id: uuid.UUID
    inventory_id: Optional[uuid.UUID] = None  # None once the inventory item is deleted
    inventory_name: str
    unit: str
    quantity_deducted: DecimalStr


class ProductionLogResponse(BaseModel):
    id: uuid.UUID
    recipe_id: Optional[uuid.UUID] = None  # None once the recipe is deleted
    recipe_name: str
    quantity: DecimalStr
    created_at: datetime
    items: List[ProductionLogItemResponse]

    @classmethod
    def from_model(cls, log) -> "ProductionLogResponse":
        """Builds the response from a ProductionLog with 'items' prefetched."""
        return cls(
            id=log.id,
            recipe_id=log.recipe_id,
            recipe_name=log.recipe_name,
            quantity=log.quantity,
            created_at=log.created_at,
            items=[
                ProductionLogItemResponse(
                    id=item.id,
                    inventory_id=item.inventory_id,
                    inventory_name=item.inventory_name,
                    unit=item.unit,
                    quantity_deducted=item.quantity_deducted,
                )
                for item in log.items
            ],
        )
