import uuid
from datetime import datetime
from decimal import Decimal
from typing import List, Optional
from pydantic import BaseModel, ConfigDict, Field
from crumbs.schemas.inventory import InventoryItemResponse
from crumbs.schemas.types import DecimalStr


class RecipeItemInput(BaseModel):
    inventory_id: uuid.UUID
    quantity: Decimal = Field(..., gt=0, max_digits=12, decimal_places=2, description="Quantity per one unit produced.")


class RecipeCreate(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    name: str = Field(..., min_length=1, max_length=255)
    instructions: Optional[str] = None
    image: Optional[str] = Field(None, description="Image as a data: URI.")
    items: List[RecipeItemInput] = Field(..., min_length=1)


class RecipeUpdate(BaseModel):
    """Metadata-only patch; items are replaced through RecipeReplace."""
    model_config = ConfigDict(str_strip_whitespace=True)

    name: Optional[str] = Field(None, min_length=1, max_length=255)
    instructions: Optional[str] = None
    image: Optional[str] = None
    # Must stay below 100: the price divides by (1 - margin/100)
    target_margin: Optional[Decimal] = Field(None, ge=0, lt=100, max_digits=5, decimal_places=2)
    has_vat: Optional[bool] = None


class RecipeReplace(BaseModel):
    """Full update: metadata plus the complete new item list."""
    model_config = ConfigDict(str_strip_whitespace=True)

    name: str = Field(..., min_length=1, max_length=255)
    instructions: Optional[str] = None
    image: Optional[str] = None
    items: List[RecipeItemInput] = Field(..., min_length=1)


class RecipeItemResponse(BaseModel):
    id: uuid.UUID
    inventory_id: uuid.UUID
    quantity: DecimalStr
    inventory: InventoryItemResponse


class RecipeResponse(BaseModel):
    id: uuid.UUID
    name: str
    instructions: Optional[str] = None
    image: Optional[str] = None
    target_margin: DecimalStr
    has_vat: bool
    created_at: datetime
    updated_at: datetime
    items: List[RecipeItemResponse] = []

    @classmethod
    def from_model(cls, recipe) -> "RecipeResponse":
        """Builds the response from a Recipe with 'items__inventory' prefetched."""
        items = [
            RecipeItemResponse(
                id=item.id,
                inventory_id=item.inventory_id,
                quantity=item.quantity,
                inventory=InventoryItemResponse.model_validate(item.inventory),
            )
            for item in recipe.items
        ]
        return cls(
            id=recipe.id,
            name=recipe.name,
            instructions=recipe.instructions,
            image=recipe.image,
            target_margin=recipe.target_margin,
            has_vat=recipe.has_vat,
            created_at=recipe.created_at,
            updated_at=recipe.updated_at,
            items=items,
        )


class RecipeCosting(BaseModel):
    """Read-time pricing breakdown for one recipe. Nothing here is persisted."""
    recipe_id: uuid.UUID
    currency: str
    vat_rate: DecimalStr
    ingredients_subtotal: DecimalStr
    others_subtotal: DecimalStr
    total_cost: DecimalStr
    target_margin: DecimalStr
    has_vat: bool
    price_before_vat: DecimalStr
    final_price: DecimalStr
    profit: DecimalStr
