import uuid
from datetime import datetime
from decimal import Decimal
from typing import Optional
from pydantic import BaseModel, ConfigDict, Field
from crumbs.models.inventory import InventoryCategory
from crumbs.schemas.types import DecimalStr


class InventoryItemCreate(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    name: str = Field(..., min_length=1, max_length=255, description="Name of the item (e.g., Flour).")
    category: InventoryCategory = Field(..., description="'ingredient' for food items, 'other' for packaging etc.")
    supplier: Optional[str] = Field(None, max_length=255)
    purchase_cost: Decimal = Field(..., ge=0, max_digits=12, decimal_places=2, description="Price paid for one purchase.")
    purchase_quantity: Decimal = Field(..., gt=0, max_digits=12, decimal_places=2, description="Quantity received per purchase.")
    unit: str = Field(..., min_length=1, max_length=32, description="Unit of measure (g, ml, pcs...).")


class InventoryItemUpdate(BaseModel):
    """Partial patch. Only the fields that are set are written."""
    model_config = ConfigDict(str_strip_whitespace=True)

    name: Optional[str] = Field(None, min_length=1, max_length=255)
    category: Optional[InventoryCategory] = None
    supplier: Optional[str] = Field(None, max_length=255)
    purchase_cost: Optional[Decimal] = Field(None, ge=0, max_digits=12, decimal_places=2)
    purchase_quantity: Optional[Decimal] = Field(None, gt=0, max_digits=12, decimal_places=2)
    unit: Optional[str] = Field(None, min_length=1, max_length=32)
    stock: Optional[Decimal] = Field(None, ge=0, max_digits=12, decimal_places=2)


class AddStockRequest(BaseModel):
    quantity_to_add: Decimal = Field(..., gt=0, max_digits=12, decimal_places=2)


class InventoryItemResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    name: str
    category: InventoryCategory
    supplier: Optional[str] = None
    purchase_cost: DecimalStr
    purchase_quantity: DecimalStr
    unit: str
    stock: DecimalStr
    unit_cost: DecimalStr  # Preview only, never stored
    created_at: datetime
    updated_at: datetime
