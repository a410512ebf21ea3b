import uuid
from decimal import Decimal
from typing import List
from pydantic import BaseModel, Field
from crumbs.schemas.types import DecimalStr


# ----------- Shapes requested from the model -----------

class SuggestedLine(BaseModel):
    inventoryId: str = Field(..., description="Exact ID from the provided list")
    quantity: str = Field(..., description="Numeric quantity as a string")


class RecipeDraftOutput(BaseModel):
    name: str
    steps: List[str] = []
    ingredients: List[SuggestedLine] = []
    others: List[SuggestedLine] = []


class MarginOutput(BaseModel):
    suggestedMargin: Decimal = Field(..., ge=0, lt=100)
    reasoning: str


# ----------- API schemas -----------

class GeneratedRecipeLine(BaseModel):
    inventory_id: uuid.UUID
    quantity: DecimalStr


class GeneratedRecipe(BaseModel):
    """Draft used to pre-fill the new recipe form. Never saved as-is."""
    name: str
    instructions: str
    ingredients: List[GeneratedRecipeLine]
    others: List[GeneratedRecipeLine]


class MarginSuggestionRequest(BaseModel):
    name: str = Field(..., min_length=1)
    total_cost: Decimal = Field(..., ge=0)
    ingredients: List[str] = []


class MarginSuggestion(BaseModel):
    suggested_margin: DecimalStr
    reasoning: str
