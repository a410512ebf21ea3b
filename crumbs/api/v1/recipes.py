from uuid import UUID
from fastapi import APIRouter, Depends, status
from crumbs.core.auth import SessionUser, require_user_session
from crumbs.schemas.recipe import RecipeCreate, RecipeReplace, RecipeResponse, RecipeUpdate
from crumbs.schemas.response import SuccessResponse
from crumbs.services.pricing import get_recipe_costing
from crumbs.services.recipe_service import (
    create_recipe,
    delete_recipe,
    get_recipe,
    list_recipes,
    list_recipes_for_production,
    update_recipe,
    update_recipe_with_items,
)

router = APIRouter()


def _recipe_data(recipe) -> dict:
    return RecipeResponse.from_model(recipe).model_dump(mode="json")


@router.get("/", response_model=SuccessResponse)
async def list_recipes_endpoint(session: SessionUser = Depends(require_user_session)):
    recipes = await list_recipes(session.id)
    return SuccessResponse(data=[_recipe_data(r) for r in recipes])


@router.get("/production", response_model=SuccessResponse)
async def list_recipes_for_production_endpoint(session: SessionUser = Depends(require_user_session)):
    """Recipes ordered by name, with their items, for the production form."""
    recipes = await list_recipes_for_production(session.id)
    return SuccessResponse(data=[_recipe_data(r) for r in recipes])


@router.post("/", status_code=status.HTTP_201_CREATED, response_model=SuccessResponse)
async def create_recipe_endpoint(payload: RecipeCreate, session: SessionUser = Depends(require_user_session)):
    recipe = await create_recipe(session.id, payload)
    return SuccessResponse(data=_recipe_data(recipe))


@router.get("/{recipe_id}", response_model=SuccessResponse)
async def get_recipe_endpoint(recipe_id: UUID, session: SessionUser = Depends(require_user_session)):
    recipe = await get_recipe(session.id, recipe_id)
    return SuccessResponse(data=_recipe_data(recipe))


@router.patch("/{recipe_id}", response_model=SuccessResponse)
async def update_recipe_endpoint(recipe_id: UUID, patch: RecipeUpdate,
                                 session: SessionUser = Depends(require_user_session)):
    """Updates name, instructions, image, target margin or VAT flag."""
    recipe = await update_recipe(session.id, recipe_id, patch)
    return SuccessResponse(data=_recipe_data(recipe))


@router.put("/{recipe_id}", response_model=SuccessResponse)
async def replace_recipe_endpoint(recipe_id: UUID, payload: RecipeReplace,
                                  session: SessionUser = Depends(require_user_session)):
    """Replaces the recipe's metadata and its complete item list."""
    recipe = await update_recipe_with_items(session.id, recipe_id, payload)
    return SuccessResponse(data=_recipe_data(recipe))


@router.delete("/{recipe_id}", response_model=SuccessResponse)
async def delete_recipe_endpoint(recipe_id: UUID, session: SessionUser = Depends(require_user_session)):
    await delete_recipe(session.id, recipe_id)
    return SuccessResponse(data={"id": str(recipe_id)})


@router.get("/{recipe_id}/costing", response_model=SuccessResponse)
async def recipe_costing_endpoint(recipe_id: UUID, session: SessionUser = Depends(require_user_session)):
    """Cost, price and profit of one unit at the current purchase prices."""
    costing = await get_recipe_costing(session.id, recipe_id)
    return SuccessResponse(data=costing.model_dump(mode="json"))
