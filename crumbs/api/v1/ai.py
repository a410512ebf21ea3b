from fastapi import APIRouter, Depends
from crumbs.core.auth import SessionUser, require_user_session
from crumbs.integrations.suggestions import SuggestionClient, get_suggestion_client
from crumbs.schemas.ai import MarginSuggestionRequest
from crumbs.schemas.response import SuccessResponse
from crumbs.services.ai_service import generate_recipe, suggest_margin

router = APIRouter()


@router.post("/recipe", response_model=SuccessResponse)
async def generate_recipe_endpoint(session: SessionUser = Depends(require_user_session),
                                   client: SuggestionClient = Depends(get_suggestion_client)):
    """Drafts a recipe from the tenant's inventory to pre-fill the recipe form."""
    draft = await generate_recipe(session.id, client)
    return SuccessResponse(data=draft.model_dump(mode="json"))


@router.post("/margin", response_model=SuccessResponse)
async def suggest_margin_endpoint(payload: MarginSuggestionRequest,
                                  session: SessionUser = Depends(require_user_session),
                                  client: SuggestionClient = Depends(get_suggestion_client)):
    suggestion = await suggest_margin(payload, client)
    return SuccessResponse(data=suggestion.model_dump(mode="json"))
