from fastapi import APIRouter, Depends
from crumbs.core.auth import SessionUser, require_user_session
from crumbs.schemas.response import SuccessResponse
from crumbs.schemas.settings import UserSettingsPayload
from crumbs.services.settings_service import get_settings, update_settings

router = APIRouter()


@router.get("/", response_model=SuccessResponse)
async def get_settings_endpoint(session: SessionUser = Depends(require_user_session)):
    settings = await get_settings(session.id)
    return SuccessResponse(data=settings.model_dump())


@router.put("/", response_model=SuccessResponse)
async def update_settings_endpoint(payload: UserSettingsPayload,
                                   session: SessionUser = Depends(require_user_session)):
    """Saves the tenant's VAT rate and currency."""
    settings = await update_settings(session.id, payload)
    return SuccessResponse(data=settings.model_dump())
