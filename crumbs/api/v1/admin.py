import logging
from typing import Literal, Optional
from fastapi import APIRouter, Depends, HTTPException, Query, Request, status
from crumbs.core.auth import SessionUser, require_admin_session, require_superadmin_session
from crumbs.integrations.identity import IdentityClient, get_identity_client
from crumbs.schemas.admin import (
    BanUserRequest,
    CreateAdminRequest,
    ListUsersQuery,
    SetRoleRequest,
    UpdateUserRequest,
    UserRole,
)
from crumbs.schemas.response import SuccessResponse
from crumbs.services import admin_service

log = logging.getLogger("crumbs.api.admin")

router = APIRouter()


@router.get("/users", response_model=SuccessResponse)
async def list_users_endpoint(request: Request,
                              limit: Optional[int] = Query(None, gt=0, le=1000),
                              offset: int = Query(0, ge=0),
                              search_value: Optional[str] = Query(None, alias="searchValue"),
                              sort_direction: Literal["asc", "desc"] = Query("desc", alias="sortDirection"),
                              filter_role: Optional[UserRole] = Query(None, alias="role"),
                              session: SessionUser = Depends(require_admin_session),
                              client: IdentityClient = Depends(get_identity_client)):
    """Lists accounts with optional name search, role filter and paging."""
    query = ListUsersQuery(limit=limit, offset=offset, search_value=search_value,
                           sort_direction=sort_direction, filter_role=filter_role)
    result = await admin_service.list_users(client, query, request.headers)
    return SuccessResponse(data=result.model_dump(mode="json"))


@router.patch("/users/{user_id}", response_model=SuccessResponse)
async def update_user_endpoint(user_id: str, payload: UpdateUserRequest, request: Request,
                               session: SessionUser = Depends(require_admin_session),
                               client: IdentityClient = Depends(get_identity_client)):
    result = await admin_service.update_user(client, user_id, payload, request.headers)
    return SuccessResponse(data=result)


@router.post("/users/{user_id}/ban", response_model=SuccessResponse)
async def ban_user_endpoint(user_id: str, payload: BanUserRequest, request: Request,
                            session: SessionUser = Depends(require_admin_session),
                            client: IdentityClient = Depends(get_identity_client)):
    if user_id == session.id:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="You cannot ban yourself.")
    result = await admin_service.ban_user(client, user_id, payload, request.headers)
    return SuccessResponse(data=result)


@router.post("/users/{user_id}/unban", response_model=SuccessResponse)
async def unban_user_endpoint(user_id: str, request: Request,
                              session: SessionUser = Depends(require_admin_session),
                              client: IdentityClient = Depends(get_identity_client)):
    result = await admin_service.unban_user(client, user_id, request.headers)
    return SuccessResponse(data=result)


@router.delete("/users/{user_id}", response_model=SuccessResponse)
async def delete_user_endpoint(user_id: str, request: Request,
                               session: SessionUser = Depends(require_admin_session),
                               client: IdentityClient = Depends(get_identity_client)):
    """Deletes the account and every business record it owns."""
    if user_id == session.id:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="You cannot delete yourself.")
    await admin_service.delete_user(client, user_id, request.headers)
    log.info(f"Admin {session.id} deleted user {user_id}.")
    return SuccessResponse(data={"id": user_id})


@router.post("/admins", status_code=status.HTTP_201_CREATED, response_model=SuccessResponse)
async def create_admin_endpoint(payload: CreateAdminRequest, request: Request,
                                session: SessionUser = Depends(require_superadmin_session),
                                client: IdentityClient = Depends(get_identity_client)):
    result = await admin_service.create_admin(client, payload, request.headers)
    return SuccessResponse(data=result)


@router.put("/users/{user_id}/role", response_model=SuccessResponse)
async def set_role_endpoint(user_id: str, payload: SetRoleRequest, request: Request,
                            session: SessionUser = Depends(require_superadmin_session),
                            client: IdentityClient = Depends(get_identity_client)):
    result = await admin_service.set_user_role(client, user_id, payload.role, request.headers)
    return SuccessResponse(data=result)


@router.get("/stats", response_model=SuccessResponse)
async def dashboard_stats_endpoint(request: Request,
                                   session: SessionUser = Depends(require_admin_session),
                                   client: IdentityClient = Depends(get_identity_client)):
    """Account counts for the admin dashboard; superadmins get the all-accounts totals too."""
    stats = await admin_service.get_dashboard_stats(client, session.role == "superadmin", request.headers)
    return SuccessResponse(data=stats.model_dump(mode="json", exclude_none=True))
