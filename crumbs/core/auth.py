"""
Session dependencies.

The identity provider owns sessions; these dependencies ask it who is calling
and enforce the role split: business users reach tenant routes, admins reach
admin routes, superadmins additionally manage other admins.
"""
from typing import Optional
from fastapi import Depends, HTTPException, Request, status
from pydantic import BaseModel
from crumbs.integrations.identity import IdentityClient, get_identity_client
from crumbs.schemas.admin import ADMIN_ROLES, UserRole


class SessionUser(BaseModel):
    id: str
    name: str
    email: str
    business_name: Optional[str] = None
    image: Optional[str] = None
    role: str = UserRole.USER.value

    @property
    def is_admin(self) -> bool:
        return is_admin_role(self.role)


def is_admin_role(role: Optional[str]) -> bool:
    return role in ADMIN_ROLES


async def get_session(
    request: Request, client: IdentityClient = Depends(get_identity_client)
) -> Optional[SessionUser]:
    """Resolves the caller's session with the identity provider; None when signed out."""
    payload = await client.get_session(request.headers)
    if not payload:
        return None
    user = payload["user"]
    return SessionUser(
        id=user["id"],
        name=user.get("name") or "",
        email=user.get("email") or "",
        business_name=user.get("businessName"),
        image=user.get("image"),
        role=user.get("role") or UserRole.USER.value,
    )


async def require_user_session(session: Optional[SessionUser] = Depends(get_session)) -> SessionUser:
    """Business (tenant) users only."""
    if session is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Not signed in.")
    if session.is_admin:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Admin accounts have no business data.")
    return session


async def require_admin_session(session: Optional[SessionUser] = Depends(get_session)) -> SessionUser:
    if session is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Not signed in.")
    if not session.is_admin:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Admin access required.")
    return session


async def require_superadmin_session(session: SessionUser = Depends(require_admin_session)) -> SessionUser:
    if session.role != UserRole.SUPERADMIN.value:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Superadmin access required.")
    return session
