from datetime import datetime
from enum import Enum
from typing import List, Literal, Optional
from pydantic import BaseModel, ConfigDict, EmailStr, Field


class UserRole(str, Enum):
    USER = "user"              # Business account (tenant)
    ADMIN = "admin"            # Can manage users
    SUPERADMIN = "superadmin"  # Admin + manages other admins

ADMIN_ROLES = (UserRole.ADMIN.value, UserRole.SUPERADMIN.value)


class UserWithPlan(BaseModel):
    """User record as returned by the identity provider (camelCase on the wire)."""
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    id: str
    name: str
    email: str
    email_verified: bool = Field(False, alias="emailVerified")
    image: Optional[str] = None
    created_at: Optional[datetime] = Field(None, alias="createdAt")
    updated_at: Optional[datetime] = Field(None, alias="updatedAt")
    role: Optional[str] = None
    banned: Optional[bool] = None
    ban_reason: Optional[str] = Field(None, alias="banReason")
    ban_expires: Optional[datetime] = Field(None, alias="banExpires")
    business_name: Optional[str] = Field("", alias="businessName")
    plan: Optional[str] = "free"
    plan_expires_at: Optional[datetime] = Field(None, alias="planExpiresAt")


class ListUsersQuery(BaseModel):
    limit: Optional[int] = Field(None, gt=0, le=1000)
    offset: int = Field(0, ge=0)
    search_value: Optional[str] = None
    sort_direction: Literal["asc", "desc"] = "desc"
    filter_role: Optional[UserRole] = None


class ListUsersResult(BaseModel):
    users: List[UserWithPlan]
    total: int


class UpdateUserRequest(BaseModel):
    name: Optional[str] = Field(None, min_length=1)
    email: Optional[EmailStr] = None
    email_verified: Optional[bool] = None
    business_name: Optional[str] = None
    plan: Optional[str] = None
    plan_expires_at: Optional[datetime] = None


class BanUserRequest(BaseModel):
    ban_reason: Optional[str] = None
    ban_expires_in: Optional[int] = Field(None, gt=0, description="Ban duration in seconds; permanent when omitted.")


class CreateAdminRequest(BaseModel):
    name: str = Field(..., min_length=1)
    email: EmailStr
    password: str = Field(..., min_length=8)


class SetRoleRequest(BaseModel):
    role: UserRole


class AdminDashboardStats(BaseModel):
    total_users: int
    active_users: int
    banned_users: int
    verified_users: int
    # Superadmin only
    total_accounts: Optional[int] = None
    total_admins: Optional[int] = None
    active_accounts: Optional[int] = None
    banned_accounts: Optional[int] = None
