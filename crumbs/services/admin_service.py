"""
Admin user management.

A typed pass-through to the identity provider's admin API. Authentication,
passwords and sessions stay with the provider; the only local state touched
here is the tenant data purged when an account is deleted.
"""
import logging
from typing import Any, Dict, List, Mapping
from tortoise.transactions import in_transaction
from crumbs.core.config import ADMIN_LIST_LIMIT
from crumbs.core.tenancy import scoped
from crumbs.integrations.identity import IdentityClient
from crumbs.models.inventory import InventoryItem
from crumbs.models.production import ProductionLog, ProductionLogItem
from crumbs.models.recipe import Recipe, RecipeItem
from crumbs.models.settings import UserSettings
from crumbs.schemas.admin import (
    AdminDashboardStats,
    BanUserRequest,
    CreateAdminRequest,
    ListUsersQuery,
    ListUsersResult,
    UpdateUserRequest,
    UserRole,
    UserWithPlan,
)

log = logging.getLogger("crumbs.admin")

# Local field name -> provider field name
_USER_FIELD_MAP = {
    "name": "name",
    "email": "email",
    "email_verified": "emailVerified",
    "business_name": "businessName",
    "plan": "plan",
    "plan_expires_at": "planExpiresAt",
}


def build_list_query(query: ListUsersQuery) -> Dict[str, Any]:
    params: Dict[str, Any] = {
        "limit": query.limit or ADMIN_LIST_LIMIT,
        "offset": query.offset,
        "sortBy": "createdAt",
        "sortDirection": query.sort_direction,
    }
    if query.search_value:
        params.update(searchValue=query.search_value, searchField="name", searchOperator="contains")
    if query.filter_role:
        params.update(filterField="role", filterValue=query.filter_role.value, filterOperator="eq")
    return params


async def list_users(client: IdentityClient, query: ListUsersQuery, headers: Mapping[str, str]) -> ListUsersResult:
    payload = await client.list_users(build_list_query(query), headers)
    return ListUsersResult.model_validate(payload or {"users": [], "total": 0})


async def update_user(client: IdentityClient, user_id: str, data: UpdateUserRequest,
                      headers: Mapping[str, str]) -> Any:
    changes = data.model_dump(exclude_unset=True, mode="json")
    body = {_USER_FIELD_MAP[k]: v for k, v in changes.items()}
    result = await client.update_user(user_id, body, headers)
    log.info(f"User {user_id} updated ({', '.join(body)}).")
    return result


async def ban_user(client: IdentityClient, user_id: str, data: BanUserRequest, headers: Mapping[str, str]) -> Any:
    result = await client.ban_user(user_id, headers, ban_reason=data.ban_reason, ban_expires_in=data.ban_expires_in)
    log.info(f"User {user_id} banned (expires in {data.ban_expires_in or 'never'}).")
    return result


async def unban_user(client: IdentityClient, user_id: str, headers: Mapping[str, str]) -> Any:
    result = await client.unban_user(user_id, headers)
    log.info(f"User {user_id} unbanned.")
    return result


async def purge_tenant_data(tenant_id: str) -> None:
    """Deletes every row owned by a tenant: history, recipes, inventory, settings."""
    async with in_transaction() as conn:
        log_ids = await scoped(ProductionLog, tenant_id).using_db(conn).values_list("id", flat=True)
        if log_ids:
            await ProductionLogItem.filter(production_log_id__in=list(log_ids)).using_db(conn).delete()
        await scoped(ProductionLog, tenant_id).using_db(conn).delete()

        recipe_ids = await scoped(Recipe, tenant_id).using_db(conn).values_list("id", flat=True)
        if recipe_ids:
            await RecipeItem.filter(recipe_id__in=list(recipe_ids)).using_db(conn).delete()
        await scoped(Recipe, tenant_id).using_db(conn).delete()

        await scoped(InventoryItem, tenant_id).using_db(conn).delete()
        await scoped(UserSettings, tenant_id).using_db(conn).delete()
    log.info(f"Tenant data purged for {tenant_id}.")


async def delete_user(client: IdentityClient, user_id: str, headers: Mapping[str, str]) -> None:
    """Removes the account upstream first; local data is only purged once that succeeded."""
    await client.remove_user(user_id, headers)
    await purge_tenant_data(user_id)
    log.info(f"User {user_id} deleted.")


async def create_admin(client: IdentityClient, data: CreateAdminRequest, headers: Mapping[str, str]) -> Any:
    body = {
        "name": data.name,
        "email": data.email,
        "password": data.password,
        "role": UserRole.ADMIN.value,
        "data": {"businessName": "", "emailVerified": True},
    }
    result = await client.create_user(body, headers)
    log.info(f"Admin account created for {data.email}.")
    return result


async def set_user_role(client: IdentityClient, user_id: str, role: UserRole, headers: Mapping[str, str]) -> Any:
    result = await client.set_role(user_id, role.value, headers)
    log.info(f"User {user_id} role set to {role.value}.")
    return result


async def _all_users(client: IdentityClient, headers: Mapping[str, str]) -> List[UserWithPlan]:
    users: List[UserWithPlan] = []
    offset = 0
    while True:
        page = await list_users(client, ListUsersQuery(limit=ADMIN_LIST_LIMIT, offset=offset), headers)
        users.extend(page.users)
        offset += len(page.users)
        if not page.users or offset >= page.total:
            return users


def compute_stats(users: List[UserWithPlan], is_superadmin: bool) -> AdminDashboardStats:
    """Counts business accounts (role user or unset); superadmins also see all accounts."""
    business = [u for u in users if u.role in (None, UserRole.USER.value)]
    stats = AdminDashboardStats(
        total_users=len(business),
        active_users=sum(1 for u in business if not u.banned),
        banned_users=sum(1 for u in business if u.banned),
        verified_users=sum(1 for u in business if u.email_verified),
    )
    if is_superadmin:
        stats.total_accounts = len(users)
        stats.total_admins = sum(1 for u in users if u.role == UserRole.ADMIN.value)
        stats.active_accounts = sum(1 for u in users if not u.banned)
        stats.banned_accounts = sum(1 for u in users if u.banned)
    return stats


async def get_dashboard_stats(client: IdentityClient, is_superadmin: bool,
                              headers: Mapping[str, str]) -> AdminDashboardStats:
    users = await _all_users(client, headers)
    return compute_stats(users, is_superadmin)
