import logging
from tortoise.exceptions import IntegrityError
from tortoise.transactions import in_transaction
from crumbs.core.tenancy import scoped
from crumbs.models.settings import UserSettings
from crumbs.schemas.settings import UserSettingsPayload

log = logging.getLogger("crumbs.settings")


async def get_settings(tenant_id: str) -> UserSettingsPayload:
    """Returns the tenant's settings, with empty strings when nothing is saved yet."""
    row = await scoped(UserSettings, tenant_id).first()
    return UserSettingsPayload(
        vat_rate=row.vat_rate if row else "",
        currency=row.currency if row else "",
    )


async def _save_existing(tenant_id: str, data: UserSettingsPayload) -> bool:
    """Updates the tenant's row under a lock. False when there is no row yet."""
    async with in_transaction() as conn:
        row = await scoped(UserSettings, tenant_id).using_db(conn).select_for_update().first()
        if not row:
            return False
        row.vat_rate = data.vat_rate
        row.currency = data.currency
        await row.save(update_fields=["vat_rate", "currency", "updated_at"], using_db=conn)
    return True


async def update_settings(tenant_id: str, data: UserSettingsPayload) -> UserSettingsPayload:
    """Upserts the single settings row of the tenant, keyed on the tenant id."""
    if not await _save_existing(tenant_id, data):
        try:
            async with in_transaction() as conn:
                await UserSettings.create(
                    user_id=tenant_id, vat_rate=data.vat_rate, currency=data.currency, using_db=conn
                )
        except IntegrityError:
            # A concurrent first save created the row; update it instead
            log.info(f"Settings row for tenant {tenant_id} created concurrently, updating.")
            await _save_existing(tenant_id, data)
    log.info(f"Settings saved for tenant {tenant_id} (vat={data.vat_rate!r}, currency={data.currency!r}).")
    return data
