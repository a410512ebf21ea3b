from tortoise import fields, models


class UserSettings(models.Model):
    # One row per tenant
    user_id = fields.CharField(max_length=64, primary_key=True)
    vat_rate = fields.CharField(max_length=16, default="")  # Percentage, "" when unset
    currency = fields.CharField(max_length=10, default="")
    updated_at = fields.DatetimeField(auto_now=True)

    class Meta:
        table = "user_settings"
