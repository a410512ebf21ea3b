from decimal import Decimal, InvalidOperation
from pydantic import BaseModel, ConfigDict, Field, field_validator


class UserSettingsPayload(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    vat_rate: str = Field("", description="VAT percentage, empty when the business does not charge VAT.")
    currency: str = Field("", max_length=10, description="Currency symbol or code shown next to prices.")

    @field_validator("vat_rate")
    @classmethod
    def check_vat_rate(cls, value: str) -> str:
        if value == "":
            return value
        try:
            rate = Decimal(value)
        except InvalidOperation:
            raise ValueError("VAT rate must be between 0 and 100")
        if not rate.is_finite() or rate < 0 or rate > 100:
            raise ValueError("VAT rate must be between 0 and 100")
        return value
