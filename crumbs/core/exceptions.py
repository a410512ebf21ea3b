from decimal import Decimal
from typing import Any, Dict, Optional


def format_quantity(value: Decimal) -> str:
    """Renders a Decimal without trailing zeros or exponent (1200.00 -> '1200')."""
    normalized = value.normalize()
    return format(normalized, "f")


class ServiceError(ValueError):
    """
    Base class for errors raised by the service layer.
    Subclasses pick the HTTP status and error code used by the exception handlers.
    """
    status_code = 400
    code = "service_error"

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = details


class InvalidInputError(ServiceError):
    status_code = 400
    code = "validation_error"


class NotFoundError(ServiceError):
    status_code = 404
    code = "not_found"


class DuplicateItemError(ServiceError):
    status_code = 409
    code = "duplicate_item"


class InsufficientStockError(ServiceError):
    """Raised when a deduction plan needs more of an item than is in stock."""
    status_code = 409
    code = "insufficient_stock"

    def __init__(self, item_name: str, required: Decimal, available: Decimal, unit: str):
        self.item_name = item_name
        self.required = required
        self.available = available
        self.unit = unit
        super().__init__(
            f'Insufficient stock for "{item_name}": '
            f"need {format_quantity(required)} {unit}, have {format_quantity(available)} {unit}",
            details={
                "item": item_name,
                "required": format_quantity(required),
                "available": format_quantity(available),
                "unit": unit,
            },
        )


class UpstreamError(Exception):
    """Identity or AI provider failure. Not a ValueError: the caller did nothing wrong."""
    status_code = 502
    code = "upstream_error"

    def __init__(self, message: str, upstream_status: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.upstream_status = upstream_status
