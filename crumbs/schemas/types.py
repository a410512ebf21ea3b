from decimal import Decimal
from typing import Annotated
from pydantic import PlainSerializer

# Decimals leave the API as plain fixed-point strings ("1000", "12.5"), never
# floats and never exponent notation ("1E+3") even after ORM normalisation.
DecimalStr = Annotated[
    Decimal,
    PlainSerializer(lambda value: format(value, "f"), return_type=str, when_used="json"),
]
