"""Conversion between human token amounts and integer base units."""

from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Union

from ..core.errors import ValidationError

Number = Union[int, float, str, Decimal]


def to_decimal(amount: Number, field: str = "amount") -> Decimal:
    if isinstance(amount, bool):
        raise ValidationError(f"Invalid {field}: {amount}")
    try:
        # str() first so floats like 0.1 keep their shortest repr
        value = Decimal(str(amount).strip())
    except (InvalidOperation, ValueError):
        raise ValidationError(f"Invalid {field}: {amount}")
    if not value.is_finite():
        raise ValidationError(f"Invalid {field}: {amount}")
    return value


def to_base_units(amount: Number, decimals: int) -> int:
    """Human amount -> integer base units, rounded half-up to the nearest unit."""
    value = to_decimal(amount)
    if value <= 0:
        raise ValidationError("Amount must be greater than zero")
    scaled = value.scaleb(decimals).quantize(Decimal(1), rounding=ROUND_HALF_UP)
    if scaled <= 0:
        raise ValidationError(f"Amount {amount} is below the smallest unit of this token")
    return int(scaled)


def from_base_units(base_units: int, decimals: int) -> Decimal:
    return Decimal(int(base_units)).scaleb(-decimals)


def format_amount(value: Decimal) -> str:
    """Plain decimal string without exponent or trailing zeros."""
    text = format(value.normalize(), "f")
    if "." in text:
        text = text.rstrip("0").rstrip(".")
    return text or "0"
