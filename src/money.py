"""Integer currency helpers shared by pricing and promotions."""
from __future__ import annotations

from decimal import ROUND_FLOOR, Decimal
from typing import Union

Number = Union[int, float, Decimal]

_HALF = Decimal("0.5")


def round_half_up(value: Number) -> int:
    """Round to the nearest whole unit, ties toward positive infinity."""
    return int((Decimal(str(value)) + _HALF).to_integral_value(rounding=ROUND_FLOOR))


def percent_of(amount: int, percent: Number) -> int:
    # Rounded once on the aggregate amount, never per unit.
    return round_half_up(Decimal(amount) * Decimal(str(percent)) / 100)


def format_amount(amount: int, symbol: str = "") -> str:
    return f"{symbol}{amount:,}"
