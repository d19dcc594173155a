from __future__ import annotations

from decimal import Decimal


def to_decimal(raw: int, scale_exponent: int) -> Decimal:
    """Scale an on-chain fixed-point integer down by ``10**scale_exponent``.

    Built from the digit tuple so no context rounding applies:
    ``to_decimal(1050000000000000000, 18) == Decimal("1.05")``.
    """
    if isinstance(raw, bool) or not isinstance(raw, int):
        raise ValueError(f"Expected an integer fixed-point value, got {raw!r}")
    sign, digits, exponent = Decimal(raw).as_tuple()
    return Decimal((sign, digits, int(exponent) - int(scale_exponent)))
