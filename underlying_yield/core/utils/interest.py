from __future__ import annotations

import math
from decimal import Decimal, localcontext

from underlying_yield.core.adapters.models import RateObservation
from underlying_yield.core.constants.base import SECONDS_PER_YEAR
from underlying_yield.core.errors import InsufficientDataError


def apr_to_apy(apr: float, compounding_frequency: int) -> float:
    """
    Convert APR to APY compounding ``compounding_frequency`` times per year.
    """
    if isinstance(compounding_frequency, bool) or not isinstance(
        compounding_frequency, int
    ):
        raise ValueError("compounding_frequency must be an int")
    if compounding_frequency <= 0:
        raise ValueError("compounding_frequency must be positive")
    n = compounding_frequency
    return (1 + float(apr) / n) ** n - 1


def apy_from_rates(
    latest: RateObservation,
    earliest: RateObservation,
    compounding_frequency: int,
) -> float:
    """
    Extrapolate the growth between two exchange-rate observations to a year.

    The observed growth is annualized linearly (APR) and then compounded at
    ``compounding_frequency``. Raises ``InsufficientDataError`` when either
    rate is not positive and finite, or when ``latest`` is not strictly after
    ``earliest``.
    """
    if not latest.is_valid or not earliest.is_valid:
        raise InsufficientDataError(
            f"invalid exchange rate(s): latest={latest.rate!r} earliest={earliest.rate!r}"
        )
    elapsed = int(latest.timestamp) - int(earliest.timestamp)
    if elapsed <= 0:
        raise InsufficientDataError(
            f"insufficient time span between observations ({elapsed}s)"
        )

    ratio = float(latest.rate) / float(earliest.rate) - 1
    apr = ratio * SECONDS_PER_YEAR / elapsed
    apy = apr_to_apy(apr, compounding_frequency)
    if not math.isfinite(apy):
        raise InsufficientDataError(f"non-finite APY from ratio={ratio}")
    return apy


def continuous_rate_to_apy(per_second_rate: Decimal) -> float:
    """
    Compound a per-second growth factor (e.g. Maker's DSR, ``1.0000000015...``)
    over a year: ``rate ** SECONDS_PER_YEAR - 1``.
    """
    rate = Decimal(per_second_rate)
    if not rate.is_finite() or rate <= 0:
        raise InsufficientDataError(f"invalid per-second rate: {per_second_rate!r}")
    with localcontext() as ctx:
        ctx.prec = 50
        return float(rate**SECONDS_PER_YEAR - 1)
