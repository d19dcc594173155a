__version__ = "0.1.0"

from underlying_yield.core import (
    RateObservation,
    UnderlyingAPYs,
    UnderlyingYieldService,
    YieldAdapter,
    YieldResult,
    get_underlying_apys,
)

__all__ = [
    "__version__",
    "RateObservation",
    "UnderlyingAPYs",
    "UnderlyingYieldService",
    "YieldAdapter",
    "YieldResult",
    "get_underlying_apys",
]
