from underlying_yield.core.adapters.BaseAdapter import YieldAdapter
from underlying_yield.core.adapters.models import (
    RateObservation,
    UnderlyingAPYs,
    YieldResult,
)
from underlying_yield.core.engine.aggregator import (
    UnderlyingYieldService,
    get_underlying_apys,
)

__all__ = [
    "YieldAdapter",
    "RateObservation",
    "UnderlyingAPYs",
    "YieldResult",
    "UnderlyingYieldService",
    "get_underlying_apys",
]
