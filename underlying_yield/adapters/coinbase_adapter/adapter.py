from __future__ import annotations

from collections.abc import Mapping
from decimal import Decimal
from typing import Any

from underlying_yield.core.adapters.RateDeltaAdapter import (
    EventSourceConfig,
    RateDeltaAdapter,
)
from underlying_yield.core.constants.base import COMPOUND_DAILY, WAD_PRECISION
from underlying_yield.core.constants.symbols import CBETH
from underlying_yield.core.constants.yield_abi import CBETH_EXCHANGE_RATE_UPDATED_ABI
from underlying_yield.core.constants.yield_contracts import CBETH_ORACLE
from underlying_yield.core.utils.events import event_args
from underlying_yield.core.utils.units import to_decimal

CBETH_SOURCE = EventSourceConfig(
    contract_address=CBETH_ORACLE,
    event_name="ExchangeRateUpdated",
    abi=CBETH_EXCHANGE_RATE_UPDATED_ABI,
    min_observations=3,
)


class CoinbaseAdapter(RateDeltaAdapter):
    """cbETH: oracle ``newExchangeRate`` updates (wad), timed by block timestamp.

    There is no published fallback. A thin window reports
    ``missing_data_value`` (``0.0`` unless configured otherwise).
    """

    adapter_type = "COINBASE"
    symbol = CBETH
    compounding_frequency = COMPOUND_DAILY
    has_fallback = False
    default_source = CBETH_SOURCE

    def __init__(
        self, reader, *, missing_data_value: float | None = 0.0, **kwargs: Any
    ) -> None:
        super().__init__(
            "coinbase_adapter",
            reader,
            missing_data_value=missing_data_value,
            **kwargs,
        )

    def rate_from_event(self, log: Mapping[str, Any]) -> Decimal:
        (exchange_rate,) = event_args(log, "newExchangeRate")
        return to_decimal(exchange_rate, WAD_PRECISION)
