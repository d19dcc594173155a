from __future__ import annotations

from collections.abc import Mapping
from decimal import Decimal
from typing import Any

from underlying_yield.core.adapters.RateDeltaAdapter import (
    EventSourceConfig,
    RateDeltaAdapter,
    share_rate,
)
from underlying_yield.core.constants.base import COMPOUND_DAILY
from underlying_yield.core.constants.symbols import ETHX
from underlying_yield.core.constants.yield_abi import STADER_EXCHANGE_RATE_UPDATED_ABI
from underlying_yield.core.constants.yield_contracts import STADER_ORACLE
from underlying_yield.core.utils.events import event_args

STADER_SOURCE = EventSourceConfig(
    contract_address=STADER_ORACLE,
    event_name="ExchangeRateUpdated",
    abi=STADER_EXCHANGE_RATE_UPDATED_ABI,
    min_observations=2,
)


class StaderAdapter(RateDeltaAdapter):
    """ETHx: Stader oracle exchange-rate submissions, ``totalEth / ethxSupply``."""

    adapter_type = "STADER"
    symbol = ETHX
    compounding_frequency = COMPOUND_DAILY
    has_fallback = True
    default_source = STADER_SOURCE

    def __init__(self, reader, **kwargs: Any) -> None:
        super().__init__("stader_adapter", reader, **kwargs)

    def rate_from_event(self, log: Mapping[str, Any]) -> Decimal:
        total_eth, ethx_supply = event_args(log, "totalEth", "ethxSupply")
        return share_rate(total_eth, ethx_supply)

    def reported_timestamp(self, log: Mapping[str, Any]) -> int:
        (reported_at,) = event_args(log, "time")
        return reported_at

    async def fallback_apy(self) -> float:
        # Already an APY, in percent
        apy_pct = await self._require_api_client().get_stader_ethx_apy()
        return apy_pct / 100
