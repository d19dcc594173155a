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
from underlying_yield.core.constants.symbols import RETH
from underlying_yield.core.constants.yield_abi import ROCKETPOOL_BALANCES_UPDATED_ABI
from underlying_yield.core.constants.yield_contracts import ROCKETPOOL_NETWORK_BALANCES
from underlying_yield.core.utils.events import event_args
from underlying_yield.core.utils.interest import apr_to_apy

ROCKETPOOL_SOURCE = EventSourceConfig(
    contract_address=ROCKETPOOL_NETWORK_BALANCES,
    event_name="BalancesUpdated",
    abi=ROCKETPOOL_BALANCES_UPDATED_ABI,
    min_observations=2,
)


class RocketPoolAdapter(RateDeltaAdapter):
    """rETH: network balance reports, ``totalEth / rethSupply``.

    Rewards land roughly every 24 hours, so the rate compounds daily.
    """

    adapter_type = "ROCKETPOOL"
    symbol = RETH
    compounding_frequency = COMPOUND_DAILY
    has_fallback = True
    default_source = ROCKETPOOL_SOURCE

    def __init__(self, reader, **kwargs: Any) -> None:
        super().__init__("rocketpool_adapter", reader, **kwargs)

    def rate_from_event(self, log: Mapping[str, Any]) -> Decimal:
        total_eth, reth_supply = event_args(log, "totalEth", "rethSupply")
        return share_rate(total_eth, reth_supply)

    def reported_timestamp(self, log: Mapping[str, Any]) -> int:
        (block_timestamp,) = event_args(log, "blockTimestamp")
        return block_timestamp

    async def fallback_apy(self) -> float:
        # 7-day average APR, published in percent
        yearly_apr_pct = await self._require_api_client().get_rocketpool_yearly_apr()
        return apr_to_apy(yearly_apr_pct / 100, COMPOUND_DAILY)
