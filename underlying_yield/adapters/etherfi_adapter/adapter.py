from __future__ import annotations

from collections.abc import Mapping
from decimal import Decimal
from typing import Any

from underlying_yield.core.adapters.RateDeltaAdapter import (
    EventSourceConfig,
    RateDeltaAdapter,
    share_rate,
)
from underlying_yield.core.constants.base import COMPOUND_QUARTER_DAY
from underlying_yield.core.constants.symbols import WEETH
from underlying_yield.core.constants.yield_abi import ETHERFI_REBASE_ABI
from underlying_yield.core.constants.yield_contracts import ETHERFI_LIQUIDITY_POOL
from underlying_yield.core.utils.events import event_args
from underlying_yield.core.utils.interest import apr_to_apy

ETHERFI_SOURCE = EventSourceConfig(
    contract_address=ETHERFI_LIQUIDITY_POOL,
    event_name="Rebase",
    abi=ETHERFI_REBASE_ABI,
    min_observations=3,
)


class EtherFiAdapter(RateDeltaAdapter):
    """weETH: liquidity pool rebases, ``totalEthLocked / totalEEthShares``.

    The pool rebases about four times a day.
    """

    adapter_type = "ETHERFI"
    symbol = WEETH
    compounding_frequency = COMPOUND_QUARTER_DAY
    has_fallback = True
    default_source = ETHERFI_SOURCE

    def __init__(self, reader, **kwargs: Any) -> None:
        super().__init__("etherfi_adapter", reader, **kwargs)

    def rate_from_event(self, log: Mapping[str, Any]) -> Decimal:
        total_eth_locked, total_eeth_shares = event_args(
            log, "totalEthLocked", "totalEEthShares"
        )
        return share_rate(total_eth_locked, total_eeth_shares)

    async def fallback_apy(self) -> float:
        payload = await self._require_api_client().get_etherfi_aprs()
        if not payload.success or not payload.latest_aprs:
            self.logger.warning("Ether.fi APR endpoint returned no samples; reporting 0")
            return 0.0
        # Samples are in basis points, most recent last
        latest_apr = payload.latest_aprs[-1] / 10_000
        return apr_to_apy(latest_apr, COMPOUND_QUARTER_DAY)
