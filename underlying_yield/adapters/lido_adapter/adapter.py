from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from underlying_yield.core.adapters.BaseAdapter import YieldAdapter
from underlying_yield.core.adapters.models import RateObservation
from underlying_yield.core.constants.base import (
    COMPOUND_DAILY,
    DEFAULT_LOOKBACK_DAYS,
    RAY,
    RAY_PRECISION,
)
from underlying_yield.core.constants.symbols import WSTETH
from underlying_yield.core.constants.yield_abi import LIDO_TOKEN_REBASED_ABI
from underlying_yield.core.constants.yield_contracts import LIDO_STETH
from underlying_yield.core.errors import InsufficientDataError
from underlying_yield.core.utils.events import EventWindow, event_args, fetch_events
from underlying_yield.core.utils.interest import apy_from_rates
from underlying_yield.core.utils.units import to_decimal
from underlying_yield.core.utils.web3 import ChainReader


def _share_rate_ray(total_ether: int, total_shares: int) -> int:
    if total_ether <= 0 or total_shares <= 0:
        raise InsufficientDataError(
            f"non-positive pooled ether/shares ({total_ether}/{total_shares})"
        )
    return total_ether * RAY // total_shares


def rebase_observations(
    log: Mapping[str, Any],
) -> tuple[RateObservation, RateObservation]:
    """
    Split one ``TokenRebased`` event into ``(after, before)`` share-rate observations.

    Formula: https://docs.lido.fi/integrations/api#last-lido-apr-for-steth
    The share rate is ether-per-share in ray precision; the report covers
    ``timeElapsed`` seconds, so "before" sits at t=0 and "after" at t=timeElapsed.
    """
    (
        time_elapsed,
        pre_total_shares,
        pre_total_ether,
        post_total_shares,
        post_total_ether,
    ) = event_args(
        log,
        "timeElapsed",
        "preTotalShares",
        "preTotalEther",
        "postTotalShares",
        "postTotalEther",
    )
    pre_rate = to_decimal(_share_rate_ray(pre_total_ether, pre_total_shares), RAY_PRECISION)
    post_rate = to_decimal(
        _share_rate_ray(post_total_ether, post_total_shares), RAY_PRECISION
    )
    return RateObservation(post_rate, time_elapsed), RateObservation(pre_rate, 0)


class LidoAdapter(YieldAdapter):
    """wstETH: APR implied by the most recent stETH oracle rebase.

    stETH rebases daily, so the APR compounds 365 times a year.
    """

    adapter_type = "LIDO"
    symbol = WSTETH
    compounding_frequency = COMPOUND_DAILY
    has_fallback = True

    def __init__(
        self,
        reader: ChainReader,
        *,
        lookback_days: int = DEFAULT_LOOKBACK_DAYS,
        contract_address: str = LIDO_STETH,
        **kwargs: Any,
    ) -> None:
        super().__init__("lido_adapter", reader, **kwargs)
        self.lookback_days = int(lookback_days)
        self.contract_address = contract_address

    async def fetch_apy_onchain(self, current_block: int | None) -> float:
        window = EventWindow.lookback(
            self.contract_address,
            "TokenRebased",
            int(current_block),
            days=self.lookback_days,
        )
        events = await fetch_events(self.reader, window, LIDO_TOKEN_REBASED_ABI)
        if not events:
            raise InsufficientDataError(
                f"no TokenRebased event in blocks {window.from_block}..{window.to_block}"
            )
        latest, earliest = rebase_observations(events[-1])
        return apy_from_rates(latest, earliest, self.compounding_frequency)

    async def fallback_apy(self) -> float:
        # Lido publishes the figure we report directly; no compounding applied.
        return await self._require_api_client().get_lido_steth_apr()
