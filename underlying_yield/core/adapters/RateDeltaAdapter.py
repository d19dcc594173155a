from __future__ import annotations

from abc import abstractmethod
from collections.abc import Mapping
from dataclasses import dataclass, replace
from decimal import Decimal
from typing import Any

from underlying_yield.core.adapters.BaseAdapter import DECODE_ERRORS, YieldAdapter
from underlying_yield.core.adapters.models import RateObservation
from underlying_yield.core.clients.StakingApiClient import StakingApiClient
from underlying_yield.core.constants.base import COMPOUND_DAILY, DEFAULT_LOOKBACK_DAYS
from underlying_yield.core.errors import InsufficientDataError
from underlying_yield.core.utils.events import (
    EventWindow,
    earliest_and_latest,
    fetch_events,
)
from underlying_yield.core.utils.interest import apy_from_rates
from underlying_yield.core.utils.web3 import ChainReader


@dataclass(frozen=True)
class EventSourceConfig:
    """Where a token's exchange-rate updates are emitted."""

    contract_address: str
    event_name: str
    abi: list[dict[str, Any]]
    min_observations: int = 2
    lookback_days: int = DEFAULT_LOOKBACK_DAYS


def share_rate(assets: int, shares: int) -> Decimal:
    if assets <= 0 or shares <= 0:
        raise InsufficientDataError(f"non-positive assets/shares ({assets}/{shares})")
    return Decimal(assets) / Decimal(shares)


class RateDeltaAdapter(YieldAdapter):
    """
    APY from the earliest and latest exchange-rate events in the lookback window.

    Each event is decoded to a rate via ``rate_from_event`` and, where the
    event carries one, a time via ``reported_timestamp``; events failing either
    are skipped. When fewer than ``min_observations`` usable events remain the
    adapter degrades like any other on-chain failure.
    """

    compounding_frequency = COMPOUND_DAILY
    default_source: EventSourceConfig

    def __init__(
        self,
        name: str,
        reader: ChainReader,
        *,
        api_client: StakingApiClient | None = None,
        missing_data_value: float | None = None,
        source: EventSourceConfig | None = None,
        lookback_days: int | None = None,
    ) -> None:
        super().__init__(
            name,
            reader,
            api_client=api_client,
            missing_data_value=missing_data_value,
        )
        source = source or self.default_source
        if lookback_days is not None:
            source = replace(source, lookback_days=int(lookback_days))
        self.source = source

    @abstractmethod
    def rate_from_event(self, log: Mapping[str, Any]) -> Decimal:
        """Exchange rate (underlying per derivative) carried by one event."""

    def reported_timestamp(self, log: Mapping[str, Any]) -> int | None:
        """Unix time carried in the event args, or ``None`` to use its block time."""
        return None

    async def _observed_at(self, log: Mapping[str, Any], reported: int | None) -> int:
        if reported is not None:
            return reported
        return await self.reader.get_block_timestamp(int(log["blockNumber"]))

    async def fetch_observations(
        self, current_block: int
    ) -> tuple[RateObservation, RateObservation]:
        """Return ``(latest, earliest)`` observations in block order."""
        window = EventWindow.lookback(
            self.source.contract_address,
            self.source.event_name,
            current_block,
            days=self.source.lookback_days,
        )
        logs = await fetch_events(self.reader, window, self.source.abi)

        rated: list[tuple[Mapping[str, Any], Decimal, int | None]] = []
        for log in logs:
            try:
                rate = self.rate_from_event(log)
                reported = self.reported_timestamp(log)
            except DECODE_ERRORS as exc:
                self.logger.debug(f"Skipping malformed {window.event_name} event: {exc}")
                continue
            rated.append((log, rate, reported))

        if len(rated) < self.source.min_observations:
            raise InsufficientDataError(
                f"{len(rated)} usable {window.event_name} event(s) in blocks "
                f"{window.from_block}..{window.to_block}, need {self.source.min_observations}"
            )

        (first_log, first_rate, first_ts), (last_log, last_rate, last_ts) = (
            earliest_and_latest(rated)
        )
        earliest = RateObservation(first_rate, await self._observed_at(first_log, first_ts))
        latest = RateObservation(last_rate, await self._observed_at(last_log, last_ts))
        return latest, earliest

    async def fetch_apy_onchain(self, current_block: int | None) -> float:
        latest, earliest = await self.fetch_observations(int(current_block))
        return apy_from_rates(latest, earliest, self.compounding_frequency)
