from __future__ import annotations

import asyncio
from abc import ABC, abstractmethod

from loguru import logger

from underlying_yield.core.adapters.models import YieldResult, YieldSource
from underlying_yield.core.clients.StakingApiClient import StakingApiClient
from underlying_yield.core.errors import (
    FallbackUnavailableError,
    InsufficientDataError,
    NodeUnreachableError,
)
from underlying_yield.core.utils.web3 import ChainReader

# Decoding problems in event args or view results; treated like missing data.
DECODE_ERRORS: tuple[type[Exception], ...] = (
    InsufficientDataError,
    KeyError,
    TypeError,
    ValueError,
    ArithmeticError,
)


class YieldAdapter(ABC):
    """Yield source for one token.

    Subclasses implement ``fetch_apy_onchain`` and, when the protocol publishes
    one, ``fallback_apy``. ``get_apy`` never raises for data or network
    problems; it degrades to the fallback, then to ``missing_data_value``.
    """

    adapter_type: str | None = None
    symbol: str = ""
    compounding_frequency: int | None = None
    has_fallback: bool = False
    requires_block: bool = True

    def __init__(
        self,
        name: str,
        reader: ChainReader,
        *,
        api_client: StakingApiClient | None = None,
        missing_data_value: float | None = None,
    ) -> None:
        self.name = name
        self.reader = reader
        self.api_client = api_client
        self.missing_data_value = missing_data_value
        self.logger = logger.bind(adapter=self.__class__.__name__)

    @abstractmethod
    async def fetch_apy_onchain(self, current_block: int | None) -> float:
        """APY from chain state; raises ``InsufficientDataError`` or ``NodeUnreachableError``."""

    async def fallback_apy(self) -> float:
        raise FallbackUnavailableError(f"{self.symbol} has no fallback source")

    def _require_api_client(self) -> StakingApiClient:
        if self.api_client is None:
            raise FallbackUnavailableError("no staking API client configured")
        return self.api_client

    async def get_apy(
        self, current_block: int | None, *, timeout_s: float | None = None
    ) -> YieldResult:
        """APY for ``symbol``; ``timeout_s`` bounds the on-chain read only."""
        if current_block is None and self.requires_block:
            reason = "current block height unavailable"
        else:
            try:
                apy = await asyncio.wait_for(
                    self.fetch_apy_onchain(current_block), timeout=timeout_s
                )
                self.logger.debug(f"{self.symbol} on-chain APY {apy:.6f}")
                return YieldResult(self.symbol, apy, YieldSource.ONCHAIN)
            except TimeoutError:
                reason = f"on-chain read exceeded {timeout_s:.1f}s"
            except NodeUnreachableError as exc:
                reason = f"node unreachable ({exc})"
            except DECODE_ERRORS as exc:
                reason = f"insufficient on-chain data ({exc})"
        return await self._degrade(reason)

    def missing_result(self) -> YieldResult:
        source = (
            YieldSource.UNAVAILABLE
            if self.missing_data_value is None
            else YieldSource.DEFAULT
        )
        return YieldResult(self.symbol, self.missing_data_value, source)

    async def _degrade(self, reason: str) -> YieldResult:
        if not self.has_fallback:
            self.logger.warning(
                f"{self.symbol}: {reason}; reporting {self.missing_data_value}"
            )
            return self.missing_result()

        self.logger.warning(f"{self.symbol}: {reason}; using fallback API")
        try:
            apy = await self.fallback_apy()
        except FallbackUnavailableError as exc:
            self.logger.error(f"{self.symbol}: fallback failed: {exc}")
            return YieldResult(self.symbol, None, YieldSource.UNAVAILABLE)
        return YieldResult(self.symbol, apy, YieldSource.FALLBACK)
