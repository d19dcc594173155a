from __future__ import annotations

import asyncio
from collections.abc import Sequence

from loguru import logger

from underlying_yield.adapters.coinbase_adapter.adapter import CoinbaseAdapter
from underlying_yield.adapters.etherfi_adapter.adapter import EtherFiAdapter
from underlying_yield.adapters.lido_adapter.adapter import LidoAdapter
from underlying_yield.adapters.maker_dsr_adapter.adapter import MakerDsrAdapter
from underlying_yield.adapters.rocketpool_adapter.adapter import RocketPoolAdapter
from underlying_yield.adapters.stader_adapter.adapter import StaderAdapter
from underlying_yield.core.adapters.BaseAdapter import YieldAdapter
from underlying_yield.core.adapters.models import UnderlyingAPYs, YieldResult
from underlying_yield.core.clients.StakingApiClient import StakingApiClient
from underlying_yield.core.config import (
    get_adapter_timeout,
    get_cbeth_missing_data_value,
    get_http_timeout,
    get_lookback_days,
    get_variant,
)
from underlying_yield.core.constants.base import DEFAULT_ADAPTER_TIMEOUT
from underlying_yield.core.constants.symbols import SYMBOLS_BY_VARIANT
from underlying_yield.core.errors import NodeUnreachableError
from underlying_yield.core.utils.web3 import ChainReader, get_reader_from_chain_id


class UnderlyingYieldService:
    """
    Runs every token adapter concurrently and merges their APYs.

    The block height is read once and shared so all windows end at the same
    block. An on-chain read that exceeds ``adapter_timeout_s`` is treated like
    a node failure, so the adapter still gets to use its fallback. An adapter
    that raises reports its missing value; the others are unaffected. Nothing
    is cached between calls.
    """

    def __init__(
        self,
        reader: ChainReader,
        adapters: Sequence[YieldAdapter],
        *,
        api_client: StakingApiClient | None = None,
        adapter_timeout_s: float = DEFAULT_ADAPTER_TIMEOUT,
    ) -> None:
        symbols = [a.symbol for a in adapters]
        if len(set(symbols)) != len(symbols):
            raise ValueError(f"Duplicate adapter symbols: {symbols}")
        self.reader = reader
        self.adapters = list(adapters)
        self.api_client = api_client
        self.adapter_timeout_s = float(adapter_timeout_s)

    @property
    def symbols(self) -> list[str]:
        return [a.symbol for a in self.adapters]

    async def _current_block(self) -> int | None:
        try:
            return await self.reader.block_number()
        except NodeUnreachableError as exc:
            logger.error(f"Could not read current block height: {exc}")
            return None

    async def _run_adapter(
        self, adapter: YieldAdapter, current_block: int | None
    ) -> YieldResult:
        try:
            return await adapter.get_apy(
                current_block, timeout_s=self.adapter_timeout_s
            )
        except Exception as exc:
            logger.exception(f"{adapter.symbol}: adapter failed: {exc}")
        return adapter.missing_result()

    async def get_yield_results(self) -> list[YieldResult]:
        current_block = await self._current_block()
        results = await asyncio.gather(
            *(self._run_adapter(a, current_block) for a in self.adapters)
        )
        summary = ", ".join(f"{r.symbol}={r.apy} ({r.source})" for r in results)
        logger.info(f"Underlying APYs at block {current_block}: {summary}")
        return list(results)

    async def get_underlying_apys(self) -> UnderlyingAPYs:
        results = {r.symbol: r.apy for r in await self.get_yield_results()}
        return {symbol: results.get(symbol) for symbol in self.symbols}

    async def close(self) -> None:
        if self.api_client is not None:
            await self.api_client.close()
        await self.reader.close()


def build_adapters(
    variant: str,
    reader: ChainReader,
    api_client: StakingApiClient,
    *,
    lookback_days: int,
    cbeth_missing_data_value: float | None,
) -> list[YieldAdapter]:
    adapters: list[YieldAdapter] = [
        LidoAdapter(reader, api_client=api_client, lookback_days=lookback_days),
        MakerDsrAdapter(reader),
        RocketPoolAdapter(reader, api_client=api_client, lookback_days=lookback_days),
        StaderAdapter(reader, api_client=api_client, lookback_days=lookback_days),
        CoinbaseAdapter(
            reader,
            lookback_days=lookback_days,
            missing_data_value=cbeth_missing_data_value,
        ),
        EtherFiAdapter(reader, api_client=api_client, lookback_days=lookback_days),
    ]
    wanted = SYMBOLS_BY_VARIANT[variant]
    by_symbol = {a.symbol: a for a in adapters}
    return [by_symbol[symbol] for symbol in wanted]


def create_service(
    variant: str | None = None, *, rpc_url: str | None = None
) -> UnderlyingYieldService:
    """Build a service for ``variant`` (``full`` or ``reduced``) from the global config."""
    variant = variant or get_variant()
    if variant not in SYMBOLS_BY_VARIANT:
        raise ValueError(f"Unknown variant {variant!r}")
    reader = get_reader_from_chain_id(rpc_url=rpc_url)
    api_client = StakingApiClient(timeout_s=get_http_timeout())
    adapters = build_adapters(
        variant,
        reader,
        api_client,
        lookback_days=get_lookback_days(),
        cbeth_missing_data_value=get_cbeth_missing_data_value(),
    )
    return UnderlyingYieldService(
        reader,
        adapters,
        api_client=api_client,
        adapter_timeout_s=get_adapter_timeout(),
    )


async def get_underlying_apys(
    variant: str | None = None, *, rpc_url: str | None = None
) -> UnderlyingAPYs:
    service = create_service(variant, rpc_url=rpc_url)
    try:
        return await service.get_underlying_apys()
    finally:
        await service.close()
