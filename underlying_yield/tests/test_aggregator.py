from __future__ import annotations

import asyncio
import copy
from unittest.mock import patch

import pytest

import underlying_yield.core.config as config
from underlying_yield.adapters.coinbase_adapter.adapter import CoinbaseAdapter
from underlying_yield.core.adapters.models import YieldSource
from underlying_yield.core.engine.aggregator import (
    UnderlyingYieldService,
    build_adapters,
    create_service,
    get_underlying_apys,
)
from underlying_yield.core.errors import (
    FallbackUnavailableError,
    InsufficientDataError,
    NodeUnreachableError,
)
from underlying_yield.testing.adapters import StubAdapter
from underlying_yield.testing.chain import mock_api_client, mock_reader

FULL = ["wstETH", "sDAI", "rETH", "ETHx", "cbETH", "weETH"]


@pytest.fixture
def restore_global_config() -> None:
    original = copy.deepcopy(config.CONFIG)
    yield
    config.set_config(original)


@pytest.mark.asyncio
async def test_merges_every_adapter():
    reader = mock_reader(block_number=19_500_000)
    adapters = [
        StubAdapter("wstETH", reader, onchain=0.031),
        StubAdapter("rETH", reader, onchain=0.028),
    ]
    service = UnderlyingYieldService(reader, adapters)

    apys = await service.get_underlying_apys()

    assert apys == {"wstETH": 0.031, "rETH": 0.028}
    assert all(a.seen_block == 19_500_000 for a in adapters)
    reader.block_number.assert_awaited_once()


@pytest.mark.asyncio
async def test_failed_token_does_not_affect_others():
    reader = mock_reader()
    service = UnderlyingYieldService(
        reader,
        [
            StubAdapter("wstETH", reader, onchain=0.031),
            StubAdapter(
                "rETH",
                reader,
                onchain=NodeUnreachableError("down"),
                fallback=FallbackUnavailableError("down too"),
            ),
            StubAdapter("ETHx", reader, onchain=InsufficientDataError("1 event"), fallback=0.035),
        ],
    )

    apys = await service.get_underlying_apys()

    assert apys == {"wstETH": 0.031, "rETH": None, "ETHx": 0.035}


@pytest.mark.asyncio
async def test_slow_onchain_read_still_uses_fallback():
    reader = mock_reader()
    slow = StubAdapter("weETH", reader, onchain=0.04, fallback=0.042, delay=5)
    service = UnderlyingYieldService(
        reader,
        [StubAdapter("wstETH", reader, onchain=0.031), slow],
        adapter_timeout_s=0.05,
    )

    results = await service.get_yield_results()

    by_symbol = {r.symbol: r for r in results}
    assert by_symbol["wstETH"].apy == 0.031
    assert by_symbol["weETH"].apy == 0.042
    assert by_symbol["weETH"].source == YieldSource.FALLBACK


@pytest.mark.asyncio
async def test_slow_onchain_read_with_dead_fallback():
    reader = mock_reader()
    slow = StubAdapter(
        "weETH",
        reader,
        onchain=0.04,
        fallback=FallbackUnavailableError("HTTP 503"),
        delay=5,
    )
    service = UnderlyingYieldService(reader, [slow], adapter_timeout_s=0.05)

    (result,) = await service.get_yield_results()

    assert result.apy is None
    assert result.source == YieldSource.UNAVAILABLE


async def _hang(*args):
    await asyncio.sleep(5)


@pytest.mark.asyncio
async def test_slow_cbeth_reports_missing_value():
    reader = mock_reader()
    reader.get_logs.side_effect = _hang
    service = UnderlyingYieldService(
        reader, [CoinbaseAdapter(reader)], adapter_timeout_s=0.05
    )

    (result,) = await service.get_yield_results()

    assert result.apy == 0.0
    assert result.source == YieldSource.DEFAULT


@pytest.mark.asyncio
async def test_unexpected_exception_is_contained():
    reader = mock_reader()
    service = UnderlyingYieldService(
        reader,
        [
            StubAdapter("wstETH", reader, onchain=RuntimeError("bug")),
            StubAdapter("sDAI", reader, onchain=0.05),
        ],
    )
    assert await service.get_underlying_apys() == {"wstETH": None, "sDAI": 0.05}


@pytest.mark.asyncio
async def test_unexpected_exception_uses_missing_value():
    reader = mock_reader()
    reader.get_logs.side_effect = RuntimeError("bug")
    service = UnderlyingYieldService(reader, [CoinbaseAdapter(reader)])

    (result,) = await service.get_yield_results()

    assert result.apy == 0.0
    assert result.source == YieldSource.DEFAULT


@pytest.mark.asyncio
async def test_block_height_failure_still_runs_fallbacks():
    reader = mock_reader()
    reader.block_number.side_effect = NodeUnreachableError("eth_blockNumber")
    rocketpool = StubAdapter("rETH", reader, onchain=0.028, fallback=0.029)
    cbeth = CoinbaseAdapter(reader)
    service = UnderlyingYieldService(reader, [rocketpool, cbeth])

    results = {r.symbol: r for r in await service.get_yield_results()}

    assert results["rETH"].apy == 0.029
    assert results["rETH"].source == YieldSource.FALLBACK
    assert rocketpool.seen_block == "unset"
    assert results["cbETH"].apy == 0.0
    reader.get_logs.assert_not_awaited()


def test_duplicate_symbols_rejected():
    reader = mock_reader()
    with pytest.raises(ValueError, match="Duplicate"):
        UnderlyingYieldService(
            reader, [StubAdapter("rETH", reader), StubAdapter("rETH", reader)]
        )


@pytest.mark.parametrize(
    "variant, expected",
    [("full", FULL), ("reduced", ["wstETH", "sDAI"])],
)
def test_build_adapters_order(variant, expected):
    adapters = build_adapters(
        variant,
        mock_reader(),
        mock_api_client(),
        lookback_days=7,
        cbeth_missing_data_value=0.0,
    )
    assert [a.symbol for a in adapters] == expected


def test_build_adapters_passes_settings():
    api = mock_api_client()
    adapters = build_adapters(
        "full",
        mock_reader(),
        api,
        lookback_days=3,
        cbeth_missing_data_value=None,
    )
    by_symbol = {a.symbol: a for a in adapters}
    assert by_symbol["cbETH"].missing_data_value is None
    assert by_symbol["rETH"].source.lookback_days == 3
    assert by_symbol["wstETH"].lookback_days == 3
    assert by_symbol["weETH"].api_client is api
    assert by_symbol["sDAI"].api_client is None


@pytest.mark.asyncio
async def test_full_variant_with_node_down_has_every_key():
    reader = mock_reader()
    reader.block_number.side_effect = NodeUnreachableError("down")
    reader.call.side_effect = NodeUnreachableError("down")
    api = mock_api_client()
    api.get_lido_steth_apr.return_value = 0.031
    api.get_rocketpool_yearly_apr.side_effect = FallbackUnavailableError("HTTP 500")
    api.get_stader_ethx_apy.return_value = 3.5
    api.get_etherfi_aprs.side_effect = FallbackUnavailableError("timeout")
    adapters = build_adapters(
        "full", reader, api, lookback_days=7, cbeth_missing_data_value=0.0
    )
    service = UnderlyingYieldService(reader, adapters, api_client=api)

    apys = await service.get_underlying_apys()

    assert list(apys) == FULL
    assert apys["wstETH"] == 0.031
    assert apys["sDAI"] is None
    assert apys["rETH"] is None
    assert apys["ETHx"] == pytest.approx(0.035)
    assert apys["cbETH"] == 0.0
    assert apys["weETH"] is None


@pytest.mark.asyncio
async def test_close_releases_clients():
    reader = mock_reader()
    api = mock_api_client()
    service = UnderlyingYieldService(reader, [], api_client=api)
    await service.close()
    api.close.assert_awaited_once()
    reader.close.assert_awaited_once()


def test_create_service_from_config(restore_global_config: None):
    config.set_config(
        {
            "rpc_urls": {"1": "https://rpc.example"},
            "system": {"adapter_timeout_s": 12},
            "yields": {"variant": "reduced"},
        }
    )
    service = create_service()
    assert service.symbols == ["wstETH", "sDAI"]
    assert service.adapter_timeout_s == 12.0
    assert service.reader.web3.provider.endpoint_uri == "https://rpc.example"


def test_create_service_rejects_unknown_variant(restore_global_config: None):
    config.set_config({"rpc_urls": {"1": "https://rpc.example"}})
    with pytest.raises(ValueError, match="variant"):
        create_service("partial")


@pytest.mark.asyncio
async def test_get_underlying_apys_closes_service():
    reader = mock_reader()
    api = mock_api_client()
    service = UnderlyingYieldService(
        reader, [StubAdapter("sDAI", reader, onchain=0.05)], api_client=api
    )
    with patch(
        "underlying_yield.core.engine.aggregator.create_service", return_value=service
    ) as factory:
        apys = await get_underlying_apys("reduced")

    assert apys == {"sDAI": 0.05}
    factory.assert_called_once_with("reduced", rpc_url=None)
    reader.close.assert_awaited_once()
    api.close.assert_awaited_once()
