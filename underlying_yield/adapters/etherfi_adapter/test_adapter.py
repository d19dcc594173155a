import asyncio

import pytest

from underlying_yield.adapters.etherfi_adapter.adapter import EtherFiAdapter
from underlying_yield.core.adapters.models import EtherFiAprResponse, YieldSource
from underlying_yield.core.utils.interest import apr_to_apy
from underlying_yield.testing.chain import event_log, mock_api_client, mock_reader

ETH = 10**18
T0 = 1_700_000_000


def _rebase(block: int, locked: int, shares: int):
    return event_log(block, totalEthLocked=locked, totalEEthShares=shares)


def _aprs(success: bool, samples: list[float]) -> EtherFiAprResponse:
    return EtherFiAprResponse.model_validate({"sucess": success, "latest_aprs": samples})


def test_adapter_type():
    adapter = EtherFiAdapter(mock_reader())
    assert adapter.adapter_type == "ETHERFI"
    assert adapter.symbol == "weETH"
    assert adapter.compounding_frequency == 1460
    assert adapter.source.event_name == "Rebase"
    assert adapter.source.min_observations == 3


@pytest.mark.asyncio
async def test_onchain_rebases():
    reader = mock_reader(
        logs=[
            _rebase(100, 1_050 * ETH, 1_000 * ETH),
            _rebase(1_900, 1_050_050 * ETH // 1_000, 1_000 * ETH),
            _rebase(7_300, 1_050_105 * ETH // 1_000, 1_000 * ETH),
        ],
        block_timestamps={100: T0, 7_300: T0 + 86_400},
    )
    result = await EtherFiAdapter(reader).get_apy(20_000_000)

    apr = (1.050105 / 1.05 - 1) * 365
    assert result.source == YieldSource.ONCHAIN
    assert result.apy == pytest.approx(apr_to_apy(apr, 1460), rel=1e-9)


@pytest.mark.asyncio
async def test_malformed_events_do_not_count():
    api = mock_api_client()
    api.get_etherfi_aprs.return_value = _aprs(True, [300.0])
    reader = mock_reader(
        logs=[
            _rebase(100, 1_050 * ETH, 1_000 * ETH),
            _rebase(200, 1_051 * ETH, 0),
            event_log(300, totalEthLocked=1_052 * ETH),
            _rebase(400, 1_053 * ETH, 1_000 * ETH),
        ],
        block_timestamps={100: T0, 400: T0 + 86_400},
    )
    result = await EtherFiAdapter(reader, api_client=api).get_apy(20_000_000)

    assert result.source == YieldSource.FALLBACK
    reader.get_block_timestamp.assert_not_awaited()


@pytest.mark.asyncio
async def test_fallback_uses_latest_sample_in_basis_points():
    api = mock_api_client()
    api.get_etherfi_aprs.return_value = _aprs(True, [250.0, 280.0, 310.0])
    result = await EtherFiAdapter(mock_reader(logs=[]), api_client=api).get_apy(
        20_000_000
    )
    assert result.source == YieldSource.FALLBACK
    assert result.apy == pytest.approx(apr_to_apy(0.031, 1460))


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "payload",
    [_aprs(False, [310.0]), _aprs(True, [])],
)
async def test_fallback_without_samples_reports_zero(payload):
    api = mock_api_client()
    api.get_etherfi_aprs.return_value = payload
    result = await EtherFiAdapter(mock_reader(logs=[]), api_client=api).get_apy(
        20_000_000
    )
    assert result.apy == 0.0
    assert result.source == YieldSource.FALLBACK


@pytest.mark.asyncio
async def test_fallback_without_success_flag_reports_zero():
    api = mock_api_client()
    api.get_etherfi_aprs.return_value = EtherFiAprResponse.model_validate(
        {"latest_aprs": [310.0]}
    )
    result = await EtherFiAdapter(mock_reader(logs=[]), api_client=api).get_apy(
        20_000_000
    )
    assert result.apy == 0.0
    assert result.source == YieldSource.FALLBACK


async def _slow_logs(*args):
    await asyncio.sleep(5)


@pytest.mark.asyncio
async def test_slow_node_still_reaches_fallback():
    reader = mock_reader()
    reader.get_logs.side_effect = _slow_logs
    api = mock_api_client()
    api.get_etherfi_aprs.return_value = _aprs(True, [310.0])

    result = await EtherFiAdapter(reader, api_client=api).get_apy(
        20_000_000, timeout_s=0.05
    )

    assert result.source == YieldSource.FALLBACK
    assert result.apy == pytest.approx(apr_to_apy(0.031, 1460))
