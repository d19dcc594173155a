from __future__ import annotations

from typing import Any

# Minimal ABIs: only the events and views read to derive exchange rates.

LIDO_TOKEN_REBASED_ABI: list[dict[str, Any]] = [
    {
        "type": "event",
        "name": "TokenRebased",
        "anonymous": False,
        "inputs": [
            {"indexed": True, "name": "reportTimestamp", "type": "uint256"},
            {"indexed": False, "name": "timeElapsed", "type": "uint256"},
            {"indexed": False, "name": "preTotalShares", "type": "uint256"},
            {"indexed": False, "name": "preTotalEther", "type": "uint256"},
            {"indexed": False, "name": "postTotalShares", "type": "uint256"},
            {"indexed": False, "name": "postTotalEther", "type": "uint256"},
            {"indexed": False, "name": "sharesMintedAsFees", "type": "uint256"},
        ],
    },
]

MAKER_POT_ABI: list[dict[str, Any]] = [
    {
        "type": "function",
        "name": "dsr",
        "stateMutability": "view",
        "inputs": [],
        "outputs": [{"name": "", "type": "uint256"}],
    },
]

ROCKETPOOL_BALANCES_UPDATED_ABI: list[dict[str, Any]] = [
    {
        "type": "event",
        "name": "BalancesUpdated",
        "anonymous": False,
        "inputs": [
            {"indexed": True, "name": "block", "type": "uint256"},
            {"indexed": False, "name": "slotTimestamp", "type": "uint256"},
            {"indexed": False, "name": "totalEth", "type": "uint256"},
            {"indexed": False, "name": "stakingEth", "type": "uint256"},
            {"indexed": False, "name": "rethSupply", "type": "uint256"},
            {"indexed": False, "name": "blockTimestamp", "type": "uint256"},
        ],
    },
]

STADER_EXCHANGE_RATE_UPDATED_ABI: list[dict[str, Any]] = [
    {
        "type": "event",
        "name": "ExchangeRateUpdated",
        "anonymous": False,
        "inputs": [
            {"indexed": False, "name": "block", "type": "uint256"},
            {"indexed": False, "name": "totalEth", "type": "uint256"},
            {"indexed": False, "name": "ethxSupply", "type": "uint256"},
            {"indexed": False, "name": "time", "type": "uint256"},
        ],
    },
]

CBETH_EXCHANGE_RATE_UPDATED_ABI: list[dict[str, Any]] = [
    {
        "type": "event",
        "name": "ExchangeRateUpdated",
        "anonymous": False,
        "inputs": [
            {"indexed": True, "name": "oracle", "type": "address"},
            {"indexed": False, "name": "newExchangeRate", "type": "uint256"},
        ],
    },
]

ETHERFI_REBASE_ABI: list[dict[str, Any]] = [
    {
        "type": "event",
        "name": "Rebase",
        "anonymous": False,
        "inputs": [
            {"indexed": False, "name": "totalEthLocked", "type": "uint256"},
            {"indexed": False, "name": "totalEEthShares", "type": "uint256"},
        ],
    },
]
