from __future__ import annotations

from eth_utils import to_checksum_address

# Ethereum mainnet contracts that emit (or expose) exchange-rate updates.
#
# Deployed contracts:
# - https://docs.lido.fi/deployed-contracts/
# - https://docs.rocketpool.net/overview/contracts-integrations
# - https://www.staderlabs.com/docs-v1/Ethereum/Smart-contracts
# - https://etherfi.gitbook.io/etherfi/contracts-and-integrations/deployed-contracts

# Lido stETH token (emits TokenRebased on every oracle report)
LIDO_STETH = to_checksum_address("0xae7ab96520DE3A18E5e111B5EaAb095312D7fE84")

# Maker DSR Pot (MCD Pot); sDAI accrues the DSR
MAKER_MCD_POT = to_checksum_address("0x197E90f9FAD81970bA7976f33CbD77088E5D7cf7")

# RocketNetworkBalances
ROCKETPOOL_NETWORK_BALANCES = to_checksum_address(
    "0x6Cc65bF618F55ce2433f9D8d827Fc44117D81399"
)

# Stader Labs oracle
STADER_ORACLE = to_checksum_address("0xF64bAe65f6f2a5277571143A24FaaFDFC0C2a737")

# Coinbase cbETH exchange-rate oracle
CBETH_ORACLE = to_checksum_address("0x9b37180d847B27ADC13C2277299045C1237Ae281")

# Ether.fi LiquidityPool
ETHERFI_LIQUIDITY_POOL = to_checksum_address(
    "0x308861A430be4cce5502d0A12724771Fc6DaF216"
)

# Fallback REST endpoints
LIDO_STETH_APR_URL = "https://eth-api.lido.fi/v1/protocol/steth/apr/last"
ROCKETPOOL_APR_URL = "https://api.rocketpool.net/api/apr"
STADER_ETHX_APY_URL = "https://universe.staderlabs.com/eth/apy"
ETHERFI_APR_URL = "https://www.etherfi.bid/api/etherfi/apr"
