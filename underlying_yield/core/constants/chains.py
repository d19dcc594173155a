CHAIN_ID_ETHEREUM = 1

# Lookback windows are sized in blocks, assuming a fixed post-merge slot time.
# This is a heuristic: missed slots make the real window slightly longer.
ETHEREUM_BLOCK_TIME_S = 12
ETHEREUM_BLOCKS_PER_DAY = 24 * 60 * 60 // ETHEREUM_BLOCK_TIME_S
