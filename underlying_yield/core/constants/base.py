# Timeout constants (seconds)
DEFAULT_HTTP_TIMEOUT = 10.0  # fallback REST endpoints
DEFAULT_RPC_TIMEOUT = 10.0  # single JSON-RPC request
DEFAULT_ADAPTER_TIMEOUT = 30.0  # whole on-chain + fallback path of one token

SECONDS_PER_DAY = 24 * 60 * 60
SECONDS_PER_YEAR = 365 * SECONDS_PER_DAY

# Fixed-point precisions used on-chain
WAD_PRECISION = 18
RAY_PRECISION = 27
WAD = 10**WAD_PRECISION
RAY = 10**RAY_PRECISION

# Compounding frequencies (times per year)
COMPOUND_DAILY = 365
COMPOUND_QUARTER_DAY = 365 * 4

DEFAULT_LOOKBACK_DAYS = 7
