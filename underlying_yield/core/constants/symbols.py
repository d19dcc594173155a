from __future__ import annotations

from typing import Literal

WSTETH = "wstETH"
SDAI = "sDAI"
RETH = "rETH"
ETHX = "ETHx"
CBETH = "cbETH"
WEETH = "weETH"

Variant = Literal["full", "reduced"]

# Output key order is part of the result contract.
SYMBOLS_BY_VARIANT: dict[str, tuple[str, ...]] = {
    "full": (WSTETH, SDAI, RETH, ETHX, CBETH, WEETH),
    "reduced": (WSTETH, SDAI),
}
DEFAULT_VARIANT: Variant = "full"
