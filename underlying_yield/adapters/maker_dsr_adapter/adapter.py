from __future__ import annotations

from typing import Any

from underlying_yield.core.adapters.BaseAdapter import YieldAdapter
from underlying_yield.core.constants.base import RAY_PRECISION
from underlying_yield.core.constants.symbols import SDAI
from underlying_yield.core.constants.yield_abi import MAKER_POT_ABI
from underlying_yield.core.constants.yield_contracts import MAKER_MCD_POT
from underlying_yield.core.utils.interest import continuous_rate_to_apy
from underlying_yield.core.utils.units import to_decimal
from underlying_yield.core.utils.web3 import ChainReader


class MakerDsrAdapter(YieldAdapter):
    """
    sDAI: Dai Savings Rate read straight from the MCD Pot.

    ``dsr()`` is a per-second growth factor in ray, so the APY is
    ``dsr ** SECONDS_PER_YEAR - 1`` (same approach as DefiLlama's makerdao
    adaptor). No historical window and no fallback.
    """

    adapter_type = "MAKER_DSR"
    symbol = SDAI
    has_fallback = False
    requires_block = False

    def __init__(
        self,
        reader: ChainReader,
        *,
        pot_address: str = MAKER_MCD_POT,
        **kwargs: Any,
    ) -> None:
        super().__init__("maker_dsr_adapter", reader, **kwargs)
        self.pot_address = pot_address

    async def fetch_apy_onchain(self, current_block: int | None) -> float:
        dsr = await self.reader.call(self.pot_address, MAKER_POT_ABI, "dsr")
        return continuous_rate_to_apy(to_decimal(int(dsr), RAY_PRECISION))
