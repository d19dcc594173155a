from __future__ import annotations

import time
from typing import Any, TypeVar

import httpx
from loguru import logger
from pydantic import BaseModel, ValidationError

from underlying_yield.core.adapters.models import (
    EtherFiAprResponse,
    LidoAprResponse,
    RocketPoolAprResponse,
    StaderApyResponse,
)
from underlying_yield.core.constants.base import DEFAULT_HTTP_TIMEOUT
from underlying_yield.core.constants.yield_contracts import (
    ETHERFI_APR_URL,
    LIDO_STETH_APR_URL,
    ROCKETPOOL_APR_URL,
    STADER_ETHX_APY_URL,
)
from underlying_yield.core.errors import FallbackUnavailableError


M = TypeVar("M", bound=BaseModel)


class StakingApiClient:
    """Protocol-published APR/APY endpoints used when on-chain data is thin.

    Every failure (transport, timeout, HTTP status, schema) is raised as
    ``FallbackUnavailableError``.
    """

    def __init__(
        self,
        *,
        client: httpx.AsyncClient | None = None,
        timeout_s: float = DEFAULT_HTTP_TIMEOUT,
    ) -> None:
        self._owns_client = client is None
        self.client = client or httpx.AsyncClient(timeout=httpx.Timeout(timeout_s))

    async def close(self) -> None:
        if self._owns_client:
            await self.client.aclose()

    async def _get(self, url: str, model: type[M]) -> M:
        logger.debug(f"Making GET request to {url}")
        start_time = time.time()
        try:
            resp = await self.client.get(url)
            resp.raise_for_status()
            data: Any = resp.json()
        except httpx.HTTPError as exc:
            raise FallbackUnavailableError(f"GET {url} failed: {exc}") from exc
        except ValueError as exc:
            raise FallbackUnavailableError(f"GET {url} returned non-JSON body") from exc

        elapsed = time.time() - start_time
        logger.debug(f"HTTP {resp.status_code} response for GET {url} after {elapsed:.2f}s")
        try:
            return model.model_validate(data)
        except ValidationError as exc:
            raise FallbackUnavailableError(
                f"GET {url} returned unexpected payload: {exc.error_count()} error(s)"
            ) from exc

    async def get_lido_steth_apr(self) -> float:
        """Lido's latest stETH APR exactly as published (``data.apr``)."""
        payload = await self._get(LIDO_STETH_APR_URL, LidoAprResponse)
        return payload.data.apr

    async def get_rocketpool_yearly_apr(self) -> float:
        """Rocket Pool's 7-day-average rETH APR, in percent."""
        payload = await self._get(ROCKETPOOL_APR_URL, RocketPoolAprResponse)
        return payload.yearlyAPR

    async def get_stader_ethx_apy(self) -> float:
        """Stader's ETHx APY, in percent."""
        payload = await self._get(STADER_ETHX_APY_URL, StaderApyResponse)
        return payload.value

    async def get_etherfi_aprs(self) -> EtherFiAprResponse:
        """Ether.fi's recent APR samples, in basis points, oldest first."""
        return await self._get(ETHERFI_APR_URL, EtherFiAprResponse)
