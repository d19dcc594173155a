import asyncio
import os
import time
from collections.abc import Awaitable
from typing import Any

from loguru import logger
from web3 import AsyncHTTPProvider, AsyncWeb3

from underlying_yield.core.config import get_rpc_timeout, get_rpc_urls
from underlying_yield.core.constants.base import DEFAULT_RPC_TIMEOUT
from underlying_yield.core.constants.chains import CHAIN_ID_ETHEREUM
from underlying_yield.core.errors import NodeUnreachableError

_ENV_RPC_URL = "ETH_RPC_URL"


class ChainReader:
    """Read-only view of a chain: block height, view calls and decoded logs.

    Every node failure, including an exceeded ``timeout_s``, surfaces as
    ``NodeUnreachableError``. Nothing is retried here.
    """

    def __init__(
        self, web3: AsyncWeb3, *, timeout_s: float = DEFAULT_RPC_TIMEOUT
    ) -> None:
        self.web3 = web3
        self.timeout_s = float(timeout_s)

    async def _request(self, what: str, awaitable: Awaitable[Any]) -> Any:
        start_time = time.time()
        try:
            result = await asyncio.wait_for(awaitable, timeout=self.timeout_s)
        except TimeoutError as exc:
            raise NodeUnreachableError(
                f"{what} timed out after {self.timeout_s:.1f}s"
            ) from exc
        except Exception as exc:
            raise NodeUnreachableError(f"{what} failed: {exc}") from exc
        logger.debug(f"RPC {what} answered in {time.time() - start_time:.2f}s")
        return result

    async def block_number(self) -> int:
        return int(await self._request("eth_blockNumber", self.web3.eth.block_number))

    async def get_block_timestamp(self, block_number: int) -> int:
        block = await self._request(
            f"eth_getBlockByNumber({block_number})",
            self.web3.eth.get_block(int(block_number)),
        )
        return int(block["timestamp"])

    async def call(
        self, address: str, abi: list[dict[str, Any]], fn_name: str, *args: Any
    ) -> Any:
        contract = self.web3.eth.contract(address=address, abi=abi)
        fn = getattr(contract.functions, fn_name)
        return await self._request(f"eth_call({fn_name})", fn(*args).call())

    async def get_logs(
        self,
        address: str,
        abi: list[dict[str, Any]],
        event_name: str,
        from_block: int,
        to_block: int,
    ) -> list[Any]:
        contract = self.web3.eth.contract(address=address, abi=abi)
        event = getattr(contract.events, event_name)
        logs = await self._request(
            f"eth_getLogs({event_name} {from_block}..{to_block})",
            event.get_logs(from_block=int(from_block), to_block=int(to_block)),
        )
        return list(logs)

    async def close(self) -> None:
        await self.web3.provider.disconnect()


def _get_rpcs_for_chain_id(chain_id: int) -> list:
    mapping = get_rpc_urls()
    rpcs = mapping.get(str(chain_id))
    if rpcs is None:
        rpcs = mapping.get(chain_id)  # allow int keys
    if rpcs is None and chain_id == CHAIN_ID_ETHEREUM:
        rpcs = os.environ.get(_ENV_RPC_URL, "").strip() or None
    if rpcs is None:
        raise ValueError(f"No RPCs configured for chain ID {chain_id}")
    if isinstance(rpcs, str):
        return [rpcs]
    return rpcs


def _get_web3(rpc: str) -> AsyncWeb3:
    return AsyncWeb3(AsyncHTTPProvider(rpc))


def get_reader_from_chain_id(
    chain_id: int = CHAIN_ID_ETHEREUM, *, rpc_url: str | None = None
) -> ChainReader:
    rpc = rpc_url or _get_rpcs_for_chain_id(chain_id)[0]
    return ChainReader(_get_web3(rpc), timeout_s=get_rpc_timeout())
