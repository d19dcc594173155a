from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from typing import Any, TypeVar

from underlying_yield.core.constants.base import DEFAULT_LOOKBACK_DAYS
from underlying_yield.core.constants.chains import ETHEREUM_BLOCKS_PER_DAY
from underlying_yield.core.errors import InsufficientDataError
from underlying_yield.core.utils.web3 import ChainReader

T = TypeVar("T")


@dataclass(frozen=True)
class EventWindow:
    """Inclusive block range to scan for one contract event."""

    contract_address: str
    event_name: str
    from_block: int
    to_block: int

    @classmethod
    def lookback(
        cls,
        contract_address: str,
        event_name: str,
        current_block: int,
        *,
        days: int = DEFAULT_LOOKBACK_DAYS,
        blocks_per_day: int = ETHEREUM_BLOCKS_PER_DAY,
    ) -> EventWindow:
        """Window ending at ``current_block`` and reaching back ~``days`` days.

        Block count is estimated from a fixed block time, so the covered
        wall-clock span is approximate.
        """
        current_block = int(current_block)
        return cls(
            contract_address=contract_address,
            event_name=event_name,
            from_block=max(0, current_block - blocks_per_day * int(days)),
            to_block=current_block,
        )


def _block_order(log: Mapping[str, Any]) -> tuple[int, int]:
    return int(log.get("blockNumber") or 0), int(log.get("logIndex") or 0)


async def fetch_events(
    reader: ChainReader, window: EventWindow, abi: list[dict[str, Any]]
) -> list[Any]:
    """Decoded logs of ``window``, ascending by (block, log index).

    Node failures propagate as ``NodeUnreachableError``.
    """
    logs = await reader.get_logs(
        window.contract_address,
        abi,
        window.event_name,
        window.from_block,
        window.to_block,
    )
    return sorted(logs, key=_block_order)


def event_args(log: Mapping[str, Any], *names: str) -> tuple[int, ...]:
    """Pull integer event arguments, rejecting missing or non-integer values."""
    args = log.get("args") if isinstance(log, Mapping) else None
    if not args:
        raise InsufficientDataError("event has no decoded args")
    values: list[int] = []
    for name in names:
        value = args.get(name)
        if isinstance(value, bool) or not isinstance(value, int):
            raise InsufficientDataError(f"event arg {name!r} missing or malformed")
        values.append(value)
    return tuple(values)


def earliest_and_latest(items: Sequence[T]) -> tuple[T, T]:
    if len(items) < 2:
        raise InsufficientDataError(f"need two observations, got {len(items)}")
    return items[0], items[-1]
