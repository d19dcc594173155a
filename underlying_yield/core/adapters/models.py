from __future__ import annotations

import math
from dataclasses import dataclass
from decimal import Decimal
from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field


class YieldSource(StrEnum):
    ONCHAIN = "onchain"
    FALLBACK = "fallback"
    DEFAULT = "default"
    UNAVAILABLE = "unavailable"


@dataclass(frozen=True)
class RateObservation:
    """Derivative/underlying exchange rate sampled at ``timestamp`` (unix seconds)."""

    rate: Decimal | float
    timestamp: int

    @property
    def is_valid(self) -> bool:
        try:
            rate = float(self.rate)
        except (TypeError, ValueError, ArithmeticError):
            return False
        return math.isfinite(rate) and rate > 0


@dataclass(frozen=True)
class YieldResult:
    symbol: str
    apy: float | None
    source: YieldSource


UnderlyingAPYs = dict[str, float | None]


# Fallback REST payloads. Only the fields we read are declared; anything
# missing or of the wrong type fails validation.


class _Payload(BaseModel):
    model_config = ConfigDict(extra="ignore")


class LidoAprData(_Payload):
    timeUnix: int | None = None
    apr: float


class LidoAprResponse(_Payload):
    data: LidoAprData


class RocketPoolAprResponse(_Payload):
    yearlyAPR: float


class StaderApyResponse(_Payload):
    value: float


class EtherFiAprResponse(_Payload):
    # Upstream spells it "sucess"; absent means no usable samples.
    success: bool = Field(default=False, alias="sucess")
    latest_aprs: list[float] = Field(default_factory=list)
