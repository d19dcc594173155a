from underlying_yield.core.clients.StakingApiClient import StakingApiClient

__all__ = ["StakingApiClient"]
