from __future__ import annotations


class YieldError(Exception):
    """Base class for failures while deriving an underlying yield."""


class NodeUnreachableError(YieldError):
    """The JSON-RPC node errored or did not answer in time."""


class InsufficientDataError(YieldError):
    """On-chain signal is missing, malformed or degenerate for the token."""


class FallbackUnavailableError(YieldError):
    """A fallback REST endpoint failed or returned an unexpected payload."""
