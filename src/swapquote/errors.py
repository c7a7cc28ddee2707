"""Error types raised by the quoting core.

The HTTP layer maps each class to a status code; the core itself never
converts these into responses.
"""


class SwapQuoteError(Exception):
    """Base class for all service errors."""

    pass


class ConfigurationError(SwapQuoteError):
    """Raised when required configuration is missing or malformed."""

    pass


class InvalidArgumentError(SwapQuoteError, ValueError):
    """Raised for malformed addresses, amounts or formula inputs."""

    pass


class PairNotFoundError(SwapQuoteError):
    """Raised when the factory has no liquidity pool for a token pair."""

    def __init__(self, token_a: str, token_b: str):
        self.token_a = token_a
        self.token_b = token_b
        super().__init__("Liquidity pool not found for the token pair")


class UpstreamError(SwapQuoteError):
    """Raised when the chain node fails or returns inconsistent data."""

    pass


class RpcError(UpstreamError):
    """Raised by the chain gateway when a contract read fails."""

    pass


class GasPriceUnavailableError(UpstreamError):
    """Raised when the gas price query fails and nothing is cached."""

    pass
