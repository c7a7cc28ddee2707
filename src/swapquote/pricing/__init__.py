"""Swap output estimation for Uniswap V2 pairs."""

from swapquote.pricing.engine import (
    FEE_DENOMINATOR,
    FEE_NUMERATOR,
    AmountOut,
    PricingEngine,
    calculate_output_amount,
    parse_amount,
)

__all__ = [
    "FEE_NUMERATOR",
    "FEE_DENOMINATOR",
    "AmountOut",
    "PricingEngine",
    "calculate_output_amount",
    "parse_amount",
]
