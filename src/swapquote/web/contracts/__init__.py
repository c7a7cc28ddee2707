"""Request validation and response contracts for the HTTP layer."""

from swapquote.web.contracts.prices import (
    AmountOutResponse,
    ErrorResponse,
    GasPriceResponse,
    SwapQuoteRequest,
    ValidationResult,
    validate_address,
    validate_quote_request,
)

__all__ = [
    "AmountOutResponse",
    "ErrorResponse",
    "GasPriceResponse",
    "SwapQuoteRequest",
    "ValidationResult",
    "validate_address",
    "validate_quote_request",
]
