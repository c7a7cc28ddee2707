"""Gas price and swap quote request validation and response contracts."""

from dataclasses import dataclass, field
from typing import Generic, Optional, TypeVar

from pydantic import BaseModel, Field

from swapquote.chain.types import is_address
from swapquote.errors import InvalidArgumentError
from swapquote.pricing.engine import parse_amount

T = TypeVar("T")


@dataclass(frozen=True)
class ValidationResult(Generic[T]):
    """Outcome of validating raw request input."""

    value: Optional[T] = None
    errors: tuple[str, ...] = field(default_factory=tuple)

    @property
    def ok(self) -> bool:
        return not self.errors

    @property
    def message(self) -> str:
        return "; ".join(self.errors)


@dataclass(frozen=True)
class SwapQuoteRequest:
    """A validated swap quote request."""

    from_token: str
    to_token: str
    amount_in: int


def validate_address(value: str, name: str = "address") -> ValidationResult[str]:
    """Validate a 0x-prefixed 20-byte hex address."""
    if not is_address(value):
        return ValidationResult(errors=(f"{name} must be an Ethereum address",))
    return ValidationResult(value=value)


def validate_quote_request(
    from_token: str,
    to_token: str,
    amount_in: str,
) -> ValidationResult[SwapQuoteRequest]:
    """Validate the path parameters of a quote request.

    All problems are reported together rather than stopping at the first.
    """
    errors: list[str] = []

    from_result = validate_address(from_token, "fromTokenAddress")
    to_result = validate_address(to_token, "toTokenAddress")
    errors.extend(from_result.errors)
    errors.extend(to_result.errors)

    if from_result.ok and to_result.ok and from_token.lower() == to_token.lower():
        errors.append("fromTokenAddress and toTokenAddress must differ")

    amount: Optional[int] = None
    try:
        amount = parse_amount(amount_in)
    except InvalidArgumentError as e:
        errors.append(f"amountIn: {e}")

    if errors:
        return ValidationResult(errors=tuple(errors))

    return ValidationResult(
        value=SwapQuoteRequest(from_token=from_token, to_token=to_token, amount_in=amount)
    )


class GasPriceResponse(BaseModel):
    """Current gas price."""

    gasPrice: str = Field(..., description="Current gas price in gwei", examples=["12.5"])


class AmountOutResponse(BaseModel):
    """Estimated swap output."""

    amountOut: str = Field(
        ..., description="Estimated output amount in wei", examples=["181322178776029826"]
    )


class ErrorResponse(BaseModel):
    """Error body returned for 4xx/5xx responses."""

    detail: str = Field(..., description="Error message")
