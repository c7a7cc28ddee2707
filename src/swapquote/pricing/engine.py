"""Uniswap V2 output amount estimation.

amountOut = (amountIn * 997 * reserveOut) / (reserveIn * 1000 + amountIn * 997)

All math is exact integer arithmetic with floor division, the same rounding
the pair contract applies, so quotes never exceed what a swap would pay.
"""

import asyncio
import logging
import re
from dataclasses import dataclass

from swapquote.chain.gateway import ChainGateway
from swapquote.chain.types import PairContract, Reserves, TokenPair, canonical_bytes
from swapquote.errors import (
    InvalidArgumentError,
    PairNotFoundError,
    UpstreamError,
)

logger = logging.getLogger(__name__)

FEE_NUMERATOR = 997  # 0.3% fee
FEE_DENOMINATOR = 1000

_DECIMAL_LITERAL = re.compile(r"^[0-9]+$")
_HEX_LITERAL = re.compile(r"^0[xX][0-9a-fA-F]+$")


@dataclass(frozen=True)
class AmountOut:
    """Estimated swap output in the output token's smallest unit."""

    amount_out: str


def parse_amount(value: str) -> int:
    """Parse a positive integer amount (decimal or 0x-hex literal).

    Raises:
        InvalidArgumentError: empty, signed, fractional, non-numeric or zero
    """
    text = value.strip() if isinstance(value, str) else ""
    if _DECIMAL_LITERAL.match(text):
        amount = int(text, 10)
    elif _HEX_LITERAL.match(text):
        amount = int(text, 16)
    else:
        raise InvalidArgumentError(f"Invalid amount: {value!r}")

    if amount <= 0:
        raise InvalidArgumentError("Input amount must be greater than 0")
    return amount


def calculate_output_amount(amount_in: int, reserve_in: int, reserve_out: int) -> int:
    """Calculate the output amount for a swap using the Uniswap V2 formula.

    Args:
        amount_in: Input amount of tokens
        reserve_in: Reserve of the input token in the pool
        reserve_out: Reserve of the output token in the pool

    Returns:
        Output amount, rounded down

    Raises:
        InvalidArgumentError: any argument is not strictly positive
    """
    if amount_in <= 0 or reserve_in <= 0 or reserve_out <= 0:
        raise InvalidArgumentError("Invalid input: amounts and reserves must be positive")

    amount_in_with_fee = amount_in * FEE_NUMERATOR
    numerator = amount_in_with_fee * reserve_out
    denominator = reserve_in * FEE_DENOMINATOR + amount_in_with_fee
    return numerator // denominator


class PricingEngine:
    """Quotes swaps against Uniswap V2 pairs through the chain gateway."""

    def __init__(self, gateway: ChainGateway):
        self.gateway = gateway

    def calculate_output_amount(self, amount_in: int, reserve_in: int, reserve_out: int) -> int:
        """Apply the V2 formula to reserves already oriented for the swap."""
        return calculate_output_amount(amount_in, reserve_in, reserve_out)

    async def get_amount_out(self, from_token: str, to_token: str, amount_in: str) -> AmountOut:
        """Get the estimated output amount for a token swap.

        Args:
            from_token: Address of the input token
            to_token: Address of the output token
            amount_in: Input amount in the smallest unit, as a string

        Raises:
            InvalidArgumentError: malformed amount or address, or empty pool
            PairNotFoundError: no liquidity pool for the pair
            UpstreamError: node failure or inconsistent pair data
        """
        amount = parse_amount(amount_in)

        try:
            pair = await self.gateway.get_pair(from_token, to_token)
            if pair is None:
                raise PairNotFoundError(from_token, to_token)

            reserves, tokens = await asyncio.gather(
                self.gateway.get_reserves(pair),
                self.gateway.get_token_addresses(pair),
            )
            reserve_in, reserve_out = self._orient(pair, from_token, tokens, reserves)
        except (PairNotFoundError, InvalidArgumentError, UpstreamError):
            raise
        except Exception as e:
            raise UpstreamError(f"Failed to calculate output amount: {e}") from e

        amount_out = self.calculate_output_amount(amount, reserve_in, reserve_out)
        logger.debug(
            f"Quote {amount} {from_token} -> {amount_out} {to_token} "
            f"via {pair.address} (reserves {reserve_in}/{reserve_out})"
        )
        return AmountOut(amount_out=str(amount_out))

    @staticmethod
    def _orient(
        pair: PairContract, from_token: str, tokens: TokenPair, reserves: Reserves
    ) -> tuple[int, int]:
        """Return (reserve_in, reserve_out) for selling ``from_token``."""
        try:
            token0 = canonical_bytes(tokens.token0)
            token1 = canonical_bytes(tokens.token1)
        except InvalidArgumentError as e:
            raise UpstreamError(f"Pair {pair.address} returned a malformed token address: {e}") from e

        from_key = canonical_bytes(from_token)
        if from_key == token0:
            return reserves.reserve0, reserves.reserve1
        if from_key == token1:
            return reserves.reserve1, reserves.reserve0
        raise UpstreamError(f"Pair {pair.address} does not contain token {from_token}")
