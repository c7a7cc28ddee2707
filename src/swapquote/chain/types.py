"""Value types shared by the chain gateway and the pricing engine."""

import re
from dataclasses import dataclass
from typing import Optional

from swapquote.errors import InvalidArgumentError

ZERO_ADDRESS = "0x0000000000000000000000000000000000000000"

ADDRESS_PATTERN = re.compile(r"^0x[0-9a-fA-F]{40}$")


@dataclass(frozen=True)
class GasPriceSample:
    """A gas price observation held by the gateway cache."""

    price_gwei: str
    observed_at_ms: int


@dataclass(frozen=True)
class FeeData:
    """Network fee data in wei. Any field may be unknown."""

    gas_price: Optional[int] = None
    max_fee_per_gas: Optional[int] = None
    max_priority_fee_per_gas: Optional[int] = None


@dataclass(frozen=True)
class PairContract:
    """Handle to a Uniswap V2 pair contract."""

    address: str

    def __repr__(self) -> str:
        return f"Pair({self.address[:10]}...)"


@dataclass(frozen=True)
class TokenPair:
    """The two tokens of a pair, as reported by the pair contract."""

    token0: str
    token1: str


@dataclass(frozen=True)
class Reserves:
    """Pair reserves at the latest block."""

    reserve0: int
    reserve1: int
    block_timestamp_last: int = 0


def is_address(value: str) -> bool:
    """Check for a 0x-prefixed 20-byte hex address (any case)."""
    return isinstance(value, str) and ADDRESS_PATTERN.match(value) is not None


def canonical_address(value: str) -> str:
    """Return the lower-cased form of an address used for comparisons."""
    if not is_address(value):
        raise InvalidArgumentError(f"Invalid Ethereum address: {value!r}")
    return value.lower()


def canonical_bytes(value: str) -> bytes:
    """Return the raw 20-byte value of an address."""
    return bytes.fromhex(canonical_address(value)[2:])


def same_address(a: str, b: str) -> bool:
    """Compare two addresses by value, ignoring checksum casing."""
    return canonical_bytes(a) == canonical_bytes(b)


def sort_tokens(token_a: str, token_b: str) -> tuple[str, str]:
    """Order two token addresses the way the factory does (ascending bytes).

    Returns:
        (token0, token1) in canonical lower-case form
    """
    a = canonical_address(token_a)
    b = canonical_address(token_b)
    if canonical_bytes(a) == canonical_bytes(b):
        raise InvalidArgumentError("Token addresses must differ")
    return (a, b) if canonical_bytes(a) < canonical_bytes(b) else (b, a)
