"""Ethereum access layer.

- RpcClient: AsyncWeb3 wrapper (fee data, contract view calls)
- ChainGateway: cached gas price and Uniswap V2 factory/pair reads
"""

from swapquote.chain.client import RpcClient
from swapquote.chain.gateway import ChainGateway, format_gwei
from swapquote.chain.types import (
    ZERO_ADDRESS,
    FeeData,
    GasPriceSample,
    PairContract,
    Reserves,
    TokenPair,
    canonical_address,
    is_address,
    sort_tokens,
)

__all__ = [
    "RpcClient",
    "ChainGateway",
    "format_gwei",
    "ZERO_ADDRESS",
    "FeeData",
    "GasPriceSample",
    "PairContract",
    "Reserves",
    "TokenPair",
    "canonical_address",
    "is_address",
    "sort_tokens",
]
