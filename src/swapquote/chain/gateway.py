"""Chain gateway: gas price cache and Uniswap V2 contract reads.

The gateway owns the only shared mutable state in the service, the gas
price cache slot. Reads of the factory and pair contracts are stateless.
"""

import asyncio
import logging
import time
from typing import Callable, Optional

from web3 import AsyncWeb3

from swapquote.chain.abi import UNISWAP_V2_FACTORY_ABI, UNISWAP_V2_PAIR_ABI
from swapquote.chain.client import RpcClient
from swapquote.chain.types import (
    ZERO_ADDRESS,
    GasPriceSample,
    PairContract,
    Reserves,
    TokenPair,
    is_address,
    same_address,
    sort_tokens,
)
from swapquote.config import Settings
from swapquote.errors import ConfigurationError, GasPriceUnavailableError, RpcError

logger = logging.getLogger(__name__)

GWEI_DECIMALS = 9
GAS_PRICE_CACHE_TTL_MS = 10_000


def monotonic_ms() -> int:
    """Milliseconds from a clock that never goes backwards."""
    return int(time.monotonic() * 1000)


def format_gwei(wei: int) -> str:
    """Format a wei amount as a gwei decimal string.

    Keeps every significant fractional digit and at least one, so 10 gwei
    is "10.0" and 1 wei is "0.000000001".
    """
    whole, fraction = divmod(wei, 10**GWEI_DECIMALS)
    digits = f"{fraction:0{GWEI_DECIMALS}d}".rstrip("0") or "0"
    return f"{whole}.{digits}"


class ChainGateway:
    """Read-only access to gas price and Uniswap V2 pairs."""

    def __init__(
        self,
        rpc: RpcClient,
        factory_address: str,
        cache_ttl_ms: int = GAS_PRICE_CACHE_TTL_MS,
        clock: Callable[[], int] = monotonic_ms,
    ):
        """Initialize the gateway.

        Args:
            rpc: RPC client used for all node access
            factory_address: Uniswap V2 factory contract address
            cache_ttl_ms: Gas price cache lifetime in milliseconds
            clock: Millisecond clock, must be non-decreasing
        """
        if not factory_address:
            raise ConfigurationError("Uniswap V2 factory address is not configured")
        if not is_address(factory_address):
            raise ConfigurationError(f"Invalid Uniswap V2 factory address: {factory_address}")

        self.rpc = rpc
        self.factory_address = AsyncWeb3.to_checksum_address(factory_address)
        self.cache_ttl_ms = cache_ttl_ms
        self._clock = clock
        self._gas_price_cache: Optional[GasPriceSample] = None
        self._gas_price_refresh: Optional[asyncio.Future] = None

    @classmethod
    def from_settings(cls, settings: Settings, rpc: Optional[RpcClient] = None) -> "ChainGateway":
        """Create a gateway (and its RPC client, unless given) from settings."""
        return cls(
            rpc or RpcClient.from_settings(settings),
            settings.uniswap_v2_factory_address,
            cache_ttl_ms=settings.gas_price_cache_ttl_ms,
        )

    @property
    def cached_gas_price(self) -> Optional[GasPriceSample]:
        """The most recent gas price sample, if any."""
        return self._gas_price_cache

    # ======================
    # Gas price
    # ======================

    async def get_gas_price(self) -> str:
        """Get the current gas price in gwei.

        Serves the cached sample while it is younger than the TTL. Callers
        that find the cache expired share a single in-flight refresh. When
        that refresh fails, any cached sample is returned regardless of age.

        Raises:
            GasPriceUnavailableError: refresh failed and nothing is cached
        """
        cached = self._gas_price_cache
        if cached is not None and self._clock() - cached.observed_at_ms < self.cache_ttl_ms:
            logger.debug(f"Gas price cache hit: {cached.price_gwei} gwei")
            return cached.price_gwei

        refresh = self._gas_price_refresh
        if refresh is None:
            refresh = asyncio.ensure_future(self._refresh_gas_price())
            self._gas_price_refresh = refresh

        try:
            # A cancelled caller must not cancel the refresh other callers await
            return await asyncio.shield(refresh)
        except Exception as e:
            if cached is not None:
                age_ms = self._clock() - cached.observed_at_ms
                logger.warning(
                    f"Gas price refresh failed, serving cached value from {age_ms}ms ago: {e}"
                )
                return cached.price_gwei
            raise GasPriceUnavailableError(f"Failed to fetch gas price: {e}") from e

    async def _refresh_gas_price(self) -> str:
        try:
            now = self._clock()
            price_gwei = await self._fetch_gas_price()
            self._gas_price_cache = GasPriceSample(price_gwei=price_gwei, observed_at_ms=now)
            logger.debug(f"Gas price refreshed: {price_gwei} gwei")
            return price_gwei
        finally:
            self._gas_price_refresh = None

    async def _fetch_gas_price(self) -> str:
        fee_data = await self.rpc.get_fee_data()
        gas_price = fee_data.gas_price
        if gas_price is None:
            gas_price = fee_data.max_fee_per_gas
        if gas_price is None:
            raise RpcError("Gas price not available from provider")
        return format_gwei(gas_price)

    # ======================
    # Uniswap V2 reads
    # ======================

    async def get_pair(self, token_a: str, token_b: str) -> Optional[PairContract]:
        """Look up the pair contract for two tokens.

        Returns:
            PairContract, or None if the factory has no pool for the tokens
        """
        token0, token1 = sort_tokens(token_a, token_b)
        try:
            pair_address = await self.rpc.call(
                self.factory_address,
                UNISWAP_V2_FACTORY_ABI,
                "getPair",
                AsyncWeb3.to_checksum_address(token0),
                AsyncWeb3.to_checksum_address(token1),
            )
        except Exception as e:
            raise RpcError(f"Failed to get pair: {e}") from e

        if not pair_address or same_address(pair_address, ZERO_ADDRESS):
            logger.debug(f"No pair for {token0}/{token1}")
            return None

        return PairContract(address=AsyncWeb3.to_checksum_address(pair_address))

    async def get_reserves(self, pair: PairContract) -> Reserves:
        """Read the pair's current reserves."""
        try:
            reserve0, reserve1, block_timestamp_last = await self.rpc.call(
                pair.address, UNISWAP_V2_PAIR_ABI, "getReserves"
            )
        except Exception as e:
            raise RpcError(f"Failed to get reserves: {e}") from e

        return Reserves(
            reserve0=int(reserve0),
            reserve1=int(reserve1),
            block_timestamp_last=int(block_timestamp_last),
        )

    async def get_token_addresses(self, pair: PairContract) -> TokenPair:
        """Read token0 and token1 of a pair concurrently."""
        try:
            token0, token1 = await asyncio.gather(
                self.rpc.call(pair.address, UNISWAP_V2_PAIR_ABI, "token0"),
                self.rpc.call(pair.address, UNISWAP_V2_PAIR_ABI, "token1"),
            )
        except Exception as e:
            raise RpcError(f"Failed to get token addresses: {e}") from e

        return TokenPair(token0=token0, token1=token1)
