"""Pytest configuration and fixtures."""

import os
from typing import Optional
from unittest.mock import AsyncMock

import pytest

# Set test environment
os.environ["ENVIRONMENT"] = "test"
os.environ["ETHEREUM_RPC_URL"] = "http://localhost:8545"
os.environ["DEBUG"] = "true"

from swapquote.chain.gateway import ChainGateway
from swapquote.chain.types import ZERO_ADDRESS, FeeData
from swapquote.config import DEFAULT_FACTORY_ADDRESS

# Mainnet tokens; USDC sorts before WETH by byte value
USDC = "0xA0b86991c6218b36c1d19D4a2e9Eb0cE3606eB48"
WETH = "0xC02aaA39b223FE8D0A0e5C4F27eAD9083C756Cc2"
DAI = "0x6B175474E89094C44Da98b954EedeAC495271d0F"
USDC_WETH_PAIR = "0xB4e16d0168e52d35CaCD2c6185b44281Ec28C9Dc"

GWEI = 10**9


class FakeClock:
    """Manually advanced millisecond clock."""

    def __init__(self, start: int = 1_000_000):
        self.now = start

    def __call__(self) -> int:
        return self.now

    def advance(self, ms: int) -> None:
        self.now += ms


class FakeRpcClient:
    """In-memory stand-in for RpcClient.

    Pools are registered by token pair; contract calls are answered from
    the registry and recorded in ``calls``.
    """

    def __init__(self):
        self.get_fee_data = AsyncMock(return_value=FeeData(gas_price=10 * GWEI))
        self.calls: list[tuple] = []
        self.failing: set[str] = set()
        self._pairs: dict[tuple[str, str], str] = {}
        self._pools: dict[str, dict] = {}

    def add_pool(
        self,
        pair_address: str,
        token0: str,
        token1: str,
        reserve0: int,
        reserve1: int,
        lookup_key: Optional[tuple[str, str]] = None,
    ) -> None:
        key = lookup_key or (token0, token1)
        self._pairs[(key[0].lower(), key[1].lower())] = pair_address
        self._pools[pair_address.lower()] = {
            "token0": token0,
            "token1": token1,
            "reserves": [reserve0, reserve1, 1_700_000_000],
        }

    async def call(self, address: str, abi: list[dict], function: str, *args):
        self.calls.append((address, function, args))
        if function in self.failing:
            raise ConnectionError(f"{function} reverted")

        if function == "getPair":
            return self._pairs.get((args[0].lower(), args[1].lower()), ZERO_ADDRESS)

        pool = self._pools[address.lower()]
        if function == "getReserves":
            return list(pool["reserves"])
        return pool[function]

    def calls_to(self, function: str) -> list[tuple]:
        return [c for c in self.calls if c[1] == function]

    async def close(self) -> None:
        pass


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def rpc() -> FakeRpcClient:
    """Fake RPC client with a 1:2 USDC/WETH pool."""
    client = FakeRpcClient()
    client.add_pool(
        USDC_WETH_PAIR,
        token0=USDC,
        token1=WETH,
        reserve0=1_000_000_000_000_000_000,
        reserve1=2_000_000_000_000_000_000,
    )
    return client


@pytest.fixture
def gateway(rpc: FakeRpcClient, clock: FakeClock) -> ChainGateway:
    return ChainGateway(rpc, DEFAULT_FACTORY_ADDRESS, cache_ttl_ms=10_000, clock=clock)
