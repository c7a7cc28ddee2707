"""Async JSON-RPC client for the Ethereum node.

Wraps web3.py's AsyncWeb3 so the gateway only sees two primitives:
fee data and contract view calls.
"""

import asyncio
import logging
from typing import Any, Optional

from aiohttp import ClientTimeout
from web3 import AsyncWeb3

from swapquote.chain.types import FeeData
from swapquote.config import Settings
from swapquote.errors import ConfigurationError

logger = logging.getLogger(__name__)

# Priority fee assumed when the node does not support eth_maxPriorityFeePerGas
DEFAULT_PRIORITY_FEE_WEI = 10**9


class RpcClient:
    """Read-only Ethereum RPC client built on AsyncWeb3."""

    def __init__(self, rpc_url: str, timeout: float = 15.0, web3: Optional[AsyncWeb3] = None):
        """Initialize the client.

        Args:
            rpc_url: JSON-RPC endpoint URL
            timeout: HTTP request timeout in seconds
            web3: Pre-built AsyncWeb3 instance (skips provider construction)
        """
        if not rpc_url and web3 is None:
            raise ConfigurationError("ETHEREUM_RPC_URL is not defined in environment variables")
        self.rpc_url = rpc_url
        if web3 is None:
            web3 = AsyncWeb3(
                AsyncWeb3.AsyncHTTPProvider(
                    rpc_url, request_kwargs={"timeout": ClientTimeout(total=timeout)}
                )
            )
        self._web3 = web3

    @classmethod
    def from_settings(cls, settings: Settings) -> "RpcClient":
        """Create a client from application settings."""
        return cls(settings.ethereum_rpc_url, timeout=settings.rpc_timeout)

    @property
    def web3(self) -> AsyncWeb3:
        return self._web3

    async def get_fee_data(self) -> FeeData:
        """Query current network fee data.

        Gas price and priority fee failures leave the field unknown; a failed
        block lookup propagates.
        """
        gas_price, priority_fee, block = await asyncio.gather(
            self._optional(self._web3.eth.gas_price, "eth_gasPrice"),
            self._optional(self._web3.eth.max_priority_fee, "eth_maxPriorityFeePerGas"),
            self._web3.eth.get_block("latest"),
        )

        max_fee_per_gas = None
        base_fee = block.get("baseFeePerGas") if block else None
        if base_fee is not None:
            if priority_fee is None:
                priority_fee = DEFAULT_PRIORITY_FEE_WEI
            max_fee_per_gas = base_fee * 2 + priority_fee

        return FeeData(
            gas_price=gas_price,
            max_fee_per_gas=max_fee_per_gas,
            max_priority_fee_per_gas=priority_fee if base_fee is not None else None,
        )

    async def call(self, address: str, abi: list[dict], function: str, *args: Any) -> Any:
        """Call a view function and return the ABI-decoded result.

        Args:
            address: Contract address
            abi: Contract ABI containing ``function``
            function: Function name
            *args: Function arguments
        """
        contract = self._web3.eth.contract(
            address=AsyncWeb3.to_checksum_address(address),
            abi=abi,
        )
        logger.debug(f"eth_call {function}{tuple(args)} on {address}")
        return await getattr(contract.functions, function)(*args).call()

    async def close(self) -> None:
        """Close the provider's HTTP session."""
        disconnect = getattr(self._web3.provider, "disconnect", None)
        if disconnect is not None:
            await disconnect()

    @staticmethod
    async def _optional(awaitable, method: str) -> Optional[int]:
        try:
            return int(await awaitable)
        except Exception as e:
            logger.debug(f"{method} unavailable: {e}")
            return None
