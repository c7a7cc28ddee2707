"""Tests for the Uniswap V2 pricing engine."""

import asyncio
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from swapquote.chain.types import PairContract, Reserves, TokenPair
from swapquote.errors import (
    InvalidArgumentError,
    PairNotFoundError,
    RpcError,
    UpstreamError,
)
from swapquote.pricing.engine import (
    PricingEngine,
    calculate_output_amount,
    parse_amount,
)

from tests.conftest import DAI, USDC, USDC_WETH_PAIR, WETH

ONE = 10**18
MAX_UINT256 = 2**256 - 1


class TestCalculateOutputAmount:
    """Tests for the constant-product formula."""

    def test_reference_quote(self):
        """0.1 in against a 1:2 pool."""
        assert calculate_output_amount(10**17, ONE, 2 * ONE) == 181322178776029826

    def test_is_pure(self):
        """Same inputs always give the same output."""
        results = {calculate_output_amount(12345, 10**9, 3 * 10**9) for _ in range(5)}
        assert len(results) == 1

    def test_rounds_down(self):
        """Integer division truncates the trader's output."""
        # 1 * 997 * 1000 / (1000 * 1000 + 997) = 0.996...
        assert calculate_output_amount(1, 1000, 1000) == 0

    def test_fee_applied(self):
        """Output is below the fee-free constant-product result."""
        amount_in, reserve_in, reserve_out = 10**18, 10**21, 10**21
        no_fee = amount_in * reserve_out // (reserve_in + amount_in)
        assert calculate_output_amount(amount_in, reserve_in, reserve_out) < no_fee

    @pytest.mark.parametrize(
        "amount_in,reserve_in,reserve_out",
        [
            (1, 1, 1),
            (MAX_UINT256, 1, 2**112 - 1),
            (10**30, 10**6, 10**6),
            (5 * ONE, 3 * ONE, 7 * ONE),
        ],
    )
    def test_never_drains_pool(self, amount_in, reserve_in, reserve_out):
        """0 <= amountOut < reserveOut for positive inputs."""
        amount_out = calculate_output_amount(amount_in, reserve_in, reserve_out)
        assert 0 <= amount_out < reserve_out

    @pytest.mark.parametrize(
        "amount_in,reserve_in,reserve_out",
        [
            (0, ONE, ONE),
            (ONE, 0, ONE),
            (ONE, ONE, 0),
            (-1, ONE, ONE),
        ],
    )
    def test_rejects_non_positive(self, amount_in, reserve_in, reserve_out):
        """Zero or negative inputs are invalid."""
        with pytest.raises(InvalidArgumentError, match="must be positive"):
            calculate_output_amount(amount_in, reserve_in, reserve_out)


class TestParseAmount:
    """Tests for amount parsing."""

    def test_decimal(self):
        assert parse_amount("100000000000000000") == 10**17

    def test_hex(self):
        assert parse_amount("0x0de0b6b3a7640000") == ONE

    def test_max_uint256(self):
        assert parse_amount(str(MAX_UINT256)) == MAX_UINT256

    def test_zero(self):
        with pytest.raises(InvalidArgumentError, match="greater than 0"):
            parse_amount("0")

    @pytest.mark.parametrize("value", ["", "-5", "1.5", "abc", "1e18", " ", "0x"])
    def test_malformed(self, value):
        with pytest.raises(InvalidArgumentError, match="Invalid amount"):
            parse_amount(value)

    def test_no_upper_bound(self):
        """Amounts wider than any on-chain integer still parse exactly."""
        assert parse_amount(str(MAX_UINT256 + 1)) == 2**256
        assert parse_amount("0x1" + "0" * 80) == 16**80


class TestPricingEngine:
    """Tests for get_amount_out against a fake chain."""

    @pytest.mark.asyncio
    async def test_quote_from_token0(self, gateway):
        """Selling token0 uses reserve0 as the input reserve."""
        engine = PricingEngine(gateway)

        result = await engine.get_amount_out(USDC, WETH, "100000000000000000")

        assert result.amount_out == "181322178776029826"

    @pytest.mark.asyncio
    async def test_quote_from_token1_is_reverse_direction(self, gateway):
        """Swapping from/to swaps the reserves."""
        engine = PricingEngine(gateway)

        forward = await engine.get_amount_out(USDC, WETH, "100000000000000000")
        reverse = await engine.get_amount_out(WETH, USDC, "100000000000000000")

        assert reverse.amount_out == str(calculate_output_amount(10**17, 2 * ONE, ONE))
        assert reverse.amount_out != forward.amount_out

    @pytest.mark.asyncio
    async def test_mixed_case_addresses(self, gateway, rpc):
        """Lower-case input resolves the same pair and orientation."""
        engine = PricingEngine(gateway)

        result = await engine.get_amount_out(USDC.lower(), WETH.upper().replace("0X", "0x"), "100000000000000000")

        assert result.amount_out == "181322178776029826"
        _, _, args = rpc.calls_to("getPair")[0]
        assert args == (USDC, WETH)

    @pytest.mark.asyncio
    async def test_zero_amount(self, gateway, rpc):
        """Zero input is rejected before touching the chain."""
        engine = PricingEngine(gateway)

        with pytest.raises(InvalidArgumentError, match="greater than 0"):
            await engine.get_amount_out(USDC, WETH, "0")

        assert rpc.calls == []

    @pytest.mark.asyncio
    async def test_pair_not_found(self, gateway):
        """Missing pool raises PairNotFoundError."""
        engine = PricingEngine(gateway)

        with pytest.raises(PairNotFoundError, match="Liquidity pool not found"):
            await engine.get_amount_out(DAI, WETH, "100000000000000000")

    @pytest.mark.asyncio
    async def test_rpc_failure_is_upstream_error(self, gateway, rpc):
        """Gateway failures surface as UpstreamError."""
        rpc.failing.add("getReserves")
        engine = PricingEngine(gateway)

        with pytest.raises(UpstreamError) as exc_info:
            await engine.get_amount_out(USDC, WETH, "100000000000000000")

        assert isinstance(exc_info.value, RpcError)

    @pytest.mark.asyncio
    async def test_unexpected_gateway_error_wrapped(self):
        """Non-service exceptions from the gateway are wrapped."""
        gateway = MagicMock()
        gateway.get_pair = AsyncMock(side_effect=TimeoutError("node timed out"))
        engine = PricingEngine(gateway)

        with pytest.raises(UpstreamError, match="Failed to calculate output amount") as exc_info:
            await engine.get_amount_out(USDC, WETH, "1")

        assert isinstance(exc_info.value.__cause__, TimeoutError)

    @pytest.mark.asyncio
    async def test_empty_pool(self, gateway, rpc):
        """A pool with a zero reserve cannot be quoted."""
        rpc.add_pool(USDC_WETH_PAIR, token0=USDC, token1=WETH, reserve0=0, reserve1=0)
        engine = PricingEngine(gateway)

        with pytest.raises(InvalidArgumentError, match="must be positive"):
            await engine.get_amount_out(USDC, WETH, "100000000000000000")

    @pytest.mark.asyncio
    async def test_pair_without_from_token(self, gateway, rpc):
        """A pair that holds neither input token is reported, not quoted."""
        rpc.add_pool(
            USDC_WETH_PAIR,
            token0=DAI,
            token1=WETH,
            reserve0=ONE,
            reserve1=ONE,
            lookup_key=(USDC, WETH),
        )
        engine = PricingEngine(gateway)

        with pytest.raises(UpstreamError, match="does not contain token"):
            await engine.get_amount_out(USDC, WETH, "100000000000000000")

    @pytest.mark.asyncio
    async def test_malformed_pair_token_is_upstream_error(self, gateway, rpc):
        """A bad token address from the node is not blamed on the caller."""
        rpc.add_pool(
            USDC_WETH_PAIR,
            token0="0xbad",
            token1=WETH,
            reserve0=ONE,
            reserve1=ONE,
            lookup_key=(USDC, WETH),
        )
        engine = PricingEngine(gateway)

        with pytest.raises(UpstreamError, match="malformed token address") as exc_info:
            await engine.get_amount_out(USDC, WETH, "100000000000000000")

        assert isinstance(exc_info.value.__cause__, InvalidArgumentError)

    @pytest.mark.asyncio
    async def test_quote_uses_oriented_reserves(self, gateway):
        """The engine's formula receives (reserve_in, reserve_out) for the swap."""
        engine = PricingEngine(gateway)

        with patch.object(engine, "calculate_output_amount", return_value=42) as formula:
            result = await engine.get_amount_out(WETH, USDC, "1000")

        formula.assert_called_once_with(1000, 2 * ONE, ONE)
        assert result.amount_out == "42"

    def test_engine_formula_matches_module_formula(self, gateway):
        engine = PricingEngine(gateway)

        assert engine.calculate_output_amount(10**17, ONE, 2 * ONE) == calculate_output_amount(
            10**17, ONE, 2 * ONE
        )

    @pytest.mark.asyncio
    async def test_reads_run_concurrently(self):
        """Reserves and token addresses are fetched at the same time."""
        token_read_started = asyncio.Event()

        async def get_reserves(pair):
            await token_read_started.wait()
            return Reserves(reserve0=ONE, reserve1=2 * ONE)

        async def get_token_addresses(pair):
            token_read_started.set()
            return TokenPair(token0=USDC, token1=WETH)

        gateway = MagicMock()
        gateway.get_pair = AsyncMock(return_value=PairContract(USDC_WETH_PAIR))
        gateway.get_reserves = get_reserves
        gateway.get_token_addresses = get_token_addresses
        engine = PricingEngine(gateway)

        result = await asyncio.wait_for(
            engine.get_amount_out(USDC, WETH, "100000000000000000"), timeout=1.0
        )

        assert result.amount_out == "181322178776029826"
