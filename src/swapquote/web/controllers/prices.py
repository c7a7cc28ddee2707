"""Gas price and swap quote API endpoints."""

import logging

from fastapi import APIRouter, Depends, HTTPException, Request

from swapquote.chain.gateway import ChainGateway
from swapquote.errors import (
    GasPriceUnavailableError,
    InvalidArgumentError,
    PairNotFoundError,
    UpstreamError,
)
from swapquote.pricing.engine import PricingEngine
from swapquote.web.contracts.prices import (
    AmountOutResponse,
    ErrorResponse,
    GasPriceResponse,
    validate_quote_request,
)

logger = logging.getLogger(__name__)

router = APIRouter(tags=["prices"])


def get_gateway(request: Request) -> ChainGateway:
    """Resolve the chain gateway created by the application lifespan."""
    return request.app.state.gateway


def get_pricing_engine(request: Request) -> PricingEngine:
    """Resolve the pricing engine created by the application lifespan."""
    return request.app.state.pricing_engine


@router.get(
    "/gasPrice",
    response_model=GasPriceResponse,
    summary="Get current gas price on Ethereum network",
    responses={503: {"model": ErrorResponse, "description": "Gas price unavailable"}},
)
async def get_gas_price(gateway: ChainGateway = Depends(get_gateway)) -> GasPriceResponse:
    """Returns the current gas price in gwei.

    Served from a short-lived cache; if the node is unreachable the last
    known value is returned.
    """
    try:
        gas_price = await gateway.get_gas_price()
    except GasPriceUnavailableError as e:
        raise HTTPException(status_code=503, detail=str(e))
    return GasPriceResponse(gasPrice=gas_price)


@router.get(
    "/return/{fromTokenAddress}/{toTokenAddress}/{amountIn}",
    response_model=AmountOutResponse,
    summary="Get estimated output amount for a token swap",
    responses={
        400: {"model": ErrorResponse, "description": "Invalid input parameters"},
        404: {"model": ErrorResponse, "description": "Liquidity pool not found for the token pair"},
        502: {"model": ErrorResponse, "description": "Ethereum node error"},
    },
)
async def get_return(
    fromTokenAddress: str,
    toTokenAddress: str,
    amountIn: str,
    engine: PricingEngine = Depends(get_pricing_engine),
) -> AmountOutResponse:
    """Calculates the estimated output amount for a token swap.

    Uses the Uniswap V2 constant-product formula with the 0.3% fee
    against the pair's current on-chain reserves.
    """
    validation = validate_quote_request(fromTokenAddress, toTokenAddress, amountIn)
    if not validation.ok:
        raise HTTPException(status_code=400, detail=validation.message)

    quote_request = validation.value
    try:
        result = await engine.get_amount_out(
            quote_request.from_token,
            quote_request.to_token,
            str(quote_request.amount_in),
        )
    except InvalidArgumentError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except PairNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except UpstreamError as e:
        logger.error(f"Quote failed for {fromTokenAddress} -> {toTokenAddress}: {e}")
        raise HTTPException(status_code=502, detail=str(e))

    return AmountOutResponse(amountOut=result.amount_out)
