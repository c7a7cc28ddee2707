"""FastAPI application factory."""

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from swapquote.chain.client import RpcClient
from swapquote.chain.gateway import ChainGateway
from swapquote.config import get_settings
from swapquote.pricing.engine import PricingEngine

logger = logging.getLogger(__name__)

VERSION = "1.0.0"


def create_app(
    gateway: Optional[ChainGateway] = None,
    rpc_client: Optional[RpcClient] = None,
) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        gateway: Pre-built gateway (tests inject one backed by a fake client)
        rpc_client: RPC client for a gateway built from settings
    """
    settings = get_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Application lifespan handler."""
        # Startup
        owned_rpc = None
        chain_gateway = gateway
        if chain_gateway is None:
            rpc = rpc_client
            if rpc is None:
                rpc = owned_rpc = RpcClient.from_settings(settings)
            chain_gateway = ChainGateway.from_settings(settings, rpc=rpc)

        app.state.gateway = chain_gateway
        app.state.pricing_engine = PricingEngine(chain_gateway)

        if settings.warm_gas_price_cache:
            try:
                gas_price = await chain_gateway.get_gas_price()
                logger.info(f"Initial gas price: {gas_price} gwei")
            except Exception as e:
                logger.warning(f"Could not warm gas price cache: {e}")

        yield

        # Shutdown
        if owned_rpc is not None:
            await owned_rpc.close()

    app = FastAPI(
        title="Uniswap V2 Price Oracle API",
        description="API for fetching gas prices and Uniswap V2 price estimates",
        version=VERSION,
        lifespan=lifespan,
        debug=settings.debug,
        docs_url="/api",
    )

    if gateway is not None:
        app.state.gateway = gateway
        app.state.pricing_engine = PricingEngine(gateway)

    # CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["GET"],
        allow_headers=["*"],
    )

    # Register routes
    from swapquote.api.routes import health
    from swapquote.web.controllers import prices_router

    app.include_router(health.router, tags=["Health"])
    app.include_router(prices_router)

    return app


# Default app instance
app = create_app()
