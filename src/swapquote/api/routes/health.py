"""Health check endpoints."""

from fastapi import APIRouter, Request

from swapquote.config import get_settings

router = APIRouter()


@router.get("/health")
async def health_check():
    """Basic health check endpoint."""
    return {"status": "healthy", "service": "swapquote"}


@router.get("/health/detailed")
async def detailed_health(request: Request):
    """Detailed health check with gas price cache and configuration info."""
    from swapquote.api.app import VERSION

    settings = get_settings()
    gateway = getattr(request.app.state, "gateway", None)
    sample = gateway.cached_gas_price if gateway is not None else None
    return {
        "status": "healthy",
        "service": "swapquote",
        "version": VERSION,
        "gas_price_cached": sample is not None,
        "config": settings.get_safe_dict(),
    }
