"""HTTP controllers for the price endpoints."""

from swapquote.web.controllers.prices import router as prices_router

__all__ = [
    "prices_router",
]
