"""HTTP boundary layer.

- contracts: request validation and response models
- controllers: FastAPI routers

Everything here is read-only: no signing, no transactions.
"""

__all__ = [
    "contracts",
    "controllers",
]
