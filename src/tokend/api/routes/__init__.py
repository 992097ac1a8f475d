"""Router exports for the API module."""

from .decrypt import kms_router, transit_router
from .health import router as health_router
from .secrets import cubbyhole_router, secret_router
from .token import router as token_router

__all__ = [
    "cubbyhole_router",
    "health_router",
    "kms_router",
    "secret_router",
    "token_router",
    "transit_router",
]
