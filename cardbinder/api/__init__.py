from cardbinder.api.binders import router as binders_router
from cardbinder.api.health import router as health_router

__all__ = [
    "binders_router",
    "health_router",
]
