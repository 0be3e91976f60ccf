"""
API Routes Module
"""
from .health import router as health_router
from .sessions import router as sessions_router
from .advisors import router as advisors_router
from .portal import router as portal_router
from .store_metrics import router as store_metrics_router
from .templates import router as templates_router
from .reports import router as reports_router
from .matrix import router as matrix_router

__all__ = [
    "health_router",
    "sessions_router",
    "advisors_router",
    "portal_router",
    "store_metrics_router",
    "templates_router",
    "reports_router",
    "matrix_router",
]
