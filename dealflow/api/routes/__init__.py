"""
API Routes

Modular route definitions for the DealFlow AI API.
"""
from dealflow.api.routes.health import router as health_router
from dealflow.api.routes.routing import router as routing_router
from dealflow.api.routes.tasks import router as tasks_router
from dealflow.api.routes.enrichment import router as enrichment_router
from dealflow.api.routes.metrics import router as metrics_router

__all__ = [
    "health_router",
    "routing_router",
    "tasks_router",
    "enrichment_router",
    "metrics_router",
]
