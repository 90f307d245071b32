"""
FastAPI Dependencies

Access to the router and enrichment service created at startup.
"""
from fastapi import HTTPException, Request, status
from loguru import logger

from dealflow.core.task_router import TaskRouter
from dealflow.services.enrichment_service import EnrichmentService


def _from_state(request: Request, name: str):
    component = getattr(request.app.state, name, None)
    if component is None:
        logger.error(f"❌ app.state.{name} not initialized")
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail=f"Service not initialized: {name}"
        )
    return component


def get_router(request: Request) -> TaskRouter:
    return _from_state(request, "router")


def get_enrichment(request: Request) -> EnrichmentService:
    return _from_state(request, "enrichment")
