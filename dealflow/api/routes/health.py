"""
Health and Readiness Endpoints

Kubernetes-compatible health probes for load balancers and orchestration.
"""
from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse

router = APIRouter(tags=["Health"])

# API version - single source of truth
API_VERSION = "0.4.0"


@router.get("/health")
async def health_check():
    """
    Basic health check endpoint.

    Returns 200 if service is running.
    """
    return {
        "status": "healthy",
        "service": "dealflow-ai",
        "version": API_VERSION
    }


@router.get("/ready")
async def readiness_check(request: Request):
    """
    Readiness probe - checks if service can handle requests.

    Ready means the task router is initialized and at least one provider
    has credentials. With none, every task would degrade to canned output.

    Returns 200 if ready, 503 if not ready.
    """
    task_router = getattr(request.app.state, "router", None)
    if task_router is None:
        return JSONResponse(
            status_code=503,
            content={"status": "not_ready", "reason": "Task router not initialized"}
        )

    providers = task_router.provider_status()
    configured = sorted(name for name, status in providers.items() if status["configured"])
    missing = sorted(name for name, status in providers.items() if not status["configured"])

    if not configured:
        return JSONResponse(
            status_code=503,
            content={
                "status": "not_ready",
                "reason": "No AI provider configured",
                "missing": missing,
            }
        )

    return {
        "status": "ready",
        "providers": {"configured": configured, "missing": missing},
    }


@router.get("/")
async def root():
    """Root endpoint with API information."""
    return {
        "service": "DealFlow AI Routing API",
        "version": API_VERSION,
        "endpoints": {
            "health": "/health",
            "ready": "/ready",
            "routing": "/routing",
            "tasks": "/tasks/{task_type} (POST)",
            "enrich": "/enrich/{contact|company|deal} (POST)",
            "metrics": "/metrics",
            "provider_metrics": "/metrics/providers"
        }
    }
