"""
FastAPI Application

Main entry point for the DealFlow AI API.
Handles application lifecycle and router mounting.
"""
from contextlib import asynccontextmanager
from fastapi import FastAPI
from loguru import logger

from dealflow.config import settings
from dealflow.core.task_router import TaskRouter
from dealflow.providers import build_adapters
from dealflow.services.enrichment_service import EnrichmentService
from dealflow.utils.cost_tracker import get_cost_tracker
from dealflow.utils.observability import configure_logging
from dealflow.api.routes import (
    health_router,
    routing_router,
    tasks_router,
    enrichment_router,
    metrics_router,
)
from dealflow.api.routes.health import API_VERSION


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Manage application lifecycle: startup and shutdown events.

    Startup:
    - Configure logging
    - Build provider adapters (credentials are read once, here)
    - Verify the routing policy is covered by the adapters
    - Create the task router and enrichment service

    Shutdown:
    - Log final spend summary
    """
    configure_logging()
    logger.info("Starting DealFlow AI API server...")

    providers = settings.configured_providers()
    if not providers["configured"]:
        logger.warning("⚠️ No AI provider configured: every task will return canned output")
    else:
        logger.info(f"Configured providers: {', '.join(providers['configured'])}")

    task_router = TaskRouter(build_adapters(settings))
    # Fail startup rather than on the first request that hits a gap
    task_router.verify_coverage()

    app.state.router = task_router
    app.state.enrichment = EnrichmentService(task_router, settings)

    logger.info("API server ready to route tasks")

    yield

    logger.info("Shutting down API server...")
    lifetime = get_cost_tracker().get_summary()["lifetime"]
    logger.info(f"💰 Session spend: ${lifetime['cost_usd']:.2f} over {lifetime['calls']} provider calls")
    logger.info("Shutdown complete")


# Create FastAPI application
app = FastAPI(
    title="DealFlow AI API",
    description="Task routing and CRM enrichment across OpenAI and Gemini",
    version=API_VERSION,
    lifespan=lifespan
)

# Mount routers
app.include_router(health_router)
app.include_router(routing_router)
app.include_router(tasks_router)
app.include_router(enrichment_router)
app.include_router(metrics_router)
