"""
Metrics Endpoints

Prometheus-compatible metrics and provider statistics for observability.
"""
from fastapi import APIRouter, Request
from fastapi.responses import Response, JSONResponse
from loguru import logger

from dealflow.utils.circuit_breaker import get_all_circuit_status
from dealflow.utils.cost_tracker import get_cost_tracker
from dealflow.utils.metrics import metrics

router = APIRouter(tags=["Metrics"])


@router.get("/metrics")
async def prometheus_metrics():
    """
    Prometheus metrics endpoint.

    Returns metrics in Prometheus text exposition format for scraping.
    Includes:
    - Routed task counts by stage and routing latency
    - Provider calls, errors and latency
    - Token usage (input/output) and cost by provider
    - Enrichment outcomes

    Content-Type: text/plain; version=0.0.4; charset=utf-8
    """
    try:
        # Refresh spend gauges from the cost tracker
        summary = get_cost_tracker().get_summary()
        metrics.hourly_cost_usd.set(summary["hourly"]["cost_usd"])
        metrics.daily_cost_usd.set(summary["daily"]["cost_usd"])

        output = metrics.export()

        return Response(
            content=output,
            media_type="text/plain; version=0.0.4; charset=utf-8"
        )

    except Exception as e:
        logger.error(f"Failed to export metrics: {e}", exc_info=True)
        return Response(
            content=f"# Error exporting metrics: {e}\n",
            media_type="text/plain",
            status_code=500
        )


@router.get("/metrics/providers")
async def provider_metrics(request: Request):
    """
    Get provider health and spend.

    Returns:
    - Per-provider configuration, capabilities and circuit state
    - Every provider circuit created in this process
    - Hourly, daily and lifetime cost summary
    """
    try:
        task_router = getattr(request.app.state, "router", None)
        providers = task_router.provider_status() if task_router else {}

        return {
            "status": "ok",
            "providers": providers,
            "circuits": get_all_circuit_status(),
            "costs": get_cost_tracker().get_summary()
        }

    except Exception as e:
        logger.error(f"Failed to get provider metrics: {e}", exc_info=True)
        return JSONResponse(
            status_code=500,
            content={
                "status": "error",
                "error": str(e)
            }
        )
