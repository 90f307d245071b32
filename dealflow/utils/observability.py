"""
Structured Logging & Observability
Production-grade logging that's both human-readable and machine-parseable.
"""
import sys
from loguru import logger
from dealflow.config import get_settings


def configure_logging():
    """
    Configure loguru for production observability.

    In development: Human-readable colorized output
    In production: Structured JSON logs for ingestion (ELK, Datadog, etc.)
    """
    settings = get_settings()

    # Remove default handler
    logger.remove()

    # Development mode: Beautiful console output
    if not settings.enable_structured_logging:
        logger.add(
            sys.stderr,
            format=(
                "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | "
                "<level>{level: <8}</level> | "
                "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> | "
                "{message}"
            ),
            level=settings.log_level,
            colorize=True,
        )
    # Production mode: JSON structured logs
    else:
        logger.add(
            sys.stderr,
            format="{message}",
            level=settings.log_level,
            serialize=True,  # Output as JSON
        )

    logger.info(f"Logging configured: level={settings.log_level}, structured={settings.enable_structured_logging}")


def log_task_routing(
    task_type: str,
    priority: str,
    provider: str,
    model: str,
    reason: str,
    stage: str = "primary",
):
    """
    Structured logging for routing decisions.

    Example:
        >>> log_task_routing(
        ...     task_type="company-research",
        ...     priority="quality",
        ...     provider="gemini",
        ...     model="gemini-1.5-pro",
        ...     reason="Gemini better for factual research",
        ... )
    """
    log_data = {
        "event_type": "task_routing",
        "task_type": task_type,
        "priority": priority,
        "provider": provider,
        "model": model,
        "stage": stage,
    }

    logger.bind(**log_data).info(f"🤖 AI Task: {task_type} → {stage} {provider} ({model}) - {reason}")


def log_llm_call(
    provider: str,
    model: str,
    input_tokens: int,
    output_tokens: int,
    cost_usd: float,
    duration_ms: float,
    success: bool = True,
    error: str | None = None
):
    """
    Structured logging for provider API calls.

    Enables cost analysis, performance monitoring, and error tracking.

    Args:
        provider: Which provider served the call
        model: Model used (e.g., "gpt-4o")
        input_tokens: Input token count
        output_tokens: Output token count
        cost_usd: Cost of this call in USD
        duration_ms: API latency in milliseconds
        success: Whether the call succeeded
        error: Error message if failed
    """
    log_data = {
        "event_type": "llm_call",
        "provider": provider,
        "model": model,
        "tokens": {
            "input": input_tokens,
            "output": output_tokens,
            "total": input_tokens + output_tokens
        },
        "cost_usd": round(cost_usd, 6),
        "duration_ms": round(duration_ms, 2),
        "success": success
    }

    if error:
        log_data["error"] = error

    level = "info" if success else "error"
    logger.bind(**log_data).log(
        level.upper(),
        f"LLM Call: {provider}/{model} | {input_tokens + output_tokens} tokens | ${cost_usd:.4f}"
    )


def log_enrichment_event(
    kind: str,
    provenance: str | None,
    confidence: int | None,
    duration_ms: float | None = None,
    **details
):
    """
    Log the outcome of an enrichment for analytics.

    Args:
        kind: "contact", "company" or "deal"
        provenance: Which provider/model (or failure label) produced the values
        confidence: Heuristic confidence attached to the record
        duration_ms: End-to-end enrichment time
        **details: Extra context (subject name, degraded calls, ...)
    """
    log_data = {
        "event_type": "enrichment",
        "kind": kind,
        "provenance": provenance,
        "confidence": confidence,
        **details
    }

    if duration_ms is not None:
        log_data["duration_ms"] = round(duration_ms, 2)

    if confidence:
        logger.bind(**log_data).success(f"Enrichment: {kind} via {provenance} ({confidence}%)")
    else:
        logger.bind(**log_data).warning(f"Enrichment: {kind} degraded ({provenance})")
