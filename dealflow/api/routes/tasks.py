"""
Task Endpoints

Run a single routed task and return the normalized TaskResult.
"""
from fastapi import APIRouter, Depends, HTTPException, status
from loguru import logger
from pydantic import ValidationError

from dealflow.api.dependencies import get_router
from dealflow.api.models.requests import TaskRequest
from dealflow.core.task_router import TaskRouter, parse_payload
from dealflow.models.routing import TaskResult
from dealflow.models.task import TaskType
from dealflow.providers.base import UnsupportedCapability

router = APIRouter(prefix="/tasks", tags=["Tasks"])


@router.post("/{task_type}", response_model=TaskResult)
async def run_task(
    task_type: str,
    body: TaskRequest,
    task_router: TaskRouter = Depends(get_router),
):
    """
    Execute one task through primary → fallback → canned routing.

    Returns 200 with a TaskResult even when both providers failed
    (stage "degraded", confidence 0).
    """
    if task_type not in {t.value for t in TaskType}:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Unknown task type '{task_type}'"
        )

    try:
        payload = parse_payload(task_type, body.payload)
    except ValidationError as e:
        raise HTTPException(
            status_code=422,
            detail=e.errors(include_url=False, include_context=False)
        ) from e

    try:
        return await task_router.execute(task_type, payload, body.priority)
    except UnsupportedCapability as e:
        logger.error(f"❌ Routing wiring defect for {task_type}: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=str(e)
        ) from e
