"""
Routing Policy Endpoints
Read-only view of the policy table.
"""
from fastapi import APIRouter, HTTPException, Query, status

from dealflow.core import policy_table
from dealflow.models.routing import ModelPreference, RoutingEntry
from dealflow.models.task import Priority, TaskType

router = APIRouter(prefix="/routing", tags=["Routing"])


@router.get("", response_model=list[RoutingEntry])
async def list_routing():
    """Policy table rows: task, primary, fallback, reason."""
    return policy_table.routing_table()


@router.get("/{task_type}", response_model=ModelPreference)
async def resolve_routing(task_type: str, priority: Priority = Query(Priority.QUALITY)):
    """Preference the router would use for a task under a priority."""
    if task_type not in {t.value for t in TaskType}:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Unknown task type '{task_type}'"
        )
    return policy_table.resolve(task_type, priority)
