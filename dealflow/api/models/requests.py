"""
Pydantic models for API request bodies.
"""
from typing import Any, Dict
from pydantic import BaseModel, Field

from dealflow.models.task import Priority


class TaskRequest(BaseModel):
    """
    Body of POST /tasks/{task_type}.

    payload is validated against the task's own input model by the route,
    e.g. a DealProfile for deal-summary.
    """
    priority: Priority = Field(default=Priority.QUALITY, description="speed, quality or cost")
    payload: Dict[str, Any] = Field(..., description="Task input (contact, deal, research request...)")
