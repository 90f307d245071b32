from enum import StrEnum
from typing import Any, List, Optional
from pydantic import BaseModel, ConfigDict, Field, model_validator

from dealflow.models.task import TaskType, Priority, ProviderName

CANNED_PROVENANCE = "fallback-canned"


class ModelPreference(BaseModel):
    """Primary and fallback (provider, model) for one task type."""
    model_config = ConfigDict(frozen=True)

    primary_provider: ProviderName
    primary_model: str
    fallback_provider: ProviderName
    fallback_model: str
    reason: str = Field(..., description="Audit/debug justification only.")

    @model_validator(mode="after")
    def check_no_self_fallback(self) -> "ModelPreference":
        if (self.primary_provider, self.primary_model) == (self.fallback_provider, self.fallback_model):
            raise ValueError(
                f"fallback must differ from primary ({self.primary_provider}/{self.primary_model})"
            )
        return self

    @property
    def primary_label(self) -> str:
        return f"{self.primary_provider}/{self.primary_model}"

    @property
    def fallback_label(self) -> str:
        return f"{self.fallback_provider}/{self.fallback_model}"


class RoutingEntry(BaseModel):
    """Read-only introspection row for the policy table."""
    task: str
    primary_model: str
    fallback_model: str
    reason: str


class RoutingStage(StrEnum):
    PRIMARY = "primary"
    FALLBACK = "fallback"
    DEGRADED = "degraded"


class TaskResult(BaseModel):
    """Normalized output of one routed task."""
    task_type: TaskType
    priority: Priority
    output: Any
    stage: RoutingStage

    provider: Optional[ProviderName] = None
    model: Optional[str] = None
    provenance: str
    confidence: int = Field(ge=0, le=100)

    reason: str = ""
    errors: List[str] = Field(default_factory=list)
    duration_ms: float = 0.0

    @property
    def degraded(self) -> bool:
        return self.stage == RoutingStage.DEGRADED
