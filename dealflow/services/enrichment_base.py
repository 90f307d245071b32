"""
Enrichment Orchestrator Base

Turns a partial CRM record into a tagged, enriched copy by routing one or
more tasks and merging their outputs over the caller's fields.
"""
import time
from abc import ABC, abstractmethod
from typing import Any, Dict, Generic, Type, TypeVar

from loguru import logger

from dealflow.core.task_router import TaskRouter
from dealflow.models.enrichment import ENRICHMENT_FAILED, EnrichmentRecord
from dealflow.models.task import Priority
from dealflow.providers.base import UnsupportedCapability
from dealflow.utils.metrics import metrics
from dealflow.utils.observability import log_enrichment_event

R = TypeVar("R", bound=EnrichmentRecord)


class InsufficientInput(ValueError):
    """Raised when a partial record lacks the fields enrichment needs."""
    pass


def is_empty(value: Any) -> bool:
    """None, blank strings and empty collections count as absent."""
    if value is None:
        return True
    if isinstance(value, str):
        return not value.strip()
    if isinstance(value, (list, dict, tuple, set)):
        return not value
    return False


def merge_record(record: R, updates: Dict[str, Any]) -> R:
    """
    Overlay non-empty update values on a record, returning a new record.

    Absent values keep the caller's field. extra_data is merged key by key.
    The input record is never modified.
    """
    data = record.model_dump()
    for key, value in updates.items():
        if is_empty(value):
            continue
        if key == "extra_data":
            data[key] = {**data.get(key, {}), **value}
        else:
            data[key] = value
    return type(record).model_validate(data)


class BaseEnricher(ABC, Generic[R]):
    """
    Shared enrich() flow: validate input, route, merge, tag.

    Subclasses declare the record type, the input precondition and how task
    results map onto record fields.

    Failure handling:
        InsufficientInput        raised before any routing
        UnsupportedCapability    propagates (wiring defect)
        CancelledError           propagates
        anything else            record tagged "enrichment-failed", confidence 0
    """

    kind: str
    record_type: Type[R]

    def __init__(self, router: TaskRouter, priority: Priority | str):
        self.router = router
        self.priority = Priority(priority)

    async def enrich(self, partial: R | Dict[str, Any]) -> R:
        record = self.record_type.model_validate(partial)
        self.check_input(record)

        start = time.perf_counter()
        try:
            updates = await self._enrich(record)
        except (InsufficientInput, UnsupportedCapability):
            raise
        except Exception as e:
            logger.error(f"❌ {self.kind.title()} enrichment failed: {e}")
            updates = {
                "confidence": 0,
                "provenance": ENRICHMENT_FAILED,
                "notes": f"Failed to enrich {self.kind} data. Please try again later.",
            }

        enriched = merge_record(record, updates)
        duration_ms = (time.perf_counter() - start) * 1000

        if enriched.provenance == ENRICHMENT_FAILED:
            outcome = "failed"
        elif enriched.failed:
            outcome = "degraded"
        else:
            outcome = "enriched"
        metrics.enrichments.inc(kind=self.kind, outcome=outcome)
        log_enrichment_event(
            kind=self.kind,
            provenance=enriched.provenance,
            confidence=enriched.confidence,
            duration_ms=duration_ms,
            subject=self.subject(record),
        )
        return enriched

    @abstractmethod
    def check_input(self, record: R) -> None:
        """Raise InsufficientInput when the record can't be enriched."""

    @abstractmethod
    def subject(self, record: R) -> str:
        """Human-readable name of the record, for logs."""

    @abstractmethod
    async def _enrich(self, record: R) -> Dict[str, Any]:
        """Route tasks and return the field updates, confidence and provenance included."""
