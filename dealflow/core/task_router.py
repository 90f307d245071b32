"""
Task Router
Executes a task against the provider/model the policy table picks, falling
back once to the declared fallback and finally to a canned answer.

Flow per call:
    resolve(task, priority) → primary → [fallback] → [canned]

Failure contract:
    ProviderUnavailable / MalformedResponse  absorbed (next stage)
    UnsupportedCapability                    propagates, no fallback
    asyncio.CancelledError                   propagates, no further stage
"""
import time
from enum import StrEnum
from types import MappingProxyType
from typing import Any, Dict, Optional

from loguru import logger
from pydantic import BaseModel

from dealflow.core import policy_table
from dealflow.models.company import CompanyResearchRequest
from dealflow.models.contact import ContactProfile, ContactResearchRequest, EmailRequest
from dealflow.models.deal import DealProfile, InsightsRequest
from dealflow.models.routing import CANNED_PROVENANCE, RoutingEntry, RoutingStage, TaskResult
from dealflow.models.task import TASK_CAPABILITIES, Capability, Priority, ProviderName, TaskType
from dealflow.providers import build_adapters
from dealflow.providers.base import (
    MalformedResponse,
    ProviderAdapter,
    ProviderUnavailable,
    UnsupportedCapability,
)
from dealflow.utils.fallback_responses import get_fallback_output
from dealflow.utils.metrics import metrics
from dealflow.utils.observability import log_task_routing


class RoutingState(StrEnum):
    NOT_STARTED = "not_started"
    PRIMARY_IN_FLIGHT = "primary_in_flight"
    PRIMARY_FAILED = "primary_failed"
    FALLBACK_IN_FLIGHT = "fallback_in_flight"
    FALLBACK_FAILED = "fallback_failed"
    SUCCEEDED = "succeeded"
    DEGRADED = "degraded"


# Coarse heuristic, not a measured probability
BASE_CONFIDENCE = MappingProxyType({
    TaskType.CONTACT_ANALYSIS: 75,
    TaskType.EMAIL_GENERATION: 80,
    TaskType.COMPANY_RESEARCH: 80,
    TaskType.CONTACT_RESEARCH: 70,
    TaskType.DEAL_SUMMARY: 85,
    TaskType.NEXT_ACTIONS: 85,
    TaskType.INSIGHTS: 85,
})
FALLBACK_CONFIDENCE_PENALTY = 10

# Payload model each task expects, for callers holding raw JSON
TASK_INPUT_MODELS: MappingProxyType = MappingProxyType({
    TaskType.CONTACT_ANALYSIS: ContactProfile,
    TaskType.EMAIL_GENERATION: EmailRequest,
    TaskType.COMPANY_RESEARCH: CompanyResearchRequest,
    TaskType.CONTACT_RESEARCH: ContactResearchRequest,
    TaskType.DEAL_SUMMARY: DealProfile,
    TaskType.NEXT_ACTIONS: DealProfile,
    TaskType.INSIGHTS: InsightsRequest,
})


def parse_payload(task_type: TaskType | str, data: Any) -> BaseModel:
    """Validate raw data against the task's input model."""
    return TASK_INPUT_MODELS[TaskType(task_type)].model_validate(data)


class TaskRouter:
    """
    Routes tasks to provider adapters according to the policy table.

    Holds no per-call state, so one router can serve concurrent calls.

    Usage:
        >>> router = TaskRouter(build_adapters(settings))
        >>> result = await router.execute("company-research", request, "cost")
        >>> result.provenance
        'gemini/gemma-2-2b-it'
    """

    def __init__(self, adapters: Dict[ProviderName, ProviderAdapter]):
        self.adapters = {ProviderName(name): adapter for name, adapter in adapters.items()}
        logger.info(f"Task router initialized with providers: {', '.join(self.adapters) or 'none'}")

    # ------------------------------------------------------------------
    # Execution
    # ------------------------------------------------------------------

    async def execute(
        self,
        task_type: TaskType | str,
        payload: Any,
        priority: Priority | str = Priority.QUALITY,
    ) -> TaskResult:
        """
        Run one task with primary → fallback → canned degradation.

        Args:
            task_type: One of TaskType
            payload: The task's input model (see TASK_INPUT_MODELS)
            priority: speed, quality or cost

        Returns:
            TaskResult; degraded results carry confidence 0 and
            provenance "fallback-canned"

        Raises:
            ValueError: Unknown task type or priority
            UnsupportedCapability: An adapter lacks the task's capability
        """
        task_type = TaskType(task_type)
        priority = Priority(priority)
        capability = TASK_CAPABILITIES[task_type]
        pref = policy_table.resolve(task_type, priority)

        start = time.perf_counter()
        errors: list[str] = []
        state = RoutingState.NOT_STARTED

        stages = (
            (RoutingStage.PRIMARY, pref.primary_provider, pref.primary_model,
             RoutingState.PRIMARY_IN_FLIGHT, RoutingState.PRIMARY_FAILED),
            (RoutingStage.FALLBACK, pref.fallback_provider, pref.fallback_model,
             RoutingState.FALLBACK_IN_FLIGHT, RoutingState.FALLBACK_FAILED),
        )

        for stage, provider, model, in_flight, failed in stages:
            state = self._advance(task_type, state, in_flight)
            log_task_routing(
                task_type=task_type.value,
                priority=priority.value,
                provider=provider.value,
                model=model,
                reason=pref.reason,
                stage=stage.value,
            )

            try:
                output = await self._invoke(provider, capability, payload, model)
            except (ProviderUnavailable, MalformedResponse) as e:
                label = f"{provider}/{model}"
                errors.append(f"{label}: {type(e).__name__}: {e}")
                logger.warning(f"⚠️ {task_type} {stage} {label} failed: {e}")
                state = self._advance(task_type, state, failed)
                continue

            self._advance(task_type, state, RoutingState.SUCCEEDED)
            confidence = BASE_CONFIDENCE[task_type]
            if stage == RoutingStage.FALLBACK:
                confidence -= FALLBACK_CONFIDENCE_PENALTY
            return self._finish(
                task_type, priority, start,
                output=output,
                stage=stage,
                provider=provider,
                model=model,
                provenance=f"{provider}/{model}",
                confidence=confidence,
                reason=pref.reason,
                errors=errors,
            )

        self._advance(task_type, state, RoutingState.DEGRADED)
        logger.error(f"❌ {task_type} degraded to canned output after: {'; '.join(errors)}")
        return self._finish(
            task_type, priority, start,
            output=get_fallback_output(task_type, payload),
            stage=RoutingStage.DEGRADED,
            provider=None,
            model=None,
            provenance=CANNED_PROVENANCE,
            confidence=0,
            reason=pref.reason,
            errors=errors,
        )

    async def _invoke(self, provider: ProviderName, capability: Capability, payload: Any, model: str) -> Any:
        adapter = self.adapters.get(provider)
        if adapter is None:
            raise ProviderUnavailable(f"No adapter registered for provider '{provider}'")
        return await adapter.invoke(capability, payload, model=model)

    @staticmethod
    def _advance(task_type: TaskType, current: RoutingState, new: RoutingState) -> RoutingState:
        logger.debug(f"{task_type}: {current} -> {new}")
        return new

    @staticmethod
    def _finish(task_type: TaskType, priority: Priority, start: float, **fields) -> TaskResult:
        duration = time.perf_counter() - start
        result = TaskResult(task_type=task_type, priority=priority, duration_ms=duration * 1000, **fields)
        metrics.tasks_routed.inc(task=task_type.value, stage=result.stage.value)
        metrics.routing_duration.observe(duration, task=task_type.value)
        return result

    # ------------------------------------------------------------------
    # Convenience operations
    # ------------------------------------------------------------------

    async def analyze_contact(self, contact: ContactProfile, priority: Priority | str = Priority.QUALITY) -> TaskResult:
        return await self.execute(TaskType.CONTACT_ANALYSIS, contact, priority)

    async def generate_email(
        self,
        contact: ContactProfile,
        context: Optional[str] = None,
        priority: Priority | str = Priority.QUALITY,
    ) -> TaskResult:
        return await self.execute(TaskType.EMAIL_GENERATION, EmailRequest(contact=contact, context=context), priority)

    async def research_company(
        self,
        company_name: str,
        domain: Optional[str] = None,
        priority: Priority | str = Priority.QUALITY,
    ) -> TaskResult:
        request = CompanyResearchRequest(company_name=company_name, domain=domain)
        return await self.execute(TaskType.COMPANY_RESEARCH, request, priority)

    async def research_contact(
        self,
        person_name: str,
        company_name: Optional[str] = None,
        priority: Priority | str = Priority.SPEED,
    ) -> TaskResult:
        request = ContactResearchRequest(person_name=person_name, company_name=company_name)
        return await self.execute(TaskType.CONTACT_RESEARCH, request, priority)

    async def summarize_deal(self, deal: DealProfile, priority: Priority | str = Priority.QUALITY) -> TaskResult:
        return await self.execute(TaskType.DEAL_SUMMARY, deal, priority)

    async def suggest_next_actions(self, deal: DealProfile, priority: Priority | str = Priority.QUALITY) -> TaskResult:
        return await self.execute(TaskType.NEXT_ACTIONS, deal, priority)

    async def get_insights(
        self,
        contact: Optional[ContactProfile] = None,
        deal: Optional[DealProfile] = None,
        priority: Priority | str = Priority.QUALITY,
    ) -> TaskResult:
        return await self.execute(TaskType.INSIGHTS, InsightsRequest(contact=contact, deal=deal), priority)

    # ------------------------------------------------------------------
    # Introspection
    # ------------------------------------------------------------------

    def routing_table(self) -> list[RoutingEntry]:
        return policy_table.routing_table()

    def provider_status(self) -> dict[str, dict]:
        return {provider.value: adapter.get_status() for provider, adapter in self.adapters.items()}

    def verify_coverage(self) -> None:
        """
        Check that every adapter the policy can route to implements the
        capability it would be asked for.

        Providers with no registered adapter are only warned about: at call
        time they count as unavailable and routing degrades.

        Raises:
            UnsupportedCapability: Listing every uncovered (task, priority, provider)
        """
        gaps = []
        missing = set()
        for task_type, priority, pref in policy_table.iter_preferences():
            capability = TASK_CAPABILITIES[task_type]
            for provider in (pref.primary_provider, pref.fallback_provider):
                adapter = self.adapters.get(provider)
                if adapter is None:
                    missing.add(provider.value)
                elif not adapter.supports(capability):
                    gaps.append(f"{task_type}/{priority} -> {provider} lacks {capability}")

        if missing:
            logger.warning(f"Policy routes to providers without adapters: {', '.join(sorted(missing))}")
        if gaps:
            raise UnsupportedCapability("Routing policy not covered by adapters: " + "; ".join(gaps))

        logger.success("✅ Routing policy fully covered by provider adapters")


# Global router built from settings, created lazily
_task_router: TaskRouter | None = None


def get_task_router() -> TaskRouter:
    """Get the global task router instance (singleton)."""
    global _task_router
    if _task_router is None:
        _task_router = TaskRouter(build_adapters())
    return _task_router
