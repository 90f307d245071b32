"""
Deal Enrichment

Runs deal-summary, next-actions and insights one after another and folds
the three results into the deal.
"""
from typing import Any, Dict, List

from dealflow.models.deal import DealEnrichment, InsightsRequest
from dealflow.models.routing import CANNED_PROVENANCE, TaskResult
from dealflow.models.task import Priority, TaskType
from dealflow.services.enrichment_base import BaseEnricher, InsufficientInput, is_empty

STRATEGIC_RECOMMENDATIONS = [
    "Focus on value proposition alignment with specific needs",
    "Engage decision makers with tailored materials",
    "Address competitive differentiation proactively",
]

# Floor suggested for probability once the deal has a plan
SUGGESTED_MIN_PROBABILITY = 65


def combine_provenance(results: List[TaskResult]) -> str:
    """Canned if any call degraded, else the distinct sources in call order."""
    if any(r.degraded for r in results):
        return CANNED_PROVENANCE
    return "+".join(dict.fromkeys(r.provenance for r in results))


class DealEnricher(BaseEnricher[DealEnrichment]):
    kind = "deal"
    record_type = DealEnrichment

    def __init__(self, router, priority: Priority | str = Priority.QUALITY):
        super().__init__(router, priority)

    def check_input(self, record: DealEnrichment) -> None:
        if is_empty(record.title) or is_empty(record.company):
            raise InsufficientInput("Deal title and company are required for enrichment")

    def subject(self, record: DealEnrichment) -> str:
        return f"{record.title} ({record.company})"

    async def _enrich(self, record: DealEnrichment) -> Dict[str, Any]:
        profile = record.to_profile()

        summary = await self.router.execute(TaskType.DEAL_SUMMARY, profile, self.priority)
        next_actions = await self.router.execute(TaskType.NEXT_ACTIONS, profile, self.priority)
        insights = await self.router.execute(TaskType.INSIGHTS, InsightsRequest(deal=profile), self.priority)
        results = [summary, next_actions, insights]

        degraded = any(r.degraded for r in results)
        updates: Dict[str, Any] = {
            "summary": summary.output,
            "suggested_next_steps": next_actions.output,
            "insights": insights.output,
            "recommendations": list(STRATEGIC_RECOMMENDATIONS),
            "confidence": 0 if degraded else min(r.confidence for r in results),
            "provenance": combine_provenance(results),
        }
        if degraded:
            updates["notes"] = "Some AI analysis was unavailable; generic guidance shown."
        else:
            updates["probability"] = max(record.probability or 0, SUGGESTED_MIN_PROBABILITY)

        return updates
