"""
Company Enrichment

Fills in a company from a company-research task and keeps the sales
intelligence (needs, approach, decision makers) in extra_data.
"""
from typing import Any, Dict

from dealflow.models.company import CompanyEnrichment, CompanyResearch, CompanyResearchRequest
from dealflow.models.task import Priority, TaskType
from dealflow.services.enrichment_base import BaseEnricher, InsufficientInput, is_empty
from dealflow.utils.avatars import company_logo_url

SALES_INTELLIGENCE_FIELDS = {
    "business_model",
    "target_market",
    "potential_needs",
    "sales_approach",
    "key_decision_makers",
    "key_facts",
    "recent_trends",
}


class CompanyEnricher(BaseEnricher[CompanyEnrichment]):
    kind = "company"
    record_type = CompanyEnrichment

    def __init__(self, router, priority: Priority | str = Priority.QUALITY):
        super().__init__(router, priority)

    def check_input(self, record: CompanyEnrichment) -> None:
        if is_empty(record.name):
            raise InsufficientInput("Company name is required for enrichment")

    def subject(self, record: CompanyEnrichment) -> str:
        return record.name

    async def _enrich(self, record: CompanyEnrichment) -> Dict[str, Any]:
        result = await self.router.execute(
            TaskType.COMPANY_RESEARCH,
            CompanyResearchRequest(company_name=record.name, domain=record.domain),
            self.priority,
        )
        research: CompanyResearch = result.output

        updates: Dict[str, Any] = {
            "confidence": result.confidence,
            "provenance": result.provenance,
            "extra_data": {
                key: value
                for key, value in research.model_dump(include=SALES_INTELLIGENCE_FIELDS).items()
                if not is_empty(value)
            },
        }

        if result.degraded:
            updates["notes"] = "AI research unavailable; company details left unchanged."
        else:
            updates.update(
                industry=research.industry,
                description=research.description,
                size=research.employee_count,
                headquarters=research.headquarters,
                founded=research.founded,
                logo=research.logo_url,
                revenue=research.revenue,
                competitors=research.competitors,
                technologies_used=research.technologies,
            )

        if is_empty(record.logo) and is_empty(updates.get("logo")):
            updates["logo"] = company_logo_url(record.name)

        return updates
