"""
Enrichment Service

Single entry point for contact, company and deal enrichment. Each enricher
routes through one shared TaskRouter with the priority configured for it.
"""
from typing import Any, Dict, List, Optional

from loguru import logger

from dealflow.config import Settings, get_settings
from dealflow.core.task_router import TaskRouter, get_task_router
from dealflow.models.company import CompanyEnrichment
from dealflow.models.contact import ContactEnrichment
from dealflow.models.deal import DealEnrichment
from dealflow.models.routing import RoutingEntry
from dealflow.services.company_enrichment import CompanyEnricher
from dealflow.services.contact_enrichment import ContactEnricher
from dealflow.services.deal_enrichment import DealEnricher


class EnrichmentService:
    """
    Facade over the three enrichers.

    Usage:
        >>> service = EnrichmentService(router)
        >>> contact = await service.enrich_contact({"name": "Jane Doe", "company": "Acme"})
        >>> contact.provenance
        'gemini/gemini-1.5-flash'
    """

    def __init__(self, router: TaskRouter, settings: Optional[Settings] = None):
        settings = settings or get_settings()
        self.router = router
        self.contacts = ContactEnricher(router, settings.contact_enrichment_priority)
        self.companies = CompanyEnricher(router, settings.company_enrichment_priority)
        self.deals = DealEnricher(router, settings.deal_enrichment_priority)
        logger.info(
            "Enrichment service ready "
            f"(contact={self.contacts.priority}, company={self.companies.priority}, deal={self.deals.priority})"
        )

    async def enrich_contact(self, partial: ContactEnrichment | Dict[str, Any]) -> ContactEnrichment:
        return await self.contacts.enrich(partial)

    async def enrich_company(self, partial: CompanyEnrichment | Dict[str, Any]) -> CompanyEnrichment:
        return await self.companies.enrich(partial)

    async def enrich_deal(self, partial: DealEnrichment | Dict[str, Any]) -> DealEnrichment:
        return await self.deals.enrich(partial)

    def routing_table(self) -> List[RoutingEntry]:
        return self.router.routing_table()


# Global service instance
_service: Optional[EnrichmentService] = None


def get_enrichment_service() -> EnrichmentService:
    """Get or create the global enrichment service."""
    global _service
    if _service is None:
        _service = EnrichmentService(get_task_router())
    return _service
