"""Enrichment services package."""
from dealflow.services.enrichment_base import BaseEnricher, InsufficientInput
from dealflow.services.contact_enrichment import ContactEnricher
from dealflow.services.company_enrichment import CompanyEnricher
from dealflow.services.deal_enrichment import DealEnricher
from dealflow.services.enrichment_service import EnrichmentService, get_enrichment_service

__all__ = [
    "BaseEnricher",
    "InsufficientInput",
    "ContactEnricher",
    "CompanyEnricher",
    "DealEnricher",
    "EnrichmentService",
    "get_enrichment_service",
]
