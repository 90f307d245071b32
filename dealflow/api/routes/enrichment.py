"""
Enrichment Endpoints

POST a partial contact, company or deal and get the enriched record back,
tagged with confidence and provenance.
"""
from typing import Awaitable, Callable, TypeVar

from fastapi import APIRouter, Depends, HTTPException, status
from loguru import logger

from dealflow.api.dependencies import get_enrichment
from dealflow.models.company import CompanyEnrichment
from dealflow.models.contact import ContactEnrichment
from dealflow.models.deal import DealEnrichment
from dealflow.providers.base import UnsupportedCapability
from dealflow.services.enrichment_base import InsufficientInput
from dealflow.services.enrichment_service import EnrichmentService

router = APIRouter(prefix="/enrich", tags=["Enrichment"])

R = TypeVar("R")


async def _run(enrich: Callable[[R], Awaitable[R]], partial: R) -> R:
    """Map enrichment errors onto HTTP status codes."""
    try:
        return await enrich(partial)
    except InsufficientInput as e:
        raise HTTPException(
            status_code=422,
            detail=str(e)
        ) from e
    except UnsupportedCapability as e:
        logger.error(f"❌ Enrichment wiring defect: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=str(e)
        ) from e


@router.post("/contact", response_model=ContactEnrichment)
async def enrich_contact(partial: ContactEnrichment, service: EnrichmentService = Depends(get_enrichment)):
    """Requires name or email."""
    return await _run(service.enrich_contact, partial)


@router.post("/company", response_model=CompanyEnrichment)
async def enrich_company(partial: CompanyEnrichment, service: EnrichmentService = Depends(get_enrichment)):
    """Requires name."""
    return await _run(service.enrich_company, partial)


@router.post("/deal", response_model=DealEnrichment)
async def enrich_deal(partial: DealEnrichment, service: EnrichmentService = Depends(get_enrichment)):
    """Requires title and company. Runs three routed tasks."""
    return await _run(service.enrich_deal, partial)
