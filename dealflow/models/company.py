from typing import List, Optional
from pydantic import BaseModel, ConfigDict, Field

from dealflow.models.enrichment import EnrichmentRecord


class CompanyResearchRequest(BaseModel):
    company_name: str = Field(..., min_length=1)
    domain: Optional[str] = None


class CompanyResearch(BaseModel):
    """Business intelligence returned by a company research task."""
    # Models often answer "founded": 1998 or "employee_count": 500
    model_config = ConfigDict(coerce_numbers_to_str=True)

    name: Optional[str] = None
    industry: Optional[str] = None
    description: Optional[str] = None
    employee_count: Optional[str] = None
    headquarters: Optional[str] = None
    founded: Optional[str] = None
    revenue: Optional[str] = None
    logo_url: Optional[str] = None

    key_facts: List[str] = Field(default_factory=list)
    business_model: Optional[str] = None
    target_market: Optional[str] = None
    potential_needs: List[str] = Field(default_factory=list)
    sales_approach: Optional[str] = None
    key_decision_makers: List[str] = Field(default_factory=list)
    competitors: List[str] = Field(default_factory=list)
    technologies: List[str] = Field(default_factory=list)
    recent_trends: List[str] = Field(default_factory=list)


class CompanyEnrichment(EnrichmentRecord):
    name: Optional[str] = None
    domain: Optional[str] = None
    industry: Optional[str] = None
    description: Optional[str] = None
    size: Optional[str] = None
    founded: Optional[str] = None
    headquarters: Optional[str] = None
    logo: Optional[str] = None
    revenue: Optional[str] = None
    competitors: List[str] = Field(default_factory=list)
    technologies_used: List[str] = Field(default_factory=list)
