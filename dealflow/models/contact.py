from typing import Dict, List, Literal, Optional
from pydantic import BaseModel, ConfigDict, Field

from dealflow.models.enrichment import EnrichmentRecord


class ContactProfile(BaseModel):
    """Contact attributes sent to analysis and email prompts."""
    name: Optional[str] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    title: Optional[str] = None
    company: Optional[str] = None
    industry: Optional[str] = None

    status: Optional[Literal["lead", "prospect", "customer", "churned"]] = None
    interest_level: Optional[Literal["hot", "medium", "low", "cold"]] = None
    sources: List[str] = Field(default_factory=list)
    custom_fields: Dict[str, str | int | float | bool] = Field(default_factory=dict)
    notes: Optional[str] = None

    @property
    def display_name(self) -> str:
        if self.name:
            return self.name
        parts = [p for p in (self.first_name, self.last_name) if p]
        return " ".join(parts) or self.email or "Unknown contact"

    @property
    def greeting_name(self) -> str:
        return self.first_name or (self.name.split()[0] if self.name else "there")


class ContactAnalysis(BaseModel):
    """Scored assessment of a sales contact."""
    score: int = Field(ge=0, le=100)
    insights: List[str] = Field(default_factory=list)
    recommendations: List[str] = Field(default_factory=list)
    risk_factors: List[str] = Field(default_factory=list)


class EmailRequest(BaseModel):
    contact: ContactProfile
    context: Optional[str] = None


class ContactResearchRequest(BaseModel):
    person_name: str = Field(..., min_length=1)
    company_name: Optional[str] = None


class ContactResearch(BaseModel):
    """What a provider could find or infer about a person."""
    model_config = ConfigDict(coerce_numbers_to_str=True)

    name: Optional[str] = None
    title: Optional[str] = None
    likely_role: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    linkedin: Optional[str] = None
    department: Optional[str] = None
    location: Optional[str] = None
    background: Optional[str] = None

    contact_strategy: Optional[str] = None
    value_proposition: Optional[str] = None
    communication_style: Optional[str] = None
    best_contact_times: List[str] = Field(default_factory=list)
    ice_breakers: List[str] = Field(default_factory=list)
    email_tips: List[str] = Field(default_factory=list)


class ContactEnrichment(EnrichmentRecord):
    """Contact record, partial on the way in and tagged on the way out."""
    name: Optional[str] = None
    email: Optional[str] = None
    title: Optional[str] = None
    company: Optional[str] = None
    industry: Optional[str] = None
    phone: Optional[str] = None
    linkedin_url: Optional[str] = None
    twitter_url: Optional[str] = None
    website: Optional[str] = None
    location: Optional[str] = None
    avatar: Optional[str] = None
    social_profiles: Dict[str, str] = Field(default_factory=dict)


