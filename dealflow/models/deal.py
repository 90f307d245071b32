import datetime as dt
from typing import List, Literal, Optional
from pydantic import BaseModel, Field, model_validator

from dealflow.models.contact import ContactProfile
from dealflow.models.enrichment import EnrichmentRecord

DealStage = Literal["qualification", "proposal", "negotiation", "closed-won", "closed-lost"]


class DealProfile(BaseModel):
    """Deal attributes sent to summary, next-action and insight prompts."""
    title: str
    company: str
    contact: Optional[str] = None
    value: Optional[float] = None
    stage: Optional[DealStage] = None
    probability: Optional[int] = Field(None, ge=0, le=100)
    priority: Optional[Literal["high", "medium", "low"]] = None
    due_date: Optional[dt.date] = None
    notes: Optional[str] = None

    @property
    def value_display(self) -> str:
        return f"${self.value:,.0f}" if self.value is not None else "$0"


class InsightsRequest(BaseModel):
    """Insights can be asked about a contact, a deal, or both."""
    contact: Optional[ContactProfile] = None
    deal: Optional[DealProfile] = None

    @model_validator(mode="after")
    def check_subject(self) -> "InsightsRequest":
        if self.contact is None and self.deal is None:
            raise ValueError("insights need a contact or a deal")
        return self


class DealEnrichment(EnrichmentRecord):
    title: Optional[str] = None
    company: Optional[str] = None
    contact: Optional[str] = None
    value: Optional[float] = None
    stage: Optional[DealStage] = None
    probability: Optional[int] = Field(None, ge=0, le=100)
    priority: Optional[Literal["high", "medium", "low"]] = None
    due_date: Optional[dt.date] = None

    summary: Optional[str] = None
    insights: List[str] = Field(default_factory=list)
    risks: List[str] = Field(default_factory=list)
    recommendations: List[str] = Field(default_factory=list)
    suggested_next_steps: List[str] = Field(default_factory=list)

    def to_profile(self) -> DealProfile:
        """Assumes title and company are present."""
        return DealProfile(
            title=self.title,
            company=self.company,
            contact=self.contact,
            value=self.value,
            stage=self.stage,
            probability=self.probability,
            priority=self.priority,
            due_date=self.due_date,
            notes=self.notes,
        )
