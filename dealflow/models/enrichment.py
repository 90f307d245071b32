from typing import Any, Dict, Optional
from pydantic import BaseModel, ConfigDict, Field, model_validator

from dealflow.models.routing import CANNED_PROVENANCE

ENRICHMENT_FAILED = "enrichment-failed"

# Provenance labels that mean no provider produced the values
FAILURE_PROVENANCES = frozenset({CANNED_PROVENANCE, ENRICHMENT_FAILED})


class EnrichmentRecord(BaseModel):
    """
    Common tagging for contact, company and deal enrichment results.

    confidence is a coarse heuristic (0-100), never a probability.
    It is 0 exactly when provenance names a failure.
    """
    model_config = ConfigDict(extra="ignore")

    confidence: Optional[int] = Field(None, ge=0, le=100)
    provenance: Optional[str] = None
    notes: Optional[str] = None
    extra_data: Dict[str, Any] = Field(default_factory=dict)

    @model_validator(mode="after")
    def check_confidence_matches_provenance(self):
        if self.confidence is None or self.provenance is None:
            return self
        failed = self.provenance in FAILURE_PROVENANCES
        if failed != (self.confidence == 0):
            raise ValueError(
                f"confidence={self.confidence} is inconsistent with provenance '{self.provenance}'"
            )
        return self

    @property
    def failed(self) -> bool:
        return self.provenance in FAILURE_PROVENANCES
