"""
Contact Enrichment

Fills in a contact from a contact-research task: role, phone, LinkedIn,
location and outreach guidance.
"""
from typing import Any, Dict

from dealflow.models.contact import ContactEnrichment, ContactResearch, ContactResearchRequest
from dealflow.models.task import Priority, TaskType
from dealflow.services.enrichment_base import BaseEnricher, InsufficientInput, is_empty
from dealflow.utils.avatars import contact_avatar_url

# Without a company the research is a guess about a name
NO_COMPANY_CONFIDENCE_CAP = 40


class ContactEnricher(BaseEnricher[ContactEnrichment]):
    kind = "contact"
    record_type = ContactEnrichment

    def __init__(self, router, priority: Priority | str = Priority.SPEED):
        super().__init__(router, priority)

    def check_input(self, record: ContactEnrichment) -> None:
        if is_empty(record.name) and is_empty(record.email):
            raise InsufficientInput("Contact name or email is required for enrichment")

    def subject(self, record: ContactEnrichment) -> str:
        return self.person(record)

    @staticmethod
    def person(record: ContactEnrichment) -> str:
        """Name to research, or the email when the name is blank."""
        return record.email if is_empty(record.name) else record.name

    async def _enrich(self, record: ContactEnrichment) -> Dict[str, Any]:
        person = self.person(record)
        result = await self.router.execute(
            TaskType.CONTACT_RESEARCH,
            ContactResearchRequest(person_name=person, company_name=record.company),
            self.priority,
        )
        research: ContactResearch = result.output

        updates: Dict[str, Any] = {
            "confidence": result.confidence,
            "provenance": result.provenance,
            "extra_data": {
                key: value
                for key, value in research.model_dump(
                    include={
                        "likely_role",
                        "contact_strategy",
                        "value_proposition",
                        "communication_style",
                        "best_contact_times",
                        "ice_breakers",
                        "email_tips",
                    }
                ).items()
                if not is_empty(value)
            },
        }

        if result.degraded:
            updates["notes"] = "AI research unavailable; contact details left unchanged."
        else:
            updates.update(
                title=research.title,
                phone=research.phone,
                linkedin_url=research.linkedin,
                industry=research.department,
                location=research.location,
                notes=research.background or research.contact_strategy,
            )
            if research.linkedin:
                updates["social_profiles"] = {**record.social_profiles, "linkedin": research.linkedin}

            if is_empty(record.company):
                updates["confidence"] = min(result.confidence, NO_COMPANY_CONFIDENCE_CAP)
                updates["notes"] = (
                    f"{updates['notes'] + ' ' if updates['notes'] else ''}"
                    "Add the contact's company for more accurate enrichment."
                )

        if is_empty(record.avatar):
            updates["avatar"] = contact_avatar_url(person, record.company)

        return updates
