"""
Fallback Responses for Provider Degradation

Predefined safe outputs per task type, used when both the primary and the
fallback provider failed. They keep the UI populated without pretending to
know anything specific about the subject.
"""
from typing import Any, List

from dealflow.models.company import CompanyResearch, CompanyResearchRequest
from dealflow.models.contact import (
    ContactAnalysis,
    ContactResearch,
    ContactResearchRequest,
    EmailRequest,
)
from dealflow.models.deal import DealProfile
from dealflow.models.task import TaskType

GENERIC_UNAVAILABLE = "AI analysis temporarily unavailable. Please try again later."


def get_fallback_contact_analysis() -> ContactAnalysis:
    """Neutral score that won't push a contact up or down the list."""
    return ContactAnalysis(
        score=60,
        insights=["Contact data available for analysis"],
        recommendations=["Schedule follow-up meeting"],
        risk_factors=["Limited information available"],
    )


def get_fallback_email(request: EmailRequest | None = None) -> str:
    """Plain follow-up email that doesn't promise anything specific."""
    name = request.contact.greeting_name if request else "there"
    company = (request.contact.company if request else None) or "your business"
    return (
        "Subject: Following up\n\n"
        f"Hi {name},\n\n"
        f"I wanted to follow up on our previous conversation about {company}.\n\n"
        "I believe our solution could provide value to your team. "
        "Would you be available for a brief call this week?\n\n"
        "Best regards,\n"
        "[Your Name]"
    )


def get_fallback_insights() -> List[str]:
    return [
        "Follow up within 24 hours",
        "Research company background",
        "Prepare value proposition",
    ]


def get_fallback_deal_summary(deal: DealProfile | None = None) -> str:
    if deal is None:
        return "Deal: Untitled with Unknown Company. Value: $0. Status: Unknown"
    return (
        f"Deal: {deal.title} with {deal.company}. "
        f"Value: {deal.value_display}. Status: {deal.stage or 'Unknown'}"
    )


def get_fallback_next_actions(deal: DealProfile | None = None) -> List[str]:
    """Stage-appropriate generic next steps."""
    stage = deal.stage if deal else None
    if stage == "qualification":
        return ["Schedule detailed discovery call", "Send qualification questionnaire", "Research decision-making process"]
    if stage == "proposal":
        return ["Follow up on proposal status", "Schedule presentation meeting", "Address any concerns"]
    if stage == "negotiation":
        return ["Review contract terms", "Schedule final discussion with stakeholders", "Prepare pricing alternatives"]
    return ["Schedule follow-up call", "Send additional information", "Connect with decision maker"]


def get_fallback_company_research(request: CompanyResearchRequest | None = None) -> CompanyResearch:
    return CompanyResearch(
        name=request.company_name if request else None,
        key_facts=[],
        potential_needs=["Efficiency improvements", "Cost optimization", "Technology modernization"],
        sales_approach="Focus on value proposition and ROI demonstration",
    )


def get_fallback_contact_research(request: ContactResearchRequest | None = None) -> ContactResearch:
    return ContactResearch(
        name=request.person_name if request else None,
        contact_strategy="Professional outreach with value-focused messaging",
        value_proposition="Solutions that drive business growth and efficiency",
        communication_style="Professional and respectful approach",
        best_contact_times=["Tuesday-Thursday 10am-3pm"],
        ice_breakers=["Industry trends", "Business challenges", "Growth opportunities"],
        email_tips=["Clear value proposition", "Personalized content", "Strong call-to-action"],
    )


def get_fallback_output(task_type: TaskType | str, payload: Any = None) -> Any:
    """
    Canned output for a task type.

    Never raises: payloads of an unexpected type are ignored.
    """
    if task_type == TaskType.CONTACT_ANALYSIS:
        return get_fallback_contact_analysis()
    if task_type == TaskType.EMAIL_GENERATION:
        return get_fallback_email(payload if isinstance(payload, EmailRequest) else None)
    if task_type == TaskType.INSIGHTS:
        return get_fallback_insights()
    if task_type == TaskType.DEAL_SUMMARY:
        return get_fallback_deal_summary(payload if isinstance(payload, DealProfile) else None)
    if task_type == TaskType.NEXT_ACTIONS:
        return get_fallback_next_actions(payload if isinstance(payload, DealProfile) else None)
    if task_type == TaskType.COMPANY_RESEARCH:
        return get_fallback_company_research(payload if isinstance(payload, CompanyResearchRequest) else None)
    if task_type == TaskType.CONTACT_RESEARCH:
        return get_fallback_contact_research(payload if isinstance(payload, ContactResearchRequest) else None)
    return GENERIC_UNAVAILABLE
