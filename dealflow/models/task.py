from enum import StrEnum
from types import MappingProxyType


class TaskType(StrEnum):
    CONTACT_ANALYSIS = "contact-analysis"
    EMAIL_GENERATION = "email-generation"
    COMPANY_RESEARCH = "company-research"
    CONTACT_RESEARCH = "contact-research"
    DEAL_SUMMARY = "deal-summary"
    NEXT_ACTIONS = "next-actions"
    INSIGHTS = "insights"


class Priority(StrEnum):
    SPEED = "speed"
    QUALITY = "quality"
    COST = "cost"


class ProviderName(StrEnum):
    OPENAI = "openai"
    GEMINI = "gemini"


class Capability(StrEnum):
    """Operations a provider adapter may implement."""
    ANALYZE_CONTACT = "analyze_contact"
    GENERATE_EMAIL = "generate_email"
    GET_INSIGHTS = "get_insights"
    SUMMARIZE_DEAL = "summarize_deal"
    SUGGEST_NEXT_ACTIONS = "suggest_next_actions"
    RESEARCH_COMPANY = "research_company"
    RESEARCH_CONTACT = "research_contact"


# Each task type is served by exactly one adapter capability
TASK_CAPABILITIES = MappingProxyType({
    TaskType.CONTACT_ANALYSIS: Capability.ANALYZE_CONTACT,
    TaskType.EMAIL_GENERATION: Capability.GENERATE_EMAIL,
    TaskType.COMPANY_RESEARCH: Capability.RESEARCH_COMPANY,
    TaskType.CONTACT_RESEARCH: Capability.RESEARCH_CONTACT,
    TaskType.DEAL_SUMMARY: Capability.SUMMARIZE_DEAL,
    TaskType.NEXT_ACTIONS: Capability.SUGGEST_NEXT_ACTIONS,
    TaskType.INSIGHTS: Capability.GET_INSIGHTS,
})
