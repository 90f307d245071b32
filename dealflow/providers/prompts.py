"""
Prompt builders shared by the provider adapters.

Each capability has a system instruction (the persona) and a prompt builder
that renders the task input. Adapters decide how the instruction is
delivered and how the answer is parsed.
"""
import json

from dealflow.models.company import CompanyResearchRequest
from dealflow.models.contact import ContactProfile, ContactResearchRequest, EmailRequest
from dealflow.models.deal import DealProfile, InsightsRequest
from dealflow.models.task import Capability


SYSTEM_INSTRUCTIONS = {
    Capability.ANALYZE_CONTACT: (
        "You are an expert sales analyst with deep knowledge of B2B sales processes. "
        "Provide detailed, actionable insights about sales contacts that will help close more deals."
    ),
    Capability.GENERATE_EMAIL: (
        "You are an expert sales copywriter who creates high-converting, personalized sales emails. "
        "Write emails that get responses and drive action while maintaining professionalism."
    ),
    Capability.GET_INSIGHTS: (
        "You are a sales strategist with expertise in B2B relationship building and deal closure. "
        "Provide specific, actionable insights that sales teams can immediately implement."
    ),
    Capability.SUMMARIZE_DEAL: (
        "You are a sales manager with expertise in deal analysis and pipeline management. "
        "Create clear, actionable deal summaries that help sales teams focus on what matters most."
    ),
    Capability.SUGGEST_NEXT_ACTIONS: (
        "You are a sales coach with expertise in deal progression and closing strategies. "
        "Suggest specific actions that sales teams can take immediately to advance deals."
    ),
    Capability.RESEARCH_COMPANY: (
        "You are a business intelligence analyst with expertise in company research and competitive analysis. "
        "Provide detailed, accurate information that helps sales teams understand prospects better."
    ),
    Capability.RESEARCH_CONTACT: (
        "You are a sales development expert with deep knowledge of B2B outreach and relationship building. "
        "Provide strategic advice for connecting with prospects effectively."
    ),
}

# Example answers for providers that return free text we parse ourselves
JSON_SHAPES = {
    Capability.ANALYZE_CONTACT: {
        "score": "<number between 0-100>",
        "insights": ["insight1", "insight2", "insight3"],
        "recommendations": ["recommendation1", "recommendation2"],
        "risk_factors": ["risk1", "risk2"],
    },
    Capability.GET_INSIGHTS: ["insight1", "insight2", "insight3", "insight4"],
    Capability.SUGGEST_NEXT_ACTIONS: ["action1", "action2", "action3", "action4"],
    Capability.RESEARCH_COMPANY: {
        "name": "company name",
        "industry": "industry classification",
        "description": "detailed company description",
        "employee_count": "approximate headcount range",
        "headquarters": "city, country",
        "founded": "year",
        "revenue": "approximate annual revenue",
        "key_facts": ["fact1", "fact2", "fact3"],
        "business_model": "description of business model",
        "target_market": "their target customers",
        "potential_needs": ["need1", "need2", "need3"],
        "sales_approach": "recommended approach for selling to this company",
        "key_decision_makers": ["typical roles that make decisions"],
        "competitors": ["main competitors"],
        "technologies": ["technologies they likely use"],
        "recent_trends": ["industry trends affecting this company"],
    },
    Capability.RESEARCH_CONTACT: {
        "name": "person name",
        "title": "current job title if known",
        "likely_role": "probable job function/seniority",
        "phone": "business phone if publicly listed",
        "linkedin": "LinkedIn profile URL if known",
        "department": "department or industry focus",
        "location": "city, country",
        "background": "short professional background",
        "contact_strategy": "best approach for initial contact",
        "value_proposition": "what would likely interest them",
        "communication_style": "recommended communication approach",
        "best_contact_times": ["optimal times to reach out"],
        "ice_breakers": ["conversation starters"],
        "email_tips": ["subject line suggestions", "email structure"],
    },
}


def json_instructions(capability: Capability) -> str:
    """Tell a text-only model exactly what JSON to answer with."""
    shape = json.dumps(JSON_SHAPES[capability], indent=2)
    return f"Respond with JSON only, no prose and no code fences, using this structure:\n{shape}"


def _contact_block(contact: ContactProfile) -> str:
    return (
        f"- Name: {contact.display_name}\n"
        f"- Title: {contact.title or 'Unknown'}\n"
        f"- Company: {contact.company or 'Unknown'}\n"
        f"- Industry: {contact.industry or 'Unknown'}\n"
        f"- Status: {contact.status or 'Unknown'}\n"
        f"- Interest Level: {contact.interest_level or 'Unknown'}\n"
        f"- Sources: {', '.join(contact.sources) or 'Unknown'}\n"
        f"- Custom Fields: {json.dumps(contact.custom_fields)}\n"
        f"- Notes: {contact.notes or 'No notes'}"
    )


def _deal_block(deal: DealProfile) -> str:
    return (
        f"Deal: {deal.title}\n"
        f"Company: {deal.company}\n"
        f"Contact: {deal.contact or 'Unknown'}\n"
        f"Value: {deal.value_display}\n"
        f"Stage: {deal.stage or 'Unknown'}\n"
        f"Probability: {deal.probability if deal.probability is not None else 'Unknown'}%\n"
        f"Priority: {deal.priority or 'Unknown'}\n"
        f"Due Date: {deal.due_date.isoformat() if deal.due_date else 'Not set'}\n"
        f"Notes: {deal.notes or 'No notes'}"
    )


def contact_analysis_prompt(contact: ContactProfile) -> str:
    return (
        "Analyze this sales contact and provide a detailed assessment.\n\n"
        f"Contact Information:\n{_contact_block(contact)}\n\n"
        "Score the contact from 0 to 100 based on company size, industry, contact seniority, "
        "engagement level and data completeness. List insights, recommendations and risk factors."
    )


def email_prompt(request: EmailRequest) -> str:
    contact = request.contact
    return (
        "Generate a professional sales email for this contact:\n\n"
        f"Contact: {contact.display_name} ({contact.title or 'Unknown title'} at {contact.company or 'their company'})\n"
        f"Context: {request.context or 'General follow-up'}\n"
        f"Industry: {contact.industry or 'Unknown'}\n"
        f"Previous notes: {contact.notes or 'No previous notes'}\n"
        f"Interest Level: {contact.interest_level or 'Unknown'}\n\n"
        "Create a personalized, professional email that:\n"
        "1. Addresses them by name and title\n"
        "2. References their company and industry\n"
        "3. Provides clear value proposition\n"
        "4. Has a compelling call-to-action\n"
        "5. Is concise, respectful, and professional\n\n"
        "Format as a complete email with subject line."
    )


def insights_prompt(request: InsightsRequest) -> str:
    sections = []
    if request.contact is not None:
        sections.append(f"Contact:\n{_contact_block(request.contact)}")
    if request.deal is not None:
        sections.append(f"Deal:\n{_deal_block(request.deal)}")
    subject = "\n\n".join(sections)
    return (
        f"Generate 4-6 actionable sales insights about the following:\n\n{subject}\n\n"
        "Focus on sales strategy, timing, approach recommendations, and potential opportunities. "
        "Each insight should be specific and actionable."
    )


def deal_summary_prompt(deal: DealProfile) -> str:
    return (
        f"Create a comprehensive deal summary for:\n\n{_deal_block(deal)}\n\n"
        "Provide a clear, actionable summary highlighting:\n"
        "- Key opportunities and strengths\n"
        "- Potential risks or challenges\n"
        "- Critical next steps\n"
        "- Timeline considerations"
    )


def next_actions_prompt(deal: DealProfile) -> str:
    return (
        f"Suggest specific next actions for this deal:\n\n{_deal_block(deal)}\n\n"
        "Provide 4-6 specific, actionable next steps that will move the deal to the next stage, "
        "increase the probability of closure, address potential risks and maintain momentum."
    )


def company_research_prompt(request: CompanyResearchRequest) -> str:
    return (
        "Research and provide comprehensive information about this company:\n\n"
        f"Company Name: {request.company_name}\n"
        f"Domain: {request.domain or 'Unknown'}\n\n"
        "Cover industry, business model, size, target market, likely needs, "
        "recommended sales approach, decision makers, competitors and recent trends. "
        "Leave a field empty rather than guessing specific figures."
    )


def contact_research_prompt(request: ContactResearchRequest) -> str:
    return (
        "Provide insights and recommendations for connecting with this person:\n\n"
        f"Person: {request.person_name}\n"
        f"Company: {request.company_name or 'Unknown'}\n\n"
        "Include their likely role, the best contact strategy, value proposition, "
        "communication style, good contact times, ice breakers and email tips. "
        "Only fill in contact details such as phone or LinkedIn when they are publicly known."
    )
