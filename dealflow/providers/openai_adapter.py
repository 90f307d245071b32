"""
OpenAI adapter.

OpenAI chat models support structured output natively, so every capability
hands its pydantic output type straight to the agent.
"""
from pydantic_ai.models.openai import OpenAIChatModel
from pydantic_ai.providers.openai import OpenAIProvider

from dealflow.models.company import CompanyResearch, CompanyResearchRequest
from dealflow.models.contact import (
    ContactAnalysis,
    ContactProfile,
    ContactResearch,
    ContactResearchRequest,
    EmailRequest,
)
from dealflow.models.deal import DealProfile, InsightsRequest
from dealflow.models.task import Capability, ProviderName
from dealflow.providers import prompts
from dealflow.providers.base import ProviderAdapter


class OpenAIAdapter(ProviderAdapter):
    provider = ProviderName.OPENAI

    def _build_model(self, model_name: str) -> OpenAIChatModel:
        return OpenAIChatModel(model_name, provider=OpenAIProvider(api_key=self._api_key))

    async def analyze_contact(self, contact: ContactProfile, model: str | None = None) -> ContactAnalysis:
        return await self._complete(
            model,
            prompts.contact_analysis_prompt(contact),
            output_type=ContactAnalysis,
            instructions=prompts.SYSTEM_INSTRUCTIONS[Capability.ANALYZE_CONTACT],
        )

    async def generate_email(self, request: EmailRequest, model: str | None = None) -> str:
        return await self._complete(
            model,
            prompts.email_prompt(request),
            output_type=str,
            instructions=prompts.SYSTEM_INSTRUCTIONS[Capability.GENERATE_EMAIL],
        )

    async def get_insights(self, request: InsightsRequest, model: str | None = None) -> list[str]:
        return await self._complete(
            model,
            prompts.insights_prompt(request),
            output_type=list[str],
            instructions=prompts.SYSTEM_INSTRUCTIONS[Capability.GET_INSIGHTS],
        )

    async def summarize_deal(self, deal: DealProfile, model: str | None = None) -> str:
        return await self._complete(
            model,
            prompts.deal_summary_prompt(deal),
            output_type=str,
            instructions=prompts.SYSTEM_INSTRUCTIONS[Capability.SUMMARIZE_DEAL],
        )

    async def suggest_next_actions(self, deal: DealProfile, model: str | None = None) -> list[str]:
        return await self._complete(
            model,
            prompts.next_actions_prompt(deal),
            output_type=list[str],
            instructions=prompts.SYSTEM_INSTRUCTIONS[Capability.SUGGEST_NEXT_ACTIONS],
        )

    async def research_company(self, request: CompanyResearchRequest, model: str | None = None) -> CompanyResearch:
        return await self._complete(
            model,
            prompts.company_research_prompt(request),
            output_type=CompanyResearch,
            instructions=prompts.SYSTEM_INSTRUCTIONS[Capability.RESEARCH_COMPANY],
        )

    async def research_contact(self, request: ContactResearchRequest, model: str | None = None) -> ContactResearch:
        return await self._complete(
            model,
            prompts.contact_research_prompt(request),
            output_type=ContactResearch,
            instructions=prompts.SYSTEM_INSTRUCTIONS[Capability.RESEARCH_CONTACT],
        )
