"""
Gemini adapter (Gemini and Gemma models).

Gemma models reject system instructions and tool calls, which rules out
native structured output. Every call therefore asks for plain text with the
instruction folded into the prompt, and JSON answers are parsed here.
"""
import json
import re
from typing import Any, Type, TypeVar

from loguru import logger
from pydantic import TypeAdapter, ValidationError
from pydantic_ai.models.google import GoogleModel
from pydantic_ai.providers.google import GoogleProvider

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
from dealflow.providers.base import MalformedResponse, ProviderAdapter
from dealflow.utils.metrics import metrics

T = TypeVar("T")

_CODE_FENCE = re.compile(r"```(?:json)?\s*(.*?)```", re.DOTALL | re.IGNORECASE)


def extract_json(text: str) -> Any:
    """
    Pull the first JSON object or array out of a model answer.

    Handles answers wrapped in Markdown code fences or surrounded by prose.

    Raises:
        MalformedResponse: No decodable JSON value in the text
    """
    fenced = _CODE_FENCE.search(text)
    if fenced:
        text = fenced.group(1)

    decoder = json.JSONDecoder()
    last_error = None
    for match in re.finditer(r"[\[{]", text):
        try:
            value, _ = decoder.raw_decode(text, match.start())
            return value
        except json.JSONDecodeError as e:
            last_error = e

    if last_error is None:
        raise MalformedResponse(f"No JSON found in response: {text[:120]!r}")
    raise MalformedResponse(f"Invalid JSON in response: {last_error}") from last_error


def _clamp_score(data: Any) -> Any:
    if isinstance(data, dict) and "score" in data:
        try:
            data["score"] = max(0, min(100, int(float(data["score"]))))
        except (TypeError, ValueError):
            # Leave it for validation to reject
            pass
    return data


class GeminiAdapter(ProviderAdapter):
    provider = ProviderName.GEMINI

    def _build_model(self, model_name: str) -> GoogleModel:
        return GoogleModel(model_name, provider=GoogleProvider(api_key=self._api_key))

    async def _text(self, capability: Capability, model: str | None, prompt: str, structured: bool) -> str:
        parts = [prompts.SYSTEM_INSTRUCTIONS[capability], prompt]
        if structured:
            parts.append(prompts.json_instructions(capability))
        text = await self._complete(model, "\n\n".join(parts), output_type=str)
        text = (text or "").strip()
        if not text:
            raise MalformedResponse(f"{self.provider} returned an empty answer for {capability.value}")
        return text

    async def _structured(
        self,
        capability: Capability,
        model: str | None,
        prompt: str,
        output_type: Type[T],
        clamp_score: bool = False,
    ) -> T:
        text = await self._text(capability, model, prompt, structured=True)
        data = extract_json(text)
        if clamp_score:
            data = _clamp_score(data)
        try:
            return TypeAdapter(output_type).validate_python(data)
        except ValidationError as e:
            metrics.provider_errors.inc(provider=self.provider.value, kind="MalformedResponse")
            logger.warning(f"🧩 {self.provider} {capability.value} answer failed validation: {e.error_count()} errors")
            raise MalformedResponse(f"{capability.value} answer does not match schema: {e}") from e

    async def analyze_contact(self, contact: ContactProfile, model: str | None = None) -> ContactAnalysis:
        return await self._structured(
            Capability.ANALYZE_CONTACT,
            model,
            prompts.contact_analysis_prompt(contact),
            ContactAnalysis,
            clamp_score=True,
        )

    async def generate_email(self, request: EmailRequest, model: str | None = None) -> str:
        return await self._text(Capability.GENERATE_EMAIL, model, prompts.email_prompt(request), structured=False)

    async def get_insights(self, request: InsightsRequest, model: str | None = None) -> list[str]:
        return await self._structured(
            Capability.GET_INSIGHTS, model, prompts.insights_prompt(request), list[str]
        )

    async def summarize_deal(self, deal: DealProfile, model: str | None = None) -> str:
        return await self._text(Capability.SUMMARIZE_DEAL, model, prompts.deal_summary_prompt(deal), structured=False)

    async def suggest_next_actions(self, deal: DealProfile, model: str | None = None) -> list[str]:
        return await self._structured(
            Capability.SUGGEST_NEXT_ACTIONS, model, prompts.next_actions_prompt(deal), list[str]
        )

    async def research_company(self, request: CompanyResearchRequest, model: str | None = None) -> CompanyResearch:
        return await self._structured(
            Capability.RESEARCH_COMPANY, model, prompts.company_research_prompt(request), CompanyResearch
        )

    async def research_contact(self, request: ContactResearchRequest, model: str | None = None) -> ContactResearch:
        return await self._structured(
            Capability.RESEARCH_CONTACT, model, prompts.contact_research_prompt(request), ContactResearch
        )
