"""
Tests for the Gemini adapter: prompt folding and JSON parsing of text answers.
"""
import json
import pytest
from pydantic_ai.messages import ModelMessage, ModelResponse, TextPart
from pydantic_ai.models.function import AgentInfo, FunctionModel
from pydantic_ai.models.test import TestModel

from dealflow.models.company import CompanyResearchRequest
from dealflow.models.contact import ContactResearchRequest, EmailRequest
from dealflow.models.deal import InsightsRequest
from dealflow.providers.base import MalformedResponse
from dealflow.providers.gemini_adapter import GeminiAdapter, extract_json
from dealflow.utils.cost_tracker import CostTracker


def make_adapter(model) -> GeminiAdapter:
    return GeminiAdapter(
        api_key="test-key",
        default_model="gemini-1.5-flash",
        model_factory=lambda name: model,
        cost_tracker=CostTracker(),
        max_retries=1,
    )


class TestExtractJson:

    def test_plain_object(self):
        assert extract_json('{"score": 70}') == {"score": 70}

    def test_code_fence(self):
        text = 'Here you go:\n```json\n{"score": 70, "insights": ["a"]}\n```\nHope it helps.'

        assert extract_json(text) == {"score": 70, "insights": ["a"]}

    def test_array_with_prose(self):
        assert extract_json('Actions:\n["Call", "Email"]\nDone.') == ["Call", "Email"]

    def test_skips_bracket_in_prose(self):
        assert extract_json('Note [draft] {"name": "Acme"}') == {"name": "Acme"}

    def test_no_json(self):
        with pytest.raises(MalformedResponse, match="No JSON"):
            extract_json("I'm sorry, I can't help with that.")

    def test_truncated_json(self):
        with pytest.raises(MalformedResponse, match="Invalid JSON"):
            extract_json('{"score": 70, "insights": ["a"')


@pytest.mark.asyncio
class TestGeminiAdapter:

    async def test_contact_analysis_score_is_clamped(self, contact):
        answer = json.dumps({"score": 140, "insights": ["Strong fit"], "recommendations": [], "risk_factors": []})
        adapter = make_adapter(TestModel(custom_output_text=f"```json\n{answer}\n```"))

        analysis = await adapter.analyze_contact(contact, model="gemma-2-9b-it")

        assert analysis.score == 100
        assert analysis.insights == ["Strong fit"]

    async def test_numeric_fields_coerced_to_text(self):
        answer = json.dumps({"name": "Acme", "founded": 1998, "employee_count": 500})
        adapter = make_adapter(TestModel(custom_output_text=answer))

        research = await adapter.research_company(CompanyResearchRequest(company_name="Acme"))

        assert research.founded == "1998"
        assert research.employee_count == "500"

    async def test_list_answer(self, deal):
        adapter = make_adapter(TestModel(custom_output_text='["Share ROI model", "Book exec sponsor call"]'))

        insights = await adapter.get_insights(InsightsRequest(deal=deal))

        assert insights == ["Share ROI model", "Book exec sponsor call"]

    async def test_prose_answer_is_malformed(self):
        adapter = make_adapter(TestModel(custom_output_text="Jane is probably a manager."))

        with pytest.raises(MalformedResponse):
            await adapter.research_contact(ContactResearchRequest(person_name="Jane"))

    async def test_wrong_shape_is_malformed(self, deal):
        adapter = make_adapter(TestModel(custom_output_text='{"actions": "call them"}'))

        with pytest.raises(MalformedResponse):
            await adapter.suggest_next_actions(deal)

    async def test_empty_answer_is_malformed(self, deal):
        adapter = make_adapter(TestModel(custom_output_text="   "))

        with pytest.raises(MalformedResponse):
            await adapter.summarize_deal(deal)

    async def test_instruction_folded_into_prompt(self, contact):
        seen = []

        def respond(messages: list[ModelMessage], info: AgentInfo) -> ModelResponse:
            seen.append(messages[-1].parts[-1].content)
            return ModelResponse(parts=[TextPart("Subject: Hello Jane")])

        adapter = make_adapter(FunctionModel(respond))

        email = await adapter.generate_email(EmailRequest(contact=contact))

        assert email == "Subject: Hello Jane"
        assert "expert sales copywriter" in seen[0]
        assert "Jane Cooper" in seen[0]
        assert "Respond with JSON only" not in seen[0]

    async def test_structured_prompt_asks_for_json(self, deal):
        seen = []

        def respond(messages: list[ModelMessage], info: AgentInfo) -> ModelResponse:
            seen.append(messages[-1].parts[-1].content)
            return ModelResponse(parts=[TextPart('["Send proposal"]')])

        adapter = make_adapter(FunctionModel(respond))

        await adapter.suggest_next_actions(deal)

        assert "Respond with JSON only" in seen[0]
        assert "Northwind CRM rollout" in seen[0]
