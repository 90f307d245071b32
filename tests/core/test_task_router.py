"""
Tests for the task router.
Verifies the primary → fallback → canned state machine, the failure
contract and cancellation.
"""
import asyncio
import pytest

from dealflow.core.task_router import (
    BASE_CONFIDENCE,
    TASK_INPUT_MODELS,
    TaskRouter,
    parse_payload,
)
from dealflow.models.company import CompanyResearch, CompanyResearchRequest
from dealflow.models.contact import ContactAnalysis, ContactProfile, EmailRequest
from dealflow.models.routing import CANNED_PROVENANCE, RoutingStage
from dealflow.models.task import Capability, Priority, ProviderName, TaskType
from dealflow.providers.base import (
    MalformedResponse,
    ProviderAdapter,
    ProviderUnavailable,
    UnsupportedCapability,
)
from dealflow.utils.metrics import metrics


class AnalysisOnlyAdapter(ProviderAdapter):
    """Real adapter subclass that implements a single capability."""

    provider = ProviderName.GEMINI

    def _build_model(self, model_name):
        raise AssertionError("not used")

    async def analyze_contact(self, contact, model=None):
        return ContactAnalysis(score=50)


@pytest.mark.asyncio
class TestPrimaryStage:
    """Primary succeeds: no fallback, primary provenance."""

    async def test_primary_success(self, stub_router, gemini_stub, openai_stub, contact, contact_analysis):
        gemini_stub.invoke.return_value = contact_analysis

        result = await stub_router.execute(TaskType.CONTACT_ANALYSIS, contact)

        assert result.stage == RoutingStage.PRIMARY
        assert result.output == contact_analysis
        assert result.provenance == "gemini/gemma-2-9b-it"
        assert result.confidence == BASE_CONFIDENCE[TaskType.CONTACT_ANALYSIS]
        assert result.errors == []
        gemini_stub.invoke.assert_awaited_once_with(Capability.ANALYZE_CONTACT, contact, model="gemma-2-9b-it")
        openai_stub.invoke.assert_not_awaited()

    async def test_priority_changes_model(self, stub_router, gemini_stub):
        gemini_stub.invoke.return_value = CompanyResearch(name="Acme")
        request = CompanyResearchRequest(company_name="Acme")

        result = await stub_router.execute(TaskType.COMPANY_RESEARCH, request, Priority.COST)

        assert result.provenance == "gemini/gemma-2-2b-it"
        assert result.priority == Priority.COST

    async def test_records_routing_metrics(self, stub_router, gemini_stub, contact, contact_analysis):
        gemini_stub.invoke.return_value = contact_analysis

        await stub_router.execute(TaskType.CONTACT_ANALYSIS, contact)

        assert metrics.tasks_routed.value(task="contact-analysis", stage="primary") == 1


@pytest.mark.asyncio
class TestFallbackStage:
    """Primary fails with an absorbed error: fallback runs exactly once."""

    @pytest.mark.parametrize("error", [ProviderUnavailable("down"), MalformedResponse("bad json")])
    async def test_fallback_after_absorbed_error(
        self, stub_router, gemini_stub, openai_stub, contact, contact_analysis, error
    ):
        gemini_stub.invoke.side_effect = error
        openai_stub.invoke.return_value = contact_analysis

        result = await stub_router.execute(TaskType.CONTACT_ANALYSIS, contact)

        assert result.stage == RoutingStage.FALLBACK
        assert result.provenance == "openai/gpt-4o-mini"
        assert result.confidence == BASE_CONFIDENCE[TaskType.CONTACT_ANALYSIS] - 10
        assert len(result.errors) == 1
        assert gemini_stub.invoke.await_count == 1
        assert openai_stub.invoke.await_count == 1
        openai_stub.invoke.assert_awaited_once_with(Capability.ANALYZE_CONTACT, contact, model="gpt-4o-mini")

    async def test_missing_adapter_counts_as_unavailable(self, openai_stub, contact, contact_analysis):
        router = TaskRouter({ProviderName.OPENAI: openai_stub})
        openai_stub.invoke.return_value = contact_analysis

        result = await router.execute(TaskType.CONTACT_ANALYSIS, contact)

        assert result.stage == RoutingStage.FALLBACK
        assert "No adapter registered" in result.errors[0]


@pytest.mark.asyncio
class TestDegradedStage:
    """Both stages fail: canned output, never an exception."""

    async def test_canned_output_when_both_fail(self, stub_router, gemini_stub, openai_stub, contact):
        gemini_stub.invoke.side_effect = ProviderUnavailable("gemini down")
        openai_stub.invoke.side_effect = MalformedResponse("garbage")

        result = await stub_router.execute(TaskType.CONTACT_ANALYSIS, contact)

        assert result.degraded
        assert result.confidence == 0
        assert result.provenance == CANNED_PROVENANCE
        assert result.provider is None
        assert result.output.score == 60
        assert len(result.errors) == 2
        assert gemini_stub.invoke.await_count == 1
        assert openai_stub.invoke.await_count == 1

    async def test_canned_email_uses_payload(self, stub_router, gemini_stub, openai_stub, contact):
        gemini_stub.invoke.side_effect = ProviderUnavailable("down")
        openai_stub.invoke.side_effect = ProviderUnavailable("down")

        result = await stub_router.generate_email(contact, context="pricing follow-up")

        assert "Hi Jane" in result.output
        assert "Northwind Traders" in result.output

    async def test_no_adapters_at_all(self, contact):
        router = TaskRouter({})

        result = await router.analyze_contact(contact)

        assert result.degraded
        assert metrics.tasks_routed.value(task="contact-analysis", stage="degraded") == 1


@pytest.mark.asyncio
class TestFailureContract:
    """Errors outside the absorbed set propagate."""

    async def test_unsupported_capability_propagates_without_fallback(
        self, stub_router, gemini_stub, openai_stub, contact
    ):
        gemini_stub.invoke.side_effect = UnsupportedCapability("no analyze_contact")

        with pytest.raises(UnsupportedCapability):
            await stub_router.execute(TaskType.CONTACT_ANALYSIS, contact)

        openai_stub.invoke.assert_not_awaited()

    async def test_unsupported_capability_from_real_adapter(self, openai_stub, deal):
        router = TaskRouter({
            ProviderName.GEMINI: AnalysisOnlyAdapter(api_key="k"),
            ProviderName.OPENAI: openai_stub,
        })

        with pytest.raises(UnsupportedCapability):
            await router.summarize_deal(deal)

        openai_stub.invoke.assert_not_awaited()

    async def test_cancellation_during_primary(self, stub_router, gemini_stub, openai_stub, contact):
        started = asyncio.Event()

        async def hang(*args, **kwargs):
            started.set()
            await asyncio.Event().wait()

        gemini_stub.invoke.side_effect = hang

        task = asyncio.create_task(stub_router.execute(TaskType.CONTACT_ANALYSIS, contact))
        await started.wait()
        task.cancel()

        with pytest.raises(asyncio.CancelledError):
            await task

        openai_stub.invoke.assert_not_awaited()

    async def test_unknown_task_type_rejected(self, stub_router, contact):
        with pytest.raises(ValueError):
            await stub_router.execute("lead-scoring", contact)


@pytest.mark.asyncio
class TestConvenienceOperations:
    """Convenience wrappers build the payload and call execute()."""

    async def test_research_contact_defaults_to_speed(self, stub_router, gemini_stub, contact_research):
        gemini_stub.invoke.return_value = contact_research

        result = await stub_router.research_contact("Jane Cooper", "Northwind Traders")

        assert result.priority == Priority.SPEED
        assert result.task_type == TaskType.CONTACT_RESEARCH
        request = gemini_stub.invoke.await_args.args[1]
        assert request.person_name == "Jane Cooper"
        assert request.company_name == "Northwind Traders"

    async def test_generate_email_builds_request(self, stub_router, openai_stub, contact):
        openai_stub.invoke.return_value = "Subject: Hello"

        result = await stub_router.generate_email(contact, "demo recap")

        request = openai_stub.invoke.await_args.args[1]
        assert isinstance(request, EmailRequest)
        assert request.context == "demo recap"
        assert result.provenance == "openai/gpt-4o"

    async def test_insights_requires_subject(self, stub_router):
        with pytest.raises(ValueError):
            await stub_router.get_insights()

    async def test_deal_operations(self, stub_router, gemini_stub, deal):
        gemini_stub.invoke.return_value = "summary"

        summary = await stub_router.summarize_deal(deal)
        actions = await stub_router.suggest_next_actions(deal)

        assert summary.provenance == "gemini/gemma-2-27b-it"
        assert actions.provenance == "gemini/gemma-2-9b-it"


class TestIntrospection:

    def test_provider_status(self, stub_router):
        status = stub_router.provider_status()

        assert set(status) == {"openai", "gemini"}
        assert status["openai"]["configured"] is True

    def test_routing_table(self, stub_router):
        assert len(stub_router.routing_table()) == len(TaskType)

    def test_verify_coverage_passes_with_full_adapters(self, stub_router):
        stub_router.verify_coverage()

    def test_verify_coverage_reports_gaps(self, openai_stub):
        router = TaskRouter({
            ProviderName.GEMINI: AnalysisOnlyAdapter(api_key="k"),
            ProviderName.OPENAI: openai_stub,
        })

        with pytest.raises(UnsupportedCapability) as exc_info:
            router.verify_coverage()

        assert "research_company" in str(exc_info.value)

    def test_verify_coverage_tolerates_missing_provider(self, openai_stub):
        TaskRouter({ProviderName.OPENAI: openai_stub}).verify_coverage()


class TestPayloadParsing:

    def test_every_task_has_an_input_model(self):
        assert set(TASK_INPUT_MODELS) == set(TaskType)

    def test_parse_contact_payload(self):
        payload = parse_payload("contact-analysis", {"name": "Jane", "company": "Acme"})

        assert isinstance(payload, ContactProfile)

    def test_parse_rejects_invalid(self):
        with pytest.raises(ValueError):
            parse_payload("company-research", {"domain": "acme.com"})
