"""
Tests for provider adapter transport: retry, error categorization,
credentials, budget and circuit handling.
"""
import httpx
import pytest
from unittest.mock import AsyncMock, MagicMock, Mock, patch
from pydantic_ai.exceptions import ModelHTTPError, UnexpectedModelBehavior
from pydantic_ai.models.test import TestModel

from dealflow.models.contact import ContactProfile
from dealflow.models.task import Capability
from dealflow.providers.base import MalformedResponse, ProviderUnavailable, UnsupportedCapability
from dealflow.providers.openai_adapter import OpenAIAdapter
from dealflow.utils.circuit_breaker import CircuitBreaker, CircuitState
from dealflow.utils.cost_tracker import BudgetExceededError, CostTracker
from dealflow.utils.metrics import metrics


class MockAgent:
    """Mock PydanticAI agent that fails a number of times before succeeding."""

    def __init__(self, failure_count=0, error=None):
        self.failure_count = failure_count
        self.error = error
        self._call_count = 0

    async def run(self, prompt):
        self._call_count += 1

        if self._call_count <= self.failure_count:
            raise self.error

        mock_result = Mock()
        mock_result.output = "Success response"
        return mock_result


@pytest.fixture
def adapter():
    return OpenAIAdapter(api_key="test-key", default_model="gpt-4o-mini", max_retries=3)


@pytest.fixture(autouse=True)
def no_backoff_sleep():
    """Skip real backoff waits."""
    with patch("dealflow.providers.base.asyncio.sleep", new=AsyncMock()) as sleep:
        yield sleep


@pytest.mark.asyncio
class TestRetryLogic:
    """Transient errors are retried, then reported as unavailable."""

    async def test_success_on_first_try(self, adapter, no_backoff_sleep):
        agent = MockAgent()

        result = await adapter._run_with_retry(agent, "prompt", "gpt-4o-mini")

        assert result.output == "Success response"
        assert agent._call_count == 1
        no_backoff_sleep.assert_not_awaited()

    @pytest.mark.parametrize("error", [
        ModelHTTPError(status_code=429, model_name="gpt-4o-mini"),
        ModelHTTPError(status_code=503, model_name="gpt-4o-mini"),
        httpx.ReadTimeout("timed out"),
        httpx.ConnectError("connection refused"),
        RuntimeError("socket closed unexpectedly"),
    ])
    async def test_transient_error_retried(self, adapter, error):
        agent = MockAgent(failure_count=2, error=error)

        result = await adapter._run_with_retry(agent, "prompt", "gpt-4o-mini")

        assert result.output == "Success response"
        assert agent._call_count == 3

    async def test_exhausted_retries_raise_unavailable(self, adapter, no_backoff_sleep):
        agent = MockAgent(failure_count=10, error=ModelHTTPError(status_code=500, model_name="gpt-4o-mini"))

        with pytest.raises(ProviderUnavailable, match="failed after 3 attempts"):
            await adapter._run_with_retry(agent, "prompt", "gpt-4o-mini")

        assert agent._call_count == 3
        assert no_backoff_sleep.await_count == 2

    async def test_backoff_grows_and_is_capped(self, adapter, no_backoff_sleep):
        adapter._max_retries = 5
        agent = MockAgent(failure_count=10, error=httpx.ReadTimeout("timed out"))

        with patch("dealflow.providers.base.random.random", return_value=0.5):
            with pytest.raises(ProviderUnavailable):
                await adapter._run_with_retry(agent, "prompt", "gpt-4o-mini")

        waits = [c.args[0] for c in no_backoff_sleep.await_args_list]
        assert waits == [2, 4, 8, 10]


@pytest.mark.asyncio
class TestErrorCategorization:
    """Non-transient errors are not retried."""

    @pytest.mark.parametrize("status_code", [401, 403])
    async def test_auth_failure_is_immediate(self, adapter, status_code):
        agent = MockAgent(failure_count=10, error=ModelHTTPError(status_code=status_code, model_name="gpt-4o"))

        with pytest.raises(ProviderUnavailable, match="Authentication failed"):
            await adapter._run_with_retry(agent, "prompt", "gpt-4o")

        assert agent._call_count == 1

    async def test_api_key_message_is_immediate(self, adapter):
        agent = MockAgent(failure_count=10, error=Exception("Incorrect API key provided"))

        with pytest.raises(ProviderUnavailable, match="Authentication failed"):
            await adapter._run_with_retry(agent, "prompt", "gpt-4o")

        assert agent._call_count == 1

    async def test_rejected_request_is_immediate(self, adapter):
        agent = MockAgent(failure_count=10, error=ModelHTTPError(status_code=400, model_name="gpt-4o"))

        with pytest.raises(ProviderUnavailable, match="rejected the request"):
            await adapter._run_with_retry(agent, "prompt", "gpt-4o")

        assert agent._call_count == 1

    async def test_unexpected_behavior_is_malformed(self, adapter):
        agent = MockAgent(failure_count=10, error=UnexpectedModelBehavior("Exceeded maximum retries for output validation"))

        with pytest.raises(MalformedResponse):
            await adapter._run_with_retry(agent, "prompt", "gpt-4o")

        assert agent._call_count == 1


@pytest.mark.asyncio
class TestCompleteGuards:
    """Checks made before any provider traffic."""

    async def test_unconfigured_adapter_never_builds_a_model(self):
        factory = MagicMock()
        adapter = OpenAIAdapter(api_key="", model_factory=factory)

        with pytest.raises(ProviderUnavailable, match="not configured"):
            await adapter.analyze_contact(ContactProfile(name="Jane"))

        assert not adapter.is_configured
        factory.assert_not_called()

    async def test_budget_exceeded_is_unavailable(self):
        tracker = MagicMock()
        tracker.check_budget.side_effect = BudgetExceededError("DAILY BUDGET EXCEEDED")
        factory = MagicMock()
        adapter = OpenAIAdapter(api_key="k", model_factory=factory, cost_tracker=tracker)

        with pytest.raises(ProviderUnavailable, match="BUDGET"):
            await adapter.generate_email(MagicMock())

        factory.assert_not_called()
        assert metrics.provider_errors.value(provider="openai", kind="budget") == 1

    async def test_open_circuit_is_unavailable(self):
        circuit = CircuitBreaker(name="openai-test", failure_threshold=1, recovery_timeout=60)
        await circuit.force_open()
        adapter = OpenAIAdapter(
            api_key="k",
            model_factory=lambda name: TestModel(custom_output_text="unused"),
            circuit=circuit,
            cost_tracker=CostTracker(),
        )

        with pytest.raises(ProviderUnavailable, match="open"):
            await adapter.summarize_deal(MagicMock(title="t", company="c"))

        assert circuit.stats.total_rejections == 1

    async def test_transport_failures_trip_the_circuit(self, adapter):
        circuit = CircuitBreaker(name="openai-trip", failure_threshold=1, recovery_timeout=60)
        adapter._circuit = circuit
        adapter._model_factory = lambda name: TestModel()
        adapter._run_with_retry = AsyncMock(side_effect=ProviderUnavailable("down"))

        with pytest.raises(ProviderUnavailable):
            await adapter._complete("gpt-4o-mini", "prompt")

        assert circuit.state == CircuitState.OPEN

    async def test_unknown_capability_name(self, adapter):
        with pytest.raises(ValueError):
            await adapter.invoke("forecast_revenue", None)


class TestCapabilities:

    def test_openai_implements_everything(self, adapter):
        assert adapter.capabilities == frozenset(Capability)
        assert adapter.supports("research_company")

    def test_status(self, adapter):
        status = adapter.get_status()

        assert status["provider"] == "openai"
        assert status["configured"] is True
        assert status["default_model"] == "gpt-4o-mini"
        assert status["circuit"] is None


@pytest.mark.asyncio
async def test_base_class_capabilities_raise_unsupported():
    """A capability the subclass doesn't override is unsupported."""
    from dealflow.providers.base import ProviderAdapter
    from dealflow.models.task import ProviderName

    class EmailOnly(ProviderAdapter):
        provider = ProviderName.OPENAI

        def _build_model(self, model_name):
            return TestModel()

        async def generate_email(self, request, model=None):
            return "Subject: Hi"

    adapter = EmailOnly(api_key="k")

    assert adapter.capabilities == frozenset({Capability.GENERATE_EMAIL})
    with pytest.raises(UnsupportedCapability):
        await adapter.invoke(Capability.RESEARCH_CONTACT, None)
    assert await adapter.invoke("generate_email", None) == "Subject: Hi"
