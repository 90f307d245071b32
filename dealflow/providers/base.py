"""
Provider Adapter Base
Uniform capability surface over one AI backend, with retry, error
categorization and usage tracking around a PydanticAI agent run.

Adapters only ever raise the documented taxonomy:
    ProviderUnavailable    transport/auth/config failure (triggers fallback)
    MalformedResponse      output could not be parsed (triggers fallback)
    UnsupportedCapability  capability not implemented (caller bug, fatal)
"""
import asyncio
import random
import time
from abc import ABC, abstractmethod
from typing import Any, Callable, Type, TypeVar

import httpx
from loguru import logger
from pydantic_ai import Agent
from pydantic_ai.exceptions import ModelHTTPError, UnexpectedModelBehavior
from pydantic_ai.models import Model

from dealflow.config import get_settings
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
from dealflow.utils.circuit_breaker import CircuitBreaker, CircuitOpenError
from dealflow.utils.cost_tracker import BudgetExceededError, CostTracker, get_cost_tracker
from dealflow.utils.metrics import metrics
from dealflow.utils.observability import log_llm_call

T = TypeVar("T")

ModelFactory = Callable[[str], Model]

RETRYABLE_STATUS_CODES = {408, 429, 500, 502, 503, 504}
AUTH_STATUS_CODES = {401, 403}


class ProviderError(Exception):
    """Base for every failure an adapter reports."""
    pass


class ProviderUnavailable(ProviderError):
    """Provider unreachable, unauthenticated, rate limited or not configured."""
    pass


class MalformedResponse(ProviderError):
    """Provider answered but the answer does not fit the expected schema."""
    pass


class UnsupportedCapability(ProviderError):
    """Adapter does not implement the requested capability. Never retried."""
    pass


class ProviderAdapter(ABC):
    """
    Base class for AI backend adapters.

    Subclasses override the capability methods they implement; the rest
    raise UnsupportedCapability. Credentials are read once at construction
    and an adapter without one fails every call with ProviderUnavailable
    without touching the network.

    Args:
        api_key: Provider credential; empty or None means not configured
        default_model: Model used when a capability is invoked without one
        model_factory: Builds the PydanticAI model for a model id
            (tests pass TestModel/FunctionModel here)
        circuit: Optional circuit breaker guarding this provider
        cost_tracker: Usage and budget tracker (global one by default)
        max_retries: Attempts per call for transient failures
    """

    provider: ProviderName

    def __init__(
        self,
        api_key: str | None = None,
        default_model: str | None = None,
        *,
        model_factory: ModelFactory | None = None,
        circuit: CircuitBreaker | None = None,
        cost_tracker: CostTracker | None = None,
        max_retries: int | None = None,
    ):
        settings = get_settings()
        self._api_key = api_key or None
        self.default_model = default_model
        self._model_factory = model_factory or self._build_model
        self._circuit = circuit
        self._cost_tracker = cost_tracker or get_cost_tracker()
        self._max_retries = max_retries or settings.max_retries
        self._min_wait = settings.retry_min_wait_seconds
        self._max_wait = settings.retry_max_wait_seconds
        self._timeout = settings.provider_timeout_seconds

        if self.is_configured:
            logger.info(f"{self.provider} adapter initialized (default model: {self.default_model})")
        else:
            logger.warning(f"{self.provider} API key not configured, adapter will report unavailable")

    # ------------------------------------------------------------------
    # Introspection
    # ------------------------------------------------------------------

    @property
    def is_configured(self) -> bool:
        return self._api_key is not None

    @property
    def capabilities(self) -> frozenset:
        """Capabilities this adapter class overrides."""
        return frozenset(
            cap for cap in Capability
            if getattr(type(self), cap.value) is not getattr(ProviderAdapter, cap.value)
        )

    def supports(self, capability: Capability | str) -> bool:
        return Capability(capability) in self.capabilities

    def get_status(self) -> dict:
        return {
            "provider": self.provider.value,
            "configured": self.is_configured,
            "default_model": self.default_model,
            "capabilities": sorted(c.value for c in self.capabilities),
            "circuit": self._circuit.get_status() if self._circuit else None,
        }

    # ------------------------------------------------------------------
    # Dispatch
    # ------------------------------------------------------------------

    async def invoke(self, capability: Capability | str, payload: Any, model: str | None = None) -> Any:
        """Run one capability. Raises UnsupportedCapability before any I/O."""
        capability = Capability(capability)
        if not self.supports(capability):
            raise UnsupportedCapability(f"{self.provider} adapter does not implement '{capability.value}'")
        method = getattr(self, capability.value)
        return await method(payload, model=model)

    # ------------------------------------------------------------------
    # Capabilities (override to implement)
    # ------------------------------------------------------------------

    async def analyze_contact(self, contact: ContactProfile, model: str | None = None) -> ContactAnalysis:
        raise UnsupportedCapability(f"{self.provider} adapter does not implement 'analyze_contact'")

    async def generate_email(self, request: EmailRequest, model: str | None = None) -> str:
        raise UnsupportedCapability(f"{self.provider} adapter does not implement 'generate_email'")

    async def get_insights(self, request: InsightsRequest, model: str | None = None) -> list[str]:
        raise UnsupportedCapability(f"{self.provider} adapter does not implement 'get_insights'")

    async def summarize_deal(self, deal: DealProfile, model: str | None = None) -> str:
        raise UnsupportedCapability(f"{self.provider} adapter does not implement 'summarize_deal'")

    async def suggest_next_actions(self, deal: DealProfile, model: str | None = None) -> list[str]:
        raise UnsupportedCapability(f"{self.provider} adapter does not implement 'suggest_next_actions'")

    async def research_company(self, request: CompanyResearchRequest, model: str | None = None) -> CompanyResearch:
        raise UnsupportedCapability(f"{self.provider} adapter does not implement 'research_company'")

    async def research_contact(self, request: ContactResearchRequest, model: str | None = None) -> ContactResearch:
        raise UnsupportedCapability(f"{self.provider} adapter does not implement 'research_contact'")

    # ------------------------------------------------------------------
    # Transport
    # ------------------------------------------------------------------

    @abstractmethod
    def _build_model(self, model_name: str) -> Model:
        """Create the PydanticAI model bound to this adapter's credential."""

    async def _complete(
        self,
        model_name: str | None,
        prompt: str,
        output_type: Type[T] = str,
        instructions: str | None = None,
    ) -> T:
        """
        Run one agent call against the provider and return its output.

        Raises:
            ProviderUnavailable: Not configured, budget exhausted, circuit
                open, auth failure, or transient errors after max retries
            MalformedResponse: Output failed schema validation
        """
        model_name = model_name or self.default_model
        if not self.is_configured:
            raise ProviderUnavailable(f"{self.provider} API key not configured")

        try:
            self._cost_tracker.check_budget()
        except BudgetExceededError as e:
            metrics.provider_errors.inc(provider=self.provider.value, kind="budget")
            raise ProviderUnavailable(str(e)) from e

        try:
            agent = Agent(
                self._model_factory(model_name),
                output_type=output_type,
                instructions=instructions,
                model_settings={"timeout": self._timeout},
            )
        except Exception as e:
            logger.error(f"🚨 Could not build {self.provider}/{model_name} agent: {e}")
            metrics.provider_errors.inc(provider=self.provider.value, kind="setup")
            raise ProviderUnavailable(f"{self.provider}/{model_name} could not be set up: {e}") from e

        async def execute():
            return await self._run_with_retry(agent, prompt, model_name)

        metrics.provider_calls.inc(provider=self.provider.value, model=model_name)
        start = time.perf_counter()
        try:
            if self._circuit is not None:
                result = await self._circuit.call(execute)
            else:
                result = await execute()
        except CircuitOpenError as e:
            metrics.provider_errors.inc(provider=self.provider.value, kind="circuit_open")
            raise ProviderUnavailable(str(e)) from e
        except ProviderError as e:
            metrics.provider_errors.inc(provider=self.provider.value, kind=type(e).__name__)
            log_llm_call(
                provider=self.provider.value,
                model=model_name,
                input_tokens=0,
                output_tokens=0,
                cost_usd=0.0,
                duration_ms=(time.perf_counter() - start) * 1000,
                success=False,
                error=str(e),
            )
            raise
        finally:
            metrics.provider_duration.observe(time.perf_counter() - start, provider=self.provider.value)

        self._record_usage(model_name, result, (time.perf_counter() - start) * 1000)
        return result.output

    async def _run_with_retry(self, agent: Agent, prompt: str, model_name: str):
        """
        Executes an agent with exponential backoff retry logic.

        Rate limits, server errors, timeouts and connection errors are
        retried. Auth failures and rejected requests are not.
        """
        label = f"{self.provider}/{model_name}"

        for attempt in range(1, self._max_retries + 1):
            try:
                logger.debug(f"{label} attempt {attempt}/{self._max_retries}")
                return await agent.run(prompt)

            except UnexpectedModelBehavior as e:
                logger.warning(f"🧩 {label} returned output that does not fit the schema: {e}")
                raise MalformedResponse(f"{label} returned unusable output: {e}") from e

            except ModelHTTPError as e:
                last_error = e
                if e.status_code in AUTH_STATUS_CODES:
                    logger.error(f"🚨 {label} authentication failure: {e}")
                    raise ProviderUnavailable(f"Authentication failed for {label}: {e}") from e
                if e.status_code not in RETRYABLE_STATUS_CODES:
                    logger.error(f"🚨 {label} rejected the request: {e}")
                    raise ProviderUnavailable(f"{label} rejected the request: {e}") from e
                error_type = "rate_limit" if e.status_code == 429 else "server_error"
                logger.warning(f"🔧 {label} HTTP {e.status_code} (attempt {attempt}/{self._max_retries})")

            except (httpx.TimeoutException, TimeoutError) as e:
                last_error = e
                error_type = "timeout"
                logger.warning(f"⏱️ {label} timeout (attempt {attempt}/{self._max_retries})")

            except httpx.TransportError as e:
                last_error = e
                error_type = "connection"
                logger.warning(f"🔌 {label} connection error (attempt {attempt}/{self._max_retries}): {e}")

            except Exception as e:
                last_error = e
                error_msg = str(e).lower()
                if "api key" in error_msg or "authentication" in error_msg:
                    logger.error(f"🚨 {label} authentication failure: {e}")
                    raise ProviderUnavailable(f"Authentication failed for {label}: {e}") from e
                error_type = "unknown"
                logger.warning(f"⚠️ {label} unknown error (attempt {attempt}/{self._max_retries}): {e}")

            if attempt == self._max_retries:
                logger.error(f"❌ {label} max retries ({self._max_retries}) exhausted. Last error: {last_error}")
                raise ProviderUnavailable(
                    f"{label} failed after {self._max_retries} attempts: {last_error}"
                ) from last_error

            # Exponential backoff with 20% jitter
            wait_time = min(self._min_wait * (2 ** (attempt - 1)), self._max_wait)
            wait_time = wait_time * (0.8 + 0.4 * random.random())

            logger.info(f"⏳ Retrying {label} in {wait_time:.1f}s... (error: {error_type})")
            await asyncio.sleep(wait_time)

        raise ProviderUnavailable(f"{label} retry loop exited without a result")

    def _record_usage(self, model_name: str, result: Any, duration_ms: float) -> None:
        usage = result.usage()
        input_tokens = usage.input_tokens or 0
        output_tokens = usage.output_tokens or 0

        cost = self._cost_tracker.track_completion(
            provider=self.provider.value,
            model=model_name,
            input_tokens=input_tokens,
            output_tokens=output_tokens,
        )
        metrics.track_provider_tokens(self.provider.value, input_tokens, output_tokens, cost)
        log_llm_call(
            provider=self.provider.value,
            model=model_name,
            input_tokens=input_tokens,
            output_tokens=output_tokens,
            cost_usd=cost,
            duration_ms=duration_ms,
        )
