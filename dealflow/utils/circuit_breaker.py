"""
Circuit Breaker for Provider Degradation

One circuit per AI provider. When consecutive transport failures exceed the
threshold the circuit opens and the adapter reports the provider as
unavailable immediately instead of waiting on retries and timeouts.
"""

import asyncio
from enum import Enum
from datetime import datetime, timezone
from dataclasses import dataclass
from typing import Dict, Optional, Callable, TypeVar, Awaitable
from dealflow.config import get_settings
from dealflow.utils.observability import logger

T = TypeVar("T")


class CircuitState(str, Enum):
    """Circuit breaker states."""
    CLOSED = "closed"      # Normal operation, requests flow through
    OPEN = "open"          # Failing, reject requests immediately
    HALF_OPEN = "half_open"  # Testing if service recovered


@dataclass
class CircuitStats:
    """Circuit breaker statistics."""
    consecutive_failures: int = 0
    total_failures: int = 0
    total_successes: int = 0
    total_rejections: int = 0
    last_failure_time: Optional[datetime] = None
    last_success_time: Optional[datetime] = None
    opened_at: Optional[datetime] = None
    state_changes: int = 0


class CircuitOpenError(Exception):
    """Raised when circuit is open and the request is rejected."""
    pass


class CircuitBreaker:
    """
    Circuit breaker for protecting against cascading provider failures.

    States:
    - CLOSED: Normal operation. Failures are counted.
    - OPEN: Provider is down. Requests are rejected with CircuitOpenError.
    - HALF_OPEN: Testing recovery. Limited requests allowed.

    Exceptions listed in ``excluded_exceptions`` pass through without
    counting as failures (e.g. unparsable output from a reachable provider).

    Usage:
        breaker = CircuitBreaker(name="gemini")

        try:
            result = await breaker.call(call_gemini)
        except CircuitOpenError:
            # provider considered down
            ...
    """

    def __init__(
        self,
        name: str,
        failure_threshold: Optional[int] = None,
        recovery_timeout: Optional[float] = None,
        half_open_max_calls: Optional[int] = None,
        excluded_exceptions: tuple = (),
    ):
        """
        Initialize circuit breaker.

        Args:
            name: Identifier for this circuit (for logging)
            failure_threshold: Consecutive failures before opening
            recovery_timeout: Seconds before trying recovery
            half_open_max_calls: Max calls allowed in half-open state
            excluded_exceptions: Exception types that do not count as failures
        """
        settings = get_settings()
        self.name = name
        self._failure_threshold = failure_threshold or settings.circuit_breaker_failure_threshold
        self._recovery_timeout = recovery_timeout or settings.circuit_breaker_recovery_timeout
        self._half_open_max_calls = half_open_max_calls or settings.circuit_breaker_half_open_max_calls
        self._excluded_exceptions = excluded_exceptions

        self._state = CircuitState.CLOSED
        self._stats = CircuitStats()
        self._half_open_calls = 0
        self._lock = asyncio.Lock()

    @property
    def state(self) -> CircuitState:
        """Current circuit state."""
        return self._state

    @property
    def stats(self) -> CircuitStats:
        """Circuit statistics."""
        return self._stats

    async def call(self, func: Callable[[], Awaitable[T]]) -> T:
        """
        Execute function through circuit breaker.

        Args:
            func: Async function to execute

        Returns:
            Result from func

        Raises:
            CircuitOpenError: When the circuit rejects the call
        """
        async with self._lock:
            await self._check_state_transition()

            if self._state == CircuitState.OPEN:
                self._stats.total_rejections += 1
                logger.warning(f"Circuit '{self.name}' is OPEN, rejecting call")
                raise CircuitOpenError(f"Circuit '{self.name}' is open")

            if self._state == CircuitState.HALF_OPEN:
                if self._half_open_calls >= self._half_open_max_calls:
                    self._stats.total_rejections += 1
                    logger.warning(f"Circuit '{self.name}' HALF_OPEN limit reached, rejecting call")
                    raise CircuitOpenError(f"Circuit '{self.name}' is half-open and probing")
                self._half_open_calls += 1

        # Execute outside lock to allow concurrency
        try:
            result = await func()
        except self._excluded_exceptions:
            await self._record_success()
            raise
        except Exception as e:
            await self._record_failure(e)
            raise
        except BaseException:
            # Cancelled probe gives its slot back
            self._release_probe()
            raise
        await self._record_success()
        return result

    async def _check_state_transition(self) -> None:
        """Check if state should transition based on time."""
        if self._state != CircuitState.OPEN:
            return

        if not self._stats.opened_at:
            return

        elapsed = (datetime.now(timezone.utc) - self._stats.opened_at).total_seconds()
        if elapsed >= self._recovery_timeout:
            self._transition_to(CircuitState.HALF_OPEN)
            self._half_open_calls = 0

    def _release_probe(self) -> None:
        # No await here, so the slot is freed even while the task is being cancelled
        if self._state == CircuitState.HALF_OPEN and self._half_open_calls > 0:
            self._half_open_calls -= 1

    async def _record_success(self) -> None:
        """Record a call that reached the provider."""
        async with self._lock:
            self._stats.consecutive_failures = 0
            self._stats.total_successes += 1
            self._stats.last_success_time = datetime.now(timezone.utc)

            if self._state == CircuitState.HALF_OPEN:
                logger.info(f"Circuit '{self.name}' recovered, closing")
                self._transition_to(CircuitState.CLOSED)

    async def _record_failure(self, error: Exception) -> None:
        """Record failed call."""
        async with self._lock:
            self._stats.consecutive_failures += 1
            self._stats.total_failures += 1
            self._stats.last_failure_time = datetime.now(timezone.utc)

            logger.warning(
                f"Circuit '{self.name}' failure {self._stats.consecutive_failures}/{self._failure_threshold}: {error}"
            )

            if self._state == CircuitState.HALF_OPEN:
                logger.warning(f"Circuit '{self.name}' probe failed, reopening")
                self._transition_to(CircuitState.OPEN)
            elif self._stats.consecutive_failures >= self._failure_threshold:
                logger.error(f"Circuit '{self.name}' threshold reached, opening")
                self._transition_to(CircuitState.OPEN)

    def _transition_to(self, new_state: CircuitState) -> None:
        """Transition to new state."""
        old_state = self._state
        self._state = new_state
        self._stats.state_changes += 1

        if new_state == CircuitState.OPEN:
            self._stats.opened_at = datetime.now(timezone.utc)

        logger.info(f"Circuit '{self.name}' state: {old_state.value} -> {new_state.value}")

    async def reset(self) -> None:
        """Manually reset circuit to closed state."""
        async with self._lock:
            self._transition_to(CircuitState.CLOSED)
            self._stats.consecutive_failures = 0
            self._half_open_calls = 0

    async def force_open(self) -> None:
        """Manually open circuit (for testing/maintenance)."""
        async with self._lock:
            self._transition_to(CircuitState.OPEN)

    def get_status(self) -> dict:
        """Get circuit status for monitoring."""
        return {
            "name": self.name,
            "state": self._state.value,
            "consecutive_failures": self._stats.consecutive_failures,
            "total_failures": self._stats.total_failures,
            "total_successes": self._stats.total_successes,
            "total_rejections": self._stats.total_rejections,
            "failure_threshold": self._failure_threshold,
            "recovery_timeout_seconds": self._recovery_timeout,
            "last_failure": self._stats.last_failure_time.isoformat() if self._stats.last_failure_time else None,
            "last_success": self._stats.last_success_time.isoformat() if self._stats.last_success_time else None,
            "opened_at": self._stats.opened_at.isoformat() if self._stats.opened_at else None,
        }


# One circuit per provider, created lazily
_provider_circuits: Dict[str, CircuitBreaker] = {}


def get_provider_circuit(provider: str, excluded_exceptions: tuple = ()) -> CircuitBreaker:
    """Get or create the circuit breaker for a provider."""
    circuit = _provider_circuits.get(provider)
    if circuit is None:
        circuit = CircuitBreaker(name=provider, excluded_exceptions=excluded_exceptions)
        _provider_circuits[provider] = circuit
    return circuit


def get_all_circuit_status() -> Dict[str, dict]:
    """Status of every provider circuit created so far."""
    return {name: circuit.get_status() for name, circuit in _provider_circuits.items()}
