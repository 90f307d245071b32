"""
Cost Tracking & Budget Management
Monitors provider token usage and prevents runaway costs.
"""
import datetime as dt
import threading
from dataclasses import dataclass, field
from typing import Any, Dict
from loguru import logger
from dealflow.config import get_settings
from dealflow.core.model_catalog import get_model, MODEL_CATALOG


class BudgetExceededError(RuntimeError):
    """Raised when the hourly or daily spend limit has been reached."""
    pass


@dataclass
class UsageWindow:
    """Tracks usage over a time window."""
    total_cost: float = 0.0
    total_tokens: int = 0
    call_count: int = 0
    window_start: dt.datetime = field(default_factory=lambda: dt.datetime.now(dt.UTC))


class CostTracker:
    """
    Thread-safe cost tracking with budget enforcement.

    Tracks usage at multiple time granularities (hourly, daily)
    and refuses new calls once a limit is reached.
    """

    def __init__(self):
        self.settings = get_settings()
        self.hourly_usage = UsageWindow()
        self.daily_usage = UsageWindow()
        self.lifetime_usage = UsageWindow()

        # Per-provider and per-model costs for debugging
        self.per_provider_costs: Dict[str, float] = {}
        self.per_model_costs: Dict[str, float] = {}
        self._lock = threading.Lock()

    def _reset_window_if_needed(self, window: UsageWindow, hours: int) -> UsageWindow:
        """Reset usage window if it's expired."""
        now = dt.datetime.now(dt.UTC)
        elapsed = (now - window.window_start).total_seconds() / 3600

        if elapsed >= hours:
            logger.debug(f"Resetting {hours}h usage window")
            return UsageWindow()
        return window

    def price(self, model: str, input_tokens: int, output_tokens: int) -> tuple[float, float]:
        """Return (input_cost, output_cost) in USD for a completion."""
        spec = get_model(model)
        if spec is None:
            logger.warning(f"⚠️ Unknown model pricing: {model}, assuming gpt-4o rates")
            spec = MODEL_CATALOG["gpt-4o"]

        return (
            (input_tokens / 1_000_000) * spec.input_cost,
            (output_tokens / 1_000_000) * spec.output_cost,
        )

    def track_completion(
        self,
        provider: str,
        model: str,
        input_tokens: int,
        output_tokens: int,
    ) -> float:
        """
        Track a single completion and return its cost.

        Args:
            provider: Provider that served the call
            model: Model identifier (e.g., "gpt-4o")
            input_tokens: Number of input/prompt tokens
            output_tokens: Number of output/completion tokens

        Returns:
            Cost in USD for this completion
        """
        input_cost, output_cost = self.price(model, input_tokens, output_tokens)
        cost = input_cost + output_cost
        total_tokens = input_tokens + output_tokens

        with self._lock:
            # Reset windows if needed
            self.hourly_usage = self._reset_window_if_needed(self.hourly_usage, 1)
            self.daily_usage = self._reset_window_if_needed(self.daily_usage, 24)

            # Update all windows
            for usage_window in [self.hourly_usage, self.daily_usage, self.lifetime_usage]:
                usage_window.total_cost += cost
                usage_window.total_tokens += total_tokens
                usage_window.call_count += 1

            self.per_provider_costs[provider] = self.per_provider_costs.get(provider, 0.0) + cost
            self.per_model_costs[model] = self.per_model_costs.get(model, 0.0) + cost

        self._warn_if_near_limits()

        logger.debug(
            f"💰 {provider}/{model}: ${cost:.4f} "
            f"({input_tokens} in + {output_tokens} out = {total_tokens} tokens)"
        )

        return cost

    def check_budget(self) -> None:
        """
        Refuse new provider calls once a spend limit is reached.

        Raises:
            BudgetExceededError: If hourly or daily budget exceeded
        """
        if self.settings.environment == "test":
            return

        with self._lock:
            self.hourly_usage = self._reset_window_if_needed(self.hourly_usage, 1)
            self.daily_usage = self._reset_window_if_needed(self.daily_usage, 24)
            hourly_cost = self.hourly_usage.total_cost
            daily_cost = self.daily_usage.total_cost

        if hourly_cost >= self.settings.hourly_cost_limit_usd:
            raise BudgetExceededError(
                f"🚨 HOURLY BUDGET EXCEEDED: ${hourly_cost:.2f} "
                f"/ ${self.settings.hourly_cost_limit_usd:.2f}"
            )

        if daily_cost >= self.settings.daily_cost_limit_usd:
            raise BudgetExceededError(
                f"🚨 DAILY BUDGET EXCEEDED: ${daily_cost:.2f} "
                f"/ ${self.settings.daily_cost_limit_usd:.2f}"
            )

    def _warn_if_near_limits(self):
        """Log when spend crosses 80% of a limit."""
        hourly_pct = (self.hourly_usage.total_cost / self.settings.hourly_cost_limit_usd) * 100
        if hourly_pct >= 80:
            logger.warning(
                f"⚠️ Hourly budget at {hourly_pct:.0f}%: "
                f"${self.hourly_usage.total_cost:.2f} / ${self.settings.hourly_cost_limit_usd:.2f}"
            )

        daily_pct = (self.daily_usage.total_cost / self.settings.daily_cost_limit_usd) * 100
        if daily_pct >= 80:
            logger.warning(
                f"⚠️ Daily budget at {daily_pct:.0f}%: "
                f"${self.daily_usage.total_cost:.2f} / ${self.settings.daily_cost_limit_usd:.2f}"
            )

    def get_summary(self) -> Dict[str, Any]:
        """Get a summary of current usage statistics."""
        return {
            "hourly": {
                "cost_usd": round(self.hourly_usage.total_cost, 4),
                "tokens": self.hourly_usage.total_tokens,
                "calls": self.hourly_usage.call_count,
                "limit_usd": self.settings.hourly_cost_limit_usd,
                "pct_used": round((self.hourly_usage.total_cost / self.settings.hourly_cost_limit_usd) * 100, 1)
            },
            "daily": {
                "cost_usd": round(self.daily_usage.total_cost, 4),
                "tokens": self.daily_usage.total_tokens,
                "calls": self.daily_usage.call_count,
                "limit_usd": self.settings.daily_cost_limit_usd,
                "pct_used": round((self.daily_usage.total_cost / self.settings.daily_cost_limit_usd) * 100, 1)
            },
            "lifetime": {
                "cost_usd": round(self.lifetime_usage.total_cost, 2),
                "tokens": self.lifetime_usage.total_tokens,
                "calls": self.lifetime_usage.call_count
            },
            "per_provider": {k: round(v, 4) for k, v in self.per_provider_costs.items()},
            "per_model": {k: round(v, 4) for k, v in self.per_model_costs.items()},
        }


# Global singleton instance
_cost_tracker: CostTracker | None = None


def get_cost_tracker() -> CostTracker:
    """Get the global cost tracker instance (singleton)."""
    global _cost_tracker
    if _cost_tracker is None:
        _cost_tracker = CostTracker()
    return _cost_tracker
