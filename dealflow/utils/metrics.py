"""
Prometheus Metrics Collector

Lightweight metrics collection for observability without external dependencies.
Generates Prometheus text exposition format (text/plain; version=0.0.4).
"""
import time
import threading
from typing import Dict, List, Optional
from dataclasses import dataclass, field


@dataclass
class MetricValue:
    """Single metric value with optional labels."""
    value: float
    labels: Dict[str, str] = field(default_factory=dict)


class _LabeledMetric:
    """Shared storage for metrics keyed by label combination."""

    kind = "untyped"

    def __init__(self, name: str, description: str, labels: Optional[List[str]] = None):
        self.name = name
        self.description = description
        self.label_names = labels or []
        self._values: Dict[tuple, float] = {}
        self._lock = threading.Lock()

    @staticmethod
    def _label_key(labels: Dict[str, str]) -> tuple:
        """Create hashable key from labels."""
        return tuple(sorted((k, str(v)) for k, v in labels.items()))

    def _add(self, amount: float, labels: Dict[str, str]) -> None:
        key = self._label_key(labels)
        with self._lock:
            self._values[key] = self._values.get(key, 0.0) + amount

    def value(self, **labels: str) -> float:
        """Current value for one label combination (0 if never touched)."""
        with self._lock:
            return self._values.get(self._label_key(labels), 0.0)

    def collect(self) -> List[MetricValue]:
        """Collect all metric values."""
        with self._lock:
            return [MetricValue(value=v, labels=dict(k)) for k, v in self._values.items()]


class Counter(_LabeledMetric):
    """
    Prometheus Counter metric.

    A counter is a cumulative metric that only goes up.
    Used for: routed tasks, provider errors, token usage, costs.
    """

    kind = "counter"

    def inc(self, amount: float = 1.0, **labels: str) -> None:
        """Increment counter by amount."""
        self._add(amount, labels)


class Gauge(_LabeledMetric):
    """
    Prometheus Gauge metric.

    A gauge can go up and down.
    Used for: current spend windows, open circuits.
    """

    kind = "gauge"

    def set(self, value: float, **labels: str) -> None:
        """Set gauge to value."""
        key = self._label_key(labels)
        with self._lock:
            self._values[key] = value

    def inc(self, amount: float = 1.0, **labels: str) -> None:
        self._add(amount, labels)

    def dec(self, amount: float = 1.0, **labels: str) -> None:
        self._add(-amount, labels)


class Histogram:
    """
    Prometheus Histogram metric.

    Samples observations and counts them in cumulative buckets.
    Used for: provider latency, routing duration.
    """

    kind = "histogram"

    # Provider calls are slow compared to HTTP handlers
    DEFAULT_BUCKETS = (0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0, 30.0, 60.0)

    def __init__(
        self,
        name: str,
        description: str,
        labels: Optional[List[str]] = None,
        buckets: Optional[tuple] = None
    ):
        self.name = name
        self.description = description
        self.label_names = labels or []
        self.buckets = tuple(sorted(buckets or self.DEFAULT_BUCKETS))
        self._values: Dict[tuple, Dict] = {}
        self._lock = threading.Lock()

    def observe(self, value: float, **labels: str) -> None:
        """Record an observation."""
        key = _LabeledMetric._label_key(labels)
        with self._lock:
            data = self._values.setdefault(
                key, {"buckets": {b: 0 for b in self.buckets}, "sum": 0.0, "count": 0}
            )
            data["sum"] += value
            data["count"] += 1
            for bucket in self.buckets:
                if value <= bucket:
                    data["buckets"][bucket] += 1

    def time(self, **labels: str) -> "Timer":
        return Timer(self, **labels)

    def collect(self) -> List[MetricValue]:
        """Collect bucket, sum and count samples."""
        result = []
        with self._lock:
            for key, data in self._values.items():
                base_labels = dict(key)

                for bucket in self.buckets:
                    result.append(MetricValue(
                        value=data["buckets"][bucket],
                        labels={**base_labels, "le": str(bucket)}
                    ))

                result.append(MetricValue(value=data["count"], labels={**base_labels, "le": "+Inf"}))
                result.append(MetricValue(value=data["sum"], labels={**base_labels, "_metric": "sum"}))
                result.append(MetricValue(value=data["count"], labels={**base_labels, "_metric": "count"}))

        return result


class Timer:
    """Context manager for timing code blocks."""

    def __init__(self, histogram: Histogram, **labels: str):
        self.histogram = histogram
        self.labels = labels
        self.start_time: Optional[float] = None

    def __enter__(self) -> "Timer":
        self.start_time = time.perf_counter()
        return self

    def __exit__(self, *args) -> None:
        if self.start_time is not None:
            self.histogram.observe(time.perf_counter() - self.start_time, **self.labels)


class MetricsRegistry:
    """
    Central registry for all application metrics.

    Provides singleton access and Prometheus text format export.
    """

    _instance: Optional["MetricsRegistry"] = None
    _lock = threading.Lock()

    def __new__(cls) -> "MetricsRegistry":
        if cls._instance is None:
            with cls._lock:
                if cls._instance is None:
                    cls._instance = super().__new__(cls)
                    cls._instance._initialized = False
        return cls._instance

    def __init__(self):
        if self._initialized:
            return

        self._metrics: Dict[str, Counter | Gauge | Histogram] = {}
        self._initialized = True

        self._setup_metrics()

    def _setup_metrics(self) -> None:
        """Initialize all application metrics."""

        # ============================================
        # ROUTING METRICS
        # ============================================
        self.tasks_routed = self.counter(
            "dealflow_tasks_routed_total",
            "Routed tasks by task type and the stage that produced the result",
            ["task", "stage"]
        )

        self.routing_duration = self.histogram(
            "dealflow_routing_duration_seconds",
            "End-to-end routed task duration including fallback",
            ["task"]
        )

        # ============================================
        # PROVIDER METRICS
        # ============================================
        self.provider_calls = self.counter(
            "dealflow_provider_calls_total",
            "Provider invocations by provider and model",
            ["provider", "model"]
        )

        self.provider_errors = self.counter(
            "dealflow_provider_errors_total",
            "Provider failures by provider and error kind",
            ["provider", "kind"]
        )

        self.provider_duration = self.histogram(
            "dealflow_provider_duration_seconds",
            "Provider call latency",
            ["provider"]
        )

        # ============================================
        # TOKEN & COST METRICS
        # ============================================
        self.tokens_total = self.counter(
            "dealflow_tokens_total",
            "Tokens by provider and direction",
            ["provider", "type"]
        )

        self.cost_usd = self.counter(
            "dealflow_cost_usd_total",
            "Total cost in USD by provider",
            ["provider"]
        )

        self.hourly_cost_usd = self.gauge(
            "dealflow_hourly_cost_usd",
            "Cost in current hour window (USD)"
        )

        self.daily_cost_usd = self.gauge(
            "dealflow_daily_cost_usd",
            "Cost in current day window (USD)"
        )

        # ============================================
        # ENRICHMENT METRICS
        # ============================================
        self.enrichments = self.counter(
            "dealflow_enrichments_total",
            "Enrichment calls by record kind and outcome",
            ["kind", "outcome"]
        )

    def counter(self, name: str, description: str, labels: Optional[List[str]] = None) -> Counter:
        """Create and register a counter."""
        metric = Counter(name, description, labels)
        self._metrics[name] = metric
        return metric

    def gauge(self, name: str, description: str, labels: Optional[List[str]] = None) -> Gauge:
        """Create and register a gauge."""
        metric = Gauge(name, description, labels)
        self._metrics[name] = metric
        return metric

    def histogram(
        self,
        name: str,
        description: str,
        labels: Optional[List[str]] = None,
        buckets: Optional[tuple] = None
    ) -> Histogram:
        """Create and register a histogram."""
        metric = Histogram(name, description, labels, buckets)
        self._metrics[name] = metric
        return metric

    def track_provider_tokens(
        self,
        provider: str,
        input_tokens: int,
        output_tokens: int,
        cost_usd: float,
    ) -> None:
        """Record token and cost counters for one provider call."""
        self.tokens_total.inc(input_tokens, provider=provider, type="input")
        self.tokens_total.inc(output_tokens, provider=provider, type="output")
        self.cost_usd.inc(cost_usd, provider=provider)

    def export(self) -> str:
        """
        Export all metrics in Prometheus text exposition format.

        Format specification:
        https://prometheus.io/docs/instrumenting/exposition_formats/
        """
        lines = []

        for name, metric in self._metrics.items():
            lines.append(f"# HELP {name} {metric.description}")
            lines.append(f"# TYPE {name} {metric.kind}")

            for mv in metric.collect():
                labels = dict(mv.labels)
                metric_name = name
                if isinstance(metric, Histogram):
                    if "_metric" in labels:
                        metric_name = f"{name}_{labels.pop('_metric')}"
                    elif "le" in labels:
                        metric_name = f"{name}_bucket"

                lines.append(f"{metric_name}{self._format_labels(labels)} {mv.value}")

            lines.append("")

        return "\n".join(lines)

    @staticmethod
    def _format_labels(labels: Dict[str, str]) -> str:
        """Format labels as Prometheus label string."""
        if not labels:
            return ""

        parts = [f'{k}="{v}"' for k, v in sorted(labels.items())]
        return "{" + ",".join(parts) + "}"

    def reset(self) -> None:
        """Reset all metrics. Useful for testing."""
        self._metrics.clear()
        self._setup_metrics()


# Global metrics instance
metrics = MetricsRegistry()
