"""
Model Catalog
Known models per provider with pricing and relative speed.

The policy table uses this to derive speed/cost substitutions and the cost
tracker uses it to price token usage.
"""
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from dealflow.models.task import ProviderName, TaskType


@dataclass(frozen=True)
class ModelSpec:
    """A single model. Pricing is USD per 1M tokens."""
    id: str
    name: str
    provider: ProviderName
    family: str
    context_window: int
    max_tokens: int
    input_cost: float
    output_cost: float
    speed_rank: int  # lower is faster
    capabilities: tuple = field(default_factory=tuple)
    is_active: bool = True

    @property
    def blended_cost(self) -> float:
        """Cost of 1M input + 1M output tokens, used to rank models by price."""
        return self.input_cost + self.output_cost


_MODELS = [
    # OpenAI
    ModelSpec(
        id="gpt-4o", name="GPT-4o", provider=ProviderName.OPENAI, family="GPT-4",
        context_window=128_000, max_tokens=4096,
        input_cost=2.50, output_cost=10.00, speed_rank=3,
        capabilities=("text-generation", "analysis", "reasoning", "creative-writing"),
    ),
    ModelSpec(
        id="gpt-4o-mini", name="GPT-4o Mini", provider=ProviderName.OPENAI, family="GPT-4",
        context_window=128_000, max_tokens=16_384,
        input_cost=0.15, output_cost=0.60, speed_rank=1,
        capabilities=("text-generation", "analysis", "reasoning"),
    ),
    ModelSpec(
        id="gpt-3.5-turbo", name="GPT-3.5 Turbo", provider=ProviderName.OPENAI, family="GPT-3.5",
        context_window=16_385, max_tokens=4096,
        input_cost=0.50, output_cost=1.50, speed_rank=2,
        capabilities=("text-generation", "analysis"),
    ),
    # Gemini
    ModelSpec(
        id="gemini-2.0-flash-exp", name="Gemini 2.0 Flash Experimental", provider=ProviderName.GEMINI,
        family="Gemini 2.0", context_window=1_000_000, max_tokens=8192,
        input_cost=0.10, output_cost=0.40, speed_rank=2,
        capabilities=("text-generation", "analysis", "reasoning", "multimodal"),
    ),
    ModelSpec(
        id="gemini-1.5-flash", name="Gemini 1.5 Flash", provider=ProviderName.GEMINI,
        family="Gemini 1.5", context_window=1_000_000, max_tokens=8192,
        input_cost=0.075, output_cost=0.30, speed_rank=1,
        capabilities=("text-generation", "analysis", "reasoning", "multimodal"),
    ),
    ModelSpec(
        id="gemini-1.5-pro", name="Gemini 1.5 Pro", provider=ProviderName.GEMINI,
        family="Gemini 1.5", context_window=2_000_000, max_tokens=8192,
        input_cost=1.25, output_cost=5.00, speed_rank=4,
        capabilities=("text-generation", "analysis", "reasoning", "multimodal", "complex-reasoning"),
    ),
    # Gemma (served through the Gemini API)
    ModelSpec(
        id="gemma-2-2b-it", name="Gemma 2 2B Instruct", provider=ProviderName.GEMINI,
        family="Gemma 2", context_window=8192, max_tokens=8192,
        input_cost=0.02, output_cost=0.04, speed_rank=2,
        capabilities=("text-generation", "analysis", "instruction-following"),
    ),
    ModelSpec(
        id="gemma-2-9b-it", name="Gemma 2 9B Instruct", provider=ProviderName.GEMINI,
        family="Gemma 2", context_window=8192, max_tokens=8192,
        input_cost=0.05, output_cost=0.10, speed_rank=3,
        capabilities=("text-generation", "analysis", "reasoning", "instruction-following"),
    ),
    ModelSpec(
        id="gemma-2-27b-it", name="Gemma 2 27B Instruct", provider=ProviderName.GEMINI,
        family="Gemma 2", context_window=8192, max_tokens=8192,
        input_cost=0.10, output_cost=0.20, speed_rank=4,
        capabilities=("text-generation", "analysis", "complex-reasoning", "instruction-following"),
    ),
]

MODEL_CATALOG: Dict[str, ModelSpec] = {m.id: m for m in _MODELS}

# Per-task recommendations, best first
TASK_MODEL_RECOMMENDATIONS: Dict[TaskType, tuple] = {
    TaskType.CONTACT_ANALYSIS: ("gemma-2-9b-it", "gemini-1.5-flash"),
    TaskType.EMAIL_GENERATION: ("gpt-4o", "gemini-1.5-pro"),
    TaskType.COMPANY_RESEARCH: ("gemini-1.5-pro", "gemini-2.0-flash-exp"),
    TaskType.DEAL_SUMMARY: ("gemma-2-27b-it", "gpt-4o-mini"),
    TaskType.NEXT_ACTIONS: ("gemma-2-9b-it", "gpt-3.5-turbo"),
    TaskType.INSIGHTS: ("gpt-4o", "gemini-1.5-pro"),
    TaskType.CONTACT_RESEARCH: ("gemini-1.5-flash", "gemma-2-9b-it"),
}


def get_model(model_id: str) -> Optional[ModelSpec]:
    return MODEL_CATALOG.get(model_id)


def active_models() -> List[ModelSpec]:
    return [m for m in _MODELS if m.is_active]


def models_for_provider(provider: ProviderName) -> List[ModelSpec]:
    return [m for m in active_models() if m.provider == provider]


def models_with_capability(capability: str) -> List[ModelSpec]:
    return [m for m in active_models() if capability in m.capabilities]


def fastest_model(provider: ProviderName) -> ModelSpec:
    """Fastest active model for a provider. Ties keep catalog order."""
    candidates = models_for_provider(provider)
    if not candidates:
        raise LookupError(f"No active models for provider '{provider}'")
    return min(candidates, key=lambda m: m.speed_rank)


def cheapest_model(provider: Optional[ProviderName] = None) -> ModelSpec:
    """Lowest-cost active model, optionally restricted to one provider."""
    candidates = models_for_provider(provider) if provider else active_models()
    if not candidates:
        raise LookupError(f"No active models for provider '{provider}'")
    return min(candidates, key=lambda m: m.blended_cost)


def recommended_models(task_type: TaskType) -> List[ModelSpec]:
    ids = TASK_MODEL_RECOMMENDATIONS.get(task_type, ())
    return [MODEL_CATALOG[i] for i in ids if i in MODEL_CATALOG]
