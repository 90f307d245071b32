"""
Task Policy Table
Static routing policy: which provider/model serves each task type, and which
one takes over when it fails.

The table is immutable for the process lifetime. Priority adjustments are
derived on every lookup and never written back.
"""
from types import MappingProxyType
from typing import Iterator, List, Tuple

from dealflow.core.model_catalog import cheapest_model, fastest_model
from dealflow.models.routing import ModelPreference, RoutingEntry
from dealflow.models.task import Priority, ProviderName, TaskType

OPENAI = ProviderName.OPENAI
GEMINI = ProviderName.GEMINI


TASK_ROUTING = MappingProxyType({
    TaskType.CONTACT_ANALYSIS: ModelPreference(
        primary_provider=GEMINI,
        primary_model="gemma-2-9b-it",
        fallback_provider=OPENAI,
        fallback_model="gpt-4o-mini",
        reason="Gemma excels at structured data analysis and scoring",
    ),
    TaskType.EMAIL_GENERATION: ModelPreference(
        primary_provider=OPENAI,
        primary_model="gpt-4o",
        fallback_provider=GEMINI,
        fallback_model="gemini-2.0-flash-exp",
        reason="OpenAI superior for creative writing and personalization",
    ),
    TaskType.COMPANY_RESEARCH: ModelPreference(
        primary_provider=GEMINI,
        primary_model="gemini-1.5-pro",
        fallback_provider=OPENAI,
        fallback_model="gpt-4o",
        reason="Gemini better for factual research and comprehensive analysis",
    ),
    TaskType.DEAL_SUMMARY: ModelPreference(
        primary_provider=GEMINI,
        primary_model="gemma-2-27b-it",
        fallback_provider=OPENAI,
        fallback_model="gpt-4o",
        reason="Gemma provides concise, actionable business summaries",
    ),
    TaskType.NEXT_ACTIONS: ModelPreference(
        primary_provider=GEMINI,
        primary_model="gemma-2-9b-it",
        fallback_provider=OPENAI,
        fallback_model="gpt-4o-mini",
        reason="Gemma optimized for specific, actionable recommendations",
    ),
    TaskType.INSIGHTS: ModelPreference(
        primary_provider=OPENAI,
        primary_model="gpt-4o",
        fallback_provider=GEMINI,
        fallback_model="gemini-2.0-flash-exp",
        reason="OpenAI better for creative insights and pattern recognition",
    ),
    TaskType.CONTACT_RESEARCH: ModelPreference(
        primary_provider=GEMINI,
        primary_model="gemini-1.5-flash",
        fallback_provider=OPENAI,
        fallback_model="gpt-4o-mini",
        reason="Gemini faster for contact information and strategy research",
    ),
})

# Used for any task name the table does not know
DEFAULT_PREFERENCE = ModelPreference(
    primary_provider=GEMINI,
    primary_model="gemini-2.0-flash-exp",
    fallback_provider=OPENAI,
    fallback_model="gpt-4o-mini",
    reason="Default routing for unknown task",
)


def resolve(task_type: TaskType | str, priority: Priority | str = Priority.QUALITY) -> ModelPreference:
    """
    Look up the model preference for a task under a priority.

    Total over task names: anything not in the table gets DEFAULT_PREFERENCE.

    - quality: the entry as declared
    - speed: the primary provider's fastest model
    - cost: the cheapest model in the catalog, which may switch provider

    If an adjustment lands on the fallback, the fallback becomes the entry's
    declared primary so the two never coincide.
    """
    priority = Priority(priority)
    base = TASK_ROUTING.get(task_type)
    if base is None:
        return DEFAULT_PREFERENCE

    if priority == Priority.QUALITY:
        return base

    if priority == Priority.SPEED:
        provider = base.primary_provider
        model = fastest_model(provider).id
    else:
        cheapest = cheapest_model()
        provider, model = cheapest.provider, cheapest.id

    if (provider, model) == (base.primary_provider, base.primary_model):
        return base

    fallback_provider, fallback_model = base.fallback_provider, base.fallback_model
    if (provider, model) == (fallback_provider, fallback_model):
        fallback_provider, fallback_model = base.primary_provider, base.primary_model

    return ModelPreference(
        primary_provider=provider,
        primary_model=model,
        fallback_provider=fallback_provider,
        fallback_model=fallback_model,
        reason=f"{base.reason} (optimized for {priority.value})",
    )


def iter_preferences() -> Iterator[Tuple[TaskType, Priority, ModelPreference]]:
    """Every (task, priority) combination the router can be asked for."""
    for task_type in TaskType:
        for priority in Priority:
            yield task_type, priority, resolve(task_type, priority)


def routing_table() -> List[RoutingEntry]:
    """Operator view of the declared policy."""
    return [
        RoutingEntry(
            task=task.value,
            primary_model=f"{pref.primary_provider} ({pref.primary_model})",
            fallback_model=f"{pref.fallback_provider} ({pref.fallback_model})",
            reason=pref.reason,
        )
        for task, pref in TASK_ROUTING.items()
    ]
