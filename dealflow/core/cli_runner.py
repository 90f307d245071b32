"""
CLI Runner for the Task Router
Command-line tool to inspect routing and try enrichment against real providers.

    python -m dealflow.core.cli_runner            # routing table + sample enrichments
    python -m dealflow.core.cli_runner routing    # routing table only
    python -m dealflow.core.cli_runner models multimodal  # active models with a capability
"""
import asyncio
import sys

from loguru import logger

from dealflow.config import get_settings
from dealflow.core import policy_table
from dealflow.core.model_catalog import models_with_capability, recommended_models
from dealflow.core.task_router import TaskRouter
from dealflow.models.task import Priority, TaskType
from dealflow.providers import build_adapters
from dealflow.services.enrichment_service import EnrichmentService
from dealflow.utils.cost_tracker import get_cost_tracker
from dealflow.utils.observability import configure_logging

SAMPLE_CONTACT = {"name": "Jane Cooper", "email": "jane.cooper@northwind.example", "company": "Northwind Traders"}
SAMPLE_COMPANY = {"name": "Northwind Traders", "domain": "northwind.example"}
SAMPLE_DEAL = {
    "title": "Northwind CRM rollout",
    "company": "Northwind Traders",
    "contact": "Jane Cooper",
    "value": 48000,
    "stage": "proposal",
    "probability": 40,
}


def render_routing_table() -> str:
    """Policy table, the resolved primary for every priority, and catalog picks."""
    lines = [f"{'TASK':<18} {'PRIMARY':<30} {'FALLBACK':<34} REASON"]
    for entry in policy_table.routing_table():
        lines.append(f"{entry.task:<18} {entry.primary_model:<30} {entry.fallback_model:<34} {entry.reason}")

    lines.append("")
    lines.append(f"{'TASK':<18} " + " ".join(f"{p.value.upper():<28}" for p in Priority))
    for task_type in TaskType:
        cells = [policy_table.resolve(task_type, p).primary_label for p in Priority]
        lines.append(f"{task_type.value:<18} " + " ".join(f"{c:<28}" for c in cells))

    lines.append("")
    lines.append(f"{'TASK':<18} RECOMMENDED")
    for task_type in TaskType:
        picks = ", ".join(
            f"{m.provider.value}/{m.id} [{', '.join(m.capabilities)}]" for m in recommended_models(task_type)
        )
        lines.append(f"{task_type.value:<18} {picks}")
    return "\n".join(lines)


def render_models(capability: str) -> str:
    models = models_with_capability(capability)
    if not models:
        return f"No active models with capability '{capability}'"
    return "\n".join(
        f"{m.provider.value + '/' + m.id:<30} ${m.input_cost:.3f} in / ${m.output_cost:.3f} out per 1M tokens"
        for m in models
    )


async def run_enrichment_demo():
    """
    Enrich one sample contact, company and deal.
    Without API keys every record comes back degraded, which is also worth seeing.
    """
    configure_logging()
    settings = get_settings()

    print("\n" + "=" * 70)
    print("🧭 DealFlow AI Routing Table")
    print("=" * 70 + "\n")
    print(render_routing_table())

    providers = settings.configured_providers()
    logger.info(f"Configured providers: {providers['configured'] or 'none'}")

    task_router = TaskRouter(build_adapters(settings))
    task_router.verify_coverage()
    service = EnrichmentService(task_router, settings)

    contact, company, deal = await asyncio.gather(
        service.enrich_contact(SAMPLE_CONTACT),
        service.enrich_company(SAMPLE_COMPANY),
        service.enrich_deal(SAMPLE_DEAL),
    )

    for label, record in (("Contact", contact), ("Company", company), ("Deal", deal)):
        print(f"\n{'─' * 70}")
        print(f"📇 {label}: {record.provenance} (confidence {record.confidence})")
        print(f"{'─' * 70}")
        for key, value in record.model_dump(exclude_none=True, exclude={"provenance", "confidence"}).items():
            if value:
                print(f"   {key}: {value}")

    summary = get_cost_tracker().get_summary()
    print(f"\n💰 Spend: ${summary['lifetime']['cost_usd']} over {summary['lifetime']['calls']} calls\n")


if __name__ == "__main__":
    if len(sys.argv) > 1 and sys.argv[1] == "routing":
        print(render_routing_table())
    elif len(sys.argv) > 2 and sys.argv[1] == "models":
        print(render_models(sys.argv[2]))
    else:
        asyncio.run(run_enrichment_demo())
