"""
Tests for the routing table printout of the CLI runner.
"""
from dealflow.core.cli_runner import SAMPLE_DEAL, render_models, render_routing_table
from dealflow.models.deal import DealEnrichment
from dealflow.models.task import TaskType


def test_table_lists_every_task():
    table = render_routing_table()

    for task_type in TaskType:
        assert task_type.value in table


def test_priority_grid():
    lines = render_routing_table().splitlines()
    grid_header = next(line for line in lines if "SPEED" in line)
    company_row = [line for line in lines if line.startswith("company-research")][1]

    assert "QUALITY" in grid_header and "COST" in grid_header
    assert "gemini/gemini-1.5-pro" in company_row
    assert "gemini/gemma-2-2b-it" in company_row


def test_sample_deal_is_enrichable():
    record = DealEnrichment.model_validate(SAMPLE_DEAL)

    assert record.to_profile().company == "Northwind Traders"


def test_recommendations_listed_with_capabilities():
    lines = render_routing_table().splitlines()
    company_row = [line for line in lines if line.startswith("company-research")][-1]

    assert "gemini/gemini-1.5-pro [" in company_row
    assert "multimodal" in company_row


def test_models_by_capability():
    listing = render_models("complex-reasoning").splitlines()

    assert len(listing) == 2
    assert listing[0].startswith("gemini/gemini-1.5-pro")
    assert "per 1M tokens" in listing[0]


def test_models_by_unknown_capability():
    assert render_models("telepathy") == "No active models with capability 'telepathy'"
