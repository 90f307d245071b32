"""
Tests for the model catalog.
"""
import pytest

from dealflow.core.model_catalog import (
    MODEL_CATALOG,
    cheapest_model,
    fastest_model,
    get_model,
    models_for_provider,
    models_with_capability,
    recommended_models,
)
from dealflow.models.task import ProviderName, TaskType


class TestModelCatalog:

    def test_lookup_by_id(self):
        spec = get_model("gpt-4o-mini")

        assert spec.provider == ProviderName.OPENAI
        assert spec.input_cost == 0.15
        assert spec.output_cost == 0.60

    def test_unknown_model(self):
        assert get_model("gpt-7") is None

    def test_gemma_served_by_gemini(self):
        gemini_ids = {m.id for m in models_for_provider(ProviderName.GEMINI)}

        assert {"gemma-2-2b-it", "gemma-2-9b-it", "gemma-2-27b-it"} <= gemini_ids

    def test_fastest_per_provider(self):
        assert fastest_model(ProviderName.OPENAI).id == "gpt-4o-mini"
        assert fastest_model(ProviderName.GEMINI).id == "gemini-1.5-flash"

    def test_cheapest_overall(self):
        assert cheapest_model().id == "gemma-2-2b-it"

    def test_cheapest_for_openai(self):
        assert cheapest_model(ProviderName.OPENAI).id == "gpt-4o-mini"

    def test_capability_filter(self):
        ids = {m.id for m in models_with_capability("complex-reasoning")}

        assert ids == {"gemini-1.5-pro", "gemma-2-27b-it"}

    def test_recommendations_reference_catalog(self):
        for task_type in TaskType:
            models = recommended_models(task_type)
            assert models
            assert all(m.id in MODEL_CATALOG for m in models)

    def test_specs_are_immutable(self):
        with pytest.raises(Exception):
            get_model("gpt-4o").input_cost = 0
