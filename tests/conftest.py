import os

# Never reach real providers from the test suite, whatever .env says
os.environ["OPENAI_API_KEY"] = ""
os.environ["GEMINI_API_KEY"] = ""
os.environ["ENVIRONMENT"] = "test"

import pytest
from unittest.mock import AsyncMock, MagicMock

from dealflow.core.task_router import TaskRouter
from dealflow.models.contact import ContactAnalysis, ContactProfile, ContactResearch
from dealflow.models.company import CompanyResearch
from dealflow.models.deal import DealProfile
from dealflow.models.task import Capability, ProviderName
from dealflow.utils.metrics import metrics


def make_stub_adapter(provider: ProviderName, result=None, side_effect=None):
    """Adapter double: implements every capability, records invoke() calls."""
    adapter = MagicMock()
    adapter.provider = provider
    adapter.supports.return_value = True
    adapter.capabilities = frozenset(Capability)
    adapter.get_status.return_value = {
        "provider": provider.value,
        "configured": True,
        "default_model": None,
        "capabilities": sorted(c.value for c in Capability),
        "circuit": None,
    }
    adapter.invoke = AsyncMock(return_value=result, side_effect=side_effect)
    return adapter


@pytest.fixture(autouse=True)
def reset_metrics():
    """Each test starts from empty counters."""
    metrics.reset()
    yield


@pytest.fixture
def contact():
    return ContactProfile(
        name="Jane Cooper",
        email="jane.cooper@northwind.example",
        title="VP Operations",
        company="Northwind Traders",
        industry="Logistics",
        interest_level="hot",
    )


@pytest.fixture
def deal():
    return DealProfile(
        title="Northwind CRM rollout",
        company="Northwind Traders",
        contact="Jane Cooper",
        value=48000,
        stage="proposal",
        probability=40,
    )


@pytest.fixture
def contact_analysis():
    return ContactAnalysis(
        score=82,
        insights=["Senior buyer at a growing logistics firm"],
        recommendations=["Book a discovery call this week"],
        risk_factors=["No budget confirmed"],
    )


@pytest.fixture
def company_research():
    return CompanyResearch(
        name="Northwind Traders",
        industry="Logistics",
        description="Regional distribution and freight company",
        employee_count="200-500",
        headquarters="Seattle, USA",
        founded="1998",
        potential_needs=["Route optimization"],
        sales_approach="Lead with cost savings",
        competitors=["Contoso Freight"],
        technologies=["SAP"],
    )


@pytest.fixture
def contact_research():
    return ContactResearch(
        name="Jane Cooper",
        title="VP Operations",
        likely_role="Operations leader, economic buyer",
        phone="+1 206 555 0100",
        linkedin="https://linkedin.com/in/janecooper",
        department="Operations",
        location="Seattle, USA",
        background="15 years in logistics operations",
        contact_strategy="Open with a peer case study",
        ice_breakers=["Recent warehouse expansion"],
    )


@pytest.fixture
def openai_stub():
    return make_stub_adapter(ProviderName.OPENAI)


@pytest.fixture
def gemini_stub():
    return make_stub_adapter(ProviderName.GEMINI)


@pytest.fixture
def stub_router(openai_stub, gemini_stub):
    return TaskRouter({ProviderName.OPENAI: openai_stub, ProviderName.GEMINI: gemini_stub})
