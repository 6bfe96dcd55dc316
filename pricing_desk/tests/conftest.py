"""Shared fixtures for the pricing desk tests."""

import pytest

from pricing_desk.config import get_settings
from pricing_desk.models.negotiation import NegotiationRecord
from pricing_desk.models.schemas import CompetitorRates, CostConfig, NegotiationContext


@pytest.fixture(autouse=True)
def fresh_settings(monkeypatch):
    """Every test starts from default settings in mock mode."""
    monkeypatch.setenv("MOCK_MODE", "true")
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def zero_costs() -> CostConfig:
    return CostConfig(
        debit_cost=0.0,
        credit_sight_cost=0.0,
        anticipation_cost=0.0,
        installment_2to6_cost=0.0,
        installment_7to12_cost=0.0,
        installment_13to18_cost=0.0,
        fixed_cost_per_tx=0.0,
        tax_rate=0.0,
    )


@pytest.fixture
def competitor() -> CompetitorRates:
    return CompetitorRates(debit=1.81, credit1x=3.73, credit12x=17.74)


def make_record(description: str = "Venda Taxa Full", **overrides) -> NegotiationRecord:
    fields = dict(
        client_name="Oficina Modelo",
        requester="Carla (Field Sales)",
        description=description,
        context=NegotiationContext(potential_revenue=35000.0, min_agreed=30000.0, competitor="Stone"),
        competitor_rates=CompetitorRates(debit=1.81, credit1x=3.73, credit12x=17.74),
    )
    fields.update(overrides)
    return NegotiationRecord(**fields)


@pytest.fixture
def record() -> NegotiationRecord:
    return make_record()


@pytest.fixture
def simples_record() -> NegotiationRecord:
    return make_record("Venda Taxa Simples")


@pytest.fixture
def record_factory():
    return make_record
