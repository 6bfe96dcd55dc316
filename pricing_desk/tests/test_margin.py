"""
Tests: Mix-Weighted Margin Evaluator.

Run with:
    pytest pricing_desk/tests/test_margin.py -v
"""

import pytest

from pricing_desk.engine.margin import MarginEvaluator, evaluate, weighted_average
from pricing_desk.engine.proposal import compute_proposal
from pricing_desk.models.enums import PlanType
from pricing_desk.models.schemas import CompetitorRates, CostConfig


def _simples_costs() -> CostConfig:
    return CostConfig(
        debit_cost=0.5,
        credit_sight_cost=1.8,
        installment_2to6_cost=2.2,
        installment_7to12_cost=2.4,
        installment_13to18_cost=2.6,
        fixed_cost_per_tx=0.0,
        tax_rate=10.0,
    )


SIMPLES_PROPOSAL = {"debit": 2.0, "1x": 4.0, "2x-6x": 10.0, "7x-12x": 15.0, "13x-18x": 20.0}
SIMPLES_COMPETITOR = CompetitorRates(debit=2.5, credit1x=5.0, credit12x=15.0)


class TestWeightedFormulas:
    def test_hand_computed_proposed_side(self):
        result = evaluate(
            SIMPLES_PROPOSAL,
            {"debit": 50, "1x": 50},
            _simples_costs(),
            SIMPLES_COMPETITOR,
            tpv=10_000,
            tax_rate=10.0,
        )
        p = result.proposed
        assert p.weighted_rate == pytest.approx(3.0)
        assert p.weighted_cost == pytest.approx(1.15)
        assert p.take_rate_value == pytest.approx(300.0)
        assert p.spread_value == pytest.approx(185.0)
        assert p.spread_percent == pytest.approx(1.85)
        # tax is charged on gross take-rate, not on spread
        assert p.margin_value == pytest.approx(155.0)

    def test_hand_computed_competitor_side(self):
        result = evaluate(
            SIMPLES_PROPOSAL,
            {"debit": 50, "1x": 50},
            _simples_costs(),
            SIMPLES_COMPETITOR,
            tpv=10_000,
            tax_rate=10.0,
        )
        c = result.competitor
        assert c.weighted_rate == pytest.approx(3.75)
        assert c.weighted_cost == pytest.approx(1.15)  # our costs on both sides
        assert c.take_rate_value == pytest.approx(375.0)
        assert c.spread_value == pytest.approx(260.0)
        assert c.margin_value == pytest.approx(222.5)

    def test_merchant_savings(self):
        result = evaluate(
            SIMPLES_PROPOSAL, {"debit": 50, "1x": 50}, _simples_costs(), SIMPLES_COMPETITOR, tpv=10_000
        )
        assert result.merchant_savings == pytest.approx(75.0)
        assert result.is_cheaper is True

    def test_mix_is_normalized(self):
        args = (SIMPLES_PROPOSAL,)
        rest = (_simples_costs(), SIMPLES_COMPETITOR, 10_000)
        full_mix = evaluate(*args, {"debit": 50, "1x": 50}, *rest)
        partial_mix = evaluate(*args, {"debit": 20, "1x": 20}, *rest)
        assert partial_mix.proposed.weighted_rate == pytest.approx(full_mix.proposed.weighted_rate)
        assert partial_mix.proposed.margin_value == pytest.approx(full_mix.proposed.margin_value)

    def test_tax_rate_defaults_to_cost_model(self):
        explicit = evaluate(
            SIMPLES_PROPOSAL, {"debit": 50, "1x": 50}, _simples_costs(), SIMPLES_COMPETITOR, 10_000, 10.0
        )
        implicit = evaluate(
            SIMPLES_PROPOSAL, {"debit": 50, "1x": 50}, _simples_costs(), SIMPLES_COMPETITOR, 10_000
        )
        assert implicit.proposed.margin_value == pytest.approx(explicit.proposed.margin_value)


class TestEqualWeights:
    def test_equal_weights_give_arithmetic_mean(self, competitor):
        rates = compute_proposal(CostConfig(), competitor, PlanType.FULL, 0.85)
        mix = {bucket: 10.0 for bucket in rates}
        result = MarginEvaluator().evaluate(rates, mix, CostConfig(), competitor, tpv=50_000)
        assert result.proposed.weighted_rate == pytest.approx(sum(rates.values()) / len(rates))


class TestDegenerateInputs:
    def test_zero_mix_returns_zero_metrics(self, competitor):
        rates = compute_proposal(CostConfig(), competitor, PlanType.FULL, 0.85)
        mix = {bucket: 0.0 for bucket in rates}
        result = evaluate(rates, mix, CostConfig(), competitor, tpv=50_000)
        for side in (result.proposed, result.competitor):
            assert side.weighted_rate == 0
            assert side.spread_percent == 0
            assert side.margin_value == 0
        assert result.is_cheaper is False

    def test_empty_mix_returns_zero_metrics(self, competitor):
        rates = compute_proposal(CostConfig(), competitor, PlanType.FULL, 0.85)
        result = evaluate(rates, {}, CostConfig(), competitor, tpv=50_000)
        assert result.proposed.weighted_rate == 0
        assert result.proposed.margin_value == 0

    def test_zero_tpv_has_no_spread_percent(self):
        result = evaluate(
            SIMPLES_PROPOSAL, {"debit": 50, "1x": 50}, _simples_costs(), SIMPLES_COMPETITOR, tpv=0
        )
        assert result.proposed.weighted_rate == pytest.approx(3.0)
        assert result.proposed.take_rate_value == 0
        assert result.proposed.spread_percent == 0

    def test_weighted_average_helper(self):
        assert weighted_average({"a": 1.0, "b": 3.0}, {"a": 25, "b": 75}) == pytest.approx(2.5)
        assert weighted_average({"a": 1.0}, {"b": 100}) == 0.0
