"""
Tests: Rate Proposal Calculator, cost buckets and competitor estimates.

Run with:
    pytest pricing_desk/tests/test_proposal.py -v
"""

import pytest

from pricing_desk.config import get_settings
from pricing_desk.engine.buckets import (
    FULL_BUCKETS,
    SIMPLES_BUCKETS,
    average_term,
    bucket_cost,
    plan_for_buckets,
)
from pricing_desk.engine.competitor import competitor_estimate, interpolate_installment
from pricing_desk.engine.proposal import (
    ProposalCalculator,
    ceil_cents,
    classify_tier,
    compute_proposal,
    default_mix,
)
from pricing_desk.models.enums import ApprovalTier, PlanType
from pricing_desk.models.schemas import CompetitorRates, CostConfig


SPREADS_TIER_1 = [0.65, 0.85, 1.2, 3.0]
SPREADS_TIER_2 = [0.64, 0.5, 0.0, -0.3]


class TestBucketCost:
    def test_debit_has_no_funding_cost(self):
        cost = CostConfig(debit_cost=1.5, fixed_cost_per_tx=0.1)
        assert bucket_cost(cost, PlanType.FULL, "debit") == pytest.approx(1.6)

    def test_full_installment_includes_anticipation(self):
        cost = CostConfig()
        # 2.20 MDR + 0.90 × 3.5 months + 0.15 fixed
        assert bucket_cost(cost, PlanType.FULL, "6x") == pytest.approx(5.50)
        # 2.40 MDR + 0.90 × 6.5 months + 0.15 fixed
        assert bucket_cost(cost, PlanType.FULL, "12x") == pytest.approx(8.40)

    def test_simples_has_no_anticipation(self):
        cost = CostConfig()
        assert bucket_cost(cost, PlanType.SIMPLES, "2x-6x") == pytest.approx(2.35)
        assert bucket_cost(cost, PlanType.SIMPLES, "13x-18x") == pytest.approx(2.75)

    def test_average_term(self):
        assert average_term("debit") == 0
        assert average_term("1x") == 1
        assert average_term("12x") == 6.5

    def test_unknown_bucket_rejected(self):
        with pytest.raises(ValueError):
            bucket_cost(CostConfig(), PlanType.FULL, "pix")

    def test_negative_cost_rejected_by_model(self):
        with pytest.raises(ValueError):
            CostConfig(debit_cost=-0.1)

    def test_plan_inferred_from_bucket_labels(self):
        assert plan_for_buckets(FULL_BUCKETS) == PlanType.FULL
        assert plan_for_buckets(SIMPLES_BUCKETS) == PlanType.SIMPLES
        assert plan_for_buckets([]) == PlanType.FULL


class TestCompetitorEstimate:
    def test_interpolation_anchors(self):
        rates = CompetitorRates(debit=2.01, credit1x=5.08, credit12x=18.14)
        assert interpolate_installment(rates, 1) == pytest.approx(5.08)
        assert interpolate_installment(rates, 12) == pytest.approx(18.14)

    def test_interpolation_is_linear(self):
        rates = CompetitorRates(debit=2.01, credit1x=5.0, credit12x=16.0)
        assert competitor_estimate(rates, PlanType.FULL, "2x") == pytest.approx(6.0)
        assert competitor_estimate(rates, PlanType.FULL, "7x") == pytest.approx(11.0)

    def test_simples_offsets(self):
        rates = CompetitorRates(debit=2.0, credit1x=4.0, credit12x=15.0)
        assert competitor_estimate(rates, PlanType.SIMPLES, "2x-6x") == pytest.approx(6.5)
        assert competitor_estimate(rates, PlanType.SIMPLES, "7x-12x") == pytest.approx(15.0)
        assert competitor_estimate(rates, PlanType.SIMPLES, "13x-18x") == pytest.approx(19.0)

    def test_simples_long_offset_is_configurable(self, monkeypatch):
        monkeypatch.setenv("SIMPLES_13TO18_OFFSET", "3.0")
        get_settings.cache_clear()
        rates = CompetitorRates(debit=2.0, credit1x=4.0, credit12x=15.0)
        assert competitor_estimate(rates, PlanType.SIMPLES, "13x-18x") == pytest.approx(18.0)


class TestConcreteScenarios:
    def _inputs(self):
        cost = CostConfig(debit_cost=1.5, fixed_cost_per_tx=0.1)
        rates = CompetitorRates(debit=2.01, credit1x=5.08, credit12x=18.14)
        return cost, rates

    def test_floor_wins_in_tier_1(self):
        cost, rates = self._inputs()
        proposal = compute_proposal(cost, rates, PlanType.FULL, 0.85)
        assert proposal["debit"] == pytest.approx(2.45)
        assert classify_tier(0.85) == ApprovalTier.AUTOMATIC

    def test_cost_plus_spread_in_tier_2(self):
        cost, rates = self._inputs()
        proposal = compute_proposal(cost, rates, PlanType.FULL, 0.5)
        assert proposal["debit"] == pytest.approx(2.10)
        assert classify_tier(0.5) == ApprovalTier.MANAGERIAL

    def test_competitor_matched_when_above_floor(self):
        cost, rates = self._inputs()
        proposal = compute_proposal(cost, rates, PlanType.FULL, 0.65)
        # 1x floor = 1.80 + 0.90 + 0.10 + 0.65 = 3.45 < 5.08
        assert proposal["1x"] == pytest.approx(5.08)


class TestTierPolicy:
    @pytest.mark.parametrize("spread", SPREADS_TIER_1)
    def test_floor_never_violated(self, spread, competitor):
        cost = CostConfig()
        calc = ProposalCalculator()
        for q in calc.quote_buckets(cost, competitor, PlanType.FULL, spread):
            floor = bucket_cost(cost, PlanType.FULL, q.bucket) + spread
            assert q.rate >= floor - 1e-9
            if q.competitor_estimate > floor:
                assert q.rate == pytest.approx(q.competitor_estimate, abs=0.01)

    @pytest.mark.parametrize("spread", [0.651, 0.653, 0.6549, 0.999])
    def test_floor_rounds_up_to_the_cent(self, spread):
        cost = CostConfig()
        no_competitor = CompetitorRates()
        quotes = ProposalCalculator().quote_buckets(cost, no_competitor, PlanType.FULL, spread)
        for q in quotes:
            assert q.rate >= bucket_cost(cost, PlanType.FULL, q.bucket) + spread - 1e-9
            assert q.rate == round(q.rate, 2)

    def test_fractional_spread_example(self):
        # 3x cost = 2.20 + 0.90 × 2 + 0.15 = 4.15; floor 4.803
        rates = compute_proposal(CostConfig(), CompetitorRates(), PlanType.FULL, 0.653)
        assert rates["3x"] == pytest.approx(4.81)

    def test_ceil_cents(self):
        assert ceil_cents(2.4500000000000002) == 2.45
        assert ceil_cents(4.803) == 4.81
        assert ceil_cents(-0.301) == -0.30

    @pytest.mark.parametrize("spread", SPREADS_TIER_2)
    def test_cost_plus_spread_ignores_competitor(self, spread):
        cost = CostConfig()
        cheap = CompetitorRates(debit=0.1, credit1x=0.2, credit12x=0.3)
        pricey = CompetitorRates(debit=9.0, credit1x=12.0, credit12x=30.0)

        a = compute_proposal(cost, cheap, PlanType.FULL, spread)
        b = compute_proposal(cost, pricey, PlanType.FULL, spread)
        assert a == b
        for bucket, rate in a.items():
            expected = bucket_cost(cost, PlanType.FULL, bucket) + spread
            assert rate == pytest.approx(expected, abs=0.005)

    def test_tier_threshold_is_inclusive(self):
        assert classify_tier(0.65) == ApprovalTier.AUTOMATIC
        assert classify_tier(0.6499) == ApprovalTier.MANAGERIAL

    def test_custom_threshold(self):
        calc = ProposalCalculator(auto_approval_spread=1.0)
        assert calc.classify_tier(0.85) == ApprovalTier.MANAGERIAL

    def test_negative_spread_allowed(self):
        cost = CostConfig(debit_cost=1.5, fixed_cost_per_tx=0.1)
        rates = CompetitorRates(debit=2.01, credit1x=5.08, credit12x=18.14)
        proposal = compute_proposal(cost, rates, PlanType.FULL, -0.3)
        assert proposal["debit"] == pytest.approx(1.3)

    def test_exact_match_reproduces_competitor_anchors(self, zero_costs):
        rates = CompetitorRates(debit=2.01, credit1x=5.08, credit12x=18.14)
        proposal = compute_proposal(zero_costs, rates, PlanType.FULL, 0.65)
        assert proposal["1x"] == pytest.approx(5.08)
        assert proposal["12x"] == pytest.approx(18.14)
        assert proposal["2x"] == pytest.approx(6.27)

    def test_rates_rounded_to_cents(self, competitor):
        proposal = compute_proposal(CostConfig(), competitor, PlanType.FULL, 0.85)
        for rate in proposal.values():
            assert rate == round(rate, 2)


class TestProposalShape:
    def test_full_has_thirteen_buckets(self, competitor):
        proposal = compute_proposal(CostConfig(), competitor, PlanType.FULL, 0.65)
        assert list(proposal) == FULL_BUCKETS
        assert len(proposal) == 13

    def test_simples_buckets(self, zero_costs):
        rates = CompetitorRates(debit=2.0, credit1x=4.0, credit12x=15.0)
        proposal = compute_proposal(zero_costs, rates, PlanType.SIMPLES, 0.65)
        assert proposal == {
            "debit": 2.0,
            "1x": 4.0,
            "2x-6x": 6.5,
            "7x-12x": 15.0,
            "13x-18x": 19.0,
        }

    def test_propose_carries_tier_and_quotes(self, competitor):
        proposal = ProposalCalculator().propose(CostConfig(), competitor, PlanType.FULL, 0.5)
        assert proposal.tier == ApprovalTier.MANAGERIAL
        assert [q.bucket for q in proposal.quotes] == FULL_BUCKETS
        assert proposal.rates["debit"] == pytest.approx(1.15)


class TestFloorBreaches:
    def test_detects_bucket_below_minimum(self, competitor):
        cost = CostConfig()
        calc = ProposalCalculator()
        rates = calc.compute_proposal(cost, competitor, PlanType.FULL, 0.65)
        assert calc.floor_breaches(rates, cost, PlanType.FULL, 0.65) == []

        rates["debit"] = 1.0  # floor is 0.65 + 0.65 = 1.30
        assert calc.floor_breaches(rates, cost, PlanType.FULL, 0.65) == ["debit"]


class TestDefaultMix:
    def test_full_mix_sums_to_100(self):
        mix = default_mix(PlanType.FULL)
        assert mix["debit"] == 40
        assert mix["1x"] == 30
        assert set(mix) == set(FULL_BUCKETS)
        assert sum(mix.values()) == pytest.approx(100)

    def test_simples_mix_splits_residual(self):
        mix = default_mix(PlanType.SIMPLES)
        assert mix == {"debit": 40, "1x": 30, "2x-6x": 10, "7x-12x": 10, "13x-18x": 10}
