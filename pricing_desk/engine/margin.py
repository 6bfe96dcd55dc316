"""
Mix-Weighted Margin Evaluator — compare the incumbent's card and our
proposal over the merchant's volume mix.

Both sides are costed with OUR cost structure; the competitor's real
cost is unknown. An empty mix (total weight 0) yields zero metrics.
"""

from __future__ import annotations

import logging
from typing import Optional

from pricing_desk.engine.buckets import bucket_cost, buckets_for, plan_for_buckets
from pricing_desk.engine.competitor import competitor_table
from pricing_desk.models.enums import PlanType
from pricing_desk.models.schemas import (
    CompetitorRates,
    CostConfig,
    MarginComparison,
    SideMetrics,
)

logger = logging.getLogger(__name__)


def weighted_average(values: dict[str, float], weights: dict[str, float]) -> float:
    """Σ(v × w/100) / Σ(w/100) over the buckets present in both; 0 when no weight."""
    total_weight = 0.0
    acc = 0.0
    for bucket, weight in weights.items():
        if bucket not in values or not weight:
            continue
        acc += values[bucket] * weight / 100
        total_weight += weight / 100
    if total_weight == 0:
        return 0.0
    return acc / total_weight


def side_metrics(
    rates: dict[str, float],
    costs: dict[str, float],
    weights: dict[str, float],
    tpv: float,
    tax_rate: float,
) -> SideMetrics:
    """Take-rate, spread and MCF2 for one rate table."""
    if sum(w for b, w in weights.items() if b in rates) == 0:
        return SideMetrics()

    weighted_rate = weighted_average(rates, weights)
    weighted_cost = weighted_average(costs, {b: w for b, w in weights.items() if b in rates})

    take_rate_value = tpv * weighted_rate / 100
    spread_value = take_rate_value - tpv * weighted_cost / 100
    spread_percent = spread_value / tpv * 100 if tpv else 0.0
    margin_value = spread_value - take_rate_value * tax_rate / 100

    return SideMetrics(
        weighted_rate=weighted_rate,
        weighted_cost=weighted_cost,
        take_rate_value=take_rate_value,
        spread_value=spread_value,
        spread_percent=spread_percent,
        margin_value=margin_value,
    )


class MarginEvaluator:
    """Weighted financial comparison: competitor card vs proposed card."""

    def evaluate(
        self,
        proposed_rates: dict[str, float],
        mix_weights: dict[str, float],
        cost_model: CostConfig,
        competitor_rates: CompetitorRates,
        tpv: float,
        tax_rate: Optional[float] = None,
        plan_type: Optional[PlanType] = None,
    ) -> MarginComparison:
        if plan_type is None:
            plan_type = plan_for_buckets(list(proposed_rates) + list(mix_weights))
        if tax_rate is None:
            tax_rate = cost_model.tax_rate

        buckets = buckets_for(plan_type)
        weights = {b: mix_weights.get(b, 0.0) for b in buckets}
        costs = {b: bucket_cost(cost_model, plan_type, b) for b in buckets}
        proposed = {b: proposed_rates[b] for b in buckets if b in proposed_rates}
        competitor = competitor_table(competitor_rates, plan_type)

        competitor_side = side_metrics(competitor, costs, weights, tpv, tax_rate)
        proposed_side = side_metrics(proposed, costs, weights, tpv, tax_rate)
        savings = competitor_side.take_rate_value - proposed_side.take_rate_value

        logger.debug(
            f"Evaluated {plan_type.value} mix over TPV {tpv:,.2f}: "
            f"competitor {competitor_side.weighted_rate:.2f}% vs proposed "
            f"{proposed_side.weighted_rate:.2f}% (spread {proposed_side.spread_percent:.2f}%)"
        )

        return MarginComparison(
            competitor=competitor_side,
            proposed=proposed_side,
            merchant_savings=savings,
            is_cheaper=savings > 0,
        )


def evaluate(
    proposed_rates: dict[str, float],
    mix_weights: dict[str, float],
    cost_model: CostConfig,
    competitor_rates: CompetitorRates,
    tpv: float,
    tax_rate: Optional[float] = None,
    plan_type: Optional[PlanType] = None,
) -> MarginComparison:
    return MarginEvaluator().evaluate(
        proposed_rates, mix_weights, cost_model, competitor_rates, tpv, tax_rate, plan_type
    )
