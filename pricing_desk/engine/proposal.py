"""
Rate Proposal Calculator — floor-vs-match pricing and approval tier.

For every bucket:
  floor = bucket cost + target spread
  Alçada 1 (spread ≥ threshold): max(competitor estimate, floor)
  Alçada 2 (spread < threshold): floor, competitor ignored
Competitor matches are rounded to the nearest cent; a winning floor is
rounded up, so no rate ever sits below cost + spread.
"""

from __future__ import annotations

import logging
from decimal import ROUND_CEILING, Decimal

from pricing_desk.config import get_settings
from pricing_desk.engine.buckets import CREDIT_1X, DEBIT, bucket_cost, buckets_for
from pricing_desk.engine.competitor import competitor_estimate
from pricing_desk.models.enums import ApprovalTier, PlanType
from pricing_desk.models.schemas import BucketQuote, CompetitorRates, CostConfig, Proposal

logger = logging.getLogger(__name__)

_CENT = Decimal("0.01")


def ceil_cents(value: float) -> float:
    """Round up to the cent. Float noise below 1e-10 is dropped first (2.4500000000000002 → 2.45)."""
    return float(Decimal(str(round(value, 10))).quantize(_CENT, rounding=ROUND_CEILING))


class ProposalCalculator:
    """Builds counter-proposal rate tables from cost and competitor models."""

    def __init__(self, auto_approval_spread: float | None = None):
        if auto_approval_spread is None:
            auto_approval_spread = get_settings().auto_approval_spread
        self.auto_approval_spread = auto_approval_spread

    def classify_tier(self, target_spread: float) -> ApprovalTier:
        if target_spread >= self.auto_approval_spread:
            return ApprovalTier.AUTOMATIC
        return ApprovalTier.MANAGERIAL

    def quote_buckets(
        self,
        cost_model: CostConfig,
        competitor_rates: CompetitorRates,
        plan_type: PlanType,
        target_spread: float,
    ) -> list[BucketQuote]:
        """Per-bucket cost, competitor estimate, floor and the resulting rate."""
        tier = self.classify_tier(target_spread)
        quotes: list[BucketQuote] = []

        for bucket in buckets_for(plan_type):
            cost = bucket_cost(cost_model, plan_type, bucket)
            estimate = competitor_estimate(competitor_rates, plan_type, bucket)
            floor = cost + target_spread

            if tier == ApprovalTier.AUTOMATIC:
                rate = max(round(estimate, 2), ceil_cents(floor))
            else:
                rate = ceil_cents(floor)

            quotes.append(BucketQuote(
                bucket=bucket,
                cost=round(cost, 4),
                competitor_estimate=round(estimate, 4),
                floor=round(floor, 4),
                rate=rate,
            ))

        return quotes

    def compute_proposal(
        self,
        cost_model: CostConfig,
        competitor_rates: CompetitorRates,
        plan_type: PlanType,
        target_spread: float,
    ) -> dict[str, float]:
        quotes = self.quote_buckets(cost_model, competitor_rates, plan_type, target_spread)
        return {q.bucket: q.rate for q in quotes}

    def propose(
        self,
        cost_model: CostConfig,
        competitor_rates: CompetitorRates,
        plan_type: PlanType,
        target_spread: float,
    ) -> Proposal:
        """Rates plus tier and breakdown, in one object."""
        tier = self.classify_tier(target_spread)
        quotes = self.quote_buckets(cost_model, competitor_rates, plan_type, target_spread)
        matched = sum(1 for q in quotes if q.rate > ceil_cents(q.floor))
        logger.debug(
            f"Proposal {plan_type.value} spread={target_spread} → {tier.value}, "
            f"{matched}/{len(quotes)} buckets matched competitor"
        )
        return Proposal(
            tier=tier,
            target_spread=target_spread,
            rates={q.bucket: q.rate for q in quotes},
            quotes=quotes,
        )

    def floor_breaches(
        self,
        proposed_rates: dict[str, float],
        cost_model: CostConfig,
        plan_type: PlanType,
        target_spread: float,
    ) -> list[str]:
        """Buckets whose rate sits below cost + spread (ABAIXO da margem mínima)."""
        breaches: list[str] = []
        for bucket in buckets_for(plan_type):
            if bucket not in proposed_rates:
                continue
            floor = round(bucket_cost(cost_model, plan_type, bucket) + target_spread, 10)
            if proposed_rates[bucket] < floor:
                breaches.append(bucket)
        return breaches


def compute_proposal(
    cost_model: CostConfig,
    competitor_rates: CompetitorRates,
    plan_type: PlanType,
    target_spread: float,
) -> dict[str, float]:
    """bucket → proposed rate, using the configured auto-approval threshold."""
    return ProposalCalculator().compute_proposal(
        cost_model, competitor_rates, plan_type, target_spread
    )


def classify_tier(target_spread: float) -> ApprovalTier:
    return ProposalCalculator().classify_tier(target_spread)


def default_mix(plan_type: PlanType) -> dict[str, float]:
    """
    Seed mix for a fresh record: debit and 1x get fixed shares, the
    installment buckets split what is left. The last bucket absorbs the
    rounding so the total is 100.
    """
    settings = get_settings()
    buckets = buckets_for(plan_type)
    mix = {DEBIT: settings.default_mix_debit, CREDIT_1X: settings.default_mix_credit1x}

    installments = [b for b in buckets if b not in mix]
    residual = max(100.0 - mix[DEBIT] - mix[CREDIT_1X], 0.0)
    share = round(residual / len(installments), 2)
    for bucket in installments[:-1]:
        mix[bucket] = share
    mix[installments[-1]] = round(residual - share * (len(installments) - 1), 2)
    return mix
