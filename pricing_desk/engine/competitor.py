"""
Competitor Rate Model — expand the incumbent's three observed rates
(debit, 1x, 12x) into a full bucket table.

Full:    linear interpolation between credit1x (i=1) and credit12x (i=12).
Simples: fixed additive offsets, taken from settings so the desk and the
         evaluator always share one constant.
"""

from __future__ import annotations

from pricing_desk.config import get_settings
from pricing_desk.engine.buckets import (
    CREDIT_1X,
    DEBIT,
    SIMPLES_13TO18,
    SIMPLES_2TO6,
    SIMPLES_7TO12,
    buckets_for,
    installment_number,
)
from pricing_desk.models.enums import PlanType
from pricing_desk.models.schemas import CompetitorRates


def interpolate_installment(rates: CompetitorRates, n: int) -> float:
    """Straight line through (1, credit1x) and (12, credit12x)."""
    step = (rates.credit12x - rates.credit1x) / 11
    return rates.credit1x + step * (n - 1)


def competitor_estimate(rates: CompetitorRates, plan_type: PlanType, bucket: str) -> float:
    if bucket == DEBIT:
        return rates.debit
    if bucket == CREDIT_1X:
        return rates.credit1x

    if plan_type == PlanType.SIMPLES:
        settings = get_settings()
        if bucket == SIMPLES_2TO6:
            return rates.credit1x + settings.simples_2to6_offset
        if bucket == SIMPLES_7TO12:
            return rates.credit12x + settings.simples_7to12_offset
        if bucket == SIMPLES_13TO18:
            return rates.credit12x + settings.simples_13to18_offset
        raise ValueError(f"Unknown Simples bucket: {bucket!r}")

    n = installment_number(bucket)
    if n is None:
        raise ValueError(f"Unknown Full bucket: {bucket!r}")
    if n == 12:
        return rates.credit12x
    return interpolate_installment(rates, n)


def competitor_table(rates: CompetitorRates, plan_type: PlanType) -> dict[str, float]:
    return {b: competitor_estimate(rates, plan_type, b) for b in buckets_for(plan_type)}
