"""
Rate buckets per plan and the per-bucket cost model.

Full plan:    debit, 1x, 2x … 12x   (anticipation cost is borne by us)
Simples plan: debit, 1x, 2x-6x, 7x-12x, 13x-18x
"""

from __future__ import annotations

import re
from typing import Iterable

from pricing_desk.models.enums import PlanType
from pricing_desk.models.schemas import CostConfig

DEBIT = "debit"
CREDIT_1X = "1x"
CREDIT_12X = "12x"
SIMPLES_2TO6 = "2x-6x"
SIMPLES_7TO12 = "7x-12x"
SIMPLES_13TO18 = "13x-18x"

FULL_BUCKETS: list[str] = [DEBIT, CREDIT_1X] + [f"{n}x" for n in range(2, 13)]
SIMPLES_BUCKETS: list[str] = [DEBIT, CREDIT_1X, SIMPLES_2TO6, SIMPLES_7TO12, SIMPLES_13TO18]

_INSTALLMENT_RE = re.compile(r"^(\d+)x$")


def buckets_for(plan_type: PlanType) -> list[str]:
    """Ordered bucket labels for a plan."""
    if plan_type == PlanType.SIMPLES:
        return list(SIMPLES_BUCKETS)
    return list(FULL_BUCKETS)


def plan_for_buckets(buckets: Iterable[str]) -> PlanType:
    """Infer the plan from bucket labels (range labels only exist in Simples)."""
    simples_only = {SIMPLES_2TO6, SIMPLES_7TO12, SIMPLES_13TO18}
    if any(b in simples_only for b in buckets):
        return PlanType.SIMPLES
    return PlanType.FULL


def installment_number(bucket: str) -> int | None:
    """'7x' → 7, 'debit' or range labels → None."""
    match = _INSTALLMENT_RE.match(bucket)
    return int(match.group(1)) if match else None


def average_term(bucket: str) -> float:
    """Average months until each installment settles; debit settles immediately."""
    n = installment_number(bucket)
    if n is None:
        return 0.0
    return (n + 1) / 2


def mdr_cost(cost: CostConfig, bucket: str) -> float:
    """Interchange/MDR cost for a single bucket."""
    if bucket == DEBIT:
        return cost.debit_cost
    if bucket == SIMPLES_2TO6:
        return cost.installment_2to6_cost
    if bucket == SIMPLES_7TO12:
        return cost.installment_7to12_cost
    if bucket == SIMPLES_13TO18:
        return cost.installment_13to18_cost

    n = installment_number(bucket)
    if n is None or n < 1 or n > 18:
        raise ValueError(f"Unknown rate bucket: {bucket!r}")
    if n == 1:
        return cost.credit_sight_cost
    if n <= 6:
        return cost.installment_2to6_cost
    if n <= 12:
        return cost.installment_7to12_cost
    return cost.installment_13to18_cost


def bucket_cost(cost: CostConfig, plan_type: PlanType, bucket: str) -> float:
    """
    Total cost of a bucket in percent of volume:
    MDR + funding × average term (Full only) + fixed per-transaction cost.
    """
    total = mdr_cost(cost, bucket)
    if plan_type == PlanType.FULL:
        total += cost.anticipation_cost * average_term(bucket)
    return total + cost.fixed_cost_per_tx
