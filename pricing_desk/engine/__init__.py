"""Engine — cost/competitor models, proposal calculator, margin evaluator, rate ranges."""

from pricing_desk.engine.margin import MarginEvaluator, evaluate
from pricing_desk.engine.proposal import (
    ProposalCalculator,
    classify_tier,
    compute_proposal,
    default_mix,
)

__all__ = [
    "MarginEvaluator",
    "evaluate",
    "ProposalCalculator",
    "classify_tier",
    "compute_proposal",
    "default_mix",
]
