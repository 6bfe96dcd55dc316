"""
Negotiation session — the live desk context for one record.

Recomputation is explicit: callers invoke recompute(session, trigger).

  SPREAD_CHANGED   fresh proposal; hand-edited buckets are kept
  PLAN_CHANGED     fresh proposal; hand edits dropped, mix re-seeded if it
                   does not fit the new plan's buckets
  RECORD_SWITCHED  rates and mix taken from the record when they fit its
                   plan (stored rates that differ from a fresh proposal
                   become hand edits); otherwise a fresh proposal and
                   seeded mix
"""

from __future__ import annotations

import logging
from typing import Optional

from pydantic import BaseModel, Field

from pricing_desk.config import get_settings
from pricing_desk.engine.buckets import buckets_for
from pricing_desk.engine.margin import MarginEvaluator
from pricing_desk.engine.proposal import ProposalCalculator, default_mix
from pricing_desk.models.enums import ApprovalTier, PlanType, RecomputeTrigger
from pricing_desk.models.errors import NegotiationValidationError
from pricing_desk.models.negotiation import NegotiationRecord
from pricing_desk.models.schemas import BucketQuote, CostConfig, MarginComparison

logger = logging.getLogger(__name__)


class NegotiationSession(BaseModel):
    record: NegotiationRecord
    cost_config: CostConfig
    plan_type: PlanType
    target_spread: float
    proposed_rates: dict[str, float] = {}
    mix: dict[str, float] = {}
    overrides: set[str] = set()  # buckets edited by hand since the last reset
    tier: ApprovalTier = ApprovalTier.AUTOMATIC
    quotes: list[BucketQuote] = []
    comparison: MarginComparison = Field(default_factory=MarginComparison)

    @property
    def record_id(self) -> str:
        return self.record.id

    @property
    def tpv(self) -> float:
        return self.record.context.potential_revenue


def _mix_fits(mix: dict[str, float], plan_type: PlanType) -> bool:
    return bool(mix) and set(mix) <= set(buckets_for(plan_type))


def open_session(record: NegotiationRecord, cost_config: CostConfig) -> NegotiationSession:
    """Load a record onto the desk and compute its first proposal."""
    spread = record.target_spread
    if spread is None:
        spread = get_settings().default_target_spread

    session = NegotiationSession(
        record=record,
        cost_config=cost_config,
        plan_type=record.plan_type,
        target_spread=spread,
    )
    return recompute(session, RecomputeTrigger.RECORD_SWITCHED)


def recompute(
    session: NegotiationSession,
    trigger: RecomputeTrigger,
    calculator: Optional[ProposalCalculator] = None,
) -> NegotiationSession:
    calculator = calculator or ProposalCalculator()

    if trigger == RecomputeTrigger.RECORD_SWITCHED:
        session.overrides = set()
        record_mix = session.record.mix
        session.mix = dict(record_mix) if _mix_fits(record_mix, session.plan_type) else default_mix(session.plan_type)
    elif trigger == RecomputeTrigger.PLAN_CHANGED:
        session.overrides = set()
        if not _mix_fits(session.mix, session.plan_type):
            session.mix = default_mix(session.plan_type)

    proposal = calculator.propose(
        session.cost_config,
        session.record.competitor_rates,
        session.plan_type,
        session.target_spread,
    )
    rates = dict(proposal.rates)
    if trigger == RecomputeTrigger.RECORD_SWITCHED:
        stored = session.record.proposed_rates
        if stored and set(stored) == set(rates):
            # stored rates win; any bucket that differs from the fresh table counts as a hand edit
            session.proposed_rates = dict(stored)
            session.overrides = {b for b in rates if stored[b] != rates[b]}
    for bucket in session.overrides:
        if bucket in session.proposed_rates:
            rates[bucket] = session.proposed_rates[bucket]

    session.proposed_rates = rates
    session.tier = proposal.tier
    session.quotes = proposal.quotes

    logger.debug(
        f"[{session.record_id}] recompute {trigger.value}: {session.tier.value}, "
        f"{len(session.overrides)} manual override(s) kept"
    )
    return evaluate_session(session)


def evaluate_session(session: NegotiationSession) -> NegotiationSession:
    session.comparison = MarginEvaluator().evaluate(
        session.proposed_rates,
        session.mix,
        session.cost_config,
        session.record.competitor_rates,
        session.tpv,
        tax_rate=session.cost_config.tax_rate,
        plan_type=session.plan_type,
    )
    return session


def _require_bucket(session: NegotiationSession, bucket: str) -> None:
    if bucket not in buckets_for(session.plan_type):
        raise NegotiationValidationError(
            f"Bucket {bucket!r} does not exist in plan {session.plan_type.value}"
        )


def set_target_spread(session: NegotiationSession, target_spread: float) -> NegotiationSession:
    session.target_spread = target_spread
    return recompute(session, RecomputeTrigger.SPREAD_CHANGED)


def set_plan(
    session: NegotiationSession,
    plan_type: PlanType,
    cost_config: Optional[CostConfig] = None,
) -> NegotiationSession:
    """Switch plan; cost_config should be the new plan's cost table."""
    if plan_type == session.plan_type:
        return session
    session.plan_type = plan_type
    if cost_config is not None:
        session.cost_config = cost_config
    return recompute(session, RecomputeTrigger.PLAN_CHANGED)


def override_rate(session: NegotiationSession, bucket: str, rate: float) -> NegotiationSession:
    """Hand-edit one bucket. Survives later spread changes."""
    _require_bucket(session, bucket)
    session.proposed_rates[bucket] = round(rate, 2)
    session.overrides.add(bucket)
    return evaluate_session(session)


def set_mix_weight(session: NegotiationSession, bucket: str, weight: float) -> NegotiationSession:
    _require_bucket(session, bucket)
    if weight < 0 or weight > 100:
        raise NegotiationValidationError(f"Mix weight must be between 0 and 100, got {weight}")
    session.mix[bucket] = weight
    return evaluate_session(session)


def apply_to_record(
    session: NegotiationSession,
    record: Optional[NegotiationRecord] = None,
) -> NegotiationRecord:
    """Copy the desk workspace onto the session's record, or onto `record` if given (does not persist)."""
    if record is None:
        record = session.record
    record.plan_type = session.plan_type
    record.target_spread = session.target_spread
    record.proposed_rates = dict(session.proposed_rates)
    record.mix = dict(session.mix)
    return record
