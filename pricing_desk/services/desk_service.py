"""
Pricing Desk Service — the Mesa de Negociação workflow.

Holds one NegotiationSession per open record and commits every write
action (save / approve / reject / edit) with a single update_demand call.
Transitions are applied to a copy of the record so that a failed commit
leaves the open session untouched; persistence errors propagate.
"""

from __future__ import annotations

import logging
from collections import defaultdict
from typing import Optional, Union

from pricing_desk.engine.proposal import ProposalCalculator
from pricing_desk.engine.rate_ranges import range_table_for, reference_card, select_range_index
from pricing_desk.models.enums import NegotiationStatus, PlanType, RejectionReason
from pricing_desk.models.negotiation import NegotiationRecord
from pricing_desk.models.schemas import ClientInfo, CompetitorBenchmark, DashboardSummary
from pricing_desk.orchestration import session as desk_session
from pricing_desk.orchestration import state_machine
from pricing_desk.orchestration.session import NegotiationSession
from pricing_desk.persistence.cost_config_store import CostConfigStore
from pricing_desk.persistence.demand_repository import DemandRepository
from pricing_desk.persistence.mongo_client import MongoClient

logger = logging.getLogger(__name__)

ALL_STATUSES = "Todos"


class PricingDeskService:
    def __init__(
        self,
        repository: Optional[DemandRepository] = None,
        cost_store: Optional[CostConfigStore] = None,
        mongo: Optional[MongoClient] = None,
    ):
        # one connection shared by both stores
        self.mongo = mongo or MongoClient()
        self.repository = repository or DemandRepository(self.mongo)
        self.cost_store = cost_store or CostConfigStore(self.mongo)
        self._sessions: dict[str, NegotiationSession] = {}

    def shutdown(self) -> None:
        """Release the database connection."""
        self.mongo.close()

    # ── Queue ────────────────────────────────────────────

    def create_request(self, record: NegotiationRecord) -> NegotiationRecord:
        """Sales rep escalates a competitor quote to the desk."""
        record.status = NegotiationStatus.PENDING
        saved = self.repository.add_demand(record)
        logger.info(f"New pricing request {saved.id} for {saved.client_name} ({saved.plan_type.value})")
        return saved

    def list_requests(self, status_filter: str = NegotiationStatus.PENDING.value) -> list[NegotiationRecord]:
        if status_filter == ALL_STATUSES:
            return self.repository.get_demands()
        return self.repository.get_demands(NegotiationStatus(status_filter))

    def registered_clients(self) -> dict[str, ClientInfo]:
        """Client base keyed by CNPJ/ID, for display enrichment of the queue."""
        return {c.id: c for c in self.repository.get_clients()}

    # ── Session handling ─────────────────────────────────

    def open(self, record_id: str) -> NegotiationSession:
        """(Re)load a record from the store and compute a fresh proposal."""
        record = self.repository.get_demand(record_id)
        session = desk_session.open_session(record, self.cost_store.get_cost_config(record.plan_type))
        self._sessions[record_id] = session
        logger.info(f"[{record_id}] opened on desk ({session.tier.value})")
        return session

    def session(self, record_id: str) -> NegotiationSession:
        if record_id not in self._sessions:
            return self.open(record_id)
        return self._sessions[record_id]

    def change_spread(self, record_id: str, target_spread: float) -> NegotiationSession:
        return desk_session.set_target_spread(self.session(record_id), target_spread)

    def change_plan(self, record_id: str, plan_type: PlanType) -> NegotiationSession:
        return desk_session.set_plan(
            self.session(record_id), plan_type, self.cost_store.get_cost_config(plan_type)
        )

    def edit_rate(self, record_id: str, bucket: str, rate: float) -> NegotiationSession:
        return desk_session.override_rate(self.session(record_id), bucket, rate)

    def edit_mix(self, record_id: str, bucket: str, weight: float) -> NegotiationSession:
        return desk_session.set_mix_weight(self.session(record_id), bucket, weight)

    # ── Commit helpers ───────────────────────────────────

    def _working_copy(self, session: NegotiationSession) -> NegotiationRecord:
        return desk_session.apply_to_record(session, session.record.model_copy(deep=True))

    def _commit(self, session: NegotiationSession, record: NegotiationRecord) -> NegotiationSession:
        session.record = self.repository.update_demand(record)
        return session

    # ── Write actions ────────────────────────────────────

    def save(self, record_id: str) -> NegotiationSession:
        """Persist the desk workspace without changing status."""
        session = self.session(record_id)
        return self._commit(session, self._working_copy(session))

    def approve(self, record_id: str, approver: str) -> NegotiationSession:
        session = self.session(record_id)
        record = self._working_copy(session)
        proposed = session.comparison.proposed
        state_machine.approve(
            record,
            approver,
            session.proposed_rates,
            spread_percent=proposed.spread_percent,
            margin_value=proposed.margin_value,
        )
        return self._commit(session, record)

    def reject(
        self,
        record_id: str,
        reason: Union[RejectionReason, str, None],
        custom_text: Optional[str] = None,
        user: str = "",
    ) -> NegotiationSession:
        session = self.session(record_id)
        record = session.record.model_copy(deep=True)
        state_machine.reject(record, reason, custom_text, user)
        return self._commit(session, record)

    def edit_approved(self, record_id: str, approver: str) -> NegotiationSession:
        session = self.session(record_id)
        record = self._working_copy(session)
        proposed = session.comparison.proposed
        state_machine.edit_approved(
            record,
            approver,
            session.proposed_rates,
            spread_percent=proposed.spread_percent,
            margin_value=proposed.margin_value,
        )
        return self._commit(session, record)

    # ── Read-only analysis ───────────────────────────────

    def floor_breaches(self, record_id: str) -> list[str]:
        session = self.session(record_id)
        return ProposalCalculator().floor_breaches(
            session.proposed_rates, session.cost_config, session.plan_type, session.target_spread
        )

    def reference_card(self, record_id: str) -> Optional[dict[str, float]]:
        """List-price card for the record's TPV band, if the TPV falls in one."""
        session = self.session(record_id)
        table = range_table_for(session.plan_type)
        index = select_range_index(table, session.tpv)
        if index is None:
            return None
        return reference_card(table, index)

    def dashboard(self, competitor_filter: str = ALL_STATUSES) -> DashboardSummary:
        """KPIs: counts by status and competitor vs approved debit per acquirer."""
        records = self.repository.get_demands()
        if competitor_filter != ALL_STATUSES:
            records = [r for r in records if r.context.competitor == competitor_filter]

        summary = DashboardSummary(
            approved=sum(1 for r in records if r.status == NegotiationStatus.APPROVED),
            pending=sum(1 for r in records if r.status == NegotiationStatus.PENDING),
            rejected=sum(1 for r in records if r.status == NegotiationStatus.REJECTED),
            competitor_filter=None if competitor_filter == ALL_STATUSES else competitor_filter,
        )

        grouped: dict[str, list[NegotiationRecord]] = defaultdict(list)
        for r in records:
            if r.status == NegotiationStatus.APPROVED and r.approved_rates is not None:
                grouped[r.context.competitor or "Outros"].append(r)

        for competitor, deals in sorted(grouped.items()):
            summary.benchmarks.append(CompetitorBenchmark(
                competitor=competitor,
                deals=len(deals),
                avg_competitor_debit=round(sum(d.competitor_rates.debit for d in deals) / len(deals), 2),
                avg_approved_debit=round(sum(d.approved_rates.debit for d in deals) / len(deals), 2),
            ))
        return summary
