"""
API routes — thin HTTP layer that delegates to the PricingDeskService.

Routes:
  GET  /health                              → API health check
  POST /api/desk/requests                   → Escalate a competitor quote to the desk
  GET  /api/desk/requests?status=           → Request queue (Pendente | Aprovado Pricing | Rejeitado | Todos)
  GET  /api/desk/requests/{id}              → Open a request: proposal, tier, comparison
  POST /api/desk/requests/{id}/proposal     → Spread / plan / mix / rate edits
  POST /api/desk/requests/{id}/save         → Persist the workspace
  POST /api/desk/requests/{id}/approve      → Approve (Pendente only)
  POST /api/desk/requests/{id}/reject       → Reject with a reason (Pendente only)
  POST /api/desk/requests/{id}/edit         → Re-edit an approved card
  GET  /api/desk/dashboard                  → Pricing KPIs
  GET  /api/desk/cost-config/{plan}         → Cost table for a plan
  PUT  /api/desk/cost-config/{plan}         → Replace the cost table for a plan
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from datetime import datetime, timezone
from functools import lru_cache
from typing import Any, Iterator, Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel

from pricing_desk.config import get_settings
from pricing_desk.models.enums import ApprovalTier, NegotiationStatus, PlanType
from pricing_desk.models.errors import (
    InvalidTransitionError,
    RecordNotFoundError,
    StaleRecordError,
)
from pricing_desk.models.negotiation import NegotiationRecord
from pricing_desk.models.schemas import (
    BucketQuote,
    CompetitorRates,
    CostConfig,
    DashboardSummary,
    MarginComparison,
    NegotiationContext,
)
from pricing_desk.orchestration import state_machine
from pricing_desk.orchestration.session import NegotiationSession
from pricing_desk.services.desk_service import PricingDeskService

logger = logging.getLogger(__name__)

# ── Routers ──────────────────────────────────────────────
health_router = APIRouter()
desk_router = APIRouter()


@lru_cache()
def get_desk_service() -> PricingDeskService:
    """Process-wide desk service (overridden in tests)."""
    return PricingDeskService()


@contextmanager
def _domain_errors() -> Iterator[None]:
    """Translate domain exceptions into HTTP errors."""
    try:
        yield
    except RecordNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except (InvalidTransitionError, StaleRecordError) as e:
        raise HTTPException(status_code=409, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))


# ── Request / response schemas ───────────────────────────
class CreateRequest(BaseModel):
    client_name: str
    client_id: Optional[str] = None
    requester: str
    description: str = ""
    context: NegotiationContext = NegotiationContext()
    competitor_rates: CompetitorRates


class ProposalEdit(BaseModel):
    target_spread: Optional[float] = None
    plan_type: Optional[PlanType] = None
    mix: dict[str, float] = {}
    rates: dict[str, float] = {}


class ApproveRequest(BaseModel):
    approver: str


class RejectRequest(BaseModel):
    reason: Optional[str] = None
    custom_text: Optional[str] = None
    user: str = ""


class CostConfigUpdate(BaseModel):
    values: dict[str, Any]
    updated_by: str


class RequestSummary(BaseModel):
    id: str
    client_name: str
    client_id: Optional[str] = None
    registered_name: Optional[str] = None  # name in the client base, when the ID is known
    requester: str
    description: str
    status: NegotiationStatus
    plan_type: PlanType
    date: datetime


class SessionView(BaseModel):
    record: NegotiationRecord
    plan_type: PlanType
    target_spread: float
    tier: ApprovalTier
    proposed_rates: dict[str, float]
    mix: dict[str, float]
    overrides: list[str]
    quotes: list[BucketQuote]
    comparison: MarginComparison
    floor_breaches: list[str]
    reference_card: Optional[dict[str, float]] = None
    available_actions: list[str]


def _view(service: PricingDeskService, session: NegotiationSession) -> SessionView:
    record_id = session.record_id
    return SessionView(
        record=session.record,
        plan_type=session.plan_type,
        target_spread=session.target_spread,
        tier=session.tier,
        proposed_rates=session.proposed_rates,
        mix=session.mix,
        overrides=sorted(session.overrides),
        quotes=session.quotes,
        comparison=session.comparison,
        floor_breaches=service.floor_breaches(record_id),
        reference_card=service.reference_card(record_id),
        available_actions=state_machine.available_actions(session.record),
    )


# ── Health ───────────────────────────────────────────────

@health_router.get("/health")
async def health_check():
    settings = get_settings()
    return {
        "status": "ok",
        "app": settings.app_name,
        "mock_mode": settings.mock_mode,
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }


# ── Request queue ────────────────────────────────────────

@desk_router.post("/requests", response_model=NegotiationRecord)
async def create_request(body: CreateRequest, service: PricingDeskService = Depends(get_desk_service)):
    with _domain_errors():
        record = NegotiationRecord(**body.model_dump())
        return service.create_request(record)


@desk_router.get("/requests", response_model=list[RequestSummary])
async def list_requests(
    status: str = NegotiationStatus.PENDING.value,
    service: PricingDeskService = Depends(get_desk_service),
):
    with _domain_errors():
        records = service.list_requests(status)
    clients = service.registered_clients()
    return [
        RequestSummary(
            id=r.id,
            client_name=r.client_name,
            client_id=r.client_id,
            registered_name=clients[r.client_id].name if r.client_id in clients else None,
            requester=r.requester,
            description=r.description,
            status=r.status,
            plan_type=r.plan_type,
            date=r.date,
        )
        for r in records
    ]


# ── Desk workspace ───────────────────────────────────────

@desk_router.get("/requests/{record_id}", response_model=SessionView)
async def open_request(
    record_id: str,
    reload: bool = False,
    service: PricingDeskService = Depends(get_desk_service),
):
    with _domain_errors():
        session = service.open(record_id) if reload else service.session(record_id)
        return _view(service, session)


@desk_router.post("/requests/{record_id}/proposal", response_model=SessionView)
async def edit_proposal(
    record_id: str,
    body: ProposalEdit,
    service: PricingDeskService = Depends(get_desk_service),
):
    with _domain_errors():
        session = service.session(record_id)
        if body.plan_type is not None:
            session = service.change_plan(record_id, body.plan_type)
        if body.target_spread is not None:
            session = service.change_spread(record_id, body.target_spread)
        for bucket, weight in body.mix.items():
            session = service.edit_mix(record_id, bucket, weight)
        for bucket, rate in body.rates.items():
            session = service.edit_rate(record_id, bucket, rate)
        return _view(service, session)


@desk_router.post("/requests/{record_id}/save", response_model=SessionView)
async def save_request(record_id: str, service: PricingDeskService = Depends(get_desk_service)):
    with _domain_errors():
        return _view(service, service.save(record_id))


# ── Approval gate ────────────────────────────────────────

@desk_router.post("/requests/{record_id}/approve", response_model=SessionView)
async def approve_request(
    record_id: str,
    body: ApproveRequest,
    service: PricingDeskService = Depends(get_desk_service),
):
    with _domain_errors():
        session = service.approve(record_id, body.approver)
    logger.info(f"[{record_id}] approved by {body.approver}")
    return _view(service, session)


@desk_router.post("/requests/{record_id}/reject", response_model=SessionView)
async def reject_request(
    record_id: str,
    body: RejectRequest,
    service: PricingDeskService = Depends(get_desk_service),
):
    with _domain_errors():
        session = service.reject(record_id, body.reason, body.custom_text, body.user)
    return _view(service, session)


@desk_router.post("/requests/{record_id}/edit", response_model=SessionView)
async def edit_approved_request(
    record_id: str,
    body: ApproveRequest,
    service: PricingDeskService = Depends(get_desk_service),
):
    with _domain_errors():
        session = service.edit_approved(record_id, body.approver)
    return _view(service, session)


# ── Dashboard & configuration ────────────────────────────

@desk_router.get("/dashboard", response_model=DashboardSummary)
async def dashboard(competitor: str = "Todos", service: PricingDeskService = Depends(get_desk_service)):
    return service.dashboard(competitor)


@desk_router.get("/cost-config/{plan_type}", response_model=CostConfig)
async def get_cost_config(plan_type: PlanType, service: PricingDeskService = Depends(get_desk_service)):
    return service.cost_store.get_cost_config(plan_type)


@desk_router.put("/cost-config/{plan_type}", response_model=CostConfig)
async def update_cost_config(
    plan_type: PlanType,
    body: CostConfigUpdate,
    service: PricingDeskService = Depends(get_desk_service),
):
    with _domain_errors():
        return service.cost_store.update_cost_config(plan_type, body.values, body.updated_by)
