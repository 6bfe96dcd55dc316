"""
Negotiation record — the single persisted object the pricing desk works on.

Design rules:
  1. Sales reps create the record (identity, context, competitor card).
  2. The desk owns proposed_rates, mix, target_spread and the status fields.
  3. change_log is append-only; use add_log() rather than touching the list.
"""

from __future__ import annotations

import uuid
from datetime import datetime
from typing import Optional
from pydantic import BaseModel, Field, model_validator

from .enums import LogAction, NegotiationStatus, PlanType
from .schemas import (
    ApprovedRates,
    ChangeLogEntry,
    CompetitorRates,
    DealFinancials,
    NegotiationContext,
    utcnow,
)


def plan_type_from_description(description: str | None) -> PlanType:
    """'Venda Taxa Simples' → Simples; anything else is Full."""
    if description and "simples" in description.lower():
        return PlanType.SIMPLES
    return PlanType.FULL


class NegotiationRecord(BaseModel):
    # ── Identity (owner: sales rep) ──────────────────────
    id: str = Field(default_factory=lambda: f"NEG-{uuid.uuid4().hex[:8].upper()}")
    client_name: str
    client_id: Optional[str] = None
    requester: str = ""
    date: datetime = Field(default_factory=utcnow)
    type: str = "Negociação de Taxa"
    description: str = ""

    plan_type: Optional[PlanType] = None  # derived from description when omitted
    context: NegotiationContext = Field(default_factory=NegotiationContext)
    competitor_rates: CompetitorRates = Field(default_factory=CompetitorRates)

    # ── Desk workspace (owner: pricing desk) ─────────────
    proposed_rates: dict[str, float] = {}
    mix: dict[str, float] = {}
    target_spread: Optional[float] = None

    # ── Outcome ──────────────────────────────────────────
    status: NegotiationStatus = NegotiationStatus.PENDING
    approved_rates: Optional[ApprovedRates] = None
    financials: Optional[DealFinancials] = None
    result: str = ""

    # ── Audit trail (append-only) ────────────────────────
    change_log: list[ChangeLogEntry] = Field(default_factory=list)

    # Optimistic concurrency; bumped by the repository on every update
    version: int = 0

    @model_validator(mode="after")
    def _derive_plan_type(self) -> "NegotiationRecord":
        if self.plan_type is None:
            self.plan_type = plan_type_from_description(self.description or self.type)
        return self

    # ── Helper ───────────────────────────────────────────

    def add_log(self, user: str, action: LogAction, details: str = "") -> ChangeLogEntry:
        entry = ChangeLogEntry(user=user, action=action, details=details)
        self.change_log.append(entry)
        return entry
