"""
Reusable data schemas for the pricing desk.
Cost and competitor inputs, audit entries, and evaluator outputs.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Optional
from pydantic import BaseModel, Field

from .enums import ApprovalTier, LogAction


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


# ── Cost Model ───────────────────────────────────────────


class CostConfig(BaseModel, frozen=True):
    """Internal cost structure for one plan type. All costs in percent except fixed_cost_per_tx."""
    debit_cost: float = Field(0.50, ge=0)
    credit_sight_cost: float = Field(1.80, ge=0)
    anticipation_cost: float = Field(0.90, ge=0)  # funding cost per month of term
    installment_2to6_cost: float = Field(2.20, ge=0)
    installment_7to12_cost: float = Field(2.40, ge=0)
    installment_13to18_cost: float = Field(2.60, ge=0)
    fixed_cost_per_tx: float = Field(0.15, ge=0)
    tax_rate: float = Field(11.25, ge=0)  # percent of gross take-rate
    last_updated: datetime = Field(default_factory=utcnow)
    updated_by: str = "Sistema"


# ── Competitor Rate Model ────────────────────────────────


class CompetitorRates(BaseModel, frozen=True):
    """Incumbent acquirer's observed card. Other buckets are derived, never stored."""
    debit: float = Field(0.0, ge=0)
    credit1x: float = Field(0.0, ge=0)
    credit12x: float = Field(0.0, ge=0)


# ── Negotiation context ──────────────────────────────────


class NegotiationContext(BaseModel):
    potential_revenue: float = 0.0  # TPV estimate
    min_agreed: float = 0.0
    competitor: str = ""  # incumbent acquirer name (Stone, Cielo, ...)


class ApprovedRates(BaseModel):
    """The official approved card: three reference points only."""
    debit: float
    credit1x: float
    credit12x: float


class DealFinancials(BaseModel):
    spread: float = 0.0  # percent of TPV
    mcf2: float = 0.0    # margin value, currency


class ChangeLogEntry(BaseModel):
    date: datetime = Field(default_factory=utcnow)
    user: str
    action: LogAction
    details: str = ""


class ClientInfo(BaseModel):
    """Display-only enrichment (CNPJ/ID lookup)."""
    id: str
    name: str


# ── Proposal output ──────────────────────────────────────


class BucketQuote(BaseModel):
    """Per-bucket breakdown of how a proposed rate was reached."""
    bucket: str
    cost: float
    competitor_estimate: float
    floor: float
    rate: float


class Proposal(BaseModel):
    tier: ApprovalTier
    target_spread: float
    rates: dict[str, float] = {}
    quotes: list[BucketQuote] = []


# ── Margin evaluator output ──────────────────────────────


class SideMetrics(BaseModel):
    weighted_rate: float = 0.0
    weighted_cost: float = 0.0
    take_rate_value: float = 0.0
    spread_value: float = 0.0
    spread_percent: float = 0.0
    margin_value: float = 0.0  # MCF2


class MarginComparison(BaseModel):
    competitor: SideMetrics = Field(default_factory=SideMetrics)
    proposed: SideMetrics = Field(default_factory=SideMetrics)
    merchant_savings: float = 0.0  # competitor take-rate value minus ours
    is_cheaper: bool = False


# ── Dashboard ────────────────────────────────────────────


class CompetitorBenchmark(BaseModel):
    competitor: str
    deals: int = 0
    avg_competitor_debit: float = 0.0
    avg_approved_debit: float = 0.0


class DashboardSummary(BaseModel):
    approved: int = 0
    pending: int = 0
    rejected: int = 0
    benchmarks: list[CompetitorBenchmark] = []
    competitor_filter: Optional[str] = None
