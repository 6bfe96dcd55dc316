"""Models — enums, schemas, the negotiation record and domain errors."""

from pricing_desk.models.enums import (
    ApprovalTier,
    LogAction,
    NegotiationStatus,
    PlanType,
    RecomputeTrigger,
    RejectionReason,
)
from pricing_desk.models.errors import (
    InvalidTransitionError,
    NegotiationValidationError,
    RecordNotFoundError,
    StaleRecordError,
)
from pricing_desk.models.negotiation import NegotiationRecord, plan_type_from_description
from pricing_desk.models.schemas import (
    ApprovedRates,
    ChangeLogEntry,
    CompetitorRates,
    CostConfig,
    MarginComparison,
    NegotiationContext,
    SideMetrics,
)

__all__ = [
    "ApprovalTier",
    "LogAction",
    "NegotiationStatus",
    "PlanType",
    "RecomputeTrigger",
    "RejectionReason",
    "InvalidTransitionError",
    "NegotiationValidationError",
    "RecordNotFoundError",
    "StaleRecordError",
    "NegotiationRecord",
    "plan_type_from_description",
    "ApprovedRates",
    "ChangeLogEntry",
    "CompetitorRates",
    "CostConfig",
    "MarginComparison",
    "NegotiationContext",
    "SideMetrics",
]
