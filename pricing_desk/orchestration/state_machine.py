"""
Negotiation lifecycle transitions.

    Pendente ──approve──▶ Aprovado Pricing ──edit──▶ Aprovado Pricing
        │
        └─────reject────▶ Rejeitado   (terminal)

Every function checks its precondition and validates its input before
touching the record, so a failed call leaves the record unchanged.
Persisting the record is the caller's job (one update_demand per action).
"""

from __future__ import annotations

import logging
from typing import Optional, Union

from pricing_desk.engine.buckets import CREDIT_12X, CREDIT_1X, DEBIT, buckets_for
from pricing_desk.models.enums import LogAction, NegotiationStatus, RejectionReason
from pricing_desk.models.errors import InvalidTransitionError, NegotiationValidationError
from pricing_desk.models.negotiation import NegotiationRecord
from pricing_desk.models.schemas import ApprovedRates, DealFinancials

logger = logging.getLogger(__name__)

APPROVE = "approve"
REJECT = "reject"
EDIT = "edit"

# action → status it is legal from
ALLOWED_FROM: dict[str, NegotiationStatus] = {
    APPROVE: NegotiationStatus.PENDING,
    REJECT: NegotiationStatus.PENDING,
    EDIT: NegotiationStatus.APPROVED,
}

APPROVAL_RESULT = "Taxas aprovadas conforme análise de Pricing."


def can_transition(record: NegotiationRecord, action: str) -> bool:
    return ALLOWED_FROM.get(action) == record.status


def available_actions(record: NegotiationRecord) -> list[str]:
    return [action for action in ALLOWED_FROM if can_transition(record, action)]


def _require(record: NegotiationRecord, action: str) -> None:
    if not can_transition(record, action):
        raise InvalidTransitionError(action, record.status.value)


def snapshot_approved_rates(record: NegotiationRecord, proposed_rates: dict[str, float]) -> ApprovedRates:
    """
    Reduce the bucket table to the three persisted reference points:
    debit, 1x and 12x (or the plan's last bucket when there is no 12x).
    """
    if not proposed_rates:
        raise NegotiationValidationError("Proposed rates are required")
    missing = [b for b in (DEBIT, CREDIT_1X) if b not in proposed_rates]
    if missing:
        raise NegotiationValidationError(f"Proposed rates missing buckets: {', '.join(missing)}")

    if CREDIT_12X in proposed_rates:
        long_rate = proposed_rates[CREDIT_12X]
    else:
        ordered = [b for b in buckets_for(record.plan_type) if b in proposed_rates]
        long_rate = proposed_rates[ordered[-1]]

    return ApprovedRates(
        debit=proposed_rates[DEBIT],
        credit1x=proposed_rates[CREDIT_1X],
        credit12x=long_rate,
    )


def _require_user(user: str, role: str) -> None:
    if not user or not user.strip():
        raise NegotiationValidationError(f"{role} name is required")


def approve(
    record: NegotiationRecord,
    approver: str,
    proposed_rates: dict[str, float],
    spread_percent: float,
    margin_value: float = 0.0,
) -> NegotiationRecord:
    """Pendente → Aprovado Pricing; snapshots the approved card and logs 'Aprovação'."""
    _require(record, APPROVE)
    _require_user(approver, "Approver")
    snapshot = snapshot_approved_rates(record, proposed_rates)

    record.proposed_rates = dict(proposed_rates)
    record.approved_rates = snapshot
    record.financials = DealFinancials(spread=round(spread_percent, 4), mcf2=round(margin_value, 2))
    record.status = NegotiationStatus.APPROVED
    record.result = APPROVAL_RESULT
    record.add_log(approver, LogAction.APPROVAL, f"Spread: {spread_percent:.2f}%")

    logger.info(f"[{record.id}] Approved by {approver} (spread {spread_percent:.2f}%)")
    return record


def reject(
    record: NegotiationRecord,
    reason: Union[RejectionReason, str, None],
    custom_text: Optional[str] = None,
    user: str = "",
) -> NegotiationRecord:
    """Pendente → Rejeitado. 'Outros' needs free text."""
    _require(record, REJECT)

    if reason is None or (isinstance(reason, str) and not reason.strip()):
        raise NegotiationValidationError("A rejection reason is required")
    try:
        reason = RejectionReason(reason)
    except ValueError:
        raise NegotiationValidationError(f"Unknown rejection reason: {reason!r}") from None

    text = (custom_text or "").strip()
    if reason == RejectionReason.OTHER and not text:
        raise NegotiationValidationError("Reason 'Outros' requires a description")

    detail = f"{reason.value}: {text}" if text else reason.value
    record.status = NegotiationStatus.REJECTED
    record.result = f"Taxas reprovadas. Motivo: {detail}"
    record.add_log(user or "Pricing", LogAction.REJECTION, detail)

    logger.info(f"[{record.id}] Rejected ({detail})")
    return record


def edit_approved(
    record: NegotiationRecord,
    approver: str,
    proposed_rates: dict[str, float],
    spread_percent: float,
    margin_value: Optional[float] = None,
) -> NegotiationRecord:
    """Re-edit an approved card. Status stays Aprovado Pricing; logs 'Edição de Taxas'."""
    _require(record, EDIT)
    _require_user(approver, "Approver")
    snapshot = snapshot_approved_rates(record, proposed_rates)

    record.proposed_rates = dict(proposed_rates)
    record.approved_rates = snapshot
    if margin_value is None:
        margin_value = record.financials.mcf2 if record.financials else 0.0
    record.financials = DealFinancials(spread=round(spread_percent, 4), mcf2=round(margin_value, 2))
    record.add_log(
        approver,
        LogAction.RATE_EDIT,
        f"Spread: {spread_percent:.2f}% | Débito {snapshot.debit:.2f}% · "
        f"1x {snapshot.credit1x:.2f}% · 12x {snapshot.credit12x:.2f}%",
    )

    logger.info(f"[{record.id}] Approved rates edited by {approver}")
    return record
