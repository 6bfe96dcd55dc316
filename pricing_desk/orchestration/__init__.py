"""Orchestration — negotiation session (explicit recompute) and lifecycle transitions."""

from pricing_desk.orchestration.session import (
    NegotiationSession,
    open_session,
    recompute,
)
from pricing_desk.orchestration import state_machine

__all__ = ["NegotiationSession", "open_session", "recompute", "state_machine"]
