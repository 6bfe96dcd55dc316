"""
Domain exceptions raised by the pricing desk.

The API layer maps these to HTTP status codes; everything else
propagates unchanged to the caller.
"""

from __future__ import annotations


class NegotiationValidationError(ValueError):
    """Operator input is incomplete (missing reason, empty proposal, ...)."""


class InvalidTransitionError(RuntimeError):
    """The requested action is not legal from the record's current status."""

    def __init__(self, action: str, status: str):
        self.action = action
        self.status = status
        super().__init__(f"Cannot {action} a negotiation in status '{status}'")


class StaleRecordError(RuntimeError):
    """The record was changed by someone else since it was loaded."""

    def __init__(self, record_id: str, expected: int, found: int):
        self.record_id = record_id
        self.expected = expected
        self.found = found
        super().__init__(
            f"Negotiation {record_id} is at version {found}, "
            f"but the update was based on version {expected}"
        )


class RecordNotFoundError(LookupError):
    """No negotiation with the given id exists in the store."""
