"""Checkout session state machine transitions enforced by the controller."""

from enum import Enum


class SessionStatus(str, Enum):
    IDLE = "IDLE"
    LOADING = "LOADING"
    AWAITING_RESULT = "AWAITING_RESULT"
    SUCCEEDED = "SUCCEEDED"
    FAILED = "FAILED"
    DISMISSED = "DISMISSED"


# DISMISSED is recorded as an outcome only; a dismissed checkout rests in IDLE.
ALLOWED_TRANSITIONS: dict[SessionStatus, set[SessionStatus]] = {
    SessionStatus.IDLE: {SessionStatus.LOADING, SessionStatus.FAILED},
    SessionStatus.LOADING: {SessionStatus.AWAITING_RESULT, SessionStatus.FAILED},
    SessionStatus.AWAITING_RESULT: {SessionStatus.SUCCEEDED, SessionStatus.FAILED, SessionStatus.IDLE},
    SessionStatus.SUCCEEDED: {SessionStatus.LOADING},
    SessionStatus.FAILED: {SessionStatus.LOADING},
    SessionStatus.DISMISSED: set(),
}

IN_FLIGHT: frozenset[SessionStatus] = frozenset({SessionStatus.LOADING, SessionStatus.AWAITING_RESULT})


class InvalidTransition(ValueError):
    """Raised when an event would move a session along an illegal edge."""


def validate_transition(current: SessionStatus, new: SessionStatus) -> None:
    """Raise when a transition is not allowed by the state machine."""

    if new not in ALLOWED_TRANSITIONS.get(current, set()):
        raise InvalidTransition(f"Invalid transition: {current.value} -> {new.value}")
