"""
Commission status state machine.

    pending  -> accepted | rejected
    accepted -> completed

completed and rejected are terminal.
"""

from enum import Enum
from typing import Dict, FrozenSet, Optional


class CommissionStatus(str, Enum):
    PENDING = "pending"
    ACCEPTED = "accepted"
    COMPLETED = "completed"
    REJECTED = "rejected"


TRANSITIONS: Dict[CommissionStatus, FrozenSet[CommissionStatus]] = {
    CommissionStatus.PENDING: frozenset({CommissionStatus.ACCEPTED, CommissionStatus.REJECTED}),
    CommissionStatus.ACCEPTED: frozenset({CommissionStatus.COMPLETED}),
    CommissionStatus.COMPLETED: frozenset(),
    CommissionStatus.REJECTED: frozenset(),
}


class InvalidTransition(ValueError):
    def __init__(self, current: CommissionStatus, requested: CommissionStatus):
        self.current = current
        self.requested = requested
        super().__init__(f"Cannot move commission from '{current.value}' to '{requested.value}'")


def is_terminal(status: CommissionStatus) -> bool:
    return not TRANSITIONS[status]


def can_transition(current: CommissionStatus, requested: CommissionStatus) -> bool:
    return requested in TRANSITIONS[current]


def next_status(current: str, requested: Optional[str]) -> CommissionStatus:
    """Validate a requested status change and return the resulting status.

    A missing or unchanged status is a no-op. Unknown values raise ValueError,
    illegal moves raise InvalidTransition.
    """
    cur = CommissionStatus(current)
    if requested is None:
        return cur
    req = CommissionStatus(requested)
    if req == cur:
        return cur
    if not can_transition(cur, req):
        raise InvalidTransition(cur, req)
    return req
