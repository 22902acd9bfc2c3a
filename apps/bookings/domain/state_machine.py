"""
Booking State Machine

    pending   -> confirmed  (owner, admin)
    pending   -> rejected   (owner, admin)
    pending   -> cancelled  (advertiser, admin)
    confirmed -> cancelled  (advertiser, admin)
    confirmed -> completed  (owner, admin)

rejected, cancelled and completed are terminal.
"""

from dataclasses import dataclass
from typing import Dict, FrozenSet, Tuple

from shared.domain.exceptions import ForbiddenError, InvalidTransitionError, ValidationError

PENDING = "pending"
CONFIRMED = "confirmed"
REJECTED = "rejected"
CANCELLED = "cancelled"
COMPLETED = "completed"

ALL_STATUSES = (PENDING, CONFIRMED, REJECTED, CANCELLED, COMPLETED)
TERMINAL_STATUSES = frozenset({REJECTED, CANCELLED, COMPLETED})
BLOCKING_STATUSES = (PENDING, CONFIRMED)

# Actor roles relative to a booking
OWNER = "owner"
ADVERTISER = "advertiser"
ADMIN = "admin"


@dataclass(frozen=True)
class Transition:
    sources: FrozenSet[str]
    actors: FrozenSet[str]


TRANSITIONS: Dict[str, Transition] = {
    CONFIRMED: Transition(frozenset({PENDING}), frozenset({OWNER, ADMIN})),
    REJECTED: Transition(frozenset({PENDING}), frozenset({OWNER, ADMIN})),
    CANCELLED: Transition(frozenset({PENDING, CONFIRMED}), frozenset({ADVERTISER, ADMIN})),
    COMPLETED: Transition(frozenset({CONFIRMED}), frozenset({OWNER, ADMIN})),
}


def check_transition(current: str, target: str, actor_roles: Tuple[str, ...]) -> None:
    """
    Validate a requested status change

    Raises:
        ValidationError: target is not a status reachable by request
        ForbiddenError: none of actor_roles may request the target
        InvalidTransitionError: current status does not allow the target
    """
    transition = TRANSITIONS.get(target)
    if transition is None:
        raise ValidationError(f"Unknown target status '{target}'", status=target)

    if not transition.actors.intersection(actor_roles):
        raise ForbiddenError(
            f"Not allowed to move booking to '{target}'",
            status=target,
        )

    if not can_transition(current, target):
        raise InvalidTransitionError(
            f"Cannot move booking from '{current}' to '{target}'",
            current=current,
            status=target,
        )


def can_transition(current: str, target: str) -> bool:
    transition = TRANSITIONS.get(target)
    return transition is not None and current in transition.sources
