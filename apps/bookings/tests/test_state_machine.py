"""Tests for the booking status transition rules."""

import pytest

from apps.bookings.domain import state_machine as sm
from shared.domain.exceptions import ConflictError, ForbiddenError, InvalidTransitionError, ValidationError


@pytest.mark.parametrize(
    "current, target, roles",
    [
        (sm.PENDING, sm.CONFIRMED, (sm.OWNER,)),
        (sm.PENDING, sm.REJECTED, (sm.OWNER,)),
        (sm.PENDING, sm.CANCELLED, (sm.ADVERTISER,)),
        (sm.CONFIRMED, sm.CANCELLED, (sm.ADVERTISER,)),
        (sm.CONFIRMED, sm.COMPLETED, (sm.OWNER,)),
        (sm.PENDING, sm.CONFIRMED, (sm.ADMIN,)),
        (sm.CONFIRMED, sm.CANCELLED, (sm.ADMIN,)),
    ],
)
def test_allowed_transitions(current, target, roles):
    sm.check_transition(current, target, roles)
    assert sm.can_transition(current, target)


@pytest.mark.parametrize(
    "target, roles",
    [
        (sm.CONFIRMED, (sm.ADVERTISER,)),
        (sm.REJECTED, (sm.ADVERTISER,)),
        (sm.CANCELLED, (sm.OWNER,)),
        (sm.COMPLETED, (sm.ADVERTISER,)),
        (sm.CONFIRMED, ()),
    ],
)
def test_wrong_actor_is_forbidden(target, roles):
    with pytest.raises(ForbiddenError):
        sm.check_transition(sm.PENDING, target, roles)


@pytest.mark.parametrize("terminal", sorted(sm.TERMINAL_STATUSES))
@pytest.mark.parametrize("target", [sm.CONFIRMED, sm.REJECTED, sm.CANCELLED, sm.COMPLETED])
def test_terminal_states_accept_nothing(terminal, target):
    with pytest.raises(InvalidTransitionError):
        sm.check_transition(terminal, target, (sm.ADMIN,))


def test_pending_cannot_complete():
    with pytest.raises(InvalidTransitionError) as exc_info:
        sm.check_transition(sm.PENDING, sm.COMPLETED, (sm.OWNER,))
    assert isinstance(exc_info.value, ConflictError)


def test_unknown_target_is_validation_error():
    with pytest.raises(ValidationError):
        sm.check_transition(sm.PENDING, "archived", (sm.ADMIN,))


def test_pending_is_not_a_target():
    with pytest.raises(ValidationError):
        sm.check_transition(sm.CONFIRMED, sm.PENDING, (sm.ADMIN,))
