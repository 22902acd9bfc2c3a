"""
Booking Domain Events

Events that represent things that have happened in the booking domain.
These are published after successful transaction commits; every event
carries the booking snapshot handed to notification channels.
"""

from dataclasses import dataclass, field
from typing import Any, Dict

from shared.domain.base import DomainEvent


@dataclass(kw_only=True)
class BookingEvent(DomainEvent):
    booking_id: int
    listing_id: int
    snapshot: Dict[str, Any] = field(default_factory=dict)

    notification_kind = ""


@dataclass(kw_only=True)
class BookingCreated(BookingEvent):
    """
    Event: A new booking was created (status pending)

    Triggers:
    - Notify listing owner of the request
    """
    notification_kind = "booking_created"


@dataclass(kw_only=True)
class BookingConfirmed(BookingEvent):
    """
    Event: Booking confirmed (pending -> confirmed)

    Raised either by the owner or by a settled payment.
    """
    paid: bool = False

    notification_kind = "booking_confirmed"


@dataclass(kw_only=True)
class BookingRejected(BookingEvent):
    """Event: Owner rejected the booking (pending -> rejected)"""
    notification_kind = "booking_rejected"


@dataclass(kw_only=True)
class BookingCancelled(BookingEvent):
    """Event: Advertiser or admin cancelled the booking"""
    previous_status: str = ""

    notification_kind = "booking_cancelled"


@dataclass(kw_only=True)
class BookingCompleted(BookingEvent):
    """Event: Rental period finished (confirmed -> completed)"""
    notification_kind = "booking_completed"


EVENTS_BY_STATUS = {
    "confirmed": BookingConfirmed,
    "rejected": BookingRejected,
    "cancelled": BookingCancelled,
    "completed": BookingCompleted,
}
