"""
Domain event handlers for notifications.

Registered on the message bus when the app is ready; they run after the
originating transaction has committed.
"""

from __future__ import annotations

from apps.bookings.domain.events import (
    BookingCancelled,
    BookingCompleted,
    BookingConfirmed,
    BookingCreated,
    BookingRejected,
)
from apps.payments.domain.events import PaymentFailed, PaymentSucceeded
from shared.application.message_bus import message_bus

from .sink import notification_sink

NOTIFIED_EVENTS = (
    BookingCreated,
    BookingConfirmed,
    BookingRejected,
    BookingCancelled,
    BookingCompleted,
    PaymentSucceeded,
    PaymentFailed,
)


def notify_stakeholders(event) -> None:
    notification_sink.notify(event.notification_kind, event.snapshot)


def register_handlers() -> None:
    for event_type in NOTIFIED_EVENTS:
        message_bus.register_event_handler(event_type, notify_stakeholders)
