"""
Unit of Work

Wraps a booking or payment state change in ``transaction.atomic`` and
holds the domain events it produced until the outermost transaction has
committed. A rolled back unit publishes nothing.
"""

from typing import Callable, List, Optional
import logging

from django.db import transaction

from shared.domain.base import DomainEvent

logger = logging.getLogger(__name__)


def _default_publisher(events: List[DomainEvent]) -> None:
    from shared.application.message_bus import message_bus

    message_bus.publish_events(events)


class DjangoUnitOfWork:
    """
    Transaction scope with deferred event publication

    Units nest: an inner unit becomes a savepoint and hands its events to
    ``transaction.on_commit``, which only fires once the outermost
    transaction commits.

    Usage:
        with DjangoUnitOfWork() as uow:
            booking = lock_booking(booking_id)
            booking.status = Booking.Status.CONFIRMED
            booking.save(update_fields=["status", "updated_at"])
            uow.add_event(BookingConfirmed(...))
        # BookingConfirmed reaches the message bus after COMMIT
    """

    def __init__(self, publisher: Optional[Callable[[List[DomainEvent]], None]] = None):
        self._publisher = publisher or _default_publisher
        self._events: List[DomainEvent] = []
        self._atomic = None

    def __enter__(self):
        self._atomic = transaction.atomic()
        self._atomic.__enter__()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        try:
            if exc_type is None:
                self._schedule_publication()
            elif self._events:
                logger.warning(
                    f"Unit of work failed with {exc_type.__name__}, "
                    f"dropping {len(self._events)} events"
                )
        finally:
            self._events = []
            self._atomic.__exit__(exc_type, exc_val, exc_tb)

    def add_event(self, event: DomainEvent) -> None:
        self._events.append(event)

    @property
    def events(self) -> List[DomainEvent]:
        return list(self._events)

    def _schedule_publication(self) -> None:
        if not self._events:
            return
        events = list(self._events)
        logger.debug(f"Scheduling {len(events)} events for after commit")
        transaction.on_commit(lambda: self._publish(events))

    def _publish(self, events: List[DomainEvent]) -> None:
        logger.info(f"Publishing {len(events)} domain events after commit")
        try:
            self._publisher(events)
        except Exception as e:
            # The transaction is already committed at this point
            logger.error(f"Error publishing events: {e}", exc_info=True)
