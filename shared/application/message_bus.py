"""
Message Bus

Routes committed domain events to the side effects subscribed to them,
such as stakeholder notifications. Booking and payment code only ever
publishes; it does not know who listens.
"""

from typing import Callable, Dict, Iterable, List, Type
import logging

from shared.domain.base import DomainEvent

logger = logging.getLogger(__name__)

EventHandler = Callable[[DomainEvent], None]


class MessageBus:
    """
    Event dispatcher (1:N)

    Handlers subscribed to a base event class also receive its
    subclasses. A failing handler is logged and the remaining handlers
    still run.
    """

    def __init__(self):
        self._subscriptions: Dict[Type[DomainEvent], List[EventHandler]] = {}

    def register_event_handler(self, event_type: Type[DomainEvent], handler: EventHandler) -> None:
        """Subscribe handler to event_type; subscribing twice is a no-op."""
        handlers = self._subscriptions.setdefault(event_type, [])
        if handler not in handlers:
            handlers.append(handler)
            logger.debug(f"Subscribed {handler.__name__} to {event_type.__name__}")

    def handlers_for(self, event_type: Type[DomainEvent]) -> List[EventHandler]:
        found: List[EventHandler] = []
        for klass in event_type.__mro__:
            for handler in self._subscriptions.get(klass, []):
                if handler not in found:
                    found.append(handler)
        return found

    def publish_events(self, events: Iterable[DomainEvent]) -> None:
        for event in events:
            self._dispatch(event)

    def _dispatch(self, event: DomainEvent) -> None:
        handlers = self.handlers_for(type(event))
        if not handlers:
            logger.debug(f"No subscribers for {event.name}")
            return

        logger.info(f"Dispatching {event.name} (ID: {event.event_id}) to {len(handlers)} handler(s)")
        for handler in handlers:
            try:
                handler(event)
            except Exception as e:
                logger.error(f"Handler {handler.__name__} failed on {event.name}: {e}", exc_info=True)


message_bus = MessageBus()
