"""
Notification sink.

Fire-and-forget entry point used by the domain event handlers: the
notification is queued for the Celery worker and any queueing error is
logged, never raised.
"""

from __future__ import annotations

from typing import Any, Dict

import structlog  # type: ignore

logger = structlog.get_logger(__name__)


class NotificationSink:
    def notify(self, event_kind: str, snapshot: Dict[str, Any]) -> bool:
        from .tasks import dispatch_notification

        try:
            dispatch_notification.delay(event_kind, snapshot)
        except Exception as exc:
            logger.error(
                "notification.enqueue_failed",
                kind=event_kind,
                booking_id=snapshot.get("booking_id"),
                error=str(exc),
            )
            return False

        logger.info("notification.enqueued", kind=event_kind, booking_id=snapshot.get("booking_id"))
        return True


notification_sink = NotificationSink()
