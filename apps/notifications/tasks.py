"""Celery tasks for notification delivery."""

from __future__ import annotations

import logging

from celery import shared_task  # type: ignore

from .services import deliver_notification

logger = logging.getLogger(__name__)


@shared_task(name="notifications.dispatch_notification", ignore_result=True)
def dispatch_notification(kind: str, snapshot: dict) -> list[str]:
    """Deliver one notification; failures are logged by the channels."""
    channels = deliver_notification(kind, snapshot)
    logger.info(f"Notification {kind} for booking {snapshot.get('booking_id')} sent via {channels or 'no channel'}")
    return channels
