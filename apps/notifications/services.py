"""Notification services for sending emails and SMS messages."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Tuple

import requests
from django.conf import settings  # type: ignore
from django.core.mail import send_mail  # type: ignore

logger = logging.getLogger(__name__)

ADVERTISER = "advertiser"
OWNER = "owner"


@dataclass(frozen=True)
class Message:
    recipients: Tuple[str, ...]
    subject: str
    body: str


MESSAGES: Dict[str, Message] = {
    "booking_created": Message(
        (OWNER,),
        "New booking request for {listing_title}",
        "Booking #{booking_id} requests {listing_title} from {start_date} to {end_date} "
        "for {total_price} {currency}.",
    ),
    "booking_confirmed": Message(
        (ADVERTISER, OWNER),
        "Booking #{booking_id} confirmed",
        "Booking #{booking_id} of {listing_title} ({start_date} to {end_date}) is confirmed.",
    ),
    "booking_rejected": Message(
        (ADVERTISER,),
        "Booking #{booking_id} rejected",
        "The owner of {listing_title} declined booking #{booking_id}.",
    ),
    "booking_cancelled": Message(
        (ADVERTISER, OWNER),
        "Booking #{booking_id} cancelled",
        "Booking #{booking_id} of {listing_title} ({start_date} to {end_date}) was cancelled.",
    ),
    "booking_completed": Message(
        (ADVERTISER,),
        "Booking #{booking_id} completed",
        "Your campaign on {listing_title} has ended. Thank you for using AdSpace.",
    ),
    "payment_success": Message(
        (ADVERTISER,),
        "Payment received for booking #{booking_id}",
        "We received {amount} {currency} for booking #{booking_id} (ref. {transaction_id}).",
    ),
    "payment_failed": Message(
        (ADVERTISER,),
        "Payment failed for booking #{booking_id}",
        "Your payment for booking #{booking_id} failed. You can retry from your bookings.",
    ),
}


# ============================================================================
# CHANNELS
# ============================================================================

def send_email_notification(recipient_email: str, subject: str, message: str) -> bool:
    """
    Send a plain text email.

    Returns:
        bool: True if the message was handed to the mail backend
    """
    try:
        send_mail(
            subject=subject,
            message=message,
            from_email=settings.DEFAULT_FROM_EMAIL,
            recipient_list=[recipient_email],
            fail_silently=False,
        )
        logger.info(f"Email sent successfully to {recipient_email}: {subject}")
        return True

    except Exception as e:
        logger.error(f"Failed to send email to {recipient_email}: {e}", exc_info=True)
        return False


def send_sms_notification(phone: str, message: str) -> bool:
    """
    Send an SMS through the configured gateway.

    Without SMS_GATEWAY_URL the message is only logged.
    """
    if not settings.SMS_GATEWAY_URL:
        logger.info(f"SMS gateway not configured, message to {phone}: {message}")
        return False

    try:
        response = requests.post(
            settings.SMS_GATEWAY_URL,
            json={"to": phone, "message": message},
            headers={"Authorization": f"Bearer {settings.SMS_GATEWAY_API_KEY}"},
            timeout=10,
        )
        response.raise_for_status()
        logger.info(f"SMS sent successfully to {phone}")
        return True

    except requests.exceptions.RequestException as e:
        logger.error(f"Failed to send SMS to {phone}: {e}")
        return False


# ============================================================================
# DISPATCH
# ============================================================================

def _contacts(snapshot: Dict[str, Any], role: str) -> Tuple[str, str]:
    return snapshot.get(f"{role}_email", ""), snapshot.get(f"{role}_phone", "")


def deliver_notification(kind: str, snapshot: Dict[str, Any]) -> List[str]:
    """
    Render and send the messages for an event kind.

    Returns the list of channels used, e.g. ``["email:owner", "sms:owner"]``.
    """
    message = MESSAGES.get(kind)
    if message is None:
        logger.warning(f"No notification template for event kind '{kind}'")
        return []

    context = _Defaults(snapshot)
    subject = message.subject.format_map(context)
    body = message.body.format_map(context)

    sent: List[str] = []
    for role in message.recipients:
        email, phone = _contacts(snapshot, role)
        if email and send_email_notification(email, subject, body):
            sent.append(f"email:{role}")
        if phone and send_sms_notification(phone, body):
            sent.append(f"sms:{role}")
    return sent


class _Defaults(dict):
    """format_map mapping that renders missing keys as empty strings."""

    def __missing__(self, key: str) -> str:
        return ""
