"""
Payment Domain Events

Published after the reconciliation transaction commits.
"""

from dataclasses import dataclass, field
from typing import Any, Dict

from shared.domain.base import DomainEvent


@dataclass(kw_only=True)
class PaymentDomainEvent(DomainEvent):
    payment_id: int
    booking_id: int
    snapshot: Dict[str, Any] = field(default_factory=dict)

    notification_kind = ""


@dataclass(kw_only=True)
class PaymentSucceeded(PaymentDomainEvent):
    """
    Event: Provider reported the payment as settled

    Triggers:
    - Payment receipt to the advertiser
    """
    notification_kind = "payment_success"


@dataclass(kw_only=True)
class PaymentFailed(PaymentDomainEvent):
    """Event: Provider reported the payment as failed"""
    reason: str = ""

    notification_kind = "payment_failed"
