"""Development stand-in for the mobile-money providers.

Initiation always succeeds with a pending transaction. Polling is
deterministic per transaction id: a generator seeded with the id decides
whether the payment reads as settled, against PAYMENTS_MOCK_SUCCESS_RATE.
It never reports a failure.
"""

from __future__ import annotations

import random
import uuid

import structlog  # type: ignore
from django.conf import settings  # type: ignore

from .base import (
    FAILED,
    PENDING,
    SUCCESS,
    InitiationRequest,
    InitiationResult,
    PaymentProvider,
    StatusResult,
)

logger = structlog.get_logger(__name__)


class MockProvider(PaymentProvider):
    name = "mock"
    STATUS_MAP = {
        "PENDING": PENDING,
        "SUCCESS": SUCCESS,
        "FAILED": FAILED,
    }

    def __init__(self, method: str = "mock", config=None):
        super().__init__(config)
        self.method = method

    def initiate(self, request: InitiationRequest) -> InitiationResult:
        transaction_id = f"{self.method.upper()}_MOCK_{uuid.uuid4().hex[:12]}_{request.reference}"
        payment_url = ""
        if self.method == "wave":
            payment_url = f"https://pay.wave.com/mock/{request.reference}"
        logger.info(
            "payment.mock_initiated",
            method=self.method,
            transaction_id=transaction_id,
            amount=request.amount,
        )
        return InitiationResult(transaction_id=transaction_id, status=PENDING, payment_url=payment_url)

    def check_status(self, transaction_id: str) -> StatusResult:
        draw = random.Random(transaction_id).random()
        status = SUCCESS if draw < settings.PAYMENTS_MOCK_SUCCESS_RATE else PENDING
        logger.info("payment.mock_status", transaction_id=transaction_id, status=status)
        return StatusResult(status=status)
