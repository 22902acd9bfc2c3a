"""Wave checkout sessions adapter (redirect based, no payer phone)."""

from __future__ import annotations

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
    parse_amount,
)

logger = structlog.get_logger(__name__)

DEFAULT_API_URL = "https://api.wave.com/v1"


class WaveProvider(PaymentProvider):
    name = "wave"
    STATUS_MAP = {
        "PENDING": PENDING,
        "SUCCEEDED": SUCCESS,
        "FAILED": FAILED,
    }

    def _headers(self) -> dict:
        return {
            "Authorization": f"Bearer {self.config.get('api_key', '')}",
            "Content-Type": "application/json",
        }

    def initiate(self, request: InitiationRequest) -> InitiationResult:
        frontend = settings.FRONTEND_URL.rstrip("/")
        payload = {
            "amount": str(request.amount),
            "currency": request.currency,
            "client_reference": request.reference,
            "error_url": f"{frontend}/checkout/error?ref={request.reference}",
            "success_url": f"{frontend}/checkout/success?ref={request.reference}",
        }
        data = self._request(
            "POST",
            f"{self._api_url(DEFAULT_API_URL)}/checkout/sessions",
            json=payload,
            headers=self._headers(),
        )
        transaction_id = str(self._require(data, "id", self.name))
        logger.info("payment.provider_initiated", provider=self.name, transaction_id=transaction_id)
        return InitiationResult(
            transaction_id=transaction_id,
            status=self.normalize_status(data.get("when_completed")),
            payment_url=data.get("wave_launch_url", ""),
            raw=data,
        )

    def check_status(self, transaction_id: str) -> StatusResult:
        data = self._request(
            "GET",
            f"{self._api_url(DEFAULT_API_URL)}/checkout/sessions/{transaction_id}",
            headers=self._headers(),
        )
        return StatusResult(
            status=self.normalize_status(self._require(data, "when_completed", self.name)),
            amount=parse_amount(data.get("amount")),
            currency=data.get("currency"),
            raw=data,
        )
