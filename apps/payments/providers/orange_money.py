"""Orange Money Web Payment (Côte d'Ivoire) adapter."""

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
    format_phone_number,
    parse_amount,
)

logger = structlog.get_logger(__name__)

DEFAULT_API_URL = "https://api.orange.com/orange-money-webpay/ci/v1"


class OrangeMoneyProvider(PaymentProvider):
    name = "orange_money"
    STATUS_MAP = {
        "INITIATED": PENDING,
        "PENDING": PENDING,
        "SUCCESS": SUCCESS,
        "FAILED": FAILED,
    }

    def _headers(self) -> dict:
        return {
            "Authorization": f"Bearer {self.config.get('api_key', '')}",
            "X-Merchant-Key": self.config.get("merchant_key", ""),
            "Content-Type": "application/json",
        }

    def initiate(self, request: InitiationRequest) -> InitiationResult:
        payload = {
            "amount": int(request.amount),
            "currency": request.currency,
            "phone": format_phone_number(request.phone or ""),
            "reference": request.reference,
            "description": request.description,
            "callbackUrl": f"{settings.API_URL.rstrip('/')}/api/v1/payments/webhook/orange_money/",
        }
        data = self._request(
            "POST",
            f"{self._api_url(DEFAULT_API_URL)}/webpayment",
            json=payload,
            headers=self._headers(),
        )
        transaction_id = str(self._require(data, "transactionId", self.name))
        status = self.normalize_status(data.get("status"))
        logger.info("payment.provider_initiated", provider=self.name, transaction_id=transaction_id)
        return InitiationResult(transaction_id=transaction_id, status=status, raw=data)

    def check_status(self, transaction_id: str) -> StatusResult:
        data = self._request(
            "GET",
            f"{self._api_url(DEFAULT_API_URL)}/transactions/{transaction_id}",
            headers=self._headers(),
        )
        return StatusResult(
            status=self.normalize_status(self._require(data, "status", self.name)),
            amount=parse_amount(data.get("amount")),
            currency=data.get("currency"),
            raw=data,
        )
