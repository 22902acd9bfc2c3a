"""MTN Mobile Money collection API adapter."""

from __future__ import annotations

import uuid

import structlog  # type: ignore

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

DEFAULT_API_URL = "https://sandbox.momodeveloper.mtn.com"


class MTNMoMoProvider(PaymentProvider):
    name = "mtn_money"
    STATUS_MAP = {
        "PENDING": PENDING,
        "SUCCESSFUL": SUCCESS,
        "FAILED": FAILED,
    }

    def _headers(self) -> dict:
        return {
            "Authorization": f"Bearer {self.config.get('api_key', '')}",
            "X-Target-Environment": self.config.get("environment") or "sandbox",
            "Ocp-Apim-Subscription-Key": self.config.get("subscription_key", ""),
            "Content-Type": "application/json",
        }

    def initiate(self, request: InitiationRequest) -> InitiationResult:
        # Request-to-pay answers 202 with an empty body; the reference id we
        # send is the transaction id.
        reference_id = str(uuid.uuid4())
        payload = {
            "amount": str(request.amount),
            "currency": request.currency,
            "externalId": request.reference,
            "payer": {
                "partyIdType": "MSISDN",
                "partyId": format_phone_number(request.phone or ""),
            },
            "payerMessage": request.description,
            "payeeNote": f"Booking {request.reference}",
        }
        headers = self._headers()
        headers["X-Reference-Id"] = reference_id
        self._request(
            "POST",
            f"{self._api_url(DEFAULT_API_URL)}/collection/v1_0/requesttopay",
            json=payload,
            headers=headers,
            expected=(200, 201, 202),
            parse_json=False,
        )
        logger.info("payment.provider_initiated", provider=self.name, transaction_id=reference_id)
        return InitiationResult(transaction_id=reference_id, status=PENDING)

    def check_status(self, transaction_id: str) -> StatusResult:
        data = self._request(
            "GET",
            f"{self._api_url(DEFAULT_API_URL)}/collection/v1_0/requesttopay/{transaction_id}",
            headers=self._headers(),
        )
        return StatusResult(
            status=self.normalize_status(self._require(data, "status", self.name)),
            amount=parse_amount(data.get("amount")),
            currency=data.get("currency"),
            raw=data,
        )
