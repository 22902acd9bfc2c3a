"""
Provider selection.

``get_provider(method)`` returns the live adapter for a payment method
when its credentials are configured. Without credentials the mock
adapter is returned only where PAYMENTS_ALLOW_MOCK is enabled.
"""

from __future__ import annotations

from typing import Dict, Type

import structlog  # type: ignore
from django.conf import settings  # type: ignore

from shared.domain.exceptions import ProviderError, ValidationError

from .base import (
    CONTACT_METHODS,
    FAILED,
    PENDING,
    SUCCESS,
    InitiationRequest,
    InitiationResult,
    PaymentProvider,
    StatusResult,
    format_phone_number,
)
from .mock import MockProvider
from .mtn_money import MTNMoMoProvider
from .orange_money import OrangeMoneyProvider
from .wave import WaveProvider

logger = structlog.get_logger(__name__)

PAYMENT_METHODS = ("orange_money", "mtn_money", "wave", "card")

LIVE_ADAPTERS: Dict[str, Type[PaymentProvider]] = {
    "orange_money": OrangeMoneyProvider,
    "mtn_money": MTNMoMoProvider,
    "wave": WaveProvider,
}

WEBHOOK_ADAPTERS: Dict[str, Type[PaymentProvider]] = {
    **LIVE_ADAPTERS,
    "mock": MockProvider,
}

__all__ = [
    "CONTACT_METHODS",
    "FAILED",
    "PENDING",
    "SUCCESS",
    "PAYMENT_METHODS",
    "InitiationRequest",
    "InitiationResult",
    "PaymentProvider",
    "StatusResult",
    "format_phone_number",
    "get_provider",
    "get_webhook_adapter",
]


def get_provider(method: str, adapter_name: str | None = None) -> PaymentProvider:
    """
    Adapter for a payment method

    adapter_name pins the adapter that handled an existing payment, so a
    payment initiated through the mock keeps being polled through it.
    """
    if method not in PAYMENT_METHODS:
        raise ValidationError(f"Unknown payment method '{method}'", method=method)

    if adapter_name == MockProvider.name:
        if not settings.PAYMENTS_ALLOW_MOCK:
            raise ProviderError("Mock payments are disabled", method=method)
        return MockProvider(method)

    config = settings.PAYMENT_PROVIDERS.get(method, {})
    adapter_class = LIVE_ADAPTERS.get(method)
    if adapter_class is not None and config.get("api_key"):
        return adapter_class(config)

    if settings.PAYMENTS_ALLOW_MOCK:
        logger.warning("payment.mock_provider_selected", method=method)
        return MockProvider(method)

    raise ProviderError(f"Payment provider for '{method}' is not configured", method=method)


def get_webhook_adapter(name: str) -> Type[PaymentProvider] | None:
    """
    Adapter class whose vocabulary applies to webhooks posted under name

    The mock adapter only accepts webhooks while mock payments are allowed.
    """
    adapter_class = WEBHOOK_ADAPTERS.get(name.replace("-", "_"))
    if adapter_class is MockProvider and not settings.PAYMENTS_ALLOW_MOCK:
        return None
    return adapter_class
