"""Provider webhook authentication."""

from __future__ import annotations

import hashlib
import hmac

from django.conf import settings  # type: ignore


def webhook_secret(provider: str) -> str:
    return settings.PAYMENT_WEBHOOK_SECRETS.get(provider, "") or ""


def sign_payload(body: bytes, secret: str) -> str:
    digest = hmac.new(secret.encode("utf-8"), body, hashlib.sha256).hexdigest()
    return f"sha256={digest}"


def verify_webhook_signature(provider: str, body: bytes, signature: str | None) -> bool:
    """
    Check ``X-Signature: sha256=<hex>`` over the raw body.

    Providers without a configured secret are accepted unsigned.
    """
    secret = webhook_secret(provider)
    if not secret:
        return True
    if not signature:
        return False
    return hmac.compare_digest(sign_payload(body, secret), signature.strip())
