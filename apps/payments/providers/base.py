"""
Payment provider contract.

Adapters talk to external mobile-money APIs and translate their native
vocabularies into ``pending``, ``success`` or ``failed``. All network
failures surface as ``ProviderError``.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Any, Dict, Mapping, Optional

import requests
import structlog  # type: ignore
from django.conf import settings  # type: ignore
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from shared.domain.exceptions import ProviderError

logger = structlog.get_logger(__name__)

PENDING = "pending"
SUCCESS = "success"
FAILED = "failed"

# Methods that push a payment request to the payer's phone
CONTACT_METHODS = frozenset({"orange_money", "mtn_money"})


@dataclass
class InitiationRequest:
    amount: int
    currency: str
    reference: str
    description: str = ""
    phone: Optional[str] = None


@dataclass
class InitiationResult:
    transaction_id: str
    status: str = PENDING
    payment_url: str = ""
    raw: Dict[str, Any] = field(default_factory=dict)


@dataclass
class StatusResult:
    status: str
    amount: Optional[int] = None
    currency: Optional[str] = None
    raw: Dict[str, Any] = field(default_factory=dict)


def format_phone_number(phone: str, country_code: Optional[str] = None) -> str:
    """Keep digits only and prefix the country code when missing."""
    country_code = country_code or settings.PAYMENTS_PHONE_COUNTRY_CODE
    cleaned = re.sub(r"\D", "", phone or "")
    if not cleaned.startswith(country_code):
        cleaned = f"{country_code}{cleaned}"
    return cleaned


def parse_amount(value: Any) -> Optional[int]:
    """Provider amount (int, numeric string or float) as integer minor units."""
    if value is None or value == "":
        return None
    try:
        return int(round(float(value)))
    except (TypeError, ValueError):
        raise ProviderError(f"Malformed amount in provider response: {value!r}")


class PaymentProvider:
    """Base class for provider adapters."""

    name = ""
    # Native status (upper-cased) -> normalised status
    STATUS_MAP: Mapping[str, str] = {}

    def __init__(self, config: Optional[Mapping[str, Any]] = None):
        self.config = dict(config or {})
        self.timeout = settings.PAYMENTS_PROVIDER_TIMEOUT
        self._session: Optional[requests.Session] = None

    # ----- contract -----

    def initiate(self, request: InitiationRequest) -> InitiationResult:
        raise NotImplementedError

    def check_status(self, transaction_id: str) -> StatusResult:
        raise NotImplementedError

    @classmethod
    def normalize_status(cls, raw: Any) -> str:
        """Map a native status to pending/success/failed; unknown values stay pending."""
        return cls.STATUS_MAP.get(str(raw or "").strip().upper(), PENDING)

    @classmethod
    def normalize_reported(cls, raw: Any) -> str:
        """Webhook status: either already normalised or in the native vocabulary."""
        value = str(raw or "").strip().lower()
        if value in (PENDING, SUCCESS, FAILED):
            return value
        return cls.normalize_status(raw)

    # ----- HTTP helpers -----

    @property
    def session(self) -> requests.Session:
        if self._session is None:
            self._session = self._build_session()
        return self._session

    def _build_session(self) -> requests.Session:
        session = requests.Session()
        retry = Retry(
            total=settings.PAYMENTS_PROVIDER_RETRIES,
            backoff_factor=0.5,
            status_forcelist=(429, 500, 502, 503, 504),
            allowed_methods=frozenset({"GET"}),
            raise_on_status=False,
        )
        adapter = HTTPAdapter(max_retries=retry)
        session.mount("https://", adapter)
        session.mount("http://", adapter)
        return session

    def _request(
        self,
        method: str,
        url: str,
        *,
        expected=(200, 201),
        parse_json: bool = True,
        **kwargs: Any,
    ) -> Dict[str, Any]:
        try:
            response = self.session.request(method, url, timeout=self.timeout, **kwargs)
        except requests.exceptions.RequestException as exc:
            logger.error("payment.provider_unreachable", provider=self.name, url=url, error=str(exc))
            raise ProviderError(f"{self.name} unreachable: {exc}", provider=self.name) from exc

        if response.status_code not in expected:
            logger.error(
                "payment.provider_http_error",
                provider=self.name,
                url=url,
                status=response.status_code,
                body=response.text[:500],
            )
            raise ProviderError(
                f"{self.name} API error: {response.status_code}",
                provider=self.name,
                status=response.status_code,
            )

        if not parse_json:
            return {}
        try:
            data = response.json()
        except ValueError as exc:
            raise ProviderError(f"{self.name} returned a malformed body", provider=self.name) from exc
        if not isinstance(data, dict):
            raise ProviderError(f"{self.name} returned a malformed body", provider=self.name)
        return data

    @staticmethod
    def _require(data: Mapping[str, Any], key: str, provider: str) -> Any:
        value = data.get(key)
        if value in (None, ""):
            raise ProviderError(f"{provider} response is missing '{key}'", provider=provider)
        return value

    def _api_url(self, default: str) -> str:
        return (self.config.get("api_url") or default).rstrip("/")
