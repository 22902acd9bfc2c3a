"""Tests for the payment provider adapters and their selection."""

from __future__ import annotations

from unittest.mock import MagicMock, patch

import requests
from django.test import SimpleTestCase, override_settings

from apps.payments.providers import (
    FAILED,
    PENDING,
    SUCCESS,
    InitiationRequest,
    get_provider,
    get_webhook_adapter,
)
from apps.payments.providers.base import format_phone_number, parse_amount
from apps.payments.providers.mock import MockProvider
from apps.payments.providers.mtn_money import MTNMoMoProvider
from apps.payments.providers.orange_money import OrangeMoneyProvider
from apps.payments.providers.wave import WaveProvider
from shared.domain.exceptions import ProviderError, ValidationError

LIVE_PROVIDERS = {
    "orange_money": {"api_key": "om-key", "merchant_key": "om-merchant", "api_url": "https://om.test"},
    "mtn_money": {"api_key": "mtn-key", "subscription_key": "sub", "api_url": "https://mtn.test"},
    "wave": {"api_key": "wave-key", "api_url": "https://wave.test"},
}


def fake_response(status_code: int = 200, payload=None) -> MagicMock:
    response = MagicMock()
    response.status_code = status_code
    response.text = "" if payload is None else str(payload)
    if isinstance(payload, Exception):
        response.json.side_effect = payload
    else:
        response.json.return_value = payload
    return response


def request_for(amount: int = 250000, phone: str | None = "07 00 00 00 01") -> InitiationRequest:
    return InitiationRequest(amount=amount, currency="XOF", reference="42", description="Booking #42", phone=phone)


class PhoneAndAmountTests(SimpleTestCase):
    def test_phone_gets_country_code(self) -> None:
        self.assertEqual(format_phone_number("07 00-00-00 01"), "2250700000001")

    def test_phone_with_country_code_kept(self) -> None:
        self.assertEqual(format_phone_number("+225 0700000001"), "2250700000001")

    def test_explicit_country_code(self) -> None:
        self.assertEqual(format_phone_number("770000000", country_code="221"), "221770000000")

    def test_amount_parsing(self) -> None:
        self.assertEqual(parse_amount("250000"), 250000)
        self.assertEqual(parse_amount(250000.0), 250000)
        self.assertIsNone(parse_amount(None))
        with self.assertRaises(ProviderError):
            parse_amount("lots")


class StatusVocabularyTests(SimpleTestCase):
    def test_orange_money(self) -> None:
        self.assertEqual(OrangeMoneyProvider.normalize_status("INITIATED"), PENDING)
        self.assertEqual(OrangeMoneyProvider.normalize_status("SUCCESS"), SUCCESS)
        self.assertEqual(OrangeMoneyProvider.normalize_status("failed"), FAILED)

    def test_mtn(self) -> None:
        self.assertEqual(MTNMoMoProvider.normalize_status("SUCCESSFUL"), SUCCESS)
        self.assertEqual(MTNMoMoProvider.normalize_status("FAILED"), FAILED)

    def test_wave(self) -> None:
        self.assertEqual(WaveProvider.normalize_status("succeeded"), SUCCESS)
        self.assertEqual(WaveProvider.normalize_status("PENDING"), PENDING)

    def test_unknown_status_stays_pending(self) -> None:
        self.assertEqual(WaveProvider.normalize_status("EXPIRED"), PENDING)
        self.assertEqual(WaveProvider.normalize_status(None), PENDING)

    def test_reported_status_accepts_normalised_values(self) -> None:
        self.assertEqual(MTNMoMoProvider.normalize_reported("success"), SUCCESS)
        self.assertEqual(MTNMoMoProvider.normalize_reported("SUCCESSFUL"), SUCCESS)
        self.assertEqual(OrangeMoneyProvider.normalize_reported("FAILED"), FAILED)


@override_settings(PAYMENT_PROVIDERS=LIVE_PROVIDERS, API_URL="https://api.test")
class OrangeMoneyTests(SimpleTestCase):
    def setUp(self) -> None:
        self.provider = OrangeMoneyProvider(LIVE_PROVIDERS["orange_money"])

    def test_initiate(self) -> None:
        with patch.object(requests.Session, "request") as request:
            request.return_value = fake_response(201, {"transactionId": "OM123", "status": "INITIATED"})
            result = self.provider.initiate(request_for())

        self.assertEqual(result.transaction_id, "OM123")
        self.assertEqual(result.status, PENDING)
        method, url = request.call_args.args
        self.assertEqual((method, url), ("POST", "https://om.test/webpayment"))
        body = request.call_args.kwargs["json"]
        self.assertEqual(body["amount"], 250000)
        self.assertEqual(body["phone"], "2250700000001")
        self.assertEqual(body["callbackUrl"], "https://api.test/api/v1/payments/webhook/orange_money/")
        self.assertEqual(request.call_args.kwargs["headers"]["Authorization"], "Bearer om-key")

    def test_missing_transaction_id(self) -> None:
        with patch.object(requests.Session, "request", return_value=fake_response(200, {"status": "INITIATED"})):
            with self.assertRaises(ProviderError):
                self.provider.initiate(request_for())

    def test_http_error(self) -> None:
        with patch.object(requests.Session, "request", return_value=fake_response(500, {"error": "boom"})):
            with self.assertRaises(ProviderError):
                self.provider.initiate(request_for())

    def test_network_error(self) -> None:
        with patch.object(requests.Session, "request", side_effect=requests.ConnectionError("down")):
            with self.assertRaises(ProviderError):
                self.provider.check_status("OM123")

    def test_malformed_body(self) -> None:
        with patch.object(requests.Session, "request", return_value=fake_response(200, ValueError("no json"))):
            with self.assertRaises(ProviderError):
                self.provider.check_status("OM123")

    def test_check_status(self) -> None:
        payload = {"status": "SUCCESS", "amount": "250000", "currency": "XOF"}
        with patch.object(requests.Session, "request", return_value=fake_response(200, payload)) as request:
            result = self.provider.check_status("OM123")

        self.assertEqual(request.call_args.args, ("GET", "https://om.test/transactions/OM123"))
        self.assertEqual(result.status, SUCCESS)
        self.assertEqual(result.amount, 250000)
        self.assertEqual(result.currency, "XOF")


class MTNMoMoTests(SimpleTestCase):
    def setUp(self) -> None:
        self.provider = MTNMoMoProvider(LIVE_PROVIDERS["mtn_money"])

    def test_initiate_accepts_empty_202(self) -> None:
        with patch.object(requests.Session, "request", return_value=fake_response(202, ValueError())) as request:
            result = self.provider.initiate(request_for())

        headers = request.call_args.kwargs["headers"]
        self.assertEqual(result.transaction_id, headers["X-Reference-Id"])
        self.assertEqual(result.status, PENDING)
        self.assertEqual(request.call_args.kwargs["json"]["amount"], "250000")
        self.assertEqual(request.call_args.kwargs["json"]["payer"]["partyId"], "2250700000001")

    def test_check_status(self) -> None:
        payload = {"status": "FAILED", "amount": "250000", "currency": "XOF"}
        with patch.object(requests.Session, "request", return_value=fake_response(200, payload)) as request:
            result = self.provider.check_status("ref-1")

        self.assertEqual(request.call_args.args[1], "https://mtn.test/collection/v1_0/requesttopay/ref-1")
        self.assertEqual(result.status, FAILED)


@override_settings(FRONTEND_URL="https://front.test/")
class WaveTests(SimpleTestCase):
    def setUp(self) -> None:
        self.provider = WaveProvider(LIVE_PROVIDERS["wave"])

    def test_initiate_returns_launch_url(self) -> None:
        payload = {"id": "cos-1", "when_completed": None, "wave_launch_url": "https://pay.wave.com/c/cos-1"}
        with patch.object(requests.Session, "request", return_value=fake_response(200, payload)) as request:
            result = self.provider.initiate(request_for(phone=None))

        self.assertEqual(result.transaction_id, "cos-1")
        self.assertEqual(result.payment_url, "https://pay.wave.com/c/cos-1")
        body = request.call_args.kwargs["json"]
        self.assertEqual(body["success_url"], "https://front.test/checkout/success?ref=42")

    def test_check_status(self) -> None:
        payload = {"id": "cos-1", "when_completed": "SUCCEEDED", "amount": "250000", "currency": "XOF"}
        with patch.object(requests.Session, "request", return_value=fake_response(200, payload)):
            result = self.provider.check_status("cos-1")
        self.assertEqual(result.status, SUCCESS)
        self.assertEqual(result.amount, 250000)


class MockProviderTests(SimpleTestCase):
    def test_initiate_is_pending(self) -> None:
        result = MockProvider("wave").initiate(request_for(phone=None))
        self.assertTrue(result.transaction_id.startswith("WAVE_MOCK_"))
        self.assertTrue(result.transaction_id.endswith("_42"))
        self.assertEqual(result.status, PENDING)
        self.assertEqual(result.payment_url, "https://pay.wave.com/mock/42")

    def test_status_is_deterministic(self) -> None:
        provider = MockProvider("orange_money")
        first = provider.check_status("ORANGE_MONEY_MOCK_abc_1").status
        self.assertEqual(provider.check_status("ORANGE_MONEY_MOCK_abc_1").status, first)
        self.assertIn(first, (PENDING, SUCCESS))

    @override_settings(PAYMENTS_MOCK_SUCCESS_RATE=1.0)
    def test_full_success_rate(self) -> None:
        self.assertEqual(MockProvider().check_status("any").status, SUCCESS)

    @override_settings(PAYMENTS_MOCK_SUCCESS_RATE=0.0)
    def test_zero_success_rate(self) -> None:
        self.assertEqual(MockProvider().check_status("any").status, PENDING)


class ProviderSelectionTests(SimpleTestCase):
    def test_unknown_method(self) -> None:
        with self.assertRaises(ValidationError):
            get_provider("cash")

    @override_settings(PAYMENT_PROVIDERS=LIVE_PROVIDERS)
    def test_live_adapter_when_configured(self) -> None:
        self.assertIsInstance(get_provider("orange_money"), OrangeMoneyProvider)
        self.assertIsInstance(get_provider("mtn_money"), MTNMoMoProvider)
        self.assertIsInstance(get_provider("wave"), WaveProvider)

    @override_settings(PAYMENT_PROVIDERS=LIVE_PROVIDERS)
    def test_pinned_mock_adapter(self) -> None:
        provider = get_provider("wave", "mock")
        self.assertIsInstance(provider, MockProvider)
        self.assertEqual(provider.method, "wave")

    def test_mock_fallback_without_credentials(self) -> None:
        self.assertIsInstance(get_provider("orange_money"), MockProvider)
        self.assertIsInstance(get_provider("card"), MockProvider)

    @override_settings(PAYMENTS_ALLOW_MOCK=False)
    def test_no_fallback_when_mock_disabled(self) -> None:
        with self.assertRaises(ProviderError):
            get_provider("orange_money")
        with self.assertRaises(ProviderError):
            get_provider("card")
        with self.assertRaises(ProviderError):
            get_provider("wave", "mock")

    def test_webhook_adapter_lookup(self) -> None:
        self.assertIs(get_webhook_adapter("mtn-money"), MTNMoMoProvider)
        self.assertIs(get_webhook_adapter("orange_money"), OrangeMoneyProvider)
        self.assertIs(get_webhook_adapter("mock"), MockProvider)
        self.assertIsNone(get_webhook_adapter("paypal"))

    @override_settings(PAYMENTS_ALLOW_MOCK=False)
    def test_mock_webhook_adapter_hidden_when_mock_disabled(self) -> None:
        self.assertIsNone(get_webhook_adapter("mock"))
        self.assertIs(get_webhook_adapter("wave"), WaveProvider)
