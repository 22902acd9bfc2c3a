"""Tests for payment initiation and reconciliation."""

from __future__ import annotations

from datetime import timedelta
from unittest.mock import MagicMock, patch

from django.test import TestCase, override_settings
from django.utils import timezone

from apps.bookings.application.command_handlers import (
    ChangeBookingStatusCommand,
    ChangeBookingStatusHandler,
    CreateBookingCommand,
    CreateBookingHandler,
)
from apps.bookings.models import Booking
from apps.listings.models import Listing
from apps.payments.application.reconciler import PaymentReconciler
from apps.payments.models import Payment, PaymentEvent
from apps.payments.providers import InitiationResult, StatusResult
from apps.users.models import User
from shared.domain.exceptions import (
    AmountMismatchError,
    ConflictError,
    ForbiddenError,
    NotFoundError,
    ProviderError,
    ValidationError,
)


class ReconcilerTestCase(TestCase):
    def setUp(self) -> None:
        self.owner = User.objects.create_user(
            email="owner@example.com", password="pass", role=User.RoleChoices.OWNER
        )
        self.advertiser = User.objects.create_user(
            email="advertiser@example.com", password="pass", phone="+2250707070707"
        )
        self.outsider = User.objects.create_user(email="outsider@example.com", password="pass")
        self.listing = Listing.objects.create(
            owner=self.owner,
            title="Écran LED Cocody",
            address="Rue des Jardins",
            city="Abidjan",
            price_per_month=250000,
            space_type=Listing.SpaceType.SCREEN,
        )
        start = timezone.localdate() + timedelta(days=5)
        self.booking = CreateBookingHandler().handle(CreateBookingCommand(
            listing_id=self.listing.pk,
            advertiser=self.advertiser,
            start_date=start,
            end_date=start + timedelta(days=30),
        ))
        self.reconciler = PaymentReconciler()

    def pay(self, method: str = "orange_money", **kwargs) -> Payment:
        kwargs.setdefault("actor", self.advertiser)
        return self.reconciler.initiate(self.booking.pk, method, **kwargs)


class InitiateTests(ReconcilerTestCase):
    def test_creates_pending_payment_for_booking_total(self) -> None:
        payment = self.pay()

        self.assertEqual(payment.status, Payment.Status.PENDING)
        self.assertEqual(payment.amount, 250000)
        self.assertEqual(payment.currency, "XOF")
        self.assertEqual(payment.provider, "mock")
        self.assertTrue(payment.transaction_id.startswith("ORANGE_MONEY_MOCK_"))
        self.assertEqual(
            list(payment.events.values_list("event", flat=True)),
            [PaymentEvent.Kind.INITIATED],
        )

    def test_wave_keeps_payment_url(self) -> None:
        payment = self.pay("wave")
        self.assertEqual(payment.payment_url, f"https://pay.wave.com/mock/{self.booking.pk}")

    def test_unknown_method(self) -> None:
        with self.assertRaises(ValidationError):
            self.pay("cash")

    def test_unknown_booking(self) -> None:
        with self.assertRaises(NotFoundError):
            self.reconciler.initiate(999999, "wave", actor=self.advertiser)

    def test_only_advertiser_pays(self) -> None:
        with self.assertRaises(ForbiddenError):
            self.pay(actor=self.owner)

    def test_mobile_money_needs_a_phone(self) -> None:
        self.advertiser.phone = None
        self.advertiser.save()
        with self.assertRaises(ValidationError):
            self.pay("mtn_money")
        self.assertIsInstance(self.pay("mtn_money", payer_contact="0501020304"), Payment)

    def test_closed_booking_rejected(self) -> None:
        ChangeBookingStatusHandler().handle(
            ChangeBookingStatusCommand(self.booking.pk, Booking.Status.CANCELLED, self.advertiser)
        )
        with self.assertRaises(ConflictError):
            self.pay()

    def test_paid_booking_rejected(self) -> None:
        payment = self.pay()
        self.reconciler.reconcile(payment.transaction_id, "success", payment.amount)
        with self.assertRaises(ConflictError):
            self.pay()

    @override_settings(PAYMENTS_MAX_ATTEMPTS=2)
    def test_attempts_are_capped(self) -> None:
        self.pay()
        self.pay()
        with self.assertRaises(ConflictError):
            self.pay()

    def test_provider_failure_writes_nothing(self) -> None:
        provider = MagicMock()
        provider.initiate.side_effect = ProviderError("down")
        reconciler = PaymentReconciler(provider_factory=lambda method, adapter_name=None: provider)

        with self.assertRaises(ProviderError):
            reconciler.initiate(self.booking.pk, "wave", actor=self.advertiser)
        self.assertFalse(Payment.objects.exists())


class ReconcileTests(ReconcilerTestCase):
    def setUp(self) -> None:
        super().setUp()
        self.payment = self.pay()
        self.tx = self.payment.transaction_id

    def test_success_confirms_booking(self) -> None:
        payment = self.reconciler.reconcile(self.tx, "success", 250000, "XOF")

        self.assertEqual(payment.status, Payment.Status.SUCCESS)
        self.assertIsNotNone(payment.settled_at)
        self.booking.refresh_from_db()
        self.assertEqual(self.booking.status, Booking.Status.CONFIRMED)
        self.listing.refresh_from_db()
        self.assertEqual(self.listing.status, Listing.Status.BOOKED)
        self.assertEqual(
            list(payment.events.values_list("event", flat=True)),
            [PaymentEvent.Kind.INITIATED, PaymentEvent.Kind.WEBHOOK, PaymentEvent.Kind.RECONCILED],
        )

    def test_failure_leaves_booking_pending(self) -> None:
        payment = self.reconciler.reconcile(self.tx, "failed", 250000)

        self.assertEqual(payment.status, Payment.Status.FAILED)
        self.assertEqual(payment.failure_reason, "reported failed by provider")
        self.booking.refresh_from_db()
        self.assertEqual(self.booking.status, Booking.Status.PENDING)

    def test_pending_report_changes_nothing(self) -> None:
        payment = self.reconciler.reconcile(self.tx, "pending", 250000)
        self.assertEqual(payment.status, Payment.Status.PENDING)
        self.assertEqual(payment.events.count(), 2)

    def test_duplicate_success_is_idempotent(self) -> None:
        with patch("apps.notifications.handlers.notification_sink") as sink:
            with self.captureOnCommitCallbacks(execute=True):
                self.reconciler.reconcile(self.tx, "success", 250000)
            with self.captureOnCommitCallbacks(execute=True):
                payment = self.reconciler.reconcile(self.tx, "success", 250000)

        self.assertEqual(payment.status, Payment.Status.SUCCESS)
        kinds = [call.args[0] for call in sink.notify.call_args_list]
        self.assertEqual(kinds.count("booking_confirmed"), 1)
        self.assertEqual(kinds.count("payment_success"), 1)

    def test_failure_after_success_ignored(self) -> None:
        self.reconciler.reconcile(self.tx, "success", 250000)
        payment = self.reconciler.reconcile(self.tx, "failed", 250000)
        self.assertEqual(payment.status, Payment.Status.SUCCESS)

    def test_amount_mismatch_changes_nothing(self) -> None:
        with self.assertRaises(AmountMismatchError):
            self.reconciler.reconcile(self.tx, "success", 1000)

        self.payment.refresh_from_db()
        self.assertEqual(self.payment.status, Payment.Status.PENDING)
        self.assertEqual(self.payment.events.count(), 1)
        self.booking.refresh_from_db()
        self.assertEqual(self.booking.status, Booking.Status.PENDING)

    def test_currency_mismatch(self) -> None:
        with self.assertRaises(AmountMismatchError):
            self.reconciler.reconcile(self.tx, "success", 250000, "EUR")

    def test_unknown_transaction(self) -> None:
        with self.assertRaises(NotFoundError):
            self.reconciler.reconcile("NOPE", "success", 250000)

    def test_unknown_status(self) -> None:
        with self.assertRaises(ValidationError):
            self.reconciler.reconcile(self.tx, "SUCCESSFUL", 250000)

    def test_provider_must_match_payment(self) -> None:
        with self.assertRaises(NotFoundError):
            self.reconciler.reconcile(self.tx, "success", 250000, expected_provider="orange_money")

        self.payment.refresh_from_db()
        self.assertEqual(self.payment.status, Payment.Status.PENDING)
        self.assertEqual(self.payment.events.count(), 1)

        payment = self.reconciler.reconcile(self.tx, "success", 250000, expected_provider="mock")
        self.assertEqual(payment.status, Payment.Status.SUCCESS)

    def test_second_success_for_booking_conflicts(self) -> None:
        other = Payment.objects.create(
            booking=self.booking,
            amount=250000,
            currency="XOF",
            method=Payment.Method.WAVE,
            provider="mock",
            transaction_id="WAVE_MOCK_other",
        )
        self.reconciler.reconcile(self.tx, "success", 250000)

        with self.assertRaises(ConflictError):
            self.reconciler.reconcile(other.transaction_id, "success", 250000)
        self.assertEqual(self.booking.payments.filter(status=Payment.Status.SUCCESS).count(), 1)

    def test_payment_after_cancellation_keeps_booking_cancelled(self) -> None:
        ChangeBookingStatusHandler().handle(
            ChangeBookingStatusCommand(self.booking.pk, Booking.Status.CANCELLED, self.advertiser)
        )
        payment = self.reconciler.reconcile(self.tx, "success", 250000)

        self.assertEqual(payment.status, Payment.Status.SUCCESS)
        self.booking.refresh_from_db()
        self.assertEqual(self.booking.status, Booking.Status.CANCELLED)

    def test_failure_notifies_advertiser(self) -> None:
        with patch("apps.notifications.handlers.notification_sink") as sink:
            with self.captureOnCommitCallbacks(execute=True):
                self.reconciler.reconcile(self.tx, "failed", 250000)

        sink.notify.assert_called_once()
        kind, snapshot = sink.notify.call_args.args
        self.assertEqual(kind, "payment_failed")
        self.assertEqual(snapshot["payment_id"], self.payment.pk)


class CheckStatusTests(ReconcilerTestCase):
    def test_poll_settles_payment(self) -> None:
        payment = self.pay()
        provider = MagicMock()
        provider.check_status.return_value = StatusResult(status="success", amount=250000, currency="XOF")
        factory = MagicMock(return_value=provider)

        payment = PaymentReconciler(provider_factory=factory).check_status(payment.pk, actor=self.owner)

        factory.assert_called_once_with("orange_money", "mock")
        self.assertEqual(payment.status, Payment.Status.SUCCESS)
        self.assertEqual(payment.events.filter(event=PaymentEvent.Kind.POLL).count(), 1)

    def test_poll_without_amount_uses_stored_amount(self) -> None:
        payment = self.pay()
        provider = MagicMock()
        provider.check_status.return_value = StatusResult(status="pending")
        reconciler = PaymentReconciler(provider_factory=lambda method, adapter_name=None: provider)

        payment = reconciler.check_status(payment.pk)
        self.assertEqual(payment.status, Payment.Status.PENDING)

    @override_settings(PAYMENTS_MOCK_SUCCESS_RATE=1.0)
    def test_poll_through_mock(self) -> None:
        payment = self.reconciler.check_status(self.pay().pk, actor=self.advertiser)
        self.assertEqual(payment.status, Payment.Status.SUCCESS)

    def test_provider_error_leaves_payment_pending(self) -> None:
        payment = self.pay()
        provider = MagicMock()
        provider.check_status.side_effect = ProviderError("timeout")
        reconciler = PaymentReconciler(provider_factory=lambda method, adapter_name=None: provider)

        with self.assertRaises(ProviderError):
            reconciler.check_status(payment.pk)
        payment.refresh_from_db()
        self.assertEqual(payment.status, Payment.Status.PENDING)

    def test_settled_payment_not_polled(self) -> None:
        payment = self.pay()
        self.reconciler.reconcile(payment.transaction_id, "failed", 250000)
        factory = MagicMock()

        PaymentReconciler(provider_factory=factory).check_status(payment.pk)
        factory.assert_not_called()

    def test_outsider_cannot_poll(self) -> None:
        with self.assertRaises(ForbiddenError):
            self.reconciler.check_status(self.pay().pk, actor=self.outsider)


class RetryTests(ReconcilerTestCase):
    def test_retry_supersedes_pending_payment(self) -> None:
        first = self.pay()
        second = self.reconciler.retry(self.booking.pk, "wave", actor=self.advertiser)

        first.refresh_from_db()
        self.assertEqual(first.status, Payment.Status.FAILED)
        self.assertEqual(first.failure_reason, "superseded by retry")
        self.assertTrue(first.events.filter(event=PaymentEvent.Kind.RETRY_SUPERSEDED).exists())
        self.assertEqual(second.status, Payment.Status.PENDING)
        self.assertEqual(second.method, Payment.Method.WAVE)

    def test_retry_after_success_conflicts(self) -> None:
        payment = self.pay()
        self.reconciler.reconcile(payment.transaction_id, "success", 250000)
        with self.assertRaises(ConflictError):
            self.reconciler.retry(self.booking.pk, "wave", actor=self.advertiser)

    def test_outsider_cannot_retry(self) -> None:
        self.pay()
        with self.assertRaises(ForbiddenError):
            self.reconciler.retry(self.booking.pk, "wave", actor=self.outsider)

    def assert_still_pending(self, payment: Payment) -> None:
        payment.refresh_from_db()
        self.assertEqual(payment.status, Payment.Status.PENDING)
        self.assertFalse(payment.events.filter(event=PaymentEvent.Kind.RETRY_SUPERSEDED).exists())

    @override_settings(PAYMENTS_MAX_ATTEMPTS=1)
    def test_refused_retry_keeps_pending_payment(self) -> None:
        payment = self.pay()
        with self.assertRaises(ConflictError):
            self.reconciler.retry(self.booking.pk, "wave", actor=self.advertiser)
        self.assert_still_pending(payment)

    def test_retry_with_bad_method_or_contact_keeps_pending_payment(self) -> None:
        payment = self.pay()
        with self.assertRaises(ValidationError):
            self.reconciler.retry(self.booking.pk, "cash", actor=self.advertiser)

        self.advertiser.phone = None
        self.advertiser.save()
        with self.assertRaises(ValidationError):
            self.reconciler.retry(self.booking.pk, "mtn_money", actor=self.advertiser)
        self.assert_still_pending(payment)

    def test_retry_on_closed_booking_keeps_pending_payment(self) -> None:
        payment = self.pay()
        ChangeBookingStatusHandler().handle(
            ChangeBookingStatusCommand(self.booking.pk, Booking.Status.REJECTED, self.owner)
        )
        with self.assertRaises(ConflictError):
            self.reconciler.retry(self.booking.pk, "wave", actor=self.advertiser)
        self.assert_still_pending(payment)

    def test_listing_payments_for_stakeholders(self) -> None:
        first = self.pay()
        second = self.reconciler.retry(self.booking.pk, "wave", actor=self.advertiser)

        self.assertEqual(self.reconciler.list_for_booking(self.booking.pk, self.owner), [second, first])
        with self.assertRaises(ForbiddenError):
            self.reconciler.list_for_booking(self.booking.pk, self.outsider)


class ProviderResultTests(ReconcilerTestCase):
    def test_provider_result_recorded_on_initiation(self) -> None:
        provider = MagicMock()
        provider.name = "orange_money"
        provider.initiate.return_value = InitiationResult(
            transaction_id="OM-777", raw={"transactionId": "OM-777", "status": "INITIATED"}
        )
        reconciler = PaymentReconciler(provider_factory=lambda method, adapter_name=None: provider)

        payment = reconciler.initiate(self.booking.pk, "orange_money", actor=self.advertiser)

        self.assertEqual(payment.provider, "orange_money")
        request = provider.initiate.call_args.args[0]
        self.assertEqual(request.amount, 250000)
        self.assertEqual(request.phone, "+2250707070707")
        event = payment.events.get()
        self.assertEqual(event.payload["transactionId"], "OM-777")
