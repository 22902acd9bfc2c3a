"""
Payment Reconciler

Initiates payments with providers and folds provider-reported outcomes
(webhooks or polling) back into payment and booking state.

Guarantees:
- Provider calls never run inside a database transaction
- A payment leaves ``pending`` at most once (compare-and-set UPDATE)
- At most one successful payment per booking (partial unique constraint)
- A settled payment confirms its booking in the same transaction
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional

import structlog  # type: ignore
from django.conf import settings  # type: ignore
from django.db import IntegrityError, transaction  # type: ignore
from django.utils import timezone  # type: ignore

from apps.bookings.application.command_handlers import confirm_paid_booking
from apps.bookings.models import Booking
from apps.payments.domain.events import PaymentFailed, PaymentSucceeded
from apps.payments.models import Payment, PaymentEvent
from apps.payments.providers import (
    CONTACT_METHODS,
    FAILED,
    PAYMENT_METHODS,
    PENDING,
    SUCCESS,
    InitiationRequest,
    get_provider,
)
from shared.application.uow import DjangoUnitOfWork
from shared.domain.exceptions import (
    AmountMismatchError,
    ConflictError,
    ForbiddenError,
    NotFoundError,
    ValidationError,
)

logger = structlog.get_logger(__name__)

RETRY_FAILURE_REASON = "superseded by retry"


class PaymentReconciler:
    """Application service for the payment lifecycle."""

    def __init__(self, provider_factory=get_provider):
        self.provider_factory = provider_factory

    # ===== Initiation =====

    def initiate(
        self,
        booking_id: int,
        method: str,
        payer_contact: Optional[str] = None,
        actor=None,
    ) -> Payment:
        """
        Start a payment for a booking

        Raises:
            ValidationError: unknown method or missing payer contact
            NotFoundError: unknown booking
            ForbiddenError: actor is neither the advertiser nor an admin
            ConflictError: booking closed, already paid or out of attempts
            ProviderError: provider refused or could not be reached
        """
        booking, contact = self._prepare(booking_id, method, payer_contact, actor)

        provider = self.provider_factory(method)
        result = provider.initiate(InitiationRequest(
            amount=booking.total_price,
            currency=booking.currency,
            reference=str(booking.pk),
            description=f"Booking #{booking.pk} - {booking.listing.title}"[:120],
            phone=contact if method in CONTACT_METHODS else None,
        ))

        metadata: Dict[str, Any] = {}
        if result.payment_url:
            metadata["payment_url"] = result.payment_url

        with transaction.atomic():
            payment = Payment.objects.create(
                booking=booking,
                amount=booking.total_price,
                currency=booking.currency,
                method=method,
                provider=provider.name,
                transaction_id=result.transaction_id,
                status=Payment.Status.PENDING,
                metadata=metadata,
            )
            PaymentEvent.objects.create(
                payment=payment,
                event=PaymentEvent.Kind.INITIATED,
                status=payment.status,
                payload={"provider_status": result.status, **result.raw},
            )

        logger.info(
            "payment.initiated",
            payment_id=payment.pk,
            booking_id=booking.pk,
            method=method,
            provider=provider.name,
            transaction_id=payment.transaction_id,
            amount=payment.amount,
        )
        return payment

    # ===== Reconciliation =====

    def reconcile(
        self,
        transaction_id: str,
        reported_status: str,
        reported_amount: int,
        reported_currency: Optional[str] = None,
        source: str = PaymentEvent.Kind.WEBHOOK,
        payload: Optional[Dict[str, Any]] = None,
        expected_provider: Optional[str] = None,
    ) -> Payment:
        """
        Apply a provider-reported outcome to a payment

        Settled payments are returned unchanged. A mismatching amount or
        currency raises AmountMismatchError and changes nothing. With
        expected_provider set, a payment held by another provider is
        reported as not found.
        """
        if reported_status not in (PENDING, SUCCESS, FAILED):
            raise ValidationError(f"Unknown payment status '{reported_status}'", status=reported_status)

        try:
            payment = Payment.objects.get(transaction_id=transaction_id)
        except Payment.DoesNotExist:
            logger.warning("payment.reconcile_unknown_transaction", transaction_id=transaction_id)
            raise NotFoundError(f"Payment with transaction {transaction_id} not found")

        if expected_provider is not None and payment.provider != expected_provider:
            logger.warning(
                "payment.reconcile_provider_mismatch",
                transaction_id=transaction_id,
                expected=expected_provider,
                provider=payment.provider,
            )
            raise NotFoundError(f"Payment with transaction {transaction_id} not found")

        log = logger.bind(payment_id=payment.pk, transaction_id=transaction_id, source=source)

        if not payment.is_pending:
            log.info("payment.already_settled", status=payment.status)
            return payment

        if int(reported_amount) != payment.amount:
            log.error("payment.amount_mismatch", expected=payment.amount, received=reported_amount)
            raise AmountMismatchError(
                "Amount mismatch",
                expected=payment.amount,
                received=reported_amount,
            )
        if reported_currency and reported_currency.upper() != payment.currency:
            log.error("payment.currency_mismatch", expected=payment.currency, received=reported_currency)
            raise AmountMismatchError(
                "Currency mismatch",
                expected=payment.currency,
                received=reported_currency,
            )

        with DjangoUnitOfWork() as uow:
            PaymentEvent.objects.create(
                payment=payment,
                event=source,
                status=reported_status,
                payload=payload or {},
            )
            if reported_status == PENDING:
                return payment

            if not self._compare_and_set(payment, reported_status):
                payment.refresh_from_db()
                log.info("payment.reconcile_lost_race", status=payment.status)
                return payment

            payment.refresh_from_db()
            PaymentEvent.objects.create(
                payment=payment,
                event=PaymentEvent.Kind.RECONCILED,
                status=payment.status,
                payload={"source": source},
            )

            if payment.status == Payment.Status.SUCCESS:
                booking = confirm_paid_booking(payment.booking_id)
                uow.add_event(PaymentSucceeded(
                    aggregate_id=payment.pk,
                    payment_id=payment.pk,
                    booking_id=booking.pk,
                    snapshot=self._snapshot(payment, booking),
                ))
            else:
                booking = payment.booking
                uow.add_event(PaymentFailed(
                    aggregate_id=payment.pk,
                    payment_id=payment.pk,
                    booking_id=booking.pk,
                    snapshot=self._snapshot(payment, booking),
                    reason=payment.failure_reason,
                ))

        log.info("payment.reconciled", status=payment.status, booking_id=payment.booking_id)
        return payment

    def _compare_and_set(self, payment: Payment, new_status: str) -> bool:
        """Move a payment out of pending; False when someone else already did."""
        now = timezone.now()
        changes: Dict[str, Any] = {"status": new_status, "updated_at": now}
        if new_status == SUCCESS:
            changes["settled_at"] = now
        else:
            changes["failure_reason"] = "reported failed by provider"

        try:
            with transaction.atomic():
                updated = Payment.objects.filter(pk=payment.pk, status=Payment.Status.PENDING).update(**changes)
        except IntegrityError as exc:
            raise ConflictError(
                f"Booking {payment.booking_id} already has a successful payment",
                booking_id=payment.booking_id,
            ) from exc
        return updated == 1

    def check_status(self, payment_id: int, actor=None) -> Payment:
        """
        Poll the provider for a pending payment

        ProviderError propagates and leaves the payment pending.
        """
        payment = self._get_payment(payment_id)
        if actor is not None:
            self._ensure_stakeholder(payment.booking, actor)

        if not payment.transaction_id:
            raise NotFoundError(f"Payment {payment_id} has no provider transaction")
        if not payment.is_pending:
            return payment

        provider = self.provider_factory(payment.method, payment.provider)
        result = provider.check_status(payment.transaction_id)
        reported_amount = result.amount if result.amount is not None else payment.amount

        return self.reconcile(
            payment.transaction_id,
            result.status,
            reported_amount,
            reported_currency=result.currency,
            source=PaymentEvent.Kind.POLL,
            payload=result.raw,
        )

    # ===== Retry =====

    def retry(
        self,
        booking_id: int,
        method: str,
        payer_contact: Optional[str] = None,
        actor=None,
    ) -> Payment:
        """
        Fail every pending payment of the booking, then initiate a new one

        A retry that initiate would refuse is refused before any pending
        payment is touched.
        """
        booking, _ = self._prepare(booking_id, method, payer_contact, actor)

        with transaction.atomic():
            superseded = list(
                Payment.objects.select_for_update().filter(booking=booking, status=Payment.Status.PENDING)
            )
            for payment in superseded:
                updated = Payment.objects.filter(pk=payment.pk, status=Payment.Status.PENDING).update(
                    status=Payment.Status.FAILED,
                    failure_reason=RETRY_FAILURE_REASON,
                    updated_at=timezone.now(),
                )
                if updated:
                    PaymentEvent.objects.create(
                        payment=payment,
                        event=PaymentEvent.Kind.RETRY_SUPERSEDED,
                        status=Payment.Status.FAILED,
                        payload={"reason": RETRY_FAILURE_REASON},
                    )

        if superseded:
            logger.info(
                "payment.retry_superseded",
                booking_id=booking.pk,
                payment_ids=[payment.pk for payment in superseded],
            )

        return self.initiate(booking.pk, method, payer_contact=payer_contact, actor=actor)

    # ===== Queries =====

    def get_payment(self, payment_id: int, actor) -> Payment:
        payment = self._get_payment(payment_id)
        self._ensure_stakeholder(payment.booking, actor)
        return payment

    def list_for_booking(self, booking_id: int, actor) -> List[Payment]:
        booking = self._get_booking(booking_id)
        self._ensure_stakeholder(booking, actor)
        return list(booking.payments.order_by("-created_at", "-pk"))

    # ===== Helpers =====

    def _prepare(self, booking_id: int, method: str, payer_contact: Optional[str], actor):
        """Checks shared by initiate and retry; returns the booking and payer contact."""
        if method not in PAYMENT_METHODS:
            raise ValidationError(f"Unknown payment method '{method}'", method=method)

        booking = self._get_booking(booking_id)
        if actor is not None:
            self._ensure_payer(booking, actor)
        self._ensure_payable(booking)

        contact = payer_contact or booking.advertiser.phone
        if method in CONTACT_METHODS and not contact:
            raise ValidationError(
                "Phone number required for mobile money payment",
                method=method,
            )
        return booking, contact

    @staticmethod
    def _get_booking(booking_id: int) -> Booking:
        try:
            return Booking.objects.select_related("listing", "listing__owner", "advertiser").get(pk=booking_id)
        except Booking.DoesNotExist:
            raise NotFoundError(f"Booking {booking_id} not found")

    @staticmethod
    def _get_payment(payment_id: int) -> Payment:
        try:
            return Payment.objects.select_related(
                "booking", "booking__listing", "booking__listing__owner", "booking__advertiser"
            ).get(pk=payment_id)
        except Payment.DoesNotExist:
            raise NotFoundError(f"Payment {payment_id} not found")

    @staticmethod
    def _ensure_payer(booking: Booking, actor) -> None:
        if actor.pk != booking.advertiser_id and not actor.is_admin():
            raise ForbiddenError("Only the advertiser can pay for this booking")

    @staticmethod
    def _ensure_stakeholder(booking: Booking, actor) -> None:
        if not booking.is_stakeholder(actor):
            raise ForbiddenError("Not allowed to view payments of this booking")

    @staticmethod
    def _ensure_payable(booking: Booking) -> None:
        if booking.is_terminal:
            raise ConflictError(
                f"Cannot create payment for a {booking.status} booking",
                booking_id=booking.pk,
                status=booking.status,
            )
        if booking.payments.filter(status=Payment.Status.SUCCESS).exists():
            raise ConflictError("Booking already has a successful payment", booking_id=booking.pk)

        attempts = booking.payments.count()
        if attempts >= settings.PAYMENTS_MAX_ATTEMPTS:
            raise ConflictError(
                f"Payment attempts exhausted for booking {booking.pk}",
                booking_id=booking.pk,
                attempts=attempts,
            )

    @staticmethod
    def _snapshot(payment: Payment, booking: Booking) -> Dict[str, Any]:
        snapshot = booking.snapshot()
        snapshot.update({
            "payment_id": payment.pk,
            "payment_status": payment.status,
            "payment_method": payment.method,
            "amount": payment.amount,
            "transaction_id": payment.transaction_id,
        })
        return snapshot
