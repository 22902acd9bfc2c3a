"""
Booking Command Handlers

These are the use cases for the booking domain.
They orchestrate domain operations within transactions.

Commands:
- CreateBookingCommand: Reserve a listing for a date range
- ChangeBookingStatusCommand: Move a booking through its state machine
- SignContractCommand: Sign the rental contract of a confirmed booking

System operations:
- confirm_paid_booking: Confirm a booking after its payment settled

Queries:
- list_bookings, get_booking
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Optional

import structlog  # type: ignore
from django.conf import settings  # type: ignore
from django.db import IntegrityError  # type: ignore
from django.utils import timezone  # type: ignore

from apps.bookings.domain import state_machine
from apps.bookings.domain.events import EVENTS_BY_STATUS, BookingConfirmed, BookingCreated
from apps.bookings.domain.pricing import calculate_total_price
from apps.bookings.models import Booking
from apps.bookings.services import (
    conflicting_dates,
    is_listing_available,
    lock_booking,
    lock_listing,
    sync_listing_availability,
)
from apps.listings.models import Listing
from shared.application.uow import DjangoUnitOfWork
from shared.domain.exceptions import (
    ConflictError,
    DomainError,
    ForbiddenError,
    InvalidTransitionError,
    NotFoundError,
    ValidationError,
)

logger = structlog.get_logger(__name__)


# ===== Commands =====

@dataclass
class CreateBookingCommand:
    """
    Command to create a new booking

    When payment_method is set, a payment is initiated once the booking
    has been committed.
    """
    listing_id: int
    advertiser: object
    start_date: date
    end_date: date
    payment_method: Optional[str] = None
    payer_contact: Optional[str] = None


@dataclass
class ChangeBookingStatusCommand:
    """Command to move a booking to another status on behalf of an actor"""
    booking_id: int
    status: str
    actor: object


@dataclass
class SignContractCommand:
    """Command for the advertiser to sign the contract of a confirmed booking"""
    booking_id: int
    actor: object


# ===== Command Handlers =====

class CreateBookingHandler:
    """
    Handler for CreateBooking command

    Double booking prevention:
    1. Start database transaction (atomic)
    2. Lock the listing row (SELECT FOR UPDATE)
    3. Check overlap against pending and confirmed bookings
    4. Insert the booking with its frozen price
    5. Commit, then publish BookingCreated
    6. PostgreSQL EXCLUDE constraint as final safety net
    """

    def __init__(self, reconciler=None):
        self._reconciler = reconciler

    @property
    def reconciler(self):
        if self._reconciler is None:
            from apps.payments.application.reconciler import PaymentReconciler

            self._reconciler = PaymentReconciler()
        return self._reconciler

    def handle(self, command: CreateBookingCommand) -> Booking:
        """
        Handle booking creation

        Returns: Created Booking in status pending

        Raises:
            ForbiddenError: actor may not book
            ValidationError: bad date range
            NotFoundError: unknown listing
            ConflictError: listing not active or dates taken
        """
        advertiser = command.advertiser
        if not (advertiser.is_advertiser() or advertiser.is_admin()):
            raise ForbiddenError("Only advertisers can book listings")

        if command.start_date >= command.end_date:
            raise ValidationError(
                "End date must be after start date",
                start_date=command.start_date.isoformat(),
                end_date=command.end_date.isoformat(),
            )
        if command.start_date < timezone.localdate():
            raise ValidationError(
                "Start date cannot be in the past",
                start_date=command.start_date.isoformat(),
            )

        try:
            with DjangoUnitOfWork() as uow:
                try:
                    listing = lock_listing(command.listing_id)
                except Listing.DoesNotExist:
                    raise NotFoundError(f"Listing {command.listing_id} not found")

                if listing.status != Listing.Status.ACTIVE:
                    raise ConflictError(
                        f"Listing {listing.pk} is not available for booking",
                        listing_status=listing.status,
                    )

                if not is_listing_available(listing, command.start_date, command.end_date):
                    conflicts = conflicting_dates(listing, command.start_date, command.end_date)
                    raise ConflictError(
                        f"Listing {listing.pk} is already booked for "
                        f"{command.start_date} - {command.end_date}",
                        conflicts=[str(dates) for dates in conflicts],
                    )

                booking = Booking.objects.create(
                    listing=listing,
                    advertiser=advertiser,
                    start_date=command.start_date,
                    end_date=command.end_date,
                    total_price=calculate_total_price(
                        listing.price_per_month, command.start_date, command.end_date
                    ),
                    currency=settings.PAYMENTS_CURRENCY,
                    status=Booking.Status.PENDING,
                )

                uow.add_event(BookingCreated(
                    aggregate_id=booking.pk,
                    booking_id=booking.pk,
                    listing_id=listing.pk,
                    snapshot=booking.snapshot(),
                ))
        except IntegrityError as exc:
            raise ConflictError(
                f"Listing {command.listing_id} is already booked for "
                f"{command.start_date} - {command.end_date}"
            ) from exc

        logger.info(
            "booking.created",
            booking_id=booking.pk,
            listing_id=booking.listing_id,
            advertiser_id=advertiser.pk,
            total_price=booking.total_price,
        )

        if command.payment_method:
            self._initiate_payment(booking, command)

        return booking

    def _initiate_payment(self, booking: Booking, command: CreateBookingCommand) -> None:
        """Start the first payment; failures leave the booking pending."""
        try:
            self.reconciler.initiate(
                booking.pk,
                command.payment_method,
                payer_contact=command.payer_contact,
                actor=command.advertiser,
            )
        except DomainError as exc:
            logger.warning(
                "booking.payment_initiation_failed",
                booking_id=booking.pk,
                method=command.payment_method,
                error=exc.code,
                detail=str(exc),
            )


class ChangeBookingStatusHandler:
    """Handler for actor-requested status transitions"""

    def handle(self, command: ChangeBookingStatusCommand) -> Booking:
        with DjangoUnitOfWork() as uow:
            try:
                booking = lock_booking(command.booking_id)
            except Booking.DoesNotExist:
                raise NotFoundError(f"Booking {command.booking_id} not found")

            previous = booking.status
            state_machine.check_transition(previous, command.status, booking.roles_of(command.actor))

            booking.status = command.status
            booking.save(update_fields=["status", "updated_at"])
            sync_listing_availability(booking.listing)

            event_class = EVENTS_BY_STATUS[command.status]
            extra = {"previous_status": previous} if command.status == Booking.Status.CANCELLED else {}
            uow.add_event(event_class(
                aggregate_id=booking.pk,
                booking_id=booking.pk,
                listing_id=booking.listing_id,
                snapshot=booking.snapshot(),
                **extra,
            ))

        logger.info(
            "booking.status_changed",
            booking_id=booking.pk,
            previous=previous,
            status=booking.status,
            actor_id=command.actor.pk,
        )
        return booking


class SignContractHandler:
    """Handler for contract signature"""

    def handle(self, command: SignContractCommand) -> Booking:
        with DjangoUnitOfWork():
            try:
                booking = lock_booking(command.booking_id)
            except Booking.DoesNotExist:
                raise NotFoundError(f"Booking {command.booking_id} not found")

            if command.actor.pk != booking.advertiser_id:
                raise ForbiddenError("Only the advertiser can sign the contract")
            if booking.status != Booking.Status.CONFIRMED:
                raise InvalidTransitionError(
                    f"Contract can only be signed on a confirmed booking (status '{booking.status}')",
                    current=booking.status,
                )
            if booking.contract_signed_at is not None:
                raise ConflictError("Contract already signed")

            base_url = settings.CONTRACT_BASE_URL.rstrip("/")
            booking.contract_url = f"{base_url}/{booking.pk}.pdf"
            booking.contract_signed_at = timezone.now()
            booking.save(update_fields=["contract_url", "contract_signed_at", "updated_at"])

        logger.info("booking.contract_signed", booking_id=booking.pk)
        return booking


# ===== System operations =====

def confirm_paid_booking(booking_id: int) -> Booking:
    """
    Confirm a booking whose payment settled

    Runs inside the reconciler's transaction, so BookingConfirmed is only
    published once the payment update commits too. Confirmed bookings are
    left as they are; terminal bookings are not reopened.
    """
    with DjangoUnitOfWork() as uow:
        try:
            booking = lock_booking(booking_id)
        except Booking.DoesNotExist:
            raise NotFoundError(f"Booking {booking_id} not found")

        if booking.status == Booking.Status.CONFIRMED:
            return booking

        if booking.is_terminal:
            logger.warning("booking.paid_after_close", booking_id=booking.pk, status=booking.status)
            return booking

        booking.status = Booking.Status.CONFIRMED
        booking.save(update_fields=["status", "updated_at"])
        sync_listing_availability(booking.listing)

        uow.add_event(BookingConfirmed(
            aggregate_id=booking.pk,
            booking_id=booking.pk,
            listing_id=booking.listing_id,
            snapshot=booking.snapshot(),
            paid=True,
        ))

    logger.info("booking.confirmed_by_payment", booking_id=booking.pk)
    return booking


# ===== Queries =====

def list_bookings(actor, status: Optional[str] = None, listing_id: Optional[int] = None, as_owner: bool = False):
    """
    Bookings visible to the actor, newest first

    Admins see every booking. With as_owner the actor gets bookings made on
    their listings, otherwise the bookings they made.
    """
    queryset = Booking.objects.select_related("listing", "listing__owner", "advertiser")
    if as_owner:
        queryset = queryset.filter(listing__owner=actor)
    elif not actor.is_admin():
        queryset = queryset.filter(advertiser=actor)

    if status:
        if status not in Booking.Status.values:
            raise ValidationError(f"Unknown status '{status}'", status=status)
        queryset = queryset.filter(status=status)
    if listing_id is not None:
        queryset = queryset.filter(listing_id=listing_id)
    return queryset.order_by("-created_at", "-pk")


def get_booking(booking_id: int, actor) -> Booking:
    try:
        booking = Booking.objects.select_related("listing", "listing__owner", "advertiser").get(pk=booking_id)
    except Booking.DoesNotExist:
        raise NotFoundError(f"Booking {booking_id} not found")
    if not booking.is_stakeholder(actor):
        raise ForbiddenError("Not allowed to view this booking")
    return booking
