"""Domain services for booking workflows."""

from __future__ import annotations

from datetime import date
from typing import TYPE_CHECKING

import structlog  # type: ignore
from django.db import transaction  # type: ignore
from django.db.utils import NotSupportedError  # type: ignore

from apps.listings.models import Listing
from shared.domain.value_objects import DateRange

from .domain.availability import conflicting_ranges, has_overlap

if TYPE_CHECKING:  # pragma: no cover - type checking only
    from .models import Booking

logger = structlog.get_logger(__name__)


def _lock_queryset_if_possible(queryset):
    """Apply select_for_update when inside transaction.atomic()."""

    if not transaction.get_connection().in_atomic_block:
        return queryset

    try:
        return queryset.select_for_update()
    except NotSupportedError:
        return queryset


def lock_listing(listing_id: int) -> Listing:
    """Load a listing holding its row lock for the rest of the transaction."""

    return _lock_queryset_if_possible(Listing.objects.filter(pk=listing_id)).get()


def lock_booking(booking_id: int) -> "Booking":
    from .models import Booking  # Local import to prevent circular dependency

    queryset = _lock_queryset_if_possible(Booking.objects.filter(pk=booking_id))
    return queryset.select_related("listing", "listing__owner", "advertiser").get()


def _blocking_ranges(listing: Listing, start_date: date, end_date: date, exclude_booking_id):
    from .models import Booking

    queryset = Booking.objects.filter(listing=listing).blocking().overlapping(start_date, end_date)
    if exclude_booking_id is not None:
        queryset = queryset.exclude(pk=exclude_booking_id)
    return [booking.dates for booking in queryset.only("start_date", "end_date")]


def is_listing_available(
    listing: Listing,
    start_date: date,
    end_date: date,
    *,
    exclude_booking_id: int | None = None,
) -> bool:
    """True if no pending or confirmed booking of the listing overlaps the range."""

    existing = _blocking_ranges(listing, start_date, end_date, exclude_booking_id)
    return not has_overlap(existing, DateRange(start_date, end_date))


def conflicting_dates(
    listing: Listing,
    start_date: date,
    end_date: date,
    *,
    exclude_booking_id: int | None = None,
) -> list[DateRange]:
    """Pending or confirmed booking ranges of the listing that overlap the range."""

    existing = _blocking_ranges(listing, start_date, end_date, exclude_booking_id)
    return conflicting_ranges(existing, DateRange(start_date, end_date))


def sync_listing_availability(listing: Listing) -> str:
    """
    Recompute the listing's derived status from its confirmed bookings.

    ``booked`` while at least one booking is confirmed, ``active``
    otherwise. Inactive listings are left untouched. Must run inside the
    transaction that changed the booking.
    """

    from .models import Booking

    if listing.status == Listing.Status.INACTIVE:
        return listing.status

    has_confirmed = Booking.objects.filter(
        listing=listing,
        status=Booking.Status.CONFIRMED,
    ).exists()
    target = Listing.Status.BOOKED if has_confirmed else Listing.Status.ACTIVE

    if listing.status != target:
        previous = listing.status
        listing.status = target
        listing.save(update_fields=["status", "updated_at"])
        logger.info(
            "listing.availability_synced",
            listing_id=listing.pk,
            previous=previous,
            status=target,
        )
    return listing.status
