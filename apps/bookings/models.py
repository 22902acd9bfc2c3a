"""Booking domain models for AdSpace."""

from __future__ import annotations

from typing import Any

from django.conf import settings  # type: ignore
from django.db import models  # type: ignore
from django.utils.translation import gettext_lazy as _  # type: ignore

from shared.domain.value_objects import DateRange

from .domain import state_machine


class BookingQuerySet(models.QuerySet):
    def blocking(self):
        """Bookings that hold their dates (pending or confirmed)."""
        return self.filter(status__in=state_machine.BLOCKING_STATUSES)

    def overlapping(self, start_date, end_date):
        """Half-open overlap: existing.start < end and start < existing.end."""
        return self.filter(start_date__lt=end_date, end_date__gt=start_date)


class Booking(models.Model):
    """Reservation of a listing for a date range [start_date, end_date)."""

    class Status(models.TextChoices):
        PENDING = state_machine.PENDING, _("Pending")
        CONFIRMED = state_machine.CONFIRMED, _("Confirmed")
        REJECTED = state_machine.REJECTED, _("Rejected")
        CANCELLED = state_machine.CANCELLED, _("Cancelled")
        COMPLETED = state_machine.COMPLETED, _("Completed")

    listing = models.ForeignKey(
        "listings.Listing",
        on_delete=models.PROTECT,
        related_name="bookings",
    )
    advertiser = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name="bookings",
    )
    start_date = models.DateField()
    end_date = models.DateField()
    total_price = models.PositiveBigIntegerField(
        help_text=_("Frozen at creation, minor currency units."),
    )
    currency = models.CharField(max_length=3, default="XOF")
    status = models.CharField(
        max_length=20,
        choices=Status.choices,
        default=Status.PENDING,
    )
    contract_url = models.URLField(blank=True)
    contract_signed_at = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    objects = BookingQuerySet.as_manager()

    class Meta:
        verbose_name = _("Booking")
        verbose_name_plural = _("Bookings")
        ordering = ["-created_at"]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(end_date__gt=models.F("start_date")),
                name="booking_valid_dates",
            ),
        ]
        indexes = [
            models.Index(fields=["listing", "start_date", "end_date"], name="bookings_bo_listing_2f6a1d_idx"),
            models.Index(fields=["status"], name="bookings_bo_status_9c0e4b_idx"),
        ]

    def __str__(self) -> str:
        return f"Booking #{self.pk} for listing {self.listing_id}"

    @property
    def dates(self) -> DateRange:
        return DateRange(self.start_date, self.end_date)

    @property
    def is_terminal(self) -> bool:
        return self.status in state_machine.TERMINAL_STATUSES

    def roles_of(self, user) -> tuple[str, ...]:
        """Roles the user holds relative to this booking."""
        roles = []
        if user.is_admin():
            roles.append(state_machine.ADMIN)
        if user.pk == self.advertiser_id:
            roles.append(state_machine.ADVERTISER)
        if user.pk == self.listing.owner_id:
            roles.append(state_machine.OWNER)
        return tuple(roles)

    def is_stakeholder(self, user) -> bool:
        return bool(self.roles_of(user))

    def snapshot(self) -> dict[str, Any]:
        """Plain representation handed to notification channels."""
        listing = self.listing
        advertiser = self.advertiser
        owner = listing.owner
        return {
            "booking_id": self.pk,
            "status": self.status,
            "start_date": self.start_date.isoformat(),
            "end_date": self.end_date.isoformat(),
            "total_price": self.total_price,
            "currency": self.currency,
            "listing_id": listing.pk,
            "listing_title": listing.title,
            "listing_city": listing.city,
            "advertiser_id": advertiser.pk,
            "advertiser_email": advertiser.email,
            "advertiser_phone": advertiser.phone or "",
            "owner_id": owner.pk,
            "owner_email": owner.email,
            "owner_phone": owner.phone or "",
            "contract_url": self.contract_url,
        }
