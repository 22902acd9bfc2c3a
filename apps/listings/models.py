"""Listing domain models for AdSpace.

A listing is a physical advertising space (billboard, panel, screen)
rented by the month. Its ``status`` mixes two concerns: ``inactive`` is a
catalogue choice made by the owner or an administrator, while ``active``
and ``booked`` are derived from confirmed bookings and only written by
``apps.bookings.services.sync_listing_availability``.
"""

from __future__ import annotations

from django.conf import settings  # type: ignore
from django.core.validators import MinValueValidator  # type: ignore
from django.db import models  # type: ignore
from django.utils.translation import gettext_lazy as _  # type: ignore


class Listing(models.Model):
    """Advertising space available for monthly rental."""

    class Status(models.TextChoices):
        ACTIVE = "active", _("Available")
        BOOKED = "booked", _("Booked")
        INACTIVE = "inactive", _("Inactive")

    class SpaceType(models.TextChoices):
        BILLBOARD = "billboard", _("Billboard")
        PANEL = "panel", _("Panel")
        SCREEN = "screen", _("Digital screen")
        OTHER = "other", _("Other")

    owner = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name="listings",
    )
    title = models.CharField(max_length=255)
    description = models.TextField(blank=True)
    space_type = models.CharField(
        max_length=20,
        choices=SpaceType.choices,
        default=SpaceType.BILLBOARD,
    )
    address = models.CharField(max_length=255)
    city = models.CharField(max_length=100)
    price_per_month = models.PositiveIntegerField(
        validators=[MinValueValidator(1)],
        help_text=_("Monthly rate in minor currency units."),
    )
    status = models.CharField(max_length=20, choices=Status.choices, default=Status.ACTIVE)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = _("Listing")
        verbose_name_plural = _("Listings")
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["status"], name="listings_li_status_7c1e0a_idx"),
            models.Index(fields=["owner", "status"], name="listings_li_owner_i_4b9d2f_idx"),
            models.Index(fields=["city"], name="listings_li_city_8e3a51_idx"),
        ]

    def __str__(self) -> str:
        return f"{self.title} ({self.city})"

    @property
    def is_bookable(self) -> bool:
        return self.status != self.Status.INACTIVE
